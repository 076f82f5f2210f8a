"""
Model pricing loader — per-1K-token prices for generation cost estimates.

Same pattern as the spam config: YAML file with in-memory cache and a
hardcoded fallback if the file is missing.
"""
import logging
import math
import os

import yaml

logger = logging.getLogger('services.pricing')


_pricing = None


def _default_pricing():
    """Hardcoded fallback if YAML is missing."""
    return {
        'version': 'default',
        'models': {
            'gpt-4':               {'input': 0.03,   'output': 0.06},
            'gpt-4-turbo-preview': {'input': 0.01,   'output': 0.03},
            'gpt-3.5-turbo':       {'input': 0.0015, 'output': 0.002},
        },
        'input_share': 0.75,
        'output_share': 0.25,
    }


def load_pricing() -> dict:
    """Load pricing from YAML, with in-memory cache and hardcoded fallback."""
    global _pricing
    if _pricing is not None:
        return _pricing

    path = os.path.join(os.path.dirname(__file__), 'model_pricing.yaml')
    try:
        with open(path, 'r') as f:
            _pricing = yaml.safe_load(f)
        logger.info("Pricing loaded from YAML (version=%s)", _pricing.get('version', '?'))
    except Exception as e:
        logger.warning("Pricing YAML not found (%s), using defaults", e)
        _pricing = _default_pricing()

    return _pricing


def reset_cache():
    """Reset the in-memory cache (useful for testing)."""
    global _pricing
    _pricing = None


def estimate_cost(model: str, total_tokens: int, pricing: dict = None) -> float:
    """Cost of a call from its total token count; 0 for unpriced models."""
    pricing = pricing or load_pricing()
    rates = (pricing.get('models') or {}).get(model)
    if not rates:
        return 0.0

    input_tokens = math.floor(total_tokens * pricing.get('input_share', 0.75))
    output_tokens = math.floor(total_tokens * pricing.get('output_share', 0.25))
    return (input_tokens * rates['input'] + output_tokens * rates['output']) / 1000
