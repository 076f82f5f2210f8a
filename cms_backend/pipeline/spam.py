"""
Pipeline stage: SPAM CHECK — additive heuristics run before scoring.

Each signal adds points; the submission is spam once the total reaches the
configured threshold. Signals only ever add, so filling a honeypot or
submitting faster can never lower the score.
"""
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml

from cms_backend.pipeline.base import submitted_email

logger = logging.getLogger('pipeline.spam')


_spam_config = None


def _default_config():
    """Hardcoded fallback if YAML is missing."""
    return {
        'version': 'default',
        'threshold': 50,
        'max_score': 100,
        'weights': {
            'honeypot': 100,
            'too_fast': 50,
            'spam_keyword': 25,
            'suspicious_pattern': 30,
            'plus_address': 10,
        },
        'min_submit_seconds': 3,
        'honeypot_fields': ['honeypot', '_honeypot'],
        'keywords': ['viagra', 'casino', 'lottery', 'winner', 'congratulations', 'click here'],
    }


def load_spam_config() -> dict:
    """Load spam config from YAML, with in-memory cache and hardcoded fallback."""
    global _spam_config
    if _spam_config is not None:
        return _spam_config

    config_path = os.path.join(os.path.dirname(__file__), 'spam_config.yaml')
    try:
        with open(config_path, 'r') as f:
            _spam_config = yaml.safe_load(f)
        logger.info("Spam config loaded from YAML (version=%s)", _spam_config.get('version', '?'))
    except Exception as e:
        logger.warning("Spam YAML config not found (%s), using defaults", e)
        _spam_config = _default_config()

    return _spam_config


def reset_cache():
    """Reset the in-memory cache (useful for testing)."""
    global _spam_config
    _spam_config = None


@dataclass
class SpamCheck:
    is_spam: bool
    score: int
    raw_score: int
    reasons: List[Dict[str, str]] = field(default_factory=list)


def detect_spam(data: Dict[str, Any], submission_time: Optional[float] = None) -> SpamCheck:
    """
    Score a submission for spam.

    Args:
        data:            The submitted field → value mapping.
        submission_time: Seconds between form render and submit, if known.
    """
    cfg = load_spam_config()
    weights = cfg.get('weights', {})
    reasons = []
    score = 0

    if any(data.get(name) for name in cfg.get('honeypot_fields', [])):
        reasons.append({'reason': 'honeypot', 'details': 'Honeypot field was filled'})
        score += weights.get('honeypot', 100)

    min_seconds = cfg.get('min_submit_seconds', 3)
    if submission_time is not None and submission_time < min_seconds:
        reasons.append({'reason': 'too_fast', 'details': f'Submitted in {submission_time} seconds'})
        score += weights.get('too_fast', 50)

    all_text = ' '.join(str(v) for v in data.values() if v is not None).lower()
    for keyword in cfg.get('keywords', []):
        if keyword in all_text:
            reasons.append({'reason': 'spam_keywords', 'details': f'Contains keyword: {keyword}'})
            score += weights.get('spam_keyword', 25)

    email = submitted_email(data)
    if email and '+' in email:
        reasons.append({'reason': 'plus_address', 'details': 'Email uses plus addressing'})
        score += weights.get('plus_address', 10)

    if email and data.get('name') == email:
        reasons.append({'reason': 'suspicious_pattern', 'details': 'Name matches email'})
        score += weights.get('suspicious_pattern', 30)

    threshold = cfg.get('threshold', 50)
    result = SpamCheck(
        is_spam=score >= threshold,
        score=min(cfg.get('max_score', 100), score),
        raw_score=score,
        reasons=reasons,
    )
    if result.is_spam:
        logger.info("Spam detected (score=%d): %s", score, ', '.join(r['reason'] for r in reasons))
    return result
