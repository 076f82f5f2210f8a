"""Tests for cms_backend.services.pricing — YAML model pricing with fallback."""
import pytest
from unittest.mock import patch

from cms_backend.services import pricing


@pytest.fixture(autouse=True)
def fresh_cache():
    pricing.reset_cache()
    yield
    pricing.reset_cache()


class TestLoadPricing:

    def test_loads_packaged_yaml(self):
        data = pricing.load_pricing()
        assert data['version'] == '2024-01'
        assert data['models']['gpt-4'] == {'input': 0.03, 'output': 0.06}

    def test_cached_after_first_load(self):
        first = pricing.load_pricing()
        with patch('builtins.open', side_effect=AssertionError('should not reread')):
            assert pricing.load_pricing() is first

    def test_missing_file_uses_defaults(self):
        with patch('builtins.open', side_effect=FileNotFoundError('gone')):
            data = pricing.load_pricing()
        assert data['version'] == 'default'
        assert 'gpt-3.5-turbo' in data['models']


class TestEstimateCost:

    def test_explicit_table(self):
        table = {'models': {'m': {'input': 1.0, 'output': 2.0}}, 'input_share': 0.5, 'output_share': 0.5}
        # 500 * 1.0 + 500 * 2.0 per 1K
        assert pricing.estimate_cost('m', 1000, table) == pytest.approx(1.5)

    def test_zero_tokens(self):
        assert pricing.estimate_cost('gpt-4', 0) == 0.0
