"""Tests for cms_backend.pipeline.scoring — rule-based lead scoring and grading."""
import pytest

from cms_backend.pipeline.scoring import (
    ScoringRule,
    calculate_lead_score,
    clamp_score,
    lead_grade,
    load_rules,
    rule_matches,
)


def rule(field, condition, score, value=None):
    return ScoringRule(field=field, condition=condition, score=score, value=value)


# ── ScoringRule.from_dict ──────────────────────────────────────────────────

class TestScoringRuleFromDict:

    def test_parses_valid_rule(self):
        r = ScoringRule.from_dict({'field': 'budget', 'condition': 'greater_than', 'value': 1000, 'score': 20})
        assert r == rule('budget', 'greater_than', 20, '1000')

    def test_unknown_condition_raises(self):
        with pytest.raises(ValueError, match='Unknown scoring condition'):
            ScoringRule.from_dict({'field': 'x', 'condition': 'matches_regex', 'score': 5})

    def test_missing_field_raises(self):
        with pytest.raises(ValueError):
            ScoringRule.from_dict({'condition': 'is_filled', 'score': 5})

    def test_to_dict_round_trips_through_from_dict(self):
        r = rule('company', 'contains', 10, 'inc')
        assert ScoringRule.from_dict(r.to_dict()) == r


# ── rule_matches ───────────────────────────────────────────────────────────

class TestEquals:

    def test_exact_string_match(self):
        assert rule_matches(rule('plan', 'equals', 10, 'pro'), {'plan': 'pro'})

    def test_is_case_sensitive(self):
        assert not rule_matches(rule('plan', 'equals', 10, 'pro'), {'plan': 'Pro'})

    def test_missing_field_never_matches(self):
        assert not rule_matches(rule('plan', 'equals', 10, 'pro'), {})

    def test_number_rendered_as_text(self):
        assert rule_matches(rule('seats', 'equals', 10, '5'), {'seats': 5})
        assert rule_matches(rule('seats', 'equals', 10, '5'), {'seats': 5.0})

    def test_boolean_rendered_lowercase(self):
        assert rule_matches(rule('newsletter', 'equals', 5, 'true'), {'newsletter': True})
        assert not rule_matches(rule('newsletter', 'equals', 5, 'True'), {'newsletter': True})


class TestContains:

    def test_case_insensitive_substring(self):
        assert rule_matches(rule('company', 'contains', 10, 'acme'), {'company': 'ACME Corp'})

    def test_non_string_field_never_matches(self):
        assert not rule_matches(rule('budget', 'contains', 10, '5'), {'budget': 5000})

    def test_missing_field_never_matches(self):
        assert not rule_matches(rule('company', 'contains', 10, 'acme'), {})


class TestNumericComparisons:

    def test_greater_than_with_numeric_string(self):
        assert rule_matches(rule('budget', 'greater_than', 20, '1000'), {'budget': '5000'})

    def test_less_than(self):
        assert rule_matches(rule('employees', 'less_than', 5, '10'), {'employees': 3})

    def test_equal_values_do_not_match(self):
        assert not rule_matches(rule('budget', 'greater_than', 20, '1000'), {'budget': 1000})

    @pytest.mark.parametrize('value', ['', 'lots', None, True])
    def test_non_numeric_never_matches(self, value):
        assert not rule_matches(rule('budget', 'greater_than', 20, '0'), {'budget': value})
        assert not rule_matches(rule('budget', 'less_than', 20, '999999'), {'budget': value})

    def test_non_numeric_rule_value_never_matches(self):
        assert not rule_matches(rule('budget', 'greater_than', 20, 'big'), {'budget': 5000})


class TestIsFilled:

    def test_filled_value(self):
        assert rule_matches(rule('phone', 'is_filled', 10), {'phone': '555-0100'})

    def test_zero_counts_as_filled(self):
        assert rule_matches(rule('seats', 'is_filled', 10), {'seats': 0})

    @pytest.mark.parametrize('data', [{}, {'phone': None}, {'phone': ''}])
    def test_empty_values(self, data):
        assert not rule_matches(rule('phone', 'is_filled', 10), data)


# ── calculate_lead_score ───────────────────────────────────────────────────

class TestCalculateLeadScore:

    def test_sums_all_matching_rules(self):
        rules = [
            rule('email', 'is_filled', 10),
            rule('company', 'is_filled', 15),
            rule('budget', 'greater_than', 30, '1000'),
        ]
        assert calculate_lead_score({'email': 'a@b.co', 'company': 'Acme', 'budget': '5000'}, rules) == 55

    def test_negative_scores_subtract(self):
        rules = [rule('email', 'is_filled', 30), rule('email', 'contains', -20, 'gmail.com')]
        assert calculate_lead_score({'email': 'x@gmail.com'}, rules) == 10

    def test_clamped_to_zero(self):
        assert calculate_lead_score({'x': '1'}, [rule('x', 'is_filled', -50)]) == 0

    def test_clamped_to_hundred(self):
        rules = [rule('a', 'is_filled', 70), rule('b', 'is_filled', 70)]
        assert calculate_lead_score({'a': 1, 'b': 1}, rules) == 100

    def test_no_rules_scores_zero(self):
        assert calculate_lead_score({'email': 'a@b.co'}, []) == 0

    def test_rule_order_does_not_matter(self):
        rules = [rule('a', 'is_filled', -40), rule('b', 'is_filled', 60)]
        data = {'a': 1, 'b': 1}
        assert calculate_lead_score(data, rules) == calculate_lead_score(data, list(reversed(rules))) == 20


class TestClampScore:

    def test_passthrough_in_range(self):
        assert clamp_score(42) == 42

    def test_bounds(self):
        assert clamp_score(-5) == 0
        assert clamp_score(150) == 100


# ── lead_grade ─────────────────────────────────────────────────────────────

class TestLeadGrade:

    @pytest.mark.parametrize('score,grade', [
        (100, 'hot'), (80, 'hot'),
        (79, 'warm'), (60, 'warm'),
        (59, 'cold'), (40, 'cold'),
        (39, 'qualified'), (20, 'qualified'),
        (19, 'unqualified'), (0, 'unqualified'),
    ])
    def test_boundaries(self, score, grade):
        assert lead_grade(score) == grade


# ── load_rules ─────────────────────────────────────────────────────────────

class TestLoadRules:

    def test_skips_invalid_rules(self):
        rules = load_rules({'rules': [
            {'field': 'email', 'condition': 'is_filled', 'score': 10},
            {'field': 'email', 'condition': 'bogus', 'score': 10},
            {'condition': 'is_filled', 'score': 10},
        ]})
        assert rules == [rule('email', 'is_filled', 10)]

    def test_empty_config(self):
        assert load_rules(None) == []
        assert load_rules({}) == []
