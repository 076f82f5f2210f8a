"""
Pipeline stage: SCORING — rule-based lead scoring + grade assignment.

A form carries an ordered list of scoring rules. Each rule tests one field of
the submission; matching rules add their (possibly negative) points. The total
is clamped to [0, 100], so rule order never matters and authors need not guard
against overflow.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

logger = logging.getLogger('pipeline.scoring')


CONDITIONS = ('equals', 'contains', 'greater_than', 'less_than', 'is_filled')

SCORE_MIN = 0
SCORE_MAX = 100

# (lower bound inclusive, grade), checked top-down
GRADE_THRESHOLDS = [
    (80, 'hot'),
    (60, 'warm'),
    (40, 'cold'),
    (20, 'qualified'),
]
LOWEST_GRADE = 'unqualified'


@dataclass(frozen=True)
class ScoringRule:
    field: str
    condition: str
    score: int
    value: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ScoringRule':
        condition = data.get('condition')
        if condition not in CONDITIONS:
            raise ValueError(f"Unknown scoring condition: {condition!r}")
        if not data.get('field'):
            raise ValueError("Scoring rule requires a field")
        value = data.get('value')
        return cls(
            field=data['field'],
            condition=condition,
            score=int(data.get('score', 0)),
            value=None if value is None else str(value),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {'field': self.field, 'condition': self.condition, 'value': self.value, 'score': self.score}


def _as_text(value: Any) -> Optional[str]:
    """Render a scalar the way it appears in the submitted form."""
    if value is None:
        return None
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _as_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str) and value.strip():
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def is_filled(value: Any) -> bool:
    return value is not None and value != ''


def rule_matches(rule: ScoringRule, submission: Dict[str, Any]) -> bool:
    """Evaluate one rule against the submission field it names."""
    value = submission.get(rule.field)

    if rule.condition == 'is_filled':
        return is_filled(value)

    if rule.condition == 'equals':
        return value is not None and _as_text(value) == rule.value

    if rule.condition == 'contains':
        return isinstance(value, str) and (rule.value or '').lower() in value.lower()

    if rule.condition in ('greater_than', 'less_than'):
        left = _as_number(value)
        right = _as_number(rule.value)
        if left is None or right is None:
            return False
        return left > right if rule.condition == 'greater_than' else left < right

    return False


def clamp_score(total: int) -> int:
    return max(SCORE_MIN, min(SCORE_MAX, total))


def calculate_lead_score(submission: Dict[str, Any], rules: List[ScoringRule]) -> int:
    """Sum the points of every matching rule, clamped to [0, 100]."""
    total = 0
    for rule in rules:
        if rule_matches(rule, submission):
            total += rule.score
    score = clamp_score(total)
    logger.debug("Lead score: raw=%d clamped=%d (%d rules)", total, score, len(rules))
    return score


def lead_grade(score: int) -> str:
    """Map a score to its grade. Lower bounds are inclusive."""
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return LOWEST_GRADE


def load_rules(lead_scoring: Optional[Dict[str, Any]]) -> List[ScoringRule]:
    """Parse the rule list of a form's lead_scoring config, skipping invalid rules."""
    rules = []
    for idx, data in enumerate((lead_scoring or {}).get('rules') or []):
        try:
            rules.append(ScoringRule.from_dict(data))
        except (ValueError, TypeError) as e:
            logger.warning("Skipping scoring rule %d: %s", idx, e)
    return rules
