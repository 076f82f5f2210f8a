"""
Pipeline stage: LEAD UPSERT — create or update the Lead for a submission.

Leads are deduplicated by normalized email. Updating a lead overwrites fields
with the latest non-empty values (keeping what was already known otherwise)
and appends to scoring_history/activities; those two lists only ever grow.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from cms_backend.models.lead import Lead
from cms_backend.pipeline.base import submitted_email, submitted_name
from cms_backend.pipeline.scoring import lead_grade, is_filled

logger = logging.getLogger('pipeline.leads')


class LeadError(Exception):
    """Raised when a lead cannot be created from a submission."""


STANDARD_FIELDS = {
    'email', 'Email', 'emailAddress', 'name', 'Name', 'firstName', 'first_name',
    'lastName', 'last_name', 'phone', 'Phone', 'company', 'companyName', 'website',
    'companyWebsite', 'industry', 'companySize', 'jobTitle', 'position', 'tags',
    'budget', 'authority', 'need', 'timeline', 'honeypot', '_honeypot',
}


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _first(data: Dict[str, Any], *keys) -> Optional[Any]:
    for key in keys:
        if is_filled(data.get(key)):
            return data[key]
    return None


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _drop_empty(d: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in d.items() if is_filled(v)}


def build_lead_fields(data: Dict[str, Any], form) -> Dict[str, Any]:
    """Map submission fields onto Lead columns. Empty values are omitted."""
    tags = data.get('tags')
    return {
        'name': submitted_name(data) or None,
        'first_name': _first(data, 'firstName', 'first_name'),
        'last_name': _first(data, 'lastName', 'last_name'),
        'phone': _first(data, 'phone', 'Phone'),
        'job_title': _first(data, 'jobTitle', 'position'),
        'company': _drop_empty({
            'name': _first(data, 'company', 'companyName'),
            'website': _first(data, 'website', 'companyWebsite'),
            'industry': data.get('industry'),
            'size': data.get('companySize'),
        }),
        'source': {
            'type': 'contact_form',
            'form': form.id,
            'campaign': data.get('utm_campaign'),
            'medium': data.get('utm_medium'),
            'utm_parameters': _drop_empty({
                'source': data.get('utm_source'),
                'medium': data.get('utm_medium'),
                'campaign': data.get('utm_campaign'),
                'term': data.get('utm_term'),
                'content': data.get('utm_content'),
            }),
        },
        'qualification': _drop_empty({
            'budget': data.get('budget'),
            'authority': data.get('authority'),
            'need': data.get('need'),
            'timeline': data.get('timeline'),
        }),
        'custom_fields': extract_custom_fields(data, form),
        'tags': [t.strip() for t in tags.split(',') if t.strip()] if isinstance(tags, str) else [],
    }


def extract_custom_fields(data: Dict[str, Any], form) -> Dict[str, Dict[str, str]]:
    """Non-standard, non-UTM fields keyed by their form label."""
    custom = {}
    for key, value in data.items():
        if key in STANDARD_FIELDS or key.startswith('utm_'):
            continue
        custom[form.field_label(key)] = {'value': str(value), 'type': field_type(value)}
    return custom


def field_type(value: Any) -> str:
    if isinstance(value, bool):
        return 'boolean'
    if isinstance(value, (int, float)):
        return 'number'
    if isinstance(value, str) and value.startswith(('http://', 'https://')):
        return 'url'
    return 'text'


def _merge(lead: Lead, fields: Dict[str, Any]):
    """Overwrite with new non-empty values; keep previously known ones."""
    for key in ('name', 'first_name', 'last_name', 'phone', 'job_title'):
        if is_filled(fields.get(key)):
            setattr(lead, key, fields[key])
    for key in ('company', 'qualification', 'custom_fields'):
        merged = dict(getattr(lead, key) or {})
        merged.update(fields.get(key) or {})
        setattr(lead, key, merged)
    lead.source = fields['source']
    if fields['tags']:
        lead.tags = sorted(set(lead.tags or []) | set(fields['tags']))


def upsert_lead(session, form, data: Dict[str, Any], score: int) -> Lead:
    """
    Create or update the Lead for this submission and flush it.

    Raises LeadError if the submission carries no email.
    """
    email = submitted_email(data)
    if not email:
        raise LeadError('Email is required to create a lead')
    email = normalize_email(email)

    fields = build_lead_fields(data, form)
    grade = lead_grade(score)
    now = _now_iso()

    lead = session.query(Lead).filter_by(email=email).first()

    if lead is None:
        lead = Lead(
            email=email,
            name=fields['name'] or email,
            status='new',
            score=score,
            grade=grade,
            scoring_history=[{
                'date': now,
                'previous_score': 0,
                'new_score': score,
                'reason': 'Form submission',
                'action': f'Form: {form.name}',
            }],
            activities=[{
                'type': 'note',
                'subject': f'Initial form submission: {form.name}',
                'description': f'Lead created from form submission with score: {score}',
                'date': now,
                'outcome': 'successful',
            }],
        )
        _merge(lead, fields)
        session.add(lead)
        session.flush()
        logger.info("Created lead %s (score=%d, grade=%s)", lead.id, score, grade)
        return lead

    # Lists are reassigned (not appended in place) so SQLAlchemy sees the change
    lead.scoring_history = list(lead.scoring_history or []) + [{
        'date': now,
        'previous_score': lead.score or 0,
        'new_score': score,
        'reason': 'Form submission',
        'action': f'Form: {form.name}',
    }]
    lead.activities = list(lead.activities or []) + [{
        'type': 'note',
        'subject': f'Form submission: {form.name}',
        'description': f'New form submission received with score: {score}',
        'date': now,
        'outcome': 'successful',
    }]
    _merge(lead, fields)
    lead.score = score
    lead.grade = grade
    session.flush()
    logger.info("Updated lead %s (score=%d, grade=%s, history=%d)",
                lead.id, score, grade, len(lead.scoring_history))
    return lead
