"""
Content update pipeline — explicit stages run after an editor saves.

  APPLY CHANGES → VERSION SNAPSHOT → SEO ANALYSIS → AI SUGGESTIONS (optional)

Invalid changes raise ContentValidationError before anything is written.
A versioning failure propagates; SEO and AI failures are recorded on the
result and the update still goes through.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from cms_backend.blocks import parse_layout, serialize_layout
from cms_backend.config import CONTENT_STATUSES, SITE_URL
from cms_backend.pipeline.base import StageError, error_message
from cms_backend.seo.analyzer import analyze_and_store, content_data_from_item
from cms_backend.services.versioning import create_version

logger = logging.getLogger('services.content')


class ContentValidationError(ValueError):
    """Rejected content change."""

    def __init__(self, message: str, details: List[str] = None):
        self.details = details or []
        super().__init__(message)


@dataclass
class ContentUpdateResult:
    version: Optional[str] = None
    version_id: Optional[int] = None
    seo_score: Optional[int] = None
    readability_score: Optional[int] = None
    seo_suggestions: List[Dict[str, Any]] = field(default_factory=list)
    errors: List[StageError] = field(default_factory=list)

    def add_error(self, type_: str, message: str):
        self.errors.append(StageError(type=type_, message=message))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'version': self.version,
            'version_id': self.version_id,
            'seo_score': self.seo_score,
            'readability_score': self.readability_score,
            'seo_suggestions': self.seo_suggestions,
            'errors': [{'type': e.type, 'message': e.message} for e in self.errors],
        }


def apply_changes(item, changes: Dict[str, Any]):
    """Validate and copy editable fields onto the item."""
    if not isinstance(changes, dict) or not changes:
        raise ContentValidationError('Changes must be a non-empty object')

    unknown = [k for k in changes if k not in item.SNAPSHOT_FIELDS]
    if unknown:
        raise ContentValidationError('Unknown fields', [f"{k}: not an editable field" for k in unknown])

    if 'status' in changes and changes['status'] not in CONTENT_STATUSES:
        raise ContentValidationError('Invalid status', [f"status: must be one of {', '.join(CONTENT_STATUSES)}"])
    if 'title' in changes and not changes['title']:
        raise ContentValidationError('Invalid title', ['title: this field is required'])

    values = dict(changes)
    if 'layout' in values:
        # BlockValidationError is a ValueError; callers map both to 400
        values['layout'] = serialize_layout(parse_layout(values['layout']))

    for name, value in values.items():
        setattr(item, name, value)


def _stage_seo(session, item, result: ContentUpdateResult, base_url: str):
    data = content_data_from_item(item, base_url)
    try:
        with session.begin_nested():
            analysis = analyze_and_store(session, item.content_type, item.id, data)
        result.seo_score = analysis.score
        result.readability_score = analysis.readability_score
    except Exception as e:
        logger.error("SEO analysis failed for %s/%s: %s", item.content_type, item.id, e)
        result.add_error('seo', f"Failed to analyze content: {error_message(e)}")
    return data


def _stage_ai_suggestions(generator, data, result: ContentUpdateResult):
    if not data.focus_keyword:
        return
    try:
        result.seo_suggestions = generator.seo_suggestions(
            data.content, data.focus_keyword, data.meta_title or data.title, data.meta_description,
        )
    except Exception as e:
        logger.error("AI suggestions failed: %s", e)
        result.add_error('ai', f"Failed to generate SEO suggestions: {error_message(e)}")


def update_content(session, item, changes: Dict[str, Any], author: str = '',
                   version_type: str = 'minor', generator=None, auto_optimize: bool = False,
                   change_log: str = '', base_url: str = SITE_URL) -> ContentUpdateResult:
    """Apply an editor's changes and run the post-save stages. Caller commits."""
    apply_changes(item, changes)
    session.flush()

    result = ContentUpdateResult()
    version = create_version(session, item, author=author, version_type=version_type, change_log=change_log)
    result.version = version.version
    result.version_id = version.id

    data = _stage_seo(session, item, result, base_url)

    if auto_optimize and generator is not None:
        _stage_ai_suggestions(generator, data, result)

    logger.info("Content %s/%s updated to %s (seo=%s, errors=%d)",
                item.content_type, item.id, result.version, result.seo_score, len(result.errors),
                extra={'content_type': item.content_type, 'content_id': item.id})
    return result


def refresh_seo(session, item, base_url: str = SITE_URL) -> ContentUpdateResult:
    """Re-run only the SEO stage, e.g. after a rollback."""
    result = ContentUpdateResult()
    _stage_seo(session, item, result, base_url)
    return result
