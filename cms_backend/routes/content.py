"""
Content routes — editor saves, version history and rollback.
"""
import logging
from dataclasses import asdict

from flask import Blueprint, current_app, request, jsonify

from cms_backend.models.content_item import ContentItem
from cms_backend.services.content import ContentValidationError, update_content, refresh_seo
from cms_backend.services.versioning import (
    VERSION_TYPES, VersioningError, VersionSummary, rollback_to_version, versions_of,
)

logger = logging.getLogger('routes.content')

bp = Blueprint('content', __name__)


def _item_dict(item):
    return {
        'id': item.id,
        'content_type': item.content_type,
        'slug': item.slug,
        'title': item.title,
        'status': item.status,
        'meta': item.meta or {},
    }


@bp.route('/api/content/<int:item_id>', methods=['PATCH'])
def patch_content(item_id):
    """Apply changes, snapshot a version and re-run SEO analysis."""
    from cms_backend.database import get_session

    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        return jsonify({'error': 'Request body must be a JSON object'}), 400

    version_type = body.get('versionType', 'minor')
    if version_type not in VERSION_TYPES:
        return jsonify({'error': 'Invalid versionType',
                        'details': [f"versionType: must be one of {', '.join(VERSION_TYPES)}"]}), 400

    session = get_session()
    try:
        item = session.get(ContentItem, item_id)
        if item is None:
            return jsonify({'error': 'Content not found'}), 404

        try:
            result = update_content(
                session, item, body.get('changes'),
                author=body.get('author', ''),
                version_type=version_type,
                generator=current_app.extensions.get('content_generator'),
                auto_optimize=bool(body.get('autoOptimize')),
                change_log=body.get('changeLog', ''),
            )
        except ContentValidationError as e:
            session.rollback()
            return jsonify({'error': str(e), 'details': e.details}), 400
        except ValueError as e:
            # Malformed layout block
            session.rollback()
            return jsonify({'error': 'Invalid layout', 'details': [str(e)]}), 400

        session.commit()
        return jsonify({'content': _item_dict(item), 'result': result.to_dict()})
    except Exception as e:
        session.rollback()
        logger.error("Content update for %s failed: %s", item_id, e, exc_info=True)
        return jsonify({'error': 'Failed to update content'}), 500
    finally:
        session.close()


@bp.route('/api/content/<int:item_id>/versions')
def list_versions(item_id):
    from cms_backend.database import get_session

    session = get_session()
    try:
        item = session.get(ContentItem, item_id)
        if item is None:
            return jsonify({'error': 'Content not found'}), 404
        return jsonify([asdict(VersionSummary.of(v)) for v in versions_of(session, item)])
    finally:
        session.close()


@bp.route('/api/content/<int:item_id>/rollback/<int:version_id>', methods=['POST'])
def rollback(item_id, version_id):
    """Restore an earlier version as a new current version."""
    from cms_backend.database import get_session

    body = request.get_json(silent=True) or {}
    session = get_session()
    try:
        item = session.get(ContentItem, item_id)
        if item is None:
            return jsonify({'error': 'Content not found'}), 404

        try:
            version = rollback_to_version(
                session, item, version_id,
                author=body.get('author', ''), reason=body.get('reason', ''),
            )
        except VersioningError as e:
            session.rollback()
            return jsonify({'error': str(e)}), 404

        seo = refresh_seo(session, item)
        session.commit()
        return jsonify({
            'content': _item_dict(item),
            'version': asdict(VersionSummary.of(version)),
            'result': seo.to_dict(),
        })
    except Exception as e:
        session.rollback()
        logger.error("Rollback of %s to version %s failed: %s", item_id, version_id, e, exc_info=True)
        return jsonify({'error': 'Failed to roll back content'}), 500
    finally:
        session.close()
