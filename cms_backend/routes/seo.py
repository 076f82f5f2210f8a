"""
SEO routes — sitemap.xml, robots.txt, stored scores and ad-hoc analysis.
"""
import logging

from flask import Blueprint, Response, request, jsonify

from cms_backend import config
from cms_backend.seo.analyzer import ContentData, analyze, analyze_and_store
from cms_backend.seo.sitemap import SitemapGenerator, generate_robots_txt

logger = logging.getLogger('routes.seo')

bp = Blueprint('seo', __name__)

ROBOTS_MAX_AGE = 24 * 60 * 60
SITEMAP_MAX_AGE = 60 * 60


@bp.route('/sitemap.xml')
def sitemap():
    from cms_backend.database import get_session

    session = get_session()
    try:
        xml = SitemapGenerator(session, config.SITE_URL).generate()
    except Exception as e:
        logger.error("Sitemap generation failed: %s", e, exc_info=True)
        return Response('Error generating sitemap', status=500, mimetype='text/plain')
    finally:
        session.close()

    resp = Response(xml, mimetype='application/xml')
    resp.headers['Cache-Control'] = f'public, max-age={SITEMAP_MAX_AGE}'
    return resp


@bp.route('/robots.txt')
def robots():
    resp = Response(generate_robots_txt(config.SITE_URL), mimetype='text/plain')
    resp.headers['Cache-Control'] = f'public, max-age={ROBOTS_MAX_AGE}'
    return resp


@bp.route('/api/seo/score')
def seo_score():
    """Latest stored analysis for one content item."""
    from cms_backend.database import get_session
    from cms_backend.models.seo_record import SEORecord

    content_type = request.args.get('contentType')
    content_id = request.args.get('contentId')
    if not content_type or not content_id:
        return jsonify({'error': 'contentType and contentId are required'}), 400
    if content_type not in config.CONTENT_TYPES:
        return jsonify({'error': f"Unknown contentType: {content_type}"}), 400

    session = get_session()
    try:
        record = session.query(SEORecord).filter_by(
            content_type=content_type, content_id=str(content_id),
        ).first()
        if record is None:
            return jsonify({'error': 'No SEO analysis found'}), 404
        return jsonify({
            'content_type': record.content_type,
            'content_id': record.content_id,
            'url': record.url,
            'seo_score': record.seo_score,
            'readability_score': record.readability_score,
            'issues': record.issues or [],
            'last_analyzed': record.last_analyzed.isoformat() if record.last_analyzed else None,
        })
    finally:
        session.close()


@bp.route('/api/seo/analyze', methods=['POST'])
def seo_analyze():
    """Run the analyzer on posted content; store it when contentType/contentId are given."""
    from cms_backend.database import get_session

    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        return jsonify({'error': 'Request body must be a JSON object'}), 400

    # Either {"content": {...}, "contentType", "contentId"} or the fields at top level
    nested = body.get('content')
    content = ContentData.from_dict(nested if isinstance(nested, dict) else body)
    content_type = body.get('contentType')
    content_id = body.get('contentId')

    if not (content_type and content_id):
        return jsonify(analyze(content).to_dict())
    if content_type not in config.CONTENT_TYPES:
        return jsonify({'error': f"Unknown contentType: {content_type}"}), 400

    session = get_session()
    try:
        result = analyze_and_store(session, content_type, content_id, content)
        session.commit()
        return jsonify(result.to_dict())
    except Exception as e:
        session.rollback()
        logger.error("SEO analysis for %s/%s failed: %s", content_type, content_id, e)
        return jsonify({'error': 'Failed to analyze content', 'details': str(e)}), 500
    finally:
        session.close()
