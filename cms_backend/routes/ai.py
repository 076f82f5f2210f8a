"""
AI routes — content generation, improvement, translation and SEO suggestions.
"""
import logging
from datetime import datetime, timezone

from flask import Blueprint, current_app, request, jsonify

from cms_backend.services.content_generator import (
    ContentGenerationError, GenerationRequest, IMPROVEMENT_TYPES,
)

logger = logging.getLogger('routes.ai')

bp = Blueprint('ai', __name__)


def _generator():
    return current_app.extensions['content_generator']


def _body():
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def _save_generation(req: GenerationRequest, result, author=None):
    """Store the generation as an AIContent draft; returns its id or None."""
    from cms_backend.database import get_session
    from cms_backend.models.ai_content import AIContent

    session = get_session()
    try:
        record = AIContent(
            title=f"AI Generated {req.type.replace('_', ' ')} - {datetime.now(timezone.utc):%Y-%m-%d}",
            type=req.type,
            prompt={
                'user_prompt': req.user_prompt,
                'system_prompt': req.system_prompt,
                'keywords': req.keywords,
                'tone': req.tone,
                'target_audience': req.target_audience,
                'word_count': req.word_count,
                'language': req.language,
            },
            ai_settings={
                'model': req.model or _generator().default_model,
                'temperature': req.temperature,
                'max_tokens': req.max_tokens,
                'top_p': req.top_p,
            },
            content=result.content,
            seo_optimization={
                'enabled': bool(req.focus_keyword),
                'focus_keyword': req.focus_keyword,
                'meta_title': result.meta_title,
                'meta_description': result.meta_description,
                'suggestions': result.seo_suggestions,
            },
            quality_score=result.quality_score,
            readability_score=result.readability_score,
            tokens_used=result.tokens_used,
            estimated_cost=result.estimated_cost,
            status='draft',
            author=author,
        )
        session.add(record)
        session.commit()
        return record.id
    except Exception as e:
        session.rollback()
        logger.error("Saving AI content failed: %s", e)
        return None
    finally:
        session.close()


@bp.route('/api/ai/generate', methods=['POST'])
def generate():
    body = _body()
    if not body.get('type') or not (body.get('userPrompt') or body.get('user_prompt')):
        return jsonify({'error': 'Type and userPrompt are required'}), 400

    try:
        req = GenerationRequest.from_dict(body)
    except (TypeError, ValueError) as e:
        return jsonify({'error': 'Invalid generation parameters', 'details': str(e)}), 400

    try:
        result = _generator().generate(req)
    except ContentGenerationError as e:
        return jsonify({'error': 'Failed to generate content', 'details': str(e)}), 500

    data = result.to_dict()
    if body.get('saveToCollection', True):
        data['ai_content_id'] = _save_generation(req, result, author=body.get('author'))
    return jsonify({'success': True, 'data': data})


@bp.route('/api/ai/improve', methods=['POST'])
def improve():
    body = _body()
    content = body.get('content')
    improvement_type = body.get('improvementType')
    if not content or not improvement_type:
        return jsonify({'error': 'Content and improvementType are required'}), 400
    if improvement_type not in IMPROVEMENT_TYPES:
        return jsonify({'error': 'Invalid improvementType',
                        'details': f"must be one of {', '.join(IMPROVEMENT_TYPES)}"}), 400

    improved = _generator().improve(content, improvement_type, body.get('focusKeyword'))
    return jsonify({'success': True, 'data': {'improved_content': improved}})


@bp.route('/api/ai/translate', methods=['POST'])
def translate():
    body = _body()
    content = body.get('content')
    language = body.get('targetLanguage')
    if not content or not language:
        return jsonify({'error': 'Content and targetLanguage are required'}), 400

    translated = _generator().translate(content, language, bool(body.get('preserveFormatting', True)))
    return jsonify({'success': True, 'data': {
        'translated_content': translated,
        'target_language': language,
    }})


@bp.route('/api/ai/seo-suggestions', methods=['POST'])
def seo_suggestions():
    body = _body()
    content = body.get('content')
    focus_keyword = body.get('focusKeyword')
    if not content or not focus_keyword:
        return jsonify({'error': 'Content and focusKeyword are required'}), 400

    suggestions = _generator().seo_suggestions(
        content, focus_keyword, body.get('currentTitle'), body.get('currentDescription'),
    )
    return jsonify({'success': True, 'data': {
        'suggestions': suggestions,
        'focus_keyword': focus_keyword,
    }})
