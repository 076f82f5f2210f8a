"""
Flask application factory.

Creates and configures the Flask app, registers all blueprints.
"""
import hmac
import importlib

from flask import Flask, request, jsonify


# Editor endpoints; everything else (form submits, sitemap, health) is public
PROTECTED_PREFIXES = ('/api/ai/', '/api/content/', '/api/seo/analyze')


def _bearer_token():
    header = request.headers.get('Authorization', '')
    if header.startswith('Bearer '):
        return header[len('Bearer '):].strip()
    return ''


def create_app(content_generator=None):
    """Create and configure the Flask application.

    content_generator overrides the OpenAI-backed generator built from config.
    """
    from cms_backend import config
    from cms_backend.logging_config import configure_logging

    app = Flask(__name__)

    configure_logging(app)

    # ── Bearer-token gate for editor endpoints ──────────────────────────
    @app.before_request
    def require_token():
        token = config.ADMIN_API_TOKEN
        if not token:
            return  # No token set: open access (local dev)
        if not request.path.startswith(PROTECTED_PREFIXES):
            return
        if hmac.compare_digest(_bearer_token(), token):
            return
        return jsonify({'error': 'Unauthorized'}), 401

    # ── AI gateway (one client per app, no module-level singleton) ──────
    if content_generator is None:
        from cms_backend.extensions import make_openai_client
        from cms_backend.services.content_generator import ContentGenerator
        content_generator = ContentGenerator(make_openai_client(), default_model=config.OPENAI_MODEL)
    app.extensions['content_generator'] = content_generator

    # Register blueprints
    from cms_backend.routes.health import bp as health_bp
    from cms_backend.routes.forms import bp as forms_bp
    from cms_backend.routes.seo import bp as seo_bp
    from cms_backend.routes.ai import bp as ai_bp
    from cms_backend.routes.content import bp as content_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(forms_bp)
    app.register_blueprint(seo_bp)
    app.register_blueprint(ai_bp)
    app.register_blueprint(content_bp)

    # Import models so Base.metadata knows about them (required for SQLAlchemy).
    # Schema is managed by Alembic; no init_db() call.
    for name in ('form', 'submission', 'lead', 'seo_record', 'content_item', 'content_version', 'ai_content'):
        importlib.import_module(f'cms_backend.models.{name}')

    return app
