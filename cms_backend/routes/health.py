"""
Health routes — liveness and database reachability.
"""
import logging

from flask import Blueprint, jsonify
from sqlalchemy import text

logger = logging.getLogger('routes.health')

bp = Blueprint('health', __name__)


@bp.route('/health')
def health_check():
    """Health check endpoint."""
    from cms_backend.database import get_session

    session = get_session()
    try:
        session.execute(text('SELECT 1'))
        return jsonify({'status': 'healthy', 'database': 'ok'}), 200
    except Exception as e:
        logger.error("Health check database probe failed: %s", e)
        return jsonify({'status': 'degraded', 'database': 'unreachable'}), 503
    finally:
        session.close()
