"""
Form routes — public submission intake and view tracking.
"""
import logging

from flask import Blueprint, request, jsonify

from cms_backend import config
from cms_backend.models.form import Form
from cms_backend.pipeline.manager import (
    SubmissionValidationError, receive_submission, process_submission,
)

logger = logging.getLogger('routes.forms')

bp = Blueprint('forms', __name__)


def _request_meta():
    forwarded = request.headers.get('X-Forwarded-For', '')
    return {
        'ip_address': forwarded.split(',')[0].strip() or request.remote_addr,
        'user_agent': request.headers.get('User-Agent'),
        'referrer': request.headers.get('Referer'),
    }


def _submission_time(body):
    value = body.get('submission_time')
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
        raise SubmissionValidationError(
            'Invalid submission_time', ['submission_time: must be a non-negative number of seconds'],
        )
    return float(value)


@bp.route('/api/forms/<int:form_id>/submissions', methods=['POST'])
def submit_form(form_id):
    """Validate, store and process one submission."""
    from cms_backend.database import get_session

    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        return jsonify({'error': 'Request body must be a JSON object', 'details': []}), 400

    session = get_session()
    try:
        form = session.get(Form, form_id)
        if form is None:
            return jsonify({'error': 'Form not found'}), 404

        try:
            submission = receive_submission(
                session, form, body.get('data'),
                submission_time=_submission_time(body),
                request_meta=_request_meta(),
            )
        except SubmissionValidationError as e:
            session.rollback()
            return jsonify({'error': str(e), 'details': e.details}), 400

        if config.PROCESS_SUBMISSIONS_ASYNC:
            from cms_backend.jobs import enqueue_submission
            session.commit()
            enqueue_submission(submission.id)
            return jsonify({'submission_id': submission.id, 'status': 'queued'}), 202

        result = process_submission(session, form, submission)
        session.commit()
        return jsonify({'submission_id': submission.id, 'result': result.to_dict()}), 201
    except Exception as e:
        session.rollback()
        logger.error("Submission for form %s failed: %s", form_id, e, exc_info=True)
        return jsonify({'error': 'Failed to process submission'}), 500
    finally:
        session.close()


@bp.route('/api/forms/<int:form_id>/views', methods=['POST'])
def record_view(form_id):
    """Count one form view and return the updated counters."""
    from cms_backend.database import get_session
    from cms_backend.pipeline.analytics import record_form_view

    session = get_session()
    try:
        form = session.get(Form, form_id)
        if form is None:
            return jsonify({'error': 'Form not found'}), 404

        record_form_view(session, form_id)
        session.commit()
        session.refresh(form)
        return jsonify({'views': form.views, 'conversion_rate': form.conversion_rate})
    except Exception as e:
        session.rollback()
        logger.error("View tracking for form %s failed: %s", form_id, e)
        return jsonify({'error': str(e)}), 500
    finally:
        session.close()
