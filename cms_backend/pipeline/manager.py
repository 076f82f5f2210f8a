"""
Submission pipeline manager — runs one submission through every stage.

  RECEIVED → SPAM CHECK → SCORING → LEAD UPSERT → NOTIFY → ANALYTICS → COMPLETE

Validation happens in receive_submission() before anything is written.
After that, each stage records its failures on the ProcessingResult and the
pipeline moves on; a failed webhook never prevents the lead from being saved.
Spam stops the pipeline after the spam check: the submission is kept for
review but never scored, notified or counted.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from cms_backend.config import DEFAULT_QUALIFICATION_THRESHOLD
from cms_backend.models.submission import FormSubmission
from cms_backend.pipeline.analytics import record_form_submission
from cms_backend.pipeline.base import (
    ProcessingResult, SubmissionContext, error_message, submitted_email, submitted_name,
)
from cms_backend.pipeline.leads import upsert_lead
from cms_backend.pipeline.notifications import Notifier
from cms_backend.pipeline.scoring import calculate_lead_score, load_rules
from cms_backend.pipeline.spam import detect_spam

logger = logging.getLogger('pipeline.manager')


class SubmissionValidationError(Exception):
    """Submission rejected before any side effect."""

    def __init__(self, message: str, details: List[str] = None):
        self.details = details or []
        super().__init__(message)


def validate_submission(form, data: Any) -> Dict[str, Any]:
    """Check the payload shape and the form's required fields."""
    if form is None:
        raise SubmissionValidationError('Form not found')
    if not form.is_active:
        raise SubmissionValidationError('Form is not accepting submissions')
    if not isinstance(data, dict) or not data:
        raise SubmissionValidationError('Submission data must be a non-empty object')

    non_scalar = [k for k, v in data.items() if isinstance(v, (dict, list))]
    if non_scalar:
        raise SubmissionValidationError(
            'Submission values must be scalars',
            [f"{k}: nested values are not allowed" for k in non_scalar],
        )

    missing = [name for name in form.required_fields() if data.get(name) in (None, '')]
    if missing:
        raise SubmissionValidationError(
            'Missing required fields',
            [f"{name}: this field is required" for name in missing],
        )
    return data


def receive_submission(session, form, data: Any, submission_time: Optional[float] = None,
                       request_meta: Optional[Dict[str, str]] = None) -> FormSubmission:
    """Validate and store a new submission in state 'received'."""
    data = validate_submission(form, data)
    meta = request_meta or {}
    submission = FormSubmission(
        form_id=form.id,
        data=dict(data),
        submission_time=submission_time,
        submitter_email=submitted_email(data),
        submitter_name=submitted_name(data) or submitted_email(data),
        ip_address=meta.get('ip_address'),
        user_agent=meta.get('user_agent'),
        referrer=meta.get('referrer'),
        status='received',
    )
    session.add(submission)
    session.flush()
    logger.info("Received submission %s for form %s", submission.id, form.id)
    return submission


def _stage_spam_check(ctx: SubmissionContext, result: ProcessingResult):
    check = detect_spam(ctx.data, ctx.submission_time)
    result.is_spam = check.is_spam
    result.spam_score = check.score
    ctx.submission.is_spam = check.is_spam
    ctx.submission.spam_score = check.score
    ctx.submission.spam_reasons = check.reasons


def _stage_score(ctx: SubmissionContext, result: ProcessingResult):
    lead_scoring = ctx.form.lead_scoring or {}
    if not lead_scoring.get('enabled'):
        return
    result.lead_score = calculate_lead_score(ctx.data, load_rules(lead_scoring))
    threshold = lead_scoring.get('qualification_threshold')
    if threshold is None:
        threshold = DEFAULT_QUALIFICATION_THRESHOLD
    result.qualified = result.lead_score >= threshold


def _stage_lead(session, ctx: SubmissionContext, result: ProcessingResult):
    if not (result.qualified or ctx.form.type == 'lead_generation'):
        return
    try:
        # Savepoint so a failed insert does not poison the outer transaction
        with session.begin_nested():
            lead = upsert_lead(session, ctx.form, ctx.data, result.lead_score)
        result.lead_id = lead.id
    except Exception as e:
        logger.error("Lead upsert failed for submission %s: %s", ctx.submission.id, e)
        result.add_error('lead', f"Failed to create lead: {error_message(e)}")


def _stage_analytics(session, ctx: SubmissionContext, result: ProcessingResult):
    try:
        with session.begin_nested():
            record_form_submission(session, ctx.form.id)
    except Exception as e:
        logger.error("Analytics update failed for form %s: %s", ctx.form.id, e)
        result.add_error('processing', f"Failed to update form analytics: {error_message(e)}")


def _finish(ctx: SubmissionContext, result: ProcessingResult, status: str):
    sub = ctx.submission
    sub.status = status
    sub.lead_score = result.lead_score
    sub.qualified = result.qualified
    sub.lead_id = result.lead_id
    sub.email_sent = result.notifications.email_sent
    sub.webhook_sent = result.notifications.webhook_sent
    sub.crm_synced = result.notifications.crm_synced
    sub.processing_errors = [{'type': e.type, 'message': e.message} for e in result.errors]
    sub.processed_at = datetime.now(timezone.utc)


def process_submission(session, form, submission: FormSubmission,
                       notifier: Optional[Notifier] = None) -> ProcessingResult:
    """
    Run a stored submission through the pipeline and persist its outcome.

    Never raises for stage failures — they are returned in result.errors.
    The caller owns the transaction and commits afterwards.
    """
    notifier = notifier or Notifier()
    ctx = SubmissionContext(
        form=form,
        submission=submission,
        data=dict(submission.data or {}),
        submission_time=submission.submission_time,
    )
    result = ProcessingResult()
    result.mark('received')

    try:
        _stage_spam_check(ctx, result)
        result.mark('spam_checked')
    except Exception as e:
        logger.error("Spam check failed for submission %s", submission.id, exc_info=True)
        result.add_error('processing', f"Spam check failed: {error_message(e)}")

    if result.is_spam:
        _finish(ctx, result, 'spam')
        logger.info("Submission %s marked as spam (score=%d)", submission.id, result.spam_score)
        return result

    try:
        _stage_score(ctx, result)
        result.mark('scored')
    except Exception as e:
        logger.error("Scoring failed for submission %s", submission.id, exc_info=True)
        result.add_error('processing', f"Scoring failed: {error_message(e)}")

    _stage_lead(session, ctx, result)
    result.mark('lead_upserted')

    try:
        notifier.dispatch(ctx, result.lead_id, result)
    except Exception as e:
        logger.error("Notification dispatch failed for submission %s", submission.id, exc_info=True)
        result.add_error('processing', f"Notification dispatch failed: {error_message(e)}")
    result.mark('notified')

    _stage_analytics(session, ctx, result)
    result.mark('analytics_updated')

    _finish(ctx, result, 'processed')
    result.mark('complete')

    logger.info(
        "Submission %s processed: score=%d qualified=%s lead=%s errors=%d",
        submission.id, result.lead_score, result.qualified, result.lead_id, len(result.errors),
        extra={'submission_id': submission.id, 'form_id': form.id, 'lead_id': result.lead_id},
    )
    return result
