"""
Background jobs — submission processing on an RQ worker.

Used when PROCESS_SUBMISSIONS_ASYNC is set; otherwise the route processes
submissions inline.
"""
import logging

from cms_backend.database import get_session

logger = logging.getLogger('cms.jobs')


# ── Lazy RQ queue (avoids import-time Redis connection) ───────────────────

_queue = None


def _get_queue():
    global _queue
    if _queue is None:
        from cms_backend.extensions import redis_client
        from rq import Queue
        _queue = Queue('submissions', connection=redis_client)
    return _queue


def enqueue_submission(submission_id: int):
    """Queue a stored submission for processing. Returns the RQ job."""
    job = _get_queue().enqueue(process_submission_job, submission_id, job_timeout=120)
    logger.info("Submission %s queued as job %s", submission_id, job.id,
                extra={'submission_id': submission_id, 'job_id': job.id})
    return job


def process_submission_job(submission_id: int):
    """RQ entry point: load the submission, run the pipeline, commit."""
    from cms_backend.models.form import Form
    from cms_backend.models.submission import FormSubmission
    from cms_backend.pipeline.manager import process_submission

    session = get_session()
    try:
        submission = session.get(FormSubmission, submission_id)
        if submission is None:
            logger.warning("Submission %s not found, skipping", submission_id)
            return None
        if submission.status != 'received':
            logger.info("Submission %s already %s, skipping", submission_id, submission.status)
            return None

        form = session.get(Form, submission.form_id)
        result = process_submission(session, form, submission)
        session.commit()
        return result.to_dict()
    except Exception:
        session.rollback()
        logger.error("Job for submission %s failed", submission_id, exc_info=True)
        raise
    finally:
        session.close()
