"""
Pipeline stage: ANALYTICS — form view/submission counters.

Counters are bumped with a single UPDATE whose SET clause reads the row's
current values, so two handlers incrementing the same form cannot overwrite
each other's count. Conversion rate is recomputed in the same statement.
"""
import logging
from datetime import datetime, timezone

from sqlalchemy import case, update

from cms_backend.models.form import Form

logger = logging.getLogger('pipeline.analytics')


def _conversion_rate(submissions, views):
    """submissions / views as a percentage; 0 when there are no views."""
    return case(
        (views > 0, submissions * 100.0 / views),
        else_=0.0,
    )


def record_form_submission(session, form_id: int):
    """Increment the submission counter and recompute conversion rate."""
    session.execute(
        update(Form)
        .where(Form.id == form_id)
        .values(
            submissions=Form.submissions + 1,
            conversion_rate=_conversion_rate(Form.submissions + 1, Form.views),
            last_submission_at=datetime.now(timezone.utc),
        )
        .execution_options(synchronize_session=False)
    )
    logger.debug("Form %s submission counted", form_id)


def record_form_view(session, form_id: int):
    """Increment the view counter and recompute conversion rate."""
    session.execute(
        update(Form)
        .where(Form.id == form_id)
        .values(
            views=Form.views + 1,
            conversion_rate=_conversion_rate(Form.submissions, Form.views + 1),
        )
        .execution_options(synchronize_session=False)
    )
    logger.debug("Form %s view counted", form_id)
