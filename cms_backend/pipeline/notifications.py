"""
Pipeline stage: NOTIFY — email, webhook and CRM fan-out.

The three channels are independent: they run concurrently on a small thread
pool and each one's failure is caught and recorded on its own. Completion
order is not defined. Worker threads only see plain values captured up front,
never ORM objects.
"""
import concurrent.futures
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests

from cms_backend.config import WEBHOOK_TIMEOUT, WEBHOOK_USER_AGENT
from cms_backend.pipeline.base import ProcessingResult, SubmissionContext, error_message
from cms_backend.pipeline.crm import get_adapter
from cms_backend.services.email import send_email, render_submission_email

logger = logging.getLogger('pipeline.notifications')


class WebhookError(Exception):
    """Raised when the webhook target answers with a non-2xx status."""


def webhook_payload(form_descriptor: Dict[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
    return {
        'event': 'form_submission',
        'form': form_descriptor,
        'submission': data,
        'timestamp': datetime.now(timezone.utc).isoformat(),
    }


def send_webhook(url: str, form_descriptor: Dict[str, Any], data: Dict[str, Any],
                 timeout: float = WEBHOOK_TIMEOUT):
    resp = requests.post(
        url,
        json=webhook_payload(form_descriptor, data),
        headers={'Content-Type': 'application/json', 'User-Agent': WEBHOOK_USER_AGENT},
        timeout=timeout,
    )
    if not 200 <= resp.status_code < 300:
        raise WebhookError(f"Webhook failed with status {resp.status_code}")
    logger.info("Webhook delivered to %s (%d)", url, resp.status_code)


def send_email_notifications(form_name: str, settings: Dict[str, Any], data: Dict[str, Any],
                             submission_id, email_sender=send_email):
    """Notify every configured recipient, then the submitter if auto-respond is on."""
    recipients = [r for r in settings.get('notification_emails') or [] if r]
    if recipients:
        email_sender(
            recipients,
            f"New {form_name} submission",
            render_submission_email(form_name, data, submission_id),
        )

    auto = settings.get('auto_responder') or {}
    submitter = data.get('email')
    if auto.get('enabled') and submitter:
        email_sender(
            [submitter],
            auto.get('subject') or 'Thank you for your submission',
            auto.get('message') or 'Thank you for contacting us. We will get back to you soon.',
        )


class Notifier:
    """
    Dispatches the notification channels for one submission.

    Channel callables are injectable so tests (and alternative transports)
    can swap them without patching module globals.
    """

    def __init__(self, email_sender=send_email, webhook_sender=send_webhook,
                 crm_adapter_factory=get_adapter, max_workers: int = 3):
        self.email_sender = email_sender
        self.webhook_sender = webhook_sender
        self.crm_adapter_factory = crm_adapter_factory
        self.max_workers = max_workers

    def channels(self, ctx: SubmissionContext, lead_id: Optional[int]) -> List[Tuple[str, Callable[[], None]]]:
        """The (name, callable) pairs that apply to this submission."""
        form = ctx.form
        settings = dict(form.notifications or {})
        crm_config = dict(form.crm or {})
        form_name = form.name
        descriptor = form.descriptor()
        submission_id = ctx.submission.id
        data = dict(ctx.data)
        channels = []

        if settings.get('notification_emails') or (settings.get('auto_responder') or {}).get('enabled'):
            channels.append(('email', lambda: send_email_notifications(
                form_name, settings, data, submission_id, self.email_sender)))

        if settings.get('webhook_url'):
            channels.append(('webhook', lambda: self.webhook_sender(
                settings['webhook_url'], descriptor, data)))

        if crm_config.get('enabled') and lead_id:
            channels.append(('crm', lambda: self.crm_adapter_factory(crm_config).sync(data, lead_id)))

        return channels

    def dispatch(self, ctx: SubmissionContext, lead_id: Optional[int], result: ProcessingResult):
        channels = self.channels(ctx, lead_id)
        if not channels:
            return

        flags = {'email': 'email_sent', 'webhook': 'webhook_sent', 'crm': 'crm_synced'}
        workers = min(self.max_workers, len(channels))
        with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {executor.submit(fn): name for name, fn in channels}
            for future in concurrent.futures.as_completed(futures):
                name = futures[future]
                try:
                    future.result()
                    setattr(result.notifications, flags[name], True)
                except Exception as e:
                    logger.error("Notification channel %s failed for submission %s: %s",
                                 name, ctx.submission.id, e)
                    result.add_error(name, f"Failed to {_verb(name)}: {error_message(e)}")


def _verb(channel: str) -> str:
    return {
        'email': 'send email',
        'webhook': 'send webhook',
        'crm': 'sync with CRM',
    }[channel]
