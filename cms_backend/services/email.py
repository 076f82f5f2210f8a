"""
Transactional email via Resend.
"""
import html
import logging
from datetime import datetime
from typing import Any, Dict, List

from cms_backend.config import RESEND_API_KEY, EMAIL_FROM, SITE_URL

logger = logging.getLogger('services.email')


class EmailError(Exception):
    """Raised when an email cannot be sent."""


def send_email(to: List[str], subject: str, html_body: str, api_key: str = None, sender: str = None):
    """Send one email. Raises EmailError if email is not configured or Resend fails."""
    api_key = api_key or RESEND_API_KEY
    if not api_key:
        raise EmailError('RESEND_API_KEY not set')

    import resend
    resend.api_key = api_key
    try:
        resend.Emails.send({
            'from': sender or EMAIL_FROM,
            'to': to,
            'subject': subject,
            'html': html_body,
        })
    except Exception as e:
        raise EmailError(f"Resend rejected email to {', '.join(to)}: {e}") from e
    logger.info("Email sent to %s: %s", ', '.join(to), subject)


def render_submission_email(form_name: str, data: Dict[str, Any], submission_id) -> str:
    """HTML table of all submitted fields plus an admin link."""
    rows = ''.join(
        '<tr>'
        f'<td style="border:1px solid #ddd;padding:8px;font-weight:bold;">{html.escape(str(key))}</td>'
        f'<td style="border:1px solid #ddd;padding:8px;">{html.escape(str(value))}</td>'
        '</tr>'
        for key, value in data.items()
    )
    return f"""
<h2>New {html.escape(form_name)} Submission</h2>
<p><strong>Submission ID:</strong> {submission_id}</p>
<p><strong>Date:</strong> {datetime.now().strftime('%Y-%m-%d %H:%M')}</p>
<hr>
<h3>Submission Details:</h3>
<table style="border-collapse:collapse;width:100%;">{rows}</table>
<hr>
<p><a href="{SITE_URL}/admin/submissions/{submission_id}">View in Admin</a></p>
"""
