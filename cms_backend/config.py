"""
Centralized configuration — env vars and fixed constants.
"""
import os


# ── Logging ──────────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_FORMAT = os.getenv('LOG_FORMAT', 'text')

# ── Redis ─────────────────────────────────────────────────────────────────────
REDIS_URL = os.getenv('REDIS_URL', 'redis://localhost:6379/0')

# ── PostgreSQL ────────────────────────────────────────────────────────────────
DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///local.db')

# ── Public site ───────────────────────────────────────────────────────────────
SITE_URL = os.getenv('SITE_URL', 'http://localhost:3000')

# ── OpenAI ────────────────────────────────────────────────────────────────────
OPENAI_API_KEY = os.getenv('OPENAI_API_KEY')
OPENAI_API_BASE = os.getenv('OPENAI_API_BASE')
OPENAI_MODEL = os.getenv('OPENAI_MODEL', 'gpt-4')
OPENAI_TIMEOUT = float(os.getenv('OPENAI_TIMEOUT', '60'))
OPENAI_MAX_RETRIES = int(os.getenv('OPENAI_MAX_RETRIES', '0'))

# ── Email (Resend) ────────────────────────────────────────────────────────────
RESEND_API_KEY = os.getenv('RESEND_API_KEY')
EMAIL_FROM = os.getenv('EMAIL_FROM', 'Forms <forms@example.com>')

# ── Outbound webhooks / CRM ───────────────────────────────────────────────────
WEBHOOK_TIMEOUT = float(os.getenv('WEBHOOK_TIMEOUT', '10'))
WEBHOOK_USER_AGENT = 'cms-backend-webhook/1.0'
HUBSPOT_API_URL = 'https://api.hubapi.com'
PIPEDRIVE_API_URL = 'https://api.pipedrive.com/v1'

# ── Background processing ────────────────────────────────────────────────────
PROCESS_SUBMISSIONS_ASYNC = os.getenv('PROCESS_SUBMISSIONS_ASYNC', '').lower() in ('1', 'true', 'yes')

# ── Auth ─────────────────────────────────────────────────────────────────────
ADMIN_API_TOKEN = os.getenv('ADMIN_API_TOKEN')

# ── Submission pipeline stage definitions ────────────────────────────────────
PIPELINE_STAGES = [
    'received',
    'spam_checked',
    'scored',
    'lead_upserted',
    'notified',
    'analytics_updated',
    'complete',
]

# ── Lead defaults ─────────────────────────────────────────────────────────────
DEFAULT_QUALIFICATION_THRESHOLD = 50

# ── Content ───────────────────────────────────────────────────────────────────
CONTENT_TYPES = ['page', 'post', 'product']
CONTENT_STATUSES = ['draft', 'published', 'archived']
