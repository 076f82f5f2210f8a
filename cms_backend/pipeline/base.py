"""
Submission pipeline contracts.

Every stage reads the shared SubmissionContext and records failures on the
ProcessingResult instead of raising, so one failing stage never blocks the
stages after it.
"""
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional

from cms_backend.config import PIPELINE_STAGES


@dataclass
class StageError:
    """One recorded processing failure, tagged by stage type."""
    type: str      # validation/lead/email/webhook/crm/processing
    message: str


@dataclass
class NotificationStatus:
    email_sent: bool = False
    webhook_sent: bool = False
    crm_synced: bool = False


@dataclass
class ProcessingResult:
    """Uniform output of process_submission()."""
    lead_score: int = 0
    qualified: bool = False
    lead_id: Optional[int] = None
    is_spam: bool = False
    spam_score: int = 0
    stages_completed: List[str] = field(default_factory=list)
    errors: List[StageError] = field(default_factory=list)
    notifications: NotificationStatus = field(default_factory=NotificationStatus)

    def add_error(self, error_type: str, message: str):
        self.errors.append(StageError(type=error_type, message=message))

    def mark(self, stage: str):
        if stage not in PIPELINE_STAGES:
            raise ValueError(f"Unknown pipeline stage: {stage}")
        self.stages_completed.append(stage)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SubmissionContext:
    """Everything a stage needs to know about the submission being processed."""
    form: Any
    submission: Any
    data: Dict[str, Any]
    submission_time: Optional[float] = None

    @property
    def email(self) -> Optional[str]:
        return submitted_email(self.data)


def submitted_email(data: Dict[str, Any]) -> Optional[str]:
    """Email under any of the field names forms commonly use."""
    for key in ('email', 'Email', 'emailAddress'):
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def submitted_name(data: Dict[str, Any]) -> str:
    name = data.get('name') or data.get('Name')
    if name:
        return str(name)
    first = data.get('firstName') or data.get('first_name') or ''
    last = data.get('lastName') or data.get('last_name') or ''
    return f"{first} {last}".strip()


def error_message(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__
