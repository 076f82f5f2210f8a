"""
Form model — a form definition with its scoring rules, notification settings,
CRM integration and analytics counters.
"""
from sqlalchemy import Column, Integer, Float, Text, Boolean, DateTime, JSON
from sqlalchemy.sql import func

from cms_backend.database import Base


class Form(Base):
    __tablename__ = 'forms'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    type = Column(Text, nullable=False, default='contact')  # contact/lead_generation/newsletter/demo_request/other
    is_active = Column(Boolean, default=True)
    fields = Column(JSON, default=list)           # [{name, label, type, required}]
    lead_scoring = Column(JSON, default=dict)     # {enabled, qualification_threshold, rules: [...]}
    notifications = Column(JSON, default=dict)    # {notification_emails, auto_responder, webhook_url}
    crm = Column(JSON, default=dict)              # {enabled, provider, api_url, api_key, field_mapping}

    # Analytics counters
    views = Column(Integer, default=0, nullable=False)
    submissions = Column(Integer, default=0, nullable=False)
    conversion_rate = Column(Float, default=0.0, nullable=False)  # percent
    last_submission_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def descriptor(self):
        """Short {id, name, type} dict used in webhook envelopes."""
        return {'id': self.id, 'name': self.name, 'type': self.type}

    def required_fields(self):
        return [f['name'] for f in (self.fields or []) if f.get('required') and f.get('name')]

    def field_label(self, name):
        for f in self.fields or []:
            if f.get('name') == name:
                return f.get('label') or name
        return name
