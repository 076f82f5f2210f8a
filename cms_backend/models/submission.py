"""
FormSubmission model — one row per received submission.

`data` is stored exactly as received; everything else is processing state
written by the submission pipeline.
"""
from sqlalchemy import Column, Integer, Float, Text, Boolean, DateTime, JSON, ForeignKey
from sqlalchemy.sql import func

from cms_backend.database import Base


class FormSubmission(Base):
    __tablename__ = 'form_submissions'

    id = Column(Integer, primary_key=True, autoincrement=True)
    form_id = Column(Integer, ForeignKey('forms.id'), nullable=False, index=True)
    data = Column(JSON, nullable=False, default=dict)
    submission_time = Column(Float, nullable=True)  # seconds from page load to submit

    # Submitter info extracted from data + request headers
    submitter_email = Column(Text, nullable=True)
    submitter_name = Column(Text, nullable=True)
    ip_address = Column(Text, nullable=True)
    user_agent = Column(Text, nullable=True)
    referrer = Column(Text, nullable=True)

    # Processing state
    status = Column(Text, nullable=False, default='received')  # received/spam/processed
    is_spam = Column(Boolean, default=False)
    spam_score = Column(Integer, default=0)
    spam_reasons = Column(JSON, default=list)
    lead_score = Column(Integer, default=0)
    qualified = Column(Boolean, default=False)
    lead_id = Column(Integer, ForeignKey('leads.id'), nullable=True)
    email_sent = Column(Boolean, default=False)
    webhook_sent = Column(Boolean, default=False)
    crm_synced = Column(Boolean, default=False)
    processing_errors = Column(JSON, default=list)  # [{type, message}]

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    processed_at = Column(DateTime(timezone=True), nullable=True)
