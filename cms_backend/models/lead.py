"""
Lead model — one row per unique email address.

scoring_history and activities are append-only; score/grade reflect the
latest submission.
"""
from sqlalchemy import Column, Integer, Text, DateTime, JSON
from sqlalchemy.sql import func

from cms_backend.database import Base


class Lead(Base):
    __tablename__ = 'leads'

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(Text, nullable=False, unique=True)  # normalized: trimmed + lower-cased
    name = Column(Text, default='')
    first_name = Column(Text, nullable=True)
    last_name = Column(Text, nullable=True)
    phone = Column(Text, nullable=True)
    job_title = Column(Text, nullable=True)
    company = Column(JSON, default=dict)        # {name, website, industry, size}
    source = Column(JSON, default=dict)         # {type, form, campaign, medium, utm_parameters}
    qualification = Column(JSON, default=dict)  # {budget, authority, need, timeline}
    custom_fields = Column(JSON, default=dict)
    tags = Column(JSON, default=list)

    score = Column(Integer, default=0)
    grade = Column(Text, default='unqualified')
    status = Column(Text, default='new')
    scoring_history = Column(JSON, default=list)
    activities = Column(JSON, default=list)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
