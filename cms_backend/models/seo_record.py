"""
SEORecord model — latest analysis + sitemap overrides per content item.
"""
from sqlalchemy import Column, Integer, Float, Text, Boolean, DateTime, JSON, UniqueConstraint
from sqlalchemy.sql import func

from cms_backend.database import Base


class SEORecord(Base):
    __tablename__ = 'seo_records'
    __table_args__ = (
        UniqueConstraint('content_type', 'content_id', name='uq_seo_record_content'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, default='')
    content_type = Column(Text, nullable=False)  # page/post/product
    content_id = Column(Text, nullable=False)
    url = Column(Text, default='')

    # Analysis (issues replaced wholesale on every run)
    seo_score = Column(Integer, nullable=True)
    readability_score = Column(Integer, nullable=True)
    issues = Column(JSON, default=list)
    last_analyzed = Column(DateTime(timezone=True), nullable=True)

    # Sitemap overrides; None means "use the content-type default"
    include_in_sitemap = Column(Boolean, nullable=True)
    change_frequency = Column(Text, nullable=True)
    priority = Column(Float, nullable=True)
    last_modified = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
