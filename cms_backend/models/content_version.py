"""
ContentVersion model — immutable snapshot of a content item.

Exactly one version per (content_type, content_id) has is_current=True.
"""
from sqlalchemy import Column, Integer, Text, Boolean, DateTime, JSON, ForeignKey
from sqlalchemy.sql import func

from cms_backend.database import Base


class ContentVersion(Base):
    __tablename__ = 'content_versions'

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False)
    content_type = Column(Text, nullable=False)
    content_id = Column(Text, nullable=False, index=True)
    version = Column(Text, nullable=False)           # dotted: 1.0, 1.1, 2.0, 2.0.1
    version_type = Column(Text, default='minor')     # major/minor/patch
    author = Column(Text, default='')
    parent_version_id = Column(Integer, ForeignKey('content_versions.id'), nullable=True)
    content_snapshot = Column(JSON, nullable=False)
    changes = Column(JSON, default=list)             # [{field, change_type, old_value, new_value}]
    change_log = Column(Text, default='')
    is_current = Column(Boolean, default=False)
    metrics = Column(JSON, default=dict)             # {word_count, character_count, image_count, link_count}
    created_at = Column(DateTime(timezone=True), server_default=func.now())
