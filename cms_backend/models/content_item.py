"""
ContentItem model — pages, blog posts and products.
"""
from sqlalchemy import Column, Integer, Text, DateTime, JSON, UniqueConstraint
from sqlalchemy.sql import func

from cms_backend.database import Base


class ContentItem(Base):
    __tablename__ = 'content_items'
    __table_args__ = (
        UniqueConstraint('content_type', 'slug', name='uq_content_item_type_slug'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    content_type = Column(Text, nullable=False)  # page/post/product
    slug = Column(Text, nullable=False)
    title = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default='draft')
    body = Column(Text, default='')
    layout = Column(JSON, default=list)  # serialized blocks, see cms_backend.blocks
    meta = Column(JSON, default=dict)    # {title, description, focus_keyword}
    images = Column(JSON, default=list)  # [{src, alt}]
    links = Column(JSON, default=list)   # [{href, text, is_internal}]
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Fields copied into version snapshots
    SNAPSHOT_FIELDS = ('title', 'slug', 'status', 'body', 'layout', 'meta', 'images', 'links')

    def snapshot(self):
        return {name: getattr(self, name) for name in self.SNAPSHOT_FIELDS}
