"""
AIContent model — record of every AI generation request.
"""
from sqlalchemy import Column, Integer, Float, Text, DateTime, JSON
from sqlalchemy.sql import func

from cms_backend.database import Base


class AIContent(Base):
    __tablename__ = 'ai_content'

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False)
    type = Column(Text, nullable=False)
    prompt = Column(JSON, default=dict)           # generation parameters as requested
    ai_settings = Column(JSON, default=dict)      # {model, temperature, max_tokens, top_p}
    content = Column(Text, default='')
    seo_optimization = Column(JSON, default=dict)  # {focus_keyword, meta_title, meta_description, suggestions}
    quality_score = Column(Integer, nullable=True)
    readability_score = Column(Integer, nullable=True)
    tokens_used = Column(Integer, default=0)
    estimated_cost = Column(Float, default=0.0)
    status = Column(Text, default='draft')
    regeneration_count = Column(Integer, default=0)
    author = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
