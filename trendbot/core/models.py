"""Database models for TrendBot."""
from sqlalchemy import Boolean, DateTime, Index, Integer, JSON, String, Text
from sqlalchemy.orm import mapped_column

from .db import Base


class TrendingTopic(Base):
    """Researched or manually submitted trends."""
    __tablename__ = "trending_topics"

    id = mapped_column(Integer, primary_key=True, autoincrement=True)
    title = mapped_column(String(200), nullable=False)
    description = mapped_column(Text, nullable=False, default="")
    category = mapped_column(String(50), nullable=False, index=True)  # canonical form
    relevance_score = mapped_column(Integer, nullable=True)
    brand_context = mapped_column(String(500), nullable=True)
    content_ideas = mapped_column(JSON, nullable=False, default=list)
    hashtags = mapped_column(JSON, nullable=False, default=list)
    keywords = mapped_column(JSON, nullable=False, default=list)
    source = mapped_column(String(16), nullable=False, default="manual")  # llm|fallback|manual
    is_hidden = mapped_column(Boolean, nullable=False, default=False, index=True)
    created_at = mapped_column(DateTime(timezone=True), nullable=False, index=True)


Index('idx_trending_topics_hidden_created', TrendingTopic.is_hidden, TrendingTopic.created_at.desc())
Index('idx_trending_topics_category_created', TrendingTopic.category, TrendingTopic.created_at.desc())
