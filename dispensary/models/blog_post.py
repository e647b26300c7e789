from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text

from dispensary.core.database import Base

BLOG_CATEGORIES = ("education", "strain_review", "industry_news", "wellness")


class BlogPost(Base):
    __tablename__ = "blog_posts"

    id = Column(Integer, primary_key=True)
    title = Column(String(500), nullable=False)
    slug = Column(String(500), unique=True, index=True, nullable=False)
    content = Column(Text, nullable=False)
    excerpt = Column(Text, nullable=True)
    category = Column(String(32), default="education", nullable=False)
    author = Column(String(255), default="Dimitri's Team", nullable=False)
    featured_image = Column(String(500), nullable=True)
    published = Column(Boolean, default=False, nullable=False)
    published_at = Column(DateTime, nullable=True)
    generated_by_ai = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
