# /blog_auto/db/models/generation_models.py

"""
ORM models for blog generation jobs and the reusable style profiles that a
job can reference.
"""

from sqlalchemy import Column, String, Integer, Float, Text, JSON, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..base_class import Base


class StyleProfile(Base):
    """A writing-voice descriptor learned from sample posts."""
    __tablename__ = "style_profiles"

    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    profile = Column(Text, nullable=False)
    sample_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Generation(Base):
    """
    One topic-to-post generation job.

    `status` only moves forward (running -> completed | failed) and `content`
    is populated exactly when the job completed.
    """
    id = Column(String, primary_key=True, index=True)

    # --- Inputs ---
    topic = Column(String, nullable=False)
    keywords = Column(JSON, nullable=False, default=list)
    style = Column(String, nullable=False, index=True)
    length = Column(String, nullable=False)
    mode = Column(String, nullable=False)
    style_profile_id = Column(String, ForeignKey("style_profiles.id", ondelete="SET NULL"), nullable=True)

    # --- Outputs ---
    title = Column(String, nullable=True)
    content = Column(Text, nullable=True)
    char_count = Column(Integer, nullable=True)
    read_time = Column(Integer, nullable=True)
    headings = Column(JSON, nullable=True)
    seo_score = Column(Integer, nullable=True)
    image_urls = Column(JSON, nullable=False, default=list)

    # --- Accounting ---
    input_tokens = Column(Integer, nullable=False, default=0)
    output_tokens = Column(Integer, nullable=False, default=0)
    cost_usd = Column(Float, nullable=False, default=0.0)
    duration_sec = Column(Integer, nullable=False, default=0)

    # --- Lifecycle ---
    status = Column(String, nullable=False, index=True, default="running")
    error = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    style_profile = relationship("StyleProfile")
