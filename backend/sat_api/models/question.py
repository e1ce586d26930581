"""SAT question model."""

from sqlalchemy import Column, DateTime, Index, Integer, String, Text
from sqlalchemy.sql import func

from sat_api.db.base import Base


class SatQuestion(Base):
    """SAT question with an optional image held in object storage."""

    __tablename__ = "sat_questions"

    question_id = Column(Integer, primary_key=True, autoincrement=True)
    test_id = Column(Integer, nullable=True, index=True)  # References the external tests service
    section = Column(String(64), nullable=True)  # "math", "reading_writing", ...
    question_text = Column(Text)
    hint = Column(Text)
    image = Column(String(1024))  # Location of the object in the bucket
    explanation = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (Index("ix_sat_questions_section_test_id", "section", "test_id"),)
