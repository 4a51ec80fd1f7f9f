from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import ARRAY

from research_oracle.db.interfaces.postgresql import Base


class Paper(Base):
    __tablename__ = "papers"

    # Identifiers are opaque to the app; they round-trip through citations as text
    id = Column(String, primary_key=True)
    filename = Column(String, nullable=True)
    title = Column(String, nullable=False)
    pub_year = Column(Integer, nullable=True, index=True)

    # Extracted content
    summary = Column(Text, nullable=True)
    findings = Column(Text, nullable=True)
    hypothesis = Column(Text, nullable=True)
    entities = Column(ARRAY(Text), nullable=True)

    created_at = Column(DateTime, nullable=True)


class PaperChunk(Base):
    __tablename__ = "paper_chunks"

    id = Column(String, primary_key=True)
    paper_id = Column(String, ForeignKey("papers.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
