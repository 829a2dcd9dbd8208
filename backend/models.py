"""History models for the ERD generator (one row per LLM round)."""
from sqlalchemy import Column, Integer, Text, DateTime
from sqlalchemy.sql import func

from db import Base


class Generation(Base):
    """Result of one generate/refine call (schema + DDL + diagram)."""

    __tablename__ = "generations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    prompt = Column(Text, nullable=False)
    refinement_prompt = Column(Text)  # set for /refine rounds
    schema_json = Column(Text, nullable=False)  # camelCase wire JSON
    sql_ddl = Column(Text)
    er_diagram = Column(Text)  # Mermaid erDiagram
    raw_llm_response = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
