"""Schema → PostgreSQL DDL (Supabase-ready, re-runnable)."""
import logging
from typing import Optional

from constraints import derive_table_constraints
from schema_types import SchemaColumn, SchemaData, SchemaIndex, SchemaTable

logger = logging.getLogger(__name__)

SQL_FILENAME = "schema.sql"

HEADER = [
    "-- Generated Database Schema for Supabase/Postgres",
    "-- Copy and run this SQL in your Supabase SQL Editor",
    "",
]


def quote_literal(text: str) -> str:
    """Single-quoted SQL string literal with embedded quotes doubled."""
    return "'" + text.replace("'", "''") + "'"


def column_definition(col: SchemaColumn, single_pk: Optional[SchemaColumn]) -> str:
    """name type [PRIMARY KEY] [DEFAULT x] [NOT NULL] [UNIQUE]"""
    is_single_pk = single_pk is col
    parts = [col.name, col.type]
    if is_single_pk:
        parts.append("PRIMARY KEY")
    if col.default_value is not None:
        parts.append(f"DEFAULT {col.default_value}")
    if col.is_nullable is False:
        parts.append("NOT NULL")
    if col.is_unique and not is_single_pk:
        parts.append("UNIQUE")
    return " ".join(parts)


def create_table_statement(table: SchemaTable, schema: SchemaData, index: SchemaIndex) -> list[str]:
    """Lines for one table: header comments and the CREATE TABLE statement."""
    lines = [f"-- Table: {table.name}"]
    if table.description:
        lines.extend(f"-- {line}" for line in table.description.splitlines())
    single_pk = table.single_primary_key()
    definitions = [column_definition(c, single_pk) for c in table.columns]
    definitions += derive_table_constraints(table, schema, index)
    lines.append(f"CREATE TABLE IF NOT EXISTS public.{table.name} (")
    lines.append("  " + ",\n  ".join(definitions))
    lines.append(");")
    return lines


def _index_statement(table: SchemaTable, col: SchemaColumn) -> str:
    return (
        f"CREATE INDEX IF NOT EXISTS idx_{table.name}_{col.name} "
        f"ON public.{table.name}({col.name});"
    )


def generate_indexes(schema: SchemaData) -> list[str]:
    """Indexes on foreign-key columns, then on unique columns, per table."""
    statements = []
    for table in schema.tables:
        single_pk = table.single_primary_key()
        for col in table.columns:
            if col.is_foreign_key and col is not single_pk:
                statements.append(_index_statement(table, col))
        for col in table.columns:
            if col.is_unique and not col.is_foreign_key and col is not single_pk:
                statements.append(_index_statement(table, col))
    return statements


def generate_comments(schema: SchemaData) -> list[str]:
    statements = []
    for table in schema.tables:
        if table.description:
            statements.append(
                f"COMMENT ON TABLE public.{table.name} IS {quote_literal(table.description)};"
            )
        for col in table.columns:
            if col.description:
                statements.append(
                    f"COMMENT ON COLUMN public.{table.name}.{col.name} IS {quote_literal(col.description)};"
                )
    return statements


def generate_sql(schema: SchemaData) -> str:
    """
    Full DDL script for a schema: tables, then indexes, then comments.
    Output depends only on the schema; the same input yields the same text.
    """
    index = SchemaIndex(schema)
    lines = list(HEADER)
    for table in schema.tables:
        lines.extend(create_table_statement(table, schema, index))
        lines.append("")

    indexes = generate_indexes(schema)
    if indexes:
        lines.append("-- Indexes")
        lines.extend(indexes)
        lines.append("")

    comments = generate_comments(schema)
    if comments:
        lines.append("-- Table and Column Comments")
        lines.extend(comments)
        lines.append("")

    logger.debug(
        "Generated DDL: %d tables, %d indexes, %d comments",
        len(schema.tables), len(indexes), len(comments),
    )
    return "\n".join(lines)
