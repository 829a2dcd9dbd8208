"""Table-level constraint clauses derived from column flags and descriptions."""
import logging
from typing import Optional

from schema_types import SchemaColumn, SchemaData, SchemaIndex, SchemaTable

logger = logging.getLogger(__name__)

ENUM_SEPARATOR = "|"
_QUOTES = ("'", '"')


def parse_enum_values(description: Optional[str]) -> list[str]:
    """
    Read a pipe-delimited description ("draft | active | archived") as enum values.
    Each part is trimmed, loses one leading and one trailing quote, and is dropped
    if empty. Descriptions without a pipe yield no values.
    """
    if not description or ENUM_SEPARATOR not in description:
        return []
    values = []
    for part in description.split(ENUM_SEPARATOR):
        v = part.strip()
        if v[:1] in _QUOTES:
            v = v[1:]
        if v[-1:] in _QUOTES:
            v = v[:-1]
        if v:
            values.append(v)
    return values


def primary_key_clause(table: SchemaTable) -> Optional[str]:
    """PRIMARY KEY (...) for composite keys only; single keys are inlined."""
    pk = table.primary_key_columns()
    if len(pk) > 1:
        return f"PRIMARY KEY ({', '.join(c.name for c in pk)})"
    return None


def foreign_key_clause(table: SchemaTable, col: SchemaColumn, index: SchemaIndex) -> Optional[str]:
    """FOREIGN KEY clause for a flagged column, or None when its reference dangles."""
    if not col.is_foreign_key or col.references is None:
        return None
    target = index.resolve(col.references)
    if target is None:
        logger.debug("Skipping dangling reference on %s.%s", table.name, col.name)
        return None
    ref_table, ref_col = target
    return (
        f"CONSTRAINT fk_{table.name}_{col.name} FOREIGN KEY ({col.name}) "
        f"REFERENCES public.{ref_table.name}({ref_col.name}) ON DELETE CASCADE"
    )


def check_clause(table: SchemaTable, col: SchemaColumn) -> Optional[str]:
    values = parse_enum_values(col.description)
    if not values:
        return None
    # Values are quoted verbatim; embedded quotes are not escaped
    values_list = ", ".join(f"'{v}'" for v in values)
    return f"CONSTRAINT check_{table.name}_{col.name} CHECK ({col.name} IN ({values_list}))"


def derive_table_constraints(
    table: SchemaTable,
    schema: SchemaData,
    index: Optional[SchemaIndex] = None,
) -> list[str]:
    """
    Extra clauses for a CREATE TABLE body, in emission order:
    composite primary key, then foreign keys, then derived checks.
    """
    if index is None:
        index = SchemaIndex(schema)
    clauses = []
    pk = primary_key_clause(table)
    if pk:
        clauses.append(pk)
    for col in table.columns:
        fk = foreign_key_clause(table, col, index)
        if fk:
            clauses.append(fk)
    for col in table.columns:
        check = check_clause(table, col)
        if check:
            clauses.append(check)
    return clauses
