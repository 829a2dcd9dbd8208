"""Schema → Mermaid ER diagram."""
import re

from schema_types import SchemaColumn, SchemaData, SchemaIndex

RELATION_SYMBOLS = {
    "one-to-one": "||--||",
    "one-to-many": "||--o{",
    "many-to-one": "}o--||",
    "many-to-many": "}o--o{",
}
DEFAULT_LABEL = "has"


def _column_line(col: SchemaColumn) -> str:
    flags = []
    if col.is_primary_key:
        flags.append("PK")
    if col.is_foreign_key:
        flags.append("FK")
    if col.is_unique:
        flags.append("UNIQUE")
    # Mermaid attribute types can't contain spaces
    col_type = re.sub(r"\s+", "_", col.type)
    suffix = f' "{",".join(flags)}"' if flags else ""
    return f"        {col_type} {col.name}{suffix}"


def schema_to_mermaid(schema: SchemaData) -> str:
    """Convert schema to a Mermaid erDiagram. Relations with a missing table are left out."""
    lines = ["erDiagram"]
    for table in schema.tables:
        lines.append(f"    {table.name} {{")
        lines.extend(_column_line(c) for c in table.columns)
        lines.append("    }")
    index = SchemaIndex(schema)
    for rel in schema.relations:
        from_table = index.table(rel.from_table_id)
        to_table = index.table(rel.to_table_id)
        if from_table is None or to_table is None:
            continue
        symbol = RELATION_SYMBOLS.get(rel.relationship, RELATION_SYMBOLS["one-to-many"])
        label = rel.description or DEFAULT_LABEL
        lines.append(f'    {from_table.name} {symbol} {to_table.name} : "{label}"')
    return "\n".join(lines)
