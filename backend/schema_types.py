"""Schema model: tables, columns and relations as produced by the LLM or the UI."""
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

RelationshipKind = Literal["one-to-one", "one-to-many", "many-to-one", "many-to-many"]


class _WireModel(BaseModel):
    # camelCase on the wire, snake_case in Python; either is accepted on input
    model_config = ConfigDict(populate_by_name=True)


class ColumnReference(_WireModel):
    """Weak link to another table's column, by id."""

    table_id: str = Field(alias="tableId")
    column_id: str = Field(alias="columnId")


class SchemaColumn(_WireModel):
    id: str
    name: str
    type: str
    is_primary_key: Optional[bool] = Field(default=None, alias="isPrimaryKey")
    is_foreign_key: Optional[bool] = Field(default=None, alias="isForeignKey")
    references: Optional[ColumnReference] = None
    # None means "unspecified", which is treated as nullable
    is_nullable: Optional[bool] = Field(default=None, alias="isNullable")
    is_unique: Optional[bool] = Field(default=None, alias="isUnique")
    default_value: Optional[str] = Field(default=None, alias="defaultValue")
    description: Optional[str] = None


class SchemaTable(_WireModel):
    id: str
    name: str
    label: Optional[str] = None
    description: Optional[str] = None
    columns: list[SchemaColumn] = Field(default_factory=list)

    def primary_key_columns(self) -> list[SchemaColumn]:
        """Columns flagged as primary key, in declaration order."""
        return [c for c in self.columns if c.is_primary_key]

    def single_primary_key(self) -> Optional[SchemaColumn]:
        """The primary-key column when exactly one is flagged, else None."""
        pk = self.primary_key_columns()
        return pk[0] if len(pk) == 1 else None


class SchemaRelation(_WireModel):
    """Declared cardinality between two tables. Used for diagrams only."""

    id: str
    from_table_id: str = Field(alias="fromTableId")
    to_table_id: str = Field(alias="toTableId")
    from_column_id: str = Field(alias="fromColumnId")
    to_column_id: str = Field(alias="toColumnId")
    relationship: RelationshipKind
    description: Optional[str] = None


class SchemaData(_WireModel):
    """Complete schema: ordered tables and relations."""

    tables: list[SchemaTable] = Field(default_factory=list)
    relations: list[SchemaRelation] = Field(default_factory=list)

    def to_wire(self) -> dict:
        """JSON-ready dict using the camelCase field names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class SchemaIndex:
    """
    Id lookups over a SchemaData, built once per pass.
    Misses return None; with duplicate ids the first declaration wins.
    """

    def __init__(self, schema: SchemaData):
        self._tables: dict[str, SchemaTable] = {}
        self._columns: dict[tuple[str, str], SchemaColumn] = {}
        for table in schema.tables:
            self._tables.setdefault(table.id, table)
        # Column lookups are scoped to the table that won the id
        for table_id, table in self._tables.items():
            for col in table.columns:
                self._columns.setdefault((table_id, col.id), col)

    def table(self, table_id: str) -> Optional[SchemaTable]:
        return self._tables.get(table_id)

    def column(self, table_id: str, column_id: str) -> Optional[SchemaColumn]:
        return self._columns.get((table_id, column_id))

    def resolve(self, ref: Optional[ColumnReference]) -> Optional[tuple[SchemaTable, SchemaColumn]]:
        """Resolve a column reference to (table, column), or None if dangling."""
        if ref is None:
            return None
        table = self.table(ref.table_id)
        col = self.column(ref.table_id, ref.column_id)
        if table is None or col is None:
            return None
        return table, col
