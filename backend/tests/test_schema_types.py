"""Schema model parsing and id lookups."""
import pytest
from pydantic import ValidationError

from schema_types import ColumnReference, SchemaData, SchemaIndex


def test_camel_case_wire_names(projects_schema):
    projects = projects_schema.tables[1]
    owner = projects.columns[1]
    assert owner.is_foreign_key is True
    assert owner.is_nullable is False
    assert owner.references.table_id == "tbl-users"
    assert projects_schema.relations[0].relationship == "many-to-one"


def test_snake_case_names_accepted():
    schema = SchemaData.model_validate({
        "tables": [{"id": "t", "name": "t", "columns": [
            {"id": "c", "name": "c", "type": "int", "is_primary_key": True},
        ]}],
    })
    assert schema.tables[0].columns[0].is_primary_key is True
    assert schema.relations == []


def test_unspecified_nullable_stays_unset(projects_schema):
    created_at = projects_schema.tables[0].columns[3]
    assert created_at.is_nullable is None
    wire = projects_schema.to_wire()
    assert "isNullable" not in wire["tables"][0]["columns"][3]
    assert wire["tables"][0]["columns"][0]["isPrimaryKey"] is True


def test_wire_round_trip(projects_schema_dict, projects_schema):
    again = SchemaData.model_validate(projects_schema.to_wire())
    assert again == projects_schema


def test_unknown_relationship_rejected():
    with pytest.raises(ValidationError):
        SchemaData.model_validate({
            "tables": [],
            "relations": [{
                "id": "r", "fromTableId": "a", "toTableId": "b",
                "fromColumnId": "x", "toColumnId": "y", "relationship": "some-to-some",
            }],
        })


def test_primary_key_helpers(projects_schema):
    users = projects_schema.tables[0]
    assert [c.name for c in users.primary_key_columns()] == ["id"]
    assert users.single_primary_key() is users.columns[0]


def test_index_lookups_are_table_scoped(projects_schema):
    index = SchemaIndex(projects_schema)
    assert index.table("tbl-tasks").name == "tasks"
    assert index.column("tbl-users", "col-users-email").name == "email"
    assert index.column("tbl-projects", "col-users-email") is None
    assert index.table("tbl-missing") is None


def test_index_first_duplicate_wins():
    schema = SchemaData.model_validate({"tables": [
        {"id": "t1", "name": "first", "columns": []},
        {"id": "t1", "name": "second", "columns": []},
    ]})
    assert SchemaIndex(schema).table("t1").name == "first"


def test_resolve_dangling_reference(projects_schema):
    index = SchemaIndex(projects_schema)
    assert index.resolve(None) is None
    assert index.resolve(ColumnReference(table_id="tbl-users", column_id="nope")) is None
    table, col = index.resolve(ColumnReference(table_id="tbl-users", column_id="col-users-id"))
    assert (table.name, col.name) == ("users", "id")
