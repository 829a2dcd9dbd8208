"""
Pytest configuration and fixtures for backend tests.

Environment variables are set here, before any test module imports config,
so Settings() picks them up at collection time.
"""
import os
import tempfile
from pathlib import Path

import pytest

_TEST_DB = Path(tempfile.gettempdir()) / f"erdgen-test-{os.getpid()}.db"

os.environ.setdefault("OPENAI_API_KEY", "sk-test-key-for-ci-only")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_TEST_DB.as_posix()}")
os.environ.setdefault("LOG_LEVEL", "WARNING")

# Note: Do NOT import any app modules at module level here.


@pytest.fixture(scope="session", autouse=True)
def _remove_test_db():
    yield
    _TEST_DB.unlink(missing_ok=True)


def _col(id, name, type="text", **flags):
    return {"id": id, "name": name, "type": type, **flags}


@pytest.fixture
def projects_schema_dict():
    """users / projects / tasks, the way the chat UI seeds its demo."""
    return {
        "tables": [
            {
                "id": "tbl-users",
                "name": "users",
                "label": "Users",
                "description": "Registered people who can create projects and tasks.",
                "columns": [
                    _col("col-users-id", "id", "uuid", isPrimaryKey=True, isNullable=False,
                         defaultValue="gen_random_uuid()"),
                    _col("col-users-email", "email", isUnique=True, isNullable=False),
                    _col("col-users-name", "full_name", isNullable=False),
                    _col("col-users-created", "created_at", "timestamp with time zone",
                         defaultValue="now()"),
                ],
            },
            {
                "id": "tbl-projects",
                "name": "projects",
                "description": "Projects owned by users.",
                "columns": [
                    _col("col-projects-id", "id", "uuid", isPrimaryKey=True,
                         defaultValue="gen_random_uuid()"),
                    _col("col-projects-owner", "owner_id", "uuid", isNullable=False, isForeignKey=True,
                         references={"tableId": "tbl-users", "columnId": "col-users-id"}),
                    _col("col-projects-name", "name", isNullable=False),
                    _col("col-projects-status", "status", description="draft | active | archived"),
                ],
            },
            {
                "id": "tbl-tasks",
                "name": "tasks",
                "description": "Tasks assigned within projects.",
                "columns": [
                    _col("col-tasks-id", "id", "uuid", isPrimaryKey=True,
                         defaultValue="gen_random_uuid()"),
                    _col("col-tasks-project", "project_id", "uuid", isNullable=False, isForeignKey=True,
                         references={"tableId": "tbl-projects", "columnId": "col-projects-id"}),
                    _col("col-tasks-owner", "assignee_id", "uuid", isForeignKey=True,
                         references={"tableId": "tbl-users", "columnId": "col-users-id"}),
                    _col("col-tasks-title", "title", isNullable=False),
                    _col("col-tasks-status", "status", description="todo | in_progress | done"),
                    _col("col-tasks-due", "due_date", "date"),
                ],
            },
        ],
        "relations": [
            {
                "id": "rel-projects-owner",
                "fromTableId": "tbl-projects",
                "toTableId": "tbl-users",
                "fromColumnId": "col-projects-owner",
                "toColumnId": "col-users-id",
                "relationship": "many-to-one",
                "description": "owned by",
            },
            {
                "id": "rel-tasks-project",
                "fromTableId": "tbl-projects",
                "toTableId": "tbl-tasks",
                "fromColumnId": "col-projects-id",
                "toColumnId": "col-tasks-project",
                "relationship": "one-to-many",
            },
        ],
    }


@pytest.fixture
def projects_schema(projects_schema_dict):
    from schema_types import SchemaData

    return SchemaData.model_validate(projects_schema_dict)
