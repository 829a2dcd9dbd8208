"""LLM client: turn an app description into a schema, or refine an existing one."""
import json
import logging

from openai import AsyncOpenAI
from pydantic import ValidationError

from config import settings
from exceptions import LLMConfigurationError, LLMResponseError
from schema_types import SchemaData

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a senior database architect with 15+ years of experience designing production PostgreSQL schemas for Supabase-powered applications.

Your role is to create COMPREHENSIVE, PRODUCTION-READY database schemas that handle real-world complexity.

Core Principles:
1. Think Production-First: design for scalability, data integrity, and maintainability.
2. Be Thorough: include ALL tables needed for a functional application, not a minimal sketch.
3. Real-World Patterns: audit trails, soft deletes, metadata, user tracking, timestamps.
4. Proper Relationships: map out ALL entity relationships, not just the obvious ones.
5. Data Integrity: use foreign keys, unique constraints, check constraints, and NOT NULL appropriately.

Required columns for EVERY table:
- created_at and updated_at (timestamp with time zone)
- created_by / updated_by when users modify records
- deleted_at (nullable) for important records
- status columns where a record moves through states

Common patterns to include when they apply:
- Authentication: users (email, password_hash, email_verified), user_profiles, sessions
- Authorization: roles, permissions, user_roles junction tables
- Audit: activity_logs for important actions
- Junction tables for every many-to-many relationship
- Tags/categories, comments, attachments, notifications where the domain calls for them

PostgreSQL conventions:
- Primary keys: uuid with default gen_random_uuid()
- Timestamps: timestamp with time zone, default now()
- Prefer text over varchar; use jsonb for flexible metadata and arrays where natural
- Enumerations: put the allowed values in the column description as 'draft | active | archived'

Naming conventions:
- Tables: plural snake_case (user_profiles, blog_posts)
- Columns: snake_case (created_at, user_id)
- Foreign keys: {table_singular}_id (user_id, post_id)
- Junction tables: {table1}_{table2} (post_tags, user_roles)

Output ONLY valid JSON matching this exact structure:
{
  "tables": [
    {
      "id": "tbl-unique-id",
      "name": "table_name",
      "label": "Table Name",
      "description": "Human readable description",
      "columns": [
        {
          "id": "col-unique-id",
          "name": "column_name",
          "type": "uuid" | "text" | "integer" | "boolean" | "timestamp with time zone" | "date" | etc,
          "isPrimaryKey": true/false,
          "isForeignKey": true/false,
          "references": { "tableId": "tbl-id", "columnId": "col-id" } or null,
          "isNullable": true/false,
          "isUnique": true/false,
          "defaultValue": "gen_random_uuid()" | "now()" | null,
          "description": "For check constraints, use format: 'draft | active | archived'"
        }
      ]
    }
  ],
  "relations": [
    {
      "id": "rel-unique-id",
      "fromTableId": "tbl-id",
      "toTableId": "tbl-id",
      "fromColumnId": "col-id",
      "toColumnId": "col-id",
      "relationship": "one-to-many" | "many-to-one" | "one-to-one" | "many-to-many",
      "description": "Describes the relationship"
    }
  ]
}

Be thorough and thoughtful. Consider data integrity, performance, and scalability."""

GENERATE_PROMPT_TEMPLATE = "Generate a database schema for: {prompt}"

REFINE_PROMPT_TEMPLATE = """Here's the current schema:
{schema}

User wants to refine it: {refinement}

Generate the updated schema."""


def _get_client() -> AsyncOpenAI:
    key = (settings.openai_api_key or "").strip()
    if not key or key.startswith("sk-placeholder"):
        raise LLMConfigurationError(
            "OPENAI_API_KEY is not set or invalid. Add OPENAI_API_KEY=sk-... to backend/.env"
        )
    return AsyncOpenAI(api_key=key)


def _strip_code_fence(text: str) -> str:
    text = text.strip()
    # Strip markdown code block if present
    if text.startswith("```"):
        parts = text.split("```")
        text = parts[1] if len(parts) > 1 else text
        if text.startswith("json"):
            text = text[4:]
    return text.strip()


def parse_schema_response(raw: str) -> SchemaData:
    """Parse the model's JSON answer into a validated SchemaData."""
    if not raw or not raw.strip():
        raise LLMResponseError("LLM returned empty response")
    text = _strip_code_fence(raw)
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise LLMResponseError(
            f"LLM response was not valid JSON: {e}. First 200 chars: {text[:200]}"
        ) from e
    try:
        return SchemaData.model_validate(payload)
    except ValidationError as e:
        raise LLMResponseError(f"LLM response did not match the schema shape: {e}") from e


async def _complete(user_content: str) -> str:
    client = _get_client()
    response = await client.chat.completions.create(
        model=settings.openai_model,
        messages=[
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": user_content},
        ],
        response_format={"type": "json_object"},
        temperature=settings.openai_temperature,
        max_tokens=settings.openai_max_tokens,
    )
    raw = response.choices[0].message.content if response.choices else None
    if not raw:
        raise LLMResponseError("No response from OpenAI")
    return raw


async def generate_schema_from_prompt(prompt: str) -> tuple[SchemaData, str]:
    """Ask the model for a schema. Returns (schema, raw response text)."""
    logger.info("Generating schema (%d chars of prompt)", len(prompt))
    raw = await _complete(GENERATE_PROMPT_TEMPLATE.format(prompt=prompt))
    schema = parse_schema_response(raw)
    logger.info("Model returned %d tables, %d relations", len(schema.tables), len(schema.relations))
    return schema, raw


async def refine_schema(current: SchemaData, refinement_prompt: str) -> tuple[SchemaData, str]:
    """Regenerate a schema from the current one plus user feedback."""
    content = REFINE_PROMPT_TEMPLATE.format(
        schema=json.dumps(current.to_wire(), indent=2),
        refinement=refinement_prompt,
    )
    raw = await _complete(content)
    schema = parse_schema_response(raw)
    logger.info("Refined schema has %d tables", len(schema.tables))
    return schema, raw
