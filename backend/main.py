"""ERD Generator: FastAPI server for prompt → schema, SQL, ER diagram and Supabase apply."""
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import openai
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, ConfigDict, Field

from config import settings
from db import get_session, init_db
from ddl import SQL_FILENAME, generate_sql
from diagram import schema_to_mermaid
from evaluation import ddl_summary, verify_tables
from exceptions import (
    ErdGenError,
    GenerationNotFoundError,
    InvalidSupabaseURLError,
    LLMConfigurationError,
    LLMResponseError,
    SupabaseAuthError,
    SupabaseConnectionError,
)
from llm_client import generate_schema_from_prompt, refine_schema
from models import Generation
from schema_engine import apply_sql, check_connection
from schema_types import SchemaData
from sql_tables import extract_table_names

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"

app = FastAPI(title="ERD Generator", description="Chat prompt → Postgres schema, ERD and SQL")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup():
    await init_db()
    logger.info("OpenAI API key: %s", "configured" if settings.openai_api_key else "missing")


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info("%s %s", request.method, request.url.path)
    return await call_next(request)


# Exception type → HTTP status for application errors
ERROR_STATUS = {
    LLMConfigurationError: 500,
    LLMResponseError: 502,
    InvalidSupabaseURLError: 400,
    SupabaseAuthError: 401,
    SupabaseConnectionError: 502,
    GenerationNotFoundError: 404,
}


async def erdgen_error_handler(request: Request, exc: ErdGenError):
    status_code = next((s for t, s in ERROR_STATUS.items() if isinstance(exc, t)), 400)
    logger.warning("%s on %s: %s", type(exc).__name__, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


async def global_exception_handler(request: Request, exc: Exception):
    """Return JSON with error detail for any unhandled exception."""
    logger.error("Unhandled error on %s", request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": str(exc)})


app.add_exception_handler(ErdGenError, erdgen_error_handler)
app.add_exception_handler(Exception, global_exception_handler)


class _Body(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class GenerateBody(_Body):
    prompt: str = Field(min_length=10)


class RefineBody(_Body):
    schema_: SchemaData = Field(alias="schema")
    refinement_prompt: str = Field(alias="refinementPrompt", min_length=1)
    prompt: str = ""


class SchemaBody(_Body):
    schema_: SchemaData = Field(alias="schema")


class VerifyBody(_Body):
    schema_: SchemaData = Field(alias="schema")
    sql: str


class SqlBody(_Body):
    sql: str


class SupabaseCredentials(_Body):
    supabase_url: str = Field(alias="supabaseUrl", min_length=1)
    supabase_key: str = Field(alias="supabaseKey", min_length=1)


class SupabaseApplyBody(SupabaseCredentials):
    sql: str = Field(min_length=1)


def _raise_for_openai_error(e: Exception):
    """Map OpenAI client failures to HTTP errors; re-raise anything else."""
    if isinstance(e, openai.RateLimitError):
        raise HTTPException(429, "OpenAI rate limit or quota exceeded")
    if isinstance(e, openai.AuthenticationError):
        raise HTTPException(401, "Invalid or missing OPENAI_API_KEY")
    if isinstance(e, openai.OpenAIError):
        raise LLMResponseError(f"Failed to generate schema: {e}") from e
    raise e


def _artifacts(schema: SchemaData) -> dict:
    sql = generate_sql(schema)
    return {
        "schema": schema.to_wire(),
        "sql": sql,
        "diagram": schema_to_mermaid(schema),
        "tables": extract_table_names(sql),
    }


async def _record(prompt: str, artifacts: dict, raw: str, refinement: Optional[str] = None) -> int:
    async with get_session() as session:
        row = Generation(
            prompt=prompt,
            refinement_prompt=refinement,
            schema_json=json.dumps(artifacts["schema"]),
            sql_ddl=artifacts["sql"],
            er_diagram=artifacts["diagram"],
            raw_llm_response=raw,
        )
        session.add(row)
        await session.flush()
        return row.id


@app.get("/")
async def root():
    return {
        "message": "ERD Generator API",
        "version": API_VERSION,
        "endpoints": {
            "schema": "/api/schema",
            "health": "/api/schema/health",
            "sql": "/api/sql/tables",
            "supabase": "/api/supabase",
        },
    }


@app.get("/api/schema/health")
async def schema_health():
    return {
        "success": True,
        "message": "Schema API is healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.post("/api/schema/generate")
async def generate(body: GenerateBody):
    try:
        schema, raw = await generate_schema_from_prompt(body.prompt)
    except ErdGenError:
        raise
    except Exception as e:
        _raise_for_openai_error(e)
    artifacts = _artifacts(schema)
    generation_id = await _record(body.prompt, artifacts, raw)
    return {
        "success": True,
        "generationId": generation_id,
        **artifacts,
        "message": "Schema generated successfully",
    }


@app.post("/api/schema/refine")
async def refine(body: RefineBody):
    try:
        schema, raw = await refine_schema(body.schema_, body.refinement_prompt)
    except ErdGenError:
        raise
    except Exception as e:
        _raise_for_openai_error(e)
    artifacts = _artifacts(schema)
    generation_id = await _record(body.prompt, artifacts, raw, refinement=body.refinement_prompt)
    return {
        "success": True,
        "generationId": generation_id,
        **artifacts,
        "message": "Schema refined successfully",
    }


@app.post("/api/schema/sql")
async def schema_sql(body: SchemaBody):
    sql = generate_sql(body.schema_)
    return {"sql": sql, "filename": SQL_FILENAME, "tables": extract_table_names(sql)}


@app.post("/api/schema/diagram")
async def schema_diagram(body: SchemaBody):
    return {"diagram": schema_to_mermaid(body.schema_)}


@app.post("/api/schema/verify")
async def schema_verify(body: VerifyBody):
    return {**verify_tables(body.schema_, body.sql), "summary": ddl_summary(body.sql)}


@app.post("/api/sql/tables")
async def list_sql_tables(body: SqlBody):
    return {"tables": extract_table_names(body.sql)}


async def _load_generation(generation_id: int) -> Generation:
    async with get_session() as session:
        row = await session.get(Generation, generation_id)
    if row is None:
        raise GenerationNotFoundError(generation_id)
    return row


@app.get("/api/generations/{generation_id}")
async def get_generation(generation_id: int):
    row = await _load_generation(generation_id)
    return {
        "id": row.id,
        "prompt": row.prompt,
        "refinementPrompt": row.refinement_prompt,
        "schema": json.loads(row.schema_json),
        "sql": row.sql_ddl,
        "diagram": row.er_diagram,
        "createdAt": row.created_at.isoformat() if row.created_at else None,
    }


@app.get("/api/generations/{generation_id}/schema.sql")
async def download_generation_sql(generation_id: int):
    row = await _load_generation(generation_id)
    return PlainTextResponse(
        row.sql_ddl or "",
        media_type="application/sql",
        headers={"Content-Disposition": f'attachment; filename="{SQL_FILENAME}"'},
    )


@app.post("/api/supabase/apply")
async def supabase_apply(body: SupabaseApplyBody):
    result = await apply_sql(body.supabase_url, body.supabase_key, body.sql)
    content = {
        "success": True,
        "applied": result.applied,
        "message": result.message,
        "tables": result.tables,
        "tablesCreated": len(result.tables),
        "statementCount": result.statement_count,
    }
    if result.applied:
        content["result"] = result.result
    else:
        content["sqlPreview"] = result.sql_preview
    return content


@app.post("/api/supabase/test-connection")
async def supabase_test_connection(body: SupabaseCredentials):
    await check_connection(body.supabase_url, body.supabase_key)
    return {"success": True, "message": "Successfully connected to Supabase"}


@app.get("/api/health")
async def health():
    env_path = Path(__file__).resolve().parent / ".env"
    db_ok, db_error = True, None
    try:
        async with get_session() as session:
            from sqlalchemy import text
            await session.execute(text("SELECT 1"))
    except Exception as e:
        db_ok, db_error = False, str(e)
    db_display = settings.database_url.split("@")[-1] if "@" in settings.database_url else "sqlite"
    return {
        "status": "ok",
        "llm_configured": bool(settings.openai_api_key),
        "env_exists": env_path.exists(),
        "db_ok": db_ok,
        "db_error": db_error,
        "database": db_display,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=3001)
