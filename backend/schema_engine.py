"""Apply generated DDL to a Supabase project and cross-check the created tables."""
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from config import settings
from exceptions import InvalidSupabaseURLError, SupabaseAuthError, SupabaseConnectionError
from sql_tables import extract_table_names, split_statements

logger = logging.getLogger(__name__)

PROBE_TABLE = "_test"
EXEC_SQL_RPC = "exec_sql"
PREVIEW_CHARS = 200


@dataclass
class ApplyResult:
    applied: bool
    message: str
    tables: list[str] = field(default_factory=list)
    statement_count: int = 0
    sql_preview: Optional[str] = None
    result: Any = None


def validate_supabase_url(url: str) -> str:
    url = (url or "").strip().rstrip("/")
    if "supabase.co" not in url:
        raise InvalidSupabaseURLError(
            "Invalid Supabase URL format. Should be: https://your-project.supabase.co"
        )
    return url


def _headers(key: str) -> dict[str, str]:
    return {
        "apikey": key,
        "Authorization": f"Bearer {key}",
        "Content-Type": "application/json",
    }


def _client(transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=settings.supabase_timeout, transport=transport)


async def _probe(client: httpx.AsyncClient, url: str, key: str) -> None:
    """Hit a throwaway table; only an auth rejection counts as failure."""
    try:
        response = await client.get(
            f"{url}/rest/v1/{PROBE_TABLE}",
            params={"select": "*", "limit": "1"},
            headers=_headers(key),
        )
    except httpx.HTTPError as e:
        raise SupabaseConnectionError(f"Failed to connect to Supabase: {e}") from e
    if response.status_code in (401, 403):
        raise SupabaseAuthError(
            f"Failed to connect to Supabase. Please check your credentials. ({response.text[:200]})"
        )


async def check_connection(
    url: str,
    key: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> None:
    """Raise if the project can't be reached with this key."""
    url = validate_supabase_url(url)
    async with _client(transport) as client:
        await _probe(client, url, key)


async def apply_sql(
    url: str,
    key: str,
    sql: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ApplyResult:
    """
    Run DDL through the project's exec_sql RPC.
    When the RPC is missing or fails, nothing is executed and the result asks the
    user to paste the SQL into the Supabase SQL editor instead.
    """
    url = validate_supabase_url(url)
    tables = extract_table_names(sql)
    statements = split_statements(sql)
    logger.info("Applying schema to Supabase: %s (%d statements)", url, len(statements))

    async with _client(transport) as client:
        await _probe(client, url, key)
        try:
            response = await client.post(
                f"{url}/rest/v1/rpc/{EXEC_SQL_RPC}",
                json={"sql_string": sql},
                headers=_headers(key),
            )
        except httpx.HTTPError as e:
            raise SupabaseConnectionError(f"Failed to reach Supabase: {e}") from e

    if response.is_success:
        try:
            result = response.json() if response.content else None
        except ValueError:
            result = response.text
        return ApplyResult(
            applied=True,
            message="Schema applied successfully to Supabase!",
            tables=tables,
            statement_count=len(statements),
            result=result,
        )

    logger.warning(
        "exec_sql RPC unavailable (HTTP %s); falling back to manual apply", response.status_code
    )
    return ApplyResult(
        applied=False,
        message=(
            "Schema structure received. To apply it, please run the SQL manually "
            "in your Supabase SQL Editor."
        ),
        tables=tables,
        statement_count=len(statements),
        sql_preview=sql[:PREVIEW_CHARS] + "...",
    )
