"""Recover table names from raw SQL text (ours or hand-edited)."""
import re

_CREATE_TABLE_RE = re.compile(
    r"create\s+table\s+(?:if\s+not\s+exists\s+)?(?:public\.)?"
    r"(?!if\s+not\s+exists\b)([a-z_][a-z0-9_]*)",
    re.IGNORECASE,
)
# String literals ('' is an escaped quote) and -- line comments, scanned left to right
_NOISE_RE = re.compile(r"'(?:[^']|'')*'|--[^\n]*")


def split_statements(sql: str) -> list[str]:
    """Split SQL into statements (simple split by ;). Comment-only pieces are kept."""
    return [s.strip() for s in sql.split(";") if s.strip()]


def _strip_noise(stmt: str) -> str:
    return _NOISE_RE.sub(" ", stmt)


def extract_table_names(sql: str) -> list[str]:
    """
    Names declared by CREATE TABLE statements, in statement order.
    Text inside -- comments and quoted literals is ignored. Statements that
    mention CREATE TABLE but don't match the pattern are skipped; duplicates are kept.
    """
    names = []
    for stmt in split_statements(sql):
        code = _strip_noise(stmt)
        if "create table" not in code.lower():
            continue
        m = _CREATE_TABLE_RE.search(code)
        if m:
            names.append(m.group(1))
    return names
