"""
Evaluation helpers for generated schemas.
- Accuracy of a generated schema vs a reference (tables, relations).
- DDL summary (keys, constraints, indexes).
- Cross-check of declared tables vs tables found in SQL.
"""
from schema_types import SchemaData, SchemaIndex
from sql_tables import extract_table_names


def _prf(pred: set, true: set) -> dict:
    tp = len(pred & true)
    prec = tp / len(pred) if pred else 0.0
    rec = tp / len(true) if true else 0.0
    f1 = 2 * prec * rec / (prec + rec) if (prec + rec) else 0.0
    return {"precision": prec, "recall": rec, "f1": f1}


def _relation_keys(schema: SchemaData) -> set[tuple[str, str]]:
    index = SchemaIndex(schema)
    keys = set()
    for rel in schema.relations:
        src = index.table(rel.from_table_id)
        dst = index.table(rel.to_table_id)
        if src and dst:
            keys.add((src.name.lower(), dst.name.lower()))
    return keys


def schema_accuracy(generated: SchemaData, reference: SchemaData) -> dict:
    """
    Compare a generated schema to a reference schema.
    Returns precision, recall, F1 for table names and for relations (by table names).
    """
    t_pred = {t.name.lower() for t in generated.tables}
    t_true = {t.name.lower() for t in reference.tables}
    return {
        "tables": _prf(t_pred, t_true),
        "relations": _prf(_relation_keys(generated), _relation_keys(reference)),
    }


def ddl_summary(ddl: str) -> dict:
    """Heuristic counts over non-comment DDL lines."""
    lines = [s.strip() for s in ddl.upper().split("\n") if s.strip() and not s.strip().startswith("--")]
    return {
        "table_count": sum(1 for l in lines if "CREATE TABLE" in l),
        "primary_keys": sum(l.count("PRIMARY KEY") for l in lines),
        "foreign_keys": sum(l.count("FOREIGN KEY") for l in lines),
        "check_constraints": sum(1 for l in lines if " CHECK (" in l),
        "indexes": sum(1 for l in lines if l.startswith("CREATE INDEX")),
        "comments": sum(1 for l in lines if l.startswith("COMMENT ON")),
        "tables": extract_table_names(ddl),
    }


def verify_tables(schema: SchemaData, sql: str) -> dict:
    """Declared table names vs names recovered from SQL (e.g. what was actually submitted)."""
    expected = [t.name for t in schema.tables]
    found = extract_table_names(sql)
    missing = [n for n in expected if n not in found]
    unexpected = [n for n in found if n not in expected]
    return {
        "expected": expected,
        "found": found,
        "missing": missing,
        "unexpected": unexpected,
        "ok": not missing and not unexpected,
    }
