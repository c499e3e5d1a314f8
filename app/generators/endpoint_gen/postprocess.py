"""Deterministic fixes applied to accepted route code."""
import re

from app.planning.types import TableDefinition

_DRIZZLE_DRIVER_RE = re.compile(r"""from\s+['"]drizzle-orm/(?:pg-core|postgres-js)['"]""")
_SCHEMA_IMPORT_RE = re.compile(r"""^import\s.*from\s+['"]@/db/schema['"];?[ \t]*$""", re.MULTILINE)


def canonical_table_import(table: TableDefinition) -> str:
    cls = table.class_name
    return f'import {{ {table.table_name}, type {cls}, type New{cls} }} from "@/db/schema";'


def postprocess_route(code: str, table: TableDefinition) -> str:
    cls = table.class_name
    fixed = _DRIZZLE_DRIVER_RE.sub('from "drizzle-orm/node-postgres"', code)
    fixed = fixed.replace("$inferSelect", cls).replace("$inferInsert", f"New{cls}")
    fixed = _SCHEMA_IMPORT_RE.sub(lambda _m: canonical_table_import(table), fixed, count=1)
    if not fixed.endswith("\n"):
        fixed += "\n"
    return fixed
