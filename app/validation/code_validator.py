"""Pattern-level structure checks for generated collection route files.

The input is expected to be cleaned already (fences and comments removed).
Every check runs; one failing check never hides another.
"""
import re
from typing import List

from app.planning.types import TableDefinition, ValidationResult
from app.validation.ts_source import mask_literals

HTTP_METHODS = ("GET", "POST", "PUT", "DELETE")

POOL_OPENING = "const pool = new Pool({"
DB_INIT = "const db = drizzle(pool);"

_PARAM_PATTERNS = ("searchParams", "request.json()", "new URL(request.url)")
_HANDLER_RE = re.compile(r"export\s+async\s+function\s+\w+\s*\(")


def handler_signature(method: str) -> str:
    return f"export async function {method}(request: NextRequest)"


def check_imports(code: str, table: TableDefinition) -> List[str]:
    errors = []
    if "import { NextRequest, NextResponse }" not in code:
        errors.append("Missing NextRequest/NextResponse imports")
    if "import { drizzle }" not in code:
        errors.append("Missing drizzle import")
    if f"import {{ {table.table_name}," not in code:
        errors.append(f"Missing {table.table_name} table import")
    return errors


def check_database_setup(code: str, masked: str) -> List[str]:
    errors = []
    start = masked.find(POOL_OPENING)
    if start == -1:
        errors.append("Missing database pool initialization")
    elif not _pool_block_closed(masked, start + len(POOL_OPENING) - 1):
        errors.append("Database pool configuration not properly closed")
    if DB_INIT not in code:
        errors.append("Missing database drizzle initialization")
    return errors


def _pool_block_closed(masked: str, brace_index: int) -> bool:
    """True when the object literal opened at ``brace_index`` closes and is followed by ``);``."""
    depth = 0
    for i in range(brace_index, len(masked)):
        ch = masked[i]
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return masked[i + 1:].lstrip().startswith(");")
    return False


def check_handlers(code: str) -> List[str]:
    return [
        f"Missing {method} function declaration"
        for method in HTTP_METHODS
        if handler_signature(method) not in code
    ]


def check_parameter_placement(masked: str) -> List[str]:
    """Flag request parsing that sits at the top level, outside any handler.

    A top-level line may only mention request parsing after the opening brace
    of a handler declared on that same line.
    """
    depth = 0
    for line in masked.splitlines():
        if depth == 0:
            found = [line.find(p) for p in _PARAM_PATTERNS if p in line]
            if found:
                handler = _HANDLER_RE.search(line)
                body = line.find("{", handler.end()) if handler else -1
                if body < 0 or min(found) < body:
                    return ["Parameter validation code found outside function"]
        depth = max(depth + line.count("{") - line.count("}"), 0)
    return []


def check_brace_balance(masked: str) -> List[str]:
    opening = masked.count("{")
    closing = masked.count("}")
    if opening != closing:
        return [f"Unbalanced braces: {opening} opening, {closing} closing"]
    return []


def validate_route_code(code: str, table: TableDefinition) -> ValidationResult:
    masked = mask_literals(code)
    errors: List[str] = []
    errors += check_imports(code, table)
    errors += check_database_setup(code, masked)
    errors += check_handlers(code)
    errors += check_parameter_placement(masked)
    errors += check_brace_balance(masked)
    return ValidationResult.of(errors)
