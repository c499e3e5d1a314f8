"""Rule checks for planned tables and for the schema files written from them."""
import re
from collections import Counter
from pathlib import Path
from typing import Iterable, List

from app.planning.types import (
    Constraint,
    FieldKind,
    RECOGNIZED_KINDS,
    TableDefinition,
    ValidationResult,
    is_canonical_id,
)

IDENTIFIER_RE = re.compile(r"^[a-z][a-z0-9_]*$")
# a bare name inside the schema directory; no separators, no leading dot
FILE_NAME_RE = re.compile(r"^[a-z0-9][a-z0-9_-]*\.ts$")


def validate_plan(table: TableDefinition) -> ValidationResult:
    errors: List[str] = []
    warnings: List[str] = []

    if not table.table_name or not IDENTIFIER_RE.match(table.table_name):
        errors.append(f"Table name '{table.table_name}' must be snake_case and start with a letter")

    if not table.file_name.endswith(".ts"):
        errors.append(f"File name '{table.file_name}' must end with .ts")
    elif not FILE_NAME_RE.match(table.file_name):
        errors.append(
            f"File name '{table.file_name}' must be a plain file name "
            "(lowercase letters, digits, '-' or '_') ending in .ts"
        )

    id_count = sum(1 for f in table.fields if is_canonical_id(f))
    if id_count != 1:
        errors.append(
            "Schema must have exactly one 'id' field with type 'serial' and primaryKey() constraint"
        )

    for position, f in enumerate(table.fields, start=1):
        if not f.name or not IDENTIFIER_RE.match(f.name):
            errors.append(f"Field {position}: Name '{f.name}' must be snake_case and start with a letter")

        if f.kind not in RECOGNIZED_KINDS:
            errors.append(f"Field '{f.name}': Invalid type '{f.kind}'")

        if f.has(Constraint.PRIMARY_KEY) and f.kind != FieldKind.SERIAL.value:
            errors.append(f"Field '{f.name}': Only 'serial' fields should have primaryKey()")

        if f.has(Constraint.DEFAULT_NOW) and f.kind != FieldKind.TIMESTAMP.value:
            errors.append(f"Field '{f.name}': defaultNow() only for timestamp")

        if f.has(Constraint.DEFAULT_VALUE) and not f.default:
            warnings.append(f"Field '{f.name}': default() has no value")

    duplicates = sorted(name for name, count in Counter(table.field_names()).items() if count > 1)
    for name in duplicates:
        errors.append(f"Duplicate field name '{name}'")

    if not table.has_field("updated_at"):
        warnings.append("Table has no 'updated_at' field")

    return ValidationResult.of(errors, warnings)


def validate_plans(tables: Iterable[TableDefinition]) -> ValidationResult:
    """Validate every table; messages are prefixed with the table name."""
    result = ValidationResult()
    for table in tables:
        single = validate_plan(table)
        result = result.merge(ValidationResult.of(
            [f"{table.table_name}: {e}" for e in single.errors],
            [f"{table.table_name}: {w}" for w in single.warnings],
        ))
    return result


def construction_marker(table: TableDefinition) -> str:
    return f'pgTable("{table.table_name}"'


def validate_artifacts(tables: Iterable[TableDefinition], schema_dir: Path) -> ValidationResult:
    """Check that each table's schema file exists and defines that table."""
    errors: List[str] = []
    for table in tables:
        path = schema_dir / table.file_name
        if not path.is_file():
            errors.append(f"Schema file not found: {table.file_name}")
            continue
        content = path.read_text(encoding="utf-8")
        if construction_marker(table) not in content:
            errors.append(f"{table.file_name}: Missing pgTable definition for {table.table_name}")
    return ValidationResult.of(errors)
