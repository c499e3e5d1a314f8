"""Dataclasses for the feature pipeline."""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple

from app.generators.utils import table_to_slug, to_pascal_case, hook_name_for


class FieldKind(str, Enum):
    SERIAL = "serial"
    TEXT = "text"
    TIMESTAMP = "timestamp"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    UUID = "uuid"


RECOGNIZED_KINDS = frozenset(k.value for k in FieldKind)


class Constraint(str, Enum):
    """Field constraint markers, spelled the way the schema files render them."""
    PRIMARY_KEY = "primaryKey()"
    NOT_NULL = "notNull()"
    DEFAULT_NOW = "defaultNow()"
    UNIQUE = "unique()"
    DEFAULT_VALUE = "default()"


# Render order inside a column chain
CONSTRAINT_ORDER = (
    Constraint.PRIMARY_KEY,
    Constraint.DEFAULT_VALUE,
    Constraint.DEFAULT_NOW,
    Constraint.NOT_NULL,
    Constraint.UNIQUE,
)


@dataclass(frozen=True)
class FieldDefinition:
    """One column of a table."""
    name: str
    kind: str  # a FieldKind value; unknown kinds are kept so validation can report them
    constraints: FrozenSet[Constraint] = frozenset()
    default: Optional[str] = None  # value carried by Constraint.DEFAULT_VALUE

    def has(self, constraint: Constraint) -> bool:
        return constraint in self.constraints

    @property
    def is_required(self) -> bool:
        return self.has(Constraint.NOT_NULL)

    def constraint_markers(self) -> List[str]:
        markers = []
        for c in CONSTRAINT_ORDER:
            if c not in self.constraints:
                continue
            if c == Constraint.DEFAULT_VALUE:
                markers.append(f"default({self.default if self.default is not None else ''})")
            else:
                markers.append(c.value)
        return markers

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "type": self.kind, "constraints": self.constraint_markers()}


def id_field() -> FieldDefinition:
    return FieldDefinition("id", FieldKind.SERIAL.value, frozenset({Constraint.PRIMARY_KEY}))


def timestamp_field(name: str) -> FieldDefinition:
    return FieldDefinition(
        name, FieldKind.TIMESTAMP.value, frozenset({Constraint.DEFAULT_NOW, Constraint.NOT_NULL})
    )


def is_canonical_id(f: FieldDefinition) -> bool:
    return f.name == "id" and f.kind == FieldKind.SERIAL.value and f.has(Constraint.PRIMARY_KEY)


def is_canonical_created_at(f: FieldDefinition) -> bool:
    return (
        f.name == "created_at"
        and f.kind == FieldKind.TIMESTAMP.value
        and f.has(Constraint.DEFAULT_NOW)
        and f.has(Constraint.NOT_NULL)
    )


# Fields the database fills in; excluded from create payloads and sample data
SERVER_MANAGED_FIELDS = {"id", "created_at", "updated_at"}


@dataclass(frozen=True)
class TableDefinition:
    """A table to create: name, schema file name and ordered fields."""
    table_name: str
    file_name: str
    fields: Tuple[FieldDefinition, ...] = ()

    @property
    def slug(self) -> str:
        return table_to_slug(self.table_name)

    @property
    def class_name(self) -> str:
        return to_pascal_case(self.table_name)

    @property
    def hook_name(self) -> str:
        return hook_name_for(self.table_name)

    @property
    def api_path(self) -> str:
        return f"/api/{self.slug}"

    @property
    def file_stem(self) -> str:
        return self.file_name[:-3] if self.file_name.endswith(".ts") else self.file_name

    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    def get_field(self, name: str) -> Optional[FieldDefinition]:
        return next((f for f in self.fields if f.name == name), None)

    def has_field(self, name: str) -> bool:
        return self.get_field(name) is not None

    def user_fields(self) -> List[FieldDefinition]:
        """Fields a client supplies (everything but id and timestamps)."""
        return [f for f in self.fields if f.name not in SERVER_MANAGED_FIELDS]

    def required_fields(self) -> List[str]:
        return [f.name for f in self.user_fields() if f.is_required]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tableName": self.table_name,
            "fileName": self.file_name,
            "fields": [f.to_dict() for f in self.fields],
        }


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a single check. Built fresh, never mutated."""
    errors: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @classmethod
    def of(cls, errors: Iterable[str] = (), warnings: Iterable[str] = ()) -> "ValidationResult":
        return cls(errors=tuple(errors), warnings=tuple(warnings))

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        return ValidationResult(self.errors + other.errors, self.warnings + other.warnings)

    def to_dict(self) -> Dict[str, Any]:
        return {"isValid": self.is_valid, "errors": list(self.errors), "warnings": list(self.warnings)}


@dataclass(frozen=True)
class GenerationAttempt:
    """One round-trip to the text-generation service plus its validation."""
    attempt_number: int
    raw_text: str
    validation: ValidationResult


class Destination(str, Enum):
    MAIN = "main"
    SIDEBAR = "sidebar"


@dataclass(frozen=True)
class UISection:
    section_name: str
    target_array: str
    table: TableDefinition
    hook_name: str
    destination: Destination

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sectionName": self.section_name,
            "targetArray": self.target_array,
            "tableName": self.table.table_name,
            "hookName": self.hook_name,
            "destination": self.destination.value,
        }


@dataclass
class UIIntegrationPlan:
    sections: List[UISection] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    @property
    def should_update_main_area(self) -> bool:
        return any(s.destination == Destination.MAIN for s in self.sections)

    @property
    def should_update_sidebar(self) -> bool:
        return any(s.destination == Destination.SIDEBAR for s in self.sections)

    def sections_for(self, destination: Destination) -> List[UISection]:
        return [s for s in self.sections if s.destination == destination]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sections": [s.to_dict() for s in self.sections],
            "shouldUpdateMainArea": self.should_update_main_area,
            "shouldUpdateSidebar": self.should_update_sidebar,
            "skipped": list(self.skipped),
        }


@dataclass
class WorkflowSummary:
    """What a pipeline run produced."""
    query: str
    tables: List[TableDefinition] = field(default_factory=list)
    files_written: Dict[str, List[str]] = field(default_factory=dict)
    attempts: Dict[str, int] = field(default_factory=dict)
    failures: Dict[str, str] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
    ui_plan: Optional[Any] = None
    events: List[Dict[str, Any]] = field(default_factory=list)

    def record_file(self, table_name: str, rel_path: str) -> None:
        self.files_written.setdefault(table_name, []).append(rel_path)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "query": self.query,
            "tables": [t.to_dict() for t in self.tables],
            "files_written": self.files_written,
            "attempts": self.attempts,
            "failures": self.failures,
            "warnings": self.warnings,
            "ui_plan": self.ui_plan.to_dict() if self.ui_plan is not None else None,
            "events": self.events,
        }
