"""Turns a natural-language query into canonical table definitions.

The text-generation service is asked for a JSON array of tables. Whatever it
answers is decoded strictly, then normalized so every table carries the
canonical ``id`` and ``created_at``/``updated_at`` fields. When no service is
configured (or it cannot be reached) a small built-in plan is used instead.
"""
from __future__ import annotations
import json
import logging
import re
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from app.core.errors import TextGenerationError
from app.llm.client import TextGenerator
from app.planning.types import (
    Constraint,
    FieldDefinition,
    FieldKind,
    TableDefinition,
    id_field,
    is_canonical_created_at,
    is_canonical_id,
    timestamp_field,
)
from app.generators.utils import table_to_file_name
from app.validation.ts_source import strip_code_fences

log = logging.getLogger(__name__)


class RawFieldShape(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    type: str
    constraints: List[str] = Field(default_factory=list)


class RawTableShape(BaseModel):
    model_config = ConfigDict(extra="ignore")

    tableName: Optional[str] = None
    fileName: Optional[str] = None
    fields: List[RawFieldShape] = Field(default_factory=list)


_DEFAULT_VALUE_RE = re.compile(r"^default\((.*)\)$", re.DOTALL)

# Spellings the service uses for each marker, compared after lower-casing and
# stripping "()", "_" and "-"
_CONSTRAINT_ALIASES = {
    "primarykey": Constraint.PRIMARY_KEY,
    "pk": Constraint.PRIMARY_KEY,
    "notnull": Constraint.NOT_NULL,
    "required": Constraint.NOT_NULL,
    "defaultnow": Constraint.DEFAULT_NOW,
    "unique": Constraint.UNIQUE,
}


def parse_constraint(marker: str) -> Tuple[Optional[Constraint], Optional[str]]:
    """
    Decode one constraint marker.

    Returns (constraint, default_value). Unknown markers return (None, None).
    """
    text = marker.strip()
    if text.startswith("."):
        text = text[1:]
    m = _DEFAULT_VALUE_RE.match(text)
    if m:
        return Constraint.DEFAULT_VALUE, m.group(1).strip()
    key = text.replace("()", "").replace("_", "").replace("-", "").lower()
    if key == "default":
        return Constraint.DEFAULT_VALUE, ""
    return _CONSTRAINT_ALIASES.get(key), None


def _to_field(raw: RawFieldShape) -> FieldDefinition:
    constraints = set()
    default = None
    for marker in raw.constraints:
        constraint, value = parse_constraint(marker)
        if constraint is None:
            log.warning("Dropping unknown constraint %r on field %s", marker, raw.name)
            continue
        constraints.add(constraint)
        if constraint == Constraint.DEFAULT_VALUE:
            default = value
    return FieldDefinition(
        name=raw.name.strip(),
        kind=raw.type.strip().lower(),
        constraints=frozenset(constraints),
        default=default,
    )


def extract_json_array(text: str) -> Optional[str]:
    """Return the outermost ``[...]`` span of ``text``, or None."""
    start = text.find("[")
    end = text.rfind("]")
    if start == -1 or end <= start:
        return None
    return text[start:end + 1]


def canonicalize(table_name: str, file_name: str, fields: List[FieldDefinition]) -> TableDefinition:
    """Ensure the canonical id and timestamp fields are present."""
    conforming_id = next((f for f in fields if is_canonical_id(f)), None)
    rest = [f for f in fields if f.name != "id"]
    if len(rest) != len(fields) - (1 if conforming_id else 0):
        log.warning("Replacing non-conforming id field on %s", table_name)
    ordered = [conforming_id or id_field()] + rest

    created = [f for f in ordered if f.name == "created_at"]
    if created:
        keep = next((f for f in created if is_canonical_created_at(f)), None)
        if keep is None:
            log.warning("Replacing non-conforming created_at field on %s", table_name)
            keep = timestamp_field("created_at")
        if len(created) > 1:
            log.warning("Dropping %d duplicate created_at field(s) on %s", len(created) - 1, table_name)
        position = ordered.index(created[0])
        ordered = [f for f in ordered if f.name != "created_at"]
        ordered.insert(position, keep)
    else:
        ordered.append(timestamp_field("created_at"))
    if not any(f.name == "updated_at" for f in ordered):
        ordered.append(timestamp_field("updated_at"))

    return TableDefinition(table_name=table_name, file_name=file_name, fields=tuple(ordered))


def normalize(raw_text: str) -> List[TableDefinition]:
    """
    Decode a planner response into canonical table definitions.

    Unparseable output yields an empty list. Candidates that do not match the
    expected shape are skipped.
    """
    body = extract_json_array(strip_code_fences(raw_text))
    if body is None:
        log.warning("Planner response contains no JSON array")
        return []
    try:
        candidates = json.loads(body)
    except json.JSONDecodeError as e:
        log.warning("Planner response is not valid JSON: %s", e)
        return []
    if not isinstance(candidates, list):
        return []

    tables: List[TableDefinition] = []
    for index, candidate in enumerate(candidates):
        try:
            shape = RawTableShape.model_validate(candidate)
        except ValidationError as e:
            log.warning("Skipping malformed table candidate #%d: %s", index, e.errors()[:1])
            continue

        table_name = (shape.tableName or "").strip().lower() or "unknown_table"
        file_name = (shape.fileName or "").strip() or table_to_file_name(table_name)
        fields = [_to_field(f) for f in shape.fields]
        tables.append(canonicalize(table_name, file_name, fields))
    return tables


def _text(name: str, required: bool = True) -> FieldDefinition:
    constraints = frozenset({Constraint.NOT_NULL}) if required else frozenset()
    return FieldDefinition(name, FieldKind.TEXT.value, constraints)


def fallback_plan(query: str) -> List[TableDefinition]:
    """Built-in plan for the one request understood without a text-generation service."""
    q = query.lower()
    if "recently played" in q and "song" in q:
        return [
            TableDefinition(
                table_name="recently_played",
                file_name="recently-played.ts",
                fields=(
                    id_field(),
                    _text("user_id"),
                    _text("song_id"),
                    _text("song_title"),
                    _text("artist"),
                    _text("album", required=False),
                    FieldDefinition("duration", FieldKind.INTEGER.value),
                    timestamp_field("played_at"),
                    timestamp_field("created_at"),
                ),
            )
        ]
    return []


PLANNING_PROMPT = """You are a database schema expert for PostgreSQL with Drizzle ORM.

Analyze this user query and generate VALID schema definitions for a Next.js project with TypeScript.

User Query: "{query}"
{context_block}
Return ONLY a JSON array with schema definitions. Each schema should have:
- tableName: lowercase with underscores (e.g., "recently_played", "user_playlists")
- fileName: the TypeScript file name (e.g., "recently-played.ts")
- fields: array of field objects with name, type, and constraints

Available Drizzle field types: {kinds}
Available constraints: primaryKey(), notNull(), unique(), defaultNow(), default(value)

Ensure each table has:
- id field as serial primaryKey()
- created_at and updated_at timestamp fields with defaultNow() and notNull()

Example format:
{example}

Return ONLY the JSON array, no explanation."""


def build_planning_prompt(query: str, context: str = "") -> str:
    example = TableDefinition(
        table_name="recently_played",
        file_name="recently-played.ts",
        fields=(
            id_field(),
            _text("song_title"),
            _text("artist_name"),
            timestamp_field("created_at"),
            timestamp_field("updated_at"),
        ),
    )
    context_block = f"\nProject context:\n{context}\n" if context else ""
    return PLANNING_PROMPT.format(
        query=query,
        context_block=context_block,
        kinds=", ".join(k.value for k in FieldKind),
        example=json.dumps([example.to_dict()], indent=2),
    )


class PlanNormalizer:
    """Produces table definitions for a query, with or without a text generator."""

    def __init__(self, generator: Optional[TextGenerator] = None):
        self.generator = generator

    def plan(self, query: str, context: str = "") -> List[TableDefinition]:
        if self.generator is None:
            log.info("No text generator configured; using the built-in plan")
            return fallback_plan(query)
        try:
            raw = self.generator.generate(build_planning_prompt(query, context))
        except TextGenerationError as e:
            log.warning("Text generation unavailable (%s); using the built-in plan", e)
            return fallback_plan(query)
        return normalize(raw)
