"""Sample data and seed script template."""
import json
from typing import Any, Dict, List

from app.planning.types import FieldDefinition, FieldKind, TableDefinition

SAMPLE_SIZE = 5

TEXT_SAMPLES: Dict[str, List[str]] = {
    "user_id": ["user_{n}", "spotify_user_{n}", "test_user_{n}"],
    "song_id": ["song_{n}", "track_{n}"],
    "song_title": [
        "Bohemian Rhapsody",
        "Hotel California",
        "Stairway to Heaven",
        "Imagine",
        "Sweet Child O Mine",
        "Billie Jean",
        "Like a Rolling Stone",
        "Purple Haze",
        "What's Going On",
        "Respect",
    ],
    "artist": [
        "Queen",
        "Eagles",
        "Led Zeppelin",
        "John Lennon",
        "Guns N' Roses",
        "Michael Jackson",
        "Bob Dylan",
        "Jimi Hendrix",
        "Marvin Gaye",
        "Aretha Franklin",
    ],
    "album": [
        "A Night at the Opera",
        "Hotel California",
        "Led Zeppelin IV",
        "Imagine",
        "Appetite for Destruction",
        "Thriller",
        "Highway 61 Revisited",
        "Are You Experienced",
        "What's Going On",
        "I Never Loved a Man",
    ],
    "name": ["Sample Name {n}", "Test Item {n}"],
    "title": ["Sample Title {n}", "Test Title {n}"],
    "description": ["Sample description for item {n}", "Test description {n}"],
    "email": ["user{n}@example.com", "test{n}@domain.com"],
    "status": ["active", "inactive", "pending", "completed"],
    "category": ["music", "entertainment", "lifestyle", "technology"],
}

# (base, step): value for row i is base + i * step
INTEGER_SAMPLES = {
    "duration": (180, 37),
    "duration_seconds": (180, 37),
    "play_count": (12, 211),
    "rating": (1, 1),
    "age": (18, 9),
    "price": (499, 250),
    "quantity": (1, 3),
}


def sample_text(field_name: str, index: int) -> str:
    options = TEXT_SAMPLES.get(field_name)
    if options:
        return options[index % len(options)].format(n=index + 1)
    return f"sample_{field_name}_{index + 1}"


def sample_integer(field_name: str, index: int) -> int:
    base, step = INTEGER_SAMPLES.get(field_name, (1, 1))
    if field_name == "rating":
        return index % 5 + 1
    return base + index * step


def sample_value(field: FieldDefinition, index: int) -> Any:
    """A deterministic sample for one column, or None to leave it to the database."""
    kind = field.kind
    if kind == FieldKind.TEXT.value:
        return sample_text(field.name, index)
    if kind == FieldKind.INTEGER.value:
        return sample_integer(field.name, index)
    if kind == FieldKind.BOOLEAN.value:
        return index % 2 == 0
    if kind == FieldKind.UUID.value:
        return f"00000000-0000-4000-8000-{index + 1:012d}"
    return None


def build_sample_records(table: TableDefinition, count: int = SAMPLE_SIZE) -> List[Dict[str, Any]]:
    records = []
    for i in range(count):
        record = {}
        for f in table.user_fields():
            value = sample_value(f, i)
            if value is not None:
                record[f.name] = value
        records.append(record)
    return records


def _render_record(table: TableDefinition, record: Dict[str, Any], index: int) -> str:
    parts = [f"    {name}: {json.dumps(value)}," for name, value in record.items()]
    # user-supplied timestamps (e.g. played_at) spread over the past hours
    for f in table.user_fields():
        if f.kind == FieldKind.TIMESTAMP.value and f.name not in record:
            parts.append(f"    {f.name}: new Date(Date.now() - {index + 1} * 60 * 60 * 1000),")
    return "  {\n" + "\n".join(parts) + "\n  },"


SEED_TEMPLATE = """import { drizzle } from "drizzle-orm/node-postgres";
import { Pool } from "pg";
import dotenv from "dotenv";
import { %(table)s, type New%(cls)s } from "@/db/schema";

dotenv.config();

const sampleData: New%(cls)s[] = [
%(records)s
];

async function seed() {
  if (!process.env.DATABASE_URL) {
    console.error("DATABASE_URL environment variable is not set");
    process.exit(1);
  }

  const pool = new Pool({
    connectionString: process.env.DATABASE_URL,
    ssl: process.env.DATABASE_URL.includes("neon.tech") ? { rejectUnauthorized: false } : false
  });
  const db = drizzle(pool);

  try {
    const inserted = await db.insert(%(table)s).values(sampleData).returning();
    console.log(`Seeded ${inserted.length} %(table)s records`);
  } catch (error) {
    console.error("Seeding %(table)s failed:", error);
    process.exitCode = 1;
  } finally {
    await pool.end();
  }
}

seed();
"""


def render_seed_script(table: TableDefinition, count: int = SAMPLE_SIZE) -> str:
    """Generate scripts/seed-<slug>.ts content."""
    records = build_sample_records(table, count)
    rendered = "\n".join(_render_record(table, r, i) for i, r in enumerate(records))
    return SEED_TEMPLATE % {"table": table.table_name, "cls": table.class_name, "records": rendered}
