"""String templates for Drizzle schema files."""
from typing import Iterable, List

from app.planning.types import TableDefinition


def render_column(field) -> str:
    chain = f'{field.kind}("{field.name}")'
    for marker in field.constraint_markers():
        chain += f".{marker}"
    return f"  {field.name}: {chain},"


def render_schema_file(table: TableDefinition) -> str:
    """Generate src/db/schema/<file_name> content for one table."""
    kinds: List[str] = []
    for f in table.fields:
        if f.kind not in kinds:
            kinds.append(f.kind)
    imports = ", ".join(["pgTable"] + kinds)

    columns = "\n".join(render_column(f) for f in table.fields)
    name = table.table_name
    cls = table.class_name
    return (
        f'import {{ {imports} }} from "drizzle-orm/pg-core";\n'
        f"\n"
        f'export const {name} = pgTable("{name}", {{\n'
        f"{columns}\n"
        f"}});\n"
        f"\n"
        f"export type {cls} = typeof {name}.$inferSelect;\n"
        f"export type New{cls} = typeof {name}.$inferInsert;\n"
    )


def render_schema_index(stems: Iterable[str]) -> str:
    """Generate src/db/schema/index.ts re-exporting every schema module."""
    lines = ["// Auto-generated schema index"]
    lines += [f'export * from "./{stem}";' for stem in stems]
    return "\n".join(lines) + "\n"
