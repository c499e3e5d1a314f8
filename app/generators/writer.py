"""File writers for generated front-end artifacts."""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List

from app.planning.types import TableDefinition

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProjectLayout:
    """Where each artifact lives inside a Next.js project."""
    root: Path

    @property
    def schema_dir(self) -> Path:
        return self.root / "src" / "db" / "schema"

    @property
    def migrations_dir(self) -> Path:
        return self.root / "src" / "db" / "migrations"

    @property
    def api_dir(self) -> Path:
        return self.root / "src" / "app" / "api"

    @property
    def hooks_dir(self) -> Path:
        return self.root / "src" / "hooks"

    @property
    def components_dir(self) -> Path:
        return self.root / "src" / "components"

    @property
    def scripts_dir(self) -> Path:
        return self.root / "scripts"

    def schema_file(self, table: TableDefinition) -> Path:
        return self.schema_dir / table.file_name

    def collection_route(self, table: TableDefinition) -> Path:
        return self.api_dir / table.slug / "route.ts"

    def id_route(self, table: TableDefinition) -> Path:
        return self.api_dir / table.slug / "[id]" / "route.ts"

    def seed_script(self, table: TableDefinition) -> Path:
        return self.scripts_dir / f"seed-{table.slug}.ts"

    def hook_file(self, table: TableDefinition) -> Path:
        return self.hooks_dir / f"use-{table.slug}.ts"

    def relative(self, path: Path) -> str:
        return path.relative_to(self.root).as_posix()


def atomic_write(path: Path, content: str) -> None:
    """Write file atomically using temporary file and rename."""
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        tmp_path.write_text(content, encoding="utf-8")
        os.replace(tmp_path, path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise


def write_artifact(path: Path, content: str) -> Path:
    """Write (or overwrite) one generated file, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    log.debug("Wrote %s (%d bytes)", path, len(content))
    return path


def list_module_stems(directory: Path, suffix: str = ".ts") -> List[str]:
    if not directory.is_dir():
        return []
    return [
        p.name[: -len(suffix)]
        for p in directory.iterdir()
        if p.is_file() and p.name.endswith(suffix) and p.name != f"index{suffix}"
    ]


def regenerate_index(
    directory: Path,
    new_stems: Iterable[str],
    render: Callable[[List[str]], str],
    suffix: str = ".ts",
) -> Path:
    """
    Rebuild ``index<suffix>`` from what is on disk plus ``new_stems``.

    The directory is re-listed on every call so concurrent additions are kept.
    Output is sorted, so an unchanged directory yields byte-identical content.
    """
    stems = sorted((set(list_module_stems(directory, suffix)) | set(new_stems)) - {"index"})
    content = render(stems)
    index_path = directory / f"index{suffix}"
    directory.mkdir(parents=True, exist_ok=True)
    if index_path.is_file() and index_path.read_text(encoding="utf-8") == content:
        return index_path
    atomic_write(index_path, content)
    log.debug("Regenerated %s with %d entries", index_path, len(stems))
    return index_path
