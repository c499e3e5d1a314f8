"""Summarizes an existing front-end project for the planning prompt."""
from pathlib import Path
from typing import Dict, List

from app.generators.writer import ProjectLayout


class ProjectAnalyzer:
    def __init__(self, layout: ProjectLayout):
        self.layout = layout

    def scan(self) -> Dict[str, List[str]]:
        """
        List what the project already has.

        Returns:
            Dictionary with ``schemas`` (schema file names), ``api_routes``
            (route directory names) and ``components`` (component stems)
        """
        return {
            "schemas": self._list_files(self.layout.schema_dir, ".ts", exclude={"index.ts"}),
            "api_routes": self._list_dirs(self.layout.api_dir),
            "components": [
                name[: -len(".tsx")]
                for name in self._list_files(self.layout.components_dir, ".tsx")
            ],
        }

    def get_project_context(self) -> str:
        found = self.scan()
        labels = (
            ("Existing schemas", found["schemas"]),
            ("Existing API routes", found["api_routes"]),
            ("Main components", found["components"]),
        )
        return "\n".join(f"{label}: {', '.join(items)}" for label, items in labels if items)

    @staticmethod
    def _list_files(directory: Path, suffix: str, exclude=frozenset()) -> List[str]:
        if not directory.is_dir():
            return []
        return sorted(
            p.name for p in directory.iterdir()
            if p.is_file() and p.name.endswith(suffix) and p.name not in exclude
        )

    @staticmethod
    def _list_dirs(directory: Path) -> List[str]:
        if not directory.is_dir():
            return []
        return sorted(p.name for p in directory.iterdir() if p.is_dir())
