"""Swaps hard-coded section arrays in the page components for data hooks.

The rewrite is textual and deterministic. Anything it cannot place (a missing
component, a missing array, an array declared outside the component) becomes
a warning and the file is left as it was.
"""
from __future__ import annotations
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from app.generators.utils import to_pascal_case
from app.generators.writer import ProjectLayout, write_artifact
from app.planning.types import Destination, UIIntegrationPlan, UISection
from app.validation.ts_source import mask_literals

log = logging.getLogger(__name__)

COMPONENT_FILES = {
    Destination.MAIN: "spotify-main-content.tsx",
    Destination.SIDEBAR: "spotify-sidebar.tsx",
}

MAIN_VIEW_MAPPING = """({
    id: record.id?.toString() || record.song_id?.toString() || String(index),
    title: record.title || record.song_title || record.name || "Unknown Title",
    artist: record.artist || record.artist_name || record.creator || "Unknown Artist",
    album: record.album || record.album_name || record.category || "Unknown Album",
    image: record.image || record.cover_art || record.thumbnail,
    duration: record.duration || record.duration_seconds || 180
  })"""

SIDEBAR_VIEW_MAPPING = """({
    id: record.id?.toString() || String(index),
    title: record.title || record.name || record.playlist_name || record.song_title || "Unknown Playlist",
    subtitle: record.subtitle || record.description || record.artist || "Playlist",
    image: record.image || record.cover_art || record.thumbnail,
    duration: record.duration || record.duration_seconds || 180
  })"""

_IMPORT_RE = re.compile(
    r"""^import\s[^;]*?from\s+['"][^'"]+['"];?|^import\s+['"][^'"]+['"];?""",
    re.MULTILINE,
)


@dataclass
class RewriteResult:
    files: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def _declaration_re(target_array: str) -> re.Pattern:
    return re.compile(
        rf"const\s+{re.escape(target_array)}\s*(?P<annotation>:\s*[\w<>\[\]\s|]+?)?\s*=\s*\["
    )


def _matching_bracket(masked: str, open_index: int) -> Optional[int]:
    depth = 0
    for i in range(open_index, len(masked)):
        if masked[i] == "[":
            depth += 1
        elif masked[i] == "]":
            depth -= 1
            if depth == 0:
                return i
    return None


def _brace_depth(masked: str, index: int) -> int:
    prefix = masked[:index]
    return prefix.count("{") - prefix.count("}")


def find_static_array(content: str, target_array: str) -> Optional[Tuple[int, int, str]]:
    """
    Locate ``const <target_array> = [...]`` (optionally type-annotated).

    Returns (start, end, annotation) with ``end`` just past the closing
    bracket and an optional trailing semicolon, or None.
    """
    masked = mask_literals(content)
    m = _declaration_re(target_array).search(masked)
    if m is None:
        return None
    close = _matching_bracket(masked, m.end() - 1)
    if close is None:
        return None
    end = close + 1
    if masked[end:end + 1] == ";":
        end += 1
    annotation = (m.group("annotation") or "").strip()
    return m.start(), end, annotation


def render_hook_binding(section: UISection, annotation: str) -> str:
    target = section.target_array
    fetch_name = f"fetch{to_pascal_case(target)}"
    mapping = SIDEBAR_VIEW_MAPPING if section.destination == Destination.SIDEBAR else MAIN_VIEW_MAPPING
    annotated = f"{target}{': ' + annotation.lstrip(':').strip() if annotation else ''}"
    return (
        f"const {{ data: {target}Data, loading: {target}Loading, fetchAll: {fetch_name} }} = {section.hook_name}();\n"
        f"\n"
        f"  useEffect(() => {{\n"
        f"    {fetch_name}();\n"
        f"  }}, [{fetch_name}]);\n"
        f"\n"
        f"  const {annotated} = ({target}Data?.records || []).map((record: any, index: number) => {mapping});"
    )


def add_imports(content: str, hook_names: List[str]) -> str:
    """Add the useEffect and '@/hooks' imports after the last import line."""
    new_lines = []
    if not re.search(r"\buseEffect\b[^\n]*from\s+['\"]react['\"]", content):
        new_lines.append('import { useEffect } from "react";')
    missing = [h for h in hook_names if not re.search(rf"\b{re.escape(h)}\b[^\n]*from\s+['\"]@/hooks['\"]", content)]
    if missing:
        new_lines.append(f'import {{ {", ".join(missing)} }} from "@/hooks";')
    if not new_lines:
        return content

    imports = list(_IMPORT_RE.finditer(content))
    if imports:
        at = imports[-1].end()
        return content[:at] + "\n" + "\n".join(new_lines) + content[at:]
    # keep a leading "use client" directive first
    directive = re.match(r"""^\s*['"]use client['"];?[ \t]*\n""", content)
    at = directive.end() if directive else 0
    return content[:at] + "\n".join(new_lines) + "\n" + content[at:]


def rewrite_component(content: str, sections: List[UISection]) -> Tuple[str, List[str], List[str]]:
    """
    Apply every section to one component's source.

    Returns (new content, applied hook names, warnings).
    """
    warnings: List[str] = []
    applied: List[str] = []
    done_targets: Dict[str, str] = {}

    for section in sections:
        target = section.target_array
        if target in done_targets:
            warnings.append(
                f"'{target}' is already backed by {done_targets[target]}; {section.hook_name} not wired"
            )
            continue
        if re.search(rf"=\s*{re.escape(section.hook_name)}\(\)", content):
            log.info("%s already wired, leaving it", section.hook_name)
            done_targets[target] = section.hook_name
            continue
        found = find_static_array(content, target)
        if found is None:
            warnings.append(f"No static '{target}' array found for section {section.section_name}")
            continue
        start, end, annotation = found
        if _brace_depth(mask_literals(content), start) <= 0:
            warnings.append(f"'{target}' is declared outside the component; {section.hook_name} not wired")
            continue
        content = content[:start] + render_hook_binding(section, annotation) + content[end:]
        applied.append(section.hook_name)
        done_targets[target] = section.hook_name

    if applied:
        content = add_imports(content, applied)
    return content, applied, warnings


def integrate_ui(plan: UIIntegrationPlan, layout: ProjectLayout) -> RewriteResult:
    result = RewriteResult()
    for destination, file_name in COMPONENT_FILES.items():
        sections = plan.sections_for(destination)
        if not sections:
            continue
        path: Path = layout.components_dir / file_name
        if not path.is_file():
            result.warnings.append(f"Component {file_name} not found, skipping {destination.value} integration")
            continue
        original = path.read_text(encoding="utf-8")
        updated, applied, warnings = rewrite_component(original, sections)
        result.warnings.extend(f"{file_name}: {w}" for w in warnings)
        if applied and updated != original:
            write_artifact(path, updated)
            result.files.append(layout.relative(path))
            log.info("Wired %s into %s", ", ".join(applied), file_name)
    return result
