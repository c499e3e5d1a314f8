"""Tests for wiring data hooks into the page components."""
from pathlib import Path

from app.generators.writer import ProjectLayout
from app.planning.normalizer import normalize
from app.planning.types import Destination, UIIntegrationPlan, UISection
from app.ui.rewriter import find_static_array, integrate_ui, rewrite_component

MAIN_COMPONENT = '''"use client";

import { useState } from "react";
import {
  Play,
  Pause,
} from "lucide-react";

interface Track {
  id: string;
  title: string;
}

export function SpotifyMainContent() {
  const [playing, setPlaying] = useState(false);

  const recentlyPlayed: Track[] = [
    { id: "1", title: "Liked Songs [2024]", artist: "Various" },
    { id: "2", title: "Discover Weekly", artist: "Spotify" },
  ];

  return <div>{recentlyPlayed.length}</div>;
}
'''


def _section(table, target="recentlyPlayed", destination=Destination.MAIN):
    return UISection(
        section_name="Recently Played",
        target_array=target,
        table=table,
        hook_name=table.hook_name,
        destination=destination,
    )


def test_find_static_array_skips_brackets_in_strings():
    start, end, annotation = find_static_array(MAIN_COMPONENT, "recentlyPlayed")

    declaration = MAIN_COMPONENT[start:end]
    assert declaration.startswith("const recentlyPlayed: Track[] = [")
    assert declaration.endswith("];")
    assert "Discover Weekly" in declaration
    assert annotation == ": Track[]"


def test_rewrite_replaces_array_with_hook(recently_played):
    content, applied, warnings = rewrite_component(MAIN_COMPONENT, [_section(recently_played)])

    assert applied == ["useRecentlyPlayed"]
    assert warnings == []
    assert "Discover Weekly" not in content
    assert "const { data: recentlyPlayedData, loading: recentlyPlayedLoading, " \
           "fetchAll: fetchRecentlyPlayed } = useRecentlyPlayed();" in content
    assert "const recentlyPlayed: Track[] = (recentlyPlayedData?.records || []).map(" in content
    assert 'from "lucide-react";\nimport { useEffect } from "react";\nimport { useRecentlyPlayed } from "@/hooks";' \
        in content
    assert "return <div>{recentlyPlayed.length}</div>;" in content


def test_rewrite_is_idempotent(recently_played):
    once, _, _ = rewrite_component(MAIN_COMPONENT, [_section(recently_played)])

    twice, applied, warnings = rewrite_component(once, [_section(recently_played)])

    assert twice == once
    assert applied == []
    assert warnings == []


def test_missing_array_is_a_warning(recently_played):
    content, applied, warnings = rewrite_component(
        MAIN_COMPONENT, [_section(recently_played, target="madeForYou")]
    )

    assert content == MAIN_COMPONENT
    assert applied == []
    assert warnings == ["No static 'madeForYou' array found for section Recently Played"]


def test_array_outside_component_is_left_alone(recently_played):
    source = 'const recentlyPlayed = [\n  { id: "1" },\n];\n\nexport function Page() {\n  return null;\n}\n'

    content, applied, warnings = rewrite_component(source, [_section(recently_played)])

    assert content == source
    assert applied == []
    assert "declared outside the component" in warnings[0]


def test_second_section_for_same_array_is_reported(recently_played):
    other = normalize('[{"tableName": "listening_history", "fields": [{"name": "title", "type": "text"}]}]')[0]

    content, applied, warnings = rewrite_component(
        MAIN_COMPONENT, [_section(recently_played), _section(other)]
    )

    assert applied == ["useRecentlyPlayed"]
    assert warnings == ["'recentlyPlayed' is already backed by useRecentlyPlayed; useListeningHistory not wired"]


def test_integrate_ui_writes_component_and_warns_on_missing(recently_played, tmp_path: Path):
    layout = ProjectLayout(tmp_path)
    layout.components_dir.mkdir(parents=True)
    main = layout.components_dir / "spotify-main-content.tsx"
    main.write_text(MAIN_COMPONENT, encoding="utf-8")
    plan = UIIntegrationPlan(sections=[
        _section(recently_played),
        _section(recently_played, destination=Destination.SIDEBAR),
    ])

    result = integrate_ui(plan, layout)

    assert result.files == ["src/components/spotify-main-content.tsx"]
    assert result.warnings == ["Component spotify-sidebar.tsx not found, skipping sidebar integration"]
    assert "useRecentlyPlayed();" in main.read_text(encoding="utf-8")
