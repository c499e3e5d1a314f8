"""Decides which UI sections should be backed by the new tables."""
import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from app.planning.types import Destination, TableDefinition, UIIntegrationPlan, UISection

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class UIMapping:
    keywords: Tuple[str, ...]
    section_name: str
    target_array: str
    destination: Destination


UI_MAPPINGS: Tuple[UIMapping, ...] = (
    UIMapping(("recently played", "recent", "history", "last played"),
              "Recently Played", "recentlyPlayed", Destination.MAIN),
    UIMapping(("made for you", "curated", "recommendations", "suggested"),
              "Made For You", "madeForYou", Destination.MAIN),
    UIMapping(("popular albums", "popular", "trending albums", "top albums"),
              "Popular Albums", "popularAlbums", Destination.MAIN),
    UIMapping(("playlist", "playlists", "user playlist", "my playlist"),
              "Playlists", "recentlyPlayed", Destination.SIDEBAR),
    UIMapping(("liked songs", "favorites", "saved songs", "hearted"),
              "Liked Songs", "recentlyPlayed", Destination.SIDEBAR),
)

TITLE_FIELDS = {"title", "name", "song_title", "track_title"}
ARTIST_FIELDS = {"artist", "artist_name", "creator"}


def table_tokens(table_name: str) -> List[str]:
    return [t for t in re.split(r"[_\-]", table_name.lower()) if t]


def keyword_matches_table(keyword: str, tokens: Sequence[str]) -> bool:
    """Every word of the keyword is a substring of some token, or the other way round."""
    return all(
        any(word in token or token in word for token in tokens)
        for word in keyword.split()
    )


def find_mapping(query: str, table: TableDefinition) -> Optional[UIMapping]:
    lowered = query.lower()
    tokens = table_tokens(table.table_name)
    for mapping in UI_MAPPINGS:
        if any(k in lowered for k in mapping.keywords):
            return mapping
        if any(keyword_matches_table(k, tokens) for k in mapping.keywords):
            return mapping
    return None


def looks_like_track_collection(table: TableDefinition) -> bool:
    names = {name.lower() for name in table.field_names()}
    return bool(names & TITLE_FIELDS) and bool(names & ARTIST_FIELDS)


def plan_ui_integration(query: str, tables: Sequence[TableDefinition]) -> UIIntegrationPlan:
    """
    Map tables onto the page's sections.

    Keyword matches come first. Only when no table matched at all does the
    field-shape fallback run, sending track-like tables to the main area.
    """
    plan = UIIntegrationPlan()
    for table in tables:
        mapping = find_mapping(query, table)
        if mapping is None:
            continue
        plan.sections.append(UISection(
            section_name=mapping.section_name,
            target_array=mapping.target_array,
            table=table,
            hook_name=table.hook_name,
            destination=mapping.destination,
        ))

    if not plan.sections:
        for table in tables:
            if looks_like_track_collection(table):
                plan.sections.append(UISection(
                    section_name=f"{table.class_name} Collection",
                    target_array="recentlyPlayed",
                    table=table,
                    hook_name=table.hook_name,
                    destination=Destination.MAIN,
                ))
            else:
                log.info("Table %s does not match any known UI pattern", table.table_name)

    matched = {s.table.table_name for s in plan.sections}
    plan.skipped = [t.table_name for t in tables if t.table_name not in matched]
    return plan
