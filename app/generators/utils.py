"""Naming helpers shared by the generators."""
import re


def to_snake_case(name: str) -> str:
    """Convert PascalCase, camelCase, kebab-case or spaced words to snake_case."""
    s1 = re.sub('(.)([A-Z][a-z]+)', r'\1_\2', name.strip())
    s2 = re.sub('([a-z0-9])([A-Z])', r'\1_\2', s1)
    return re.sub(r'[\s\-]+', '_', s2).lower()


def to_kebab_case(name: str) -> str:
    """Convert snake_case (or anything to_snake_case accepts) to kebab-case."""
    return to_snake_case(name).replace('_', '-')


def to_pascal_case(name: str) -> str:
    """recently_played -> RecentlyPlayed"""
    return ''.join(part[:1].upper() + part[1:] for part in re.split(r'[_\-\s]+', name) if part)


def to_camel_case(name: str) -> str:
    """recently_played -> recentlyPlayed"""
    pascal = to_pascal_case(name)
    if not pascal:
        return pascal
    return pascal[0].lower() + pascal[1:]


def table_to_slug(table_name: str) -> str:
    """Convert a table name to the hyphenated slug used for file paths and URLs."""
    return table_name.replace('_', '-')


def table_to_file_name(table_name: str) -> str:
    return f"{table_to_slug(table_name)}.ts"


def hook_name_for(table_name: str) -> str:
    return f"use{to_pascal_case(table_name)}"
