"""Tests for the structural route checks and the TypeScript text helpers."""
from app.generators.endpoint_gen.render import render_collection_route
from app.validation.code_validator import validate_route_code
from app.validation.ts_source import (
    clean_generated_text,
    mask_literals,
    strip_code_fences,
    strip_comments,
)


def test_template_route_is_valid(recently_played):
    result = validate_route_code(render_collection_route(recently_played), recently_played)

    assert result.is_valid, result.errors


def test_missing_delete_handler(recently_played):
    code = render_collection_route(recently_played)
    code = code.replace("export async function DELETE(request: NextRequest)",
                        "export async function REMOVE(request: NextRequest)")

    result = validate_route_code(code, recently_played)

    assert result.errors == ("Missing DELETE function declaration",)


def test_extra_closing_brace_is_reported(recently_played):
    code = render_collection_route(recently_played) + "}\n"

    result = validate_route_code(code, recently_played)

    assert not result.is_valid
    assert any(e.startswith("Unbalanced braces:") for e in result.errors)


def test_brace_check_runs_alongside_other_failures(recently_played):
    code = render_collection_route(recently_played)
    code = code.replace('import { drizzle } from "drizzle-orm/node-postgres";\n', "") + "{\n"

    result = validate_route_code(code, recently_played)

    assert "Missing drizzle import" in result.errors
    assert any(e.startswith("Unbalanced braces:") for e in result.errors)


def test_braces_inside_strings_do_not_count(recently_played):
    code = render_collection_route(recently_played).replace(
        "'Invalid request body'", "'Invalid request body {'"
    )

    result = validate_route_code(code, recently_played)

    assert result.is_valid, result.errors


def test_missing_imports_and_database_setup(recently_played):
    result = validate_route_code("export const x = 1;\n", recently_played)

    assert "Missing NextRequest/NextResponse imports" in result.errors
    assert "Missing recently_played table import" in result.errors
    assert "Missing database pool initialization" in result.errors
    assert "Missing database drizzle initialization" in result.errors
    for method in ("GET", "POST", "PUT", "DELETE"):
        assert f"Missing {method} function declaration" in result.errors


def test_unclosed_pool_block(recently_played):
    code = render_collection_route(recently_played).replace(
        '"postgresql://localhost:5432/spotify_clone"\n});',
        '"postgresql://localhost:5432/spotify_clone"\n}',
    )

    result = validate_route_code(code, recently_played)

    assert "Database pool configuration not properly closed" in result.errors


def test_parameter_parsing_outside_handler(recently_played):
    code = render_collection_route(recently_played).replace(
        "const db = drizzle(pool);\n",
        "const db = drizzle(pool);\nconst { searchParams } = new URL(request.url);\n",
    )

    result = validate_route_code(code, recently_played)

    assert result.errors == ("Parameter validation code found outside function",)


def test_bodiless_handler_declaration_does_not_open_a_handler(recently_played):
    code = render_collection_route(recently_played) + (
        "export async function PATCH(request: NextRequest);\n"
        "const body = await request.json();\n"
    )

    result = validate_route_code(code, recently_played)

    assert result.errors == ("Parameter validation code found outside function",)


def test_one_line_handler_may_parse_request(recently_played):
    code = render_collection_route(recently_played) + (
        "export async function PATCH(request: NextRequest) { const body = await request.json(); "
        "return NextResponse.json(body); }\n"
    )

    assert validate_route_code(code, recently_played).is_valid


def test_strip_code_fences():
    assert strip_code_fences("```typescript\nconst a = 1;\n```") == "const a = 1;"


def test_strip_comments_keeps_urls_in_strings():
    code = 'const url = "postgresql://localhost:5432/db"; // trailing\n/* block */const b = 2;'

    assert strip_comments(code) == 'const url = "postgresql://localhost:5432/db"; \nconst b = 2;'


def test_mask_literals_preserves_length():
    code = "const s = `a ${b} {`; const t = '}';"

    masked = mask_literals(code)

    assert len(masked) == len(code)
    assert masked.count("{") == 0
    assert masked.count("}") == 0


def test_clean_generated_text():
    raw = "```ts\n// header\nconst a = 1;   \n```"

    assert clean_generated_text(raw) == "const a = 1;\n"
