"""Prompts for collection route generation."""
import json
from typing import Sequence

from app.generators.endpoint_gen.render import DEFAULT_CONNECTION_STRING
from app.planning.types import SERVER_MANAGED_FIELDS, Constraint, TableDefinition


def _fields_info(table: TableDefinition) -> list:
    return [
        {
            "name": f.name,
            "type": f.kind,
            "isRequired": f.has(Constraint.NOT_NULL) and f.name not in SERVER_MANAGED_FIELDS,
        }
        for f in table.fields
    ]


def build_endpoint_prompt(table: TableDefinition) -> str:
    name = table.table_name
    cls = table.class_name
    has_user_id = "true" if table.has_field("user_id") else "false"
    fields_json = json.dumps(_fields_info(table), indent=2)
    return f"""You are a Next.js API route code generator. Generate a COMPLETE, SYNTACTICALLY CORRECT TypeScript file for a database table with full CRUD operations.

CRITICAL REQUIREMENTS - MUST BE FOLLOWED EXACTLY:

1. COMPLETE FILE STRUCTURE:
   - All imports at the top
   - Database setup with proper closing braces
   - All 4 HTTP methods (GET, POST, PUT, DELETE) with complete function declarations
   - Each function must have proper opening and closing braces

2. EXACT DATABASE SETUP (copy this exactly):
const pool = new Pool({{
  connectionString: process.env.DATABASE_URL || "{DEFAULT_CONNECTION_STRING}"
}});
const db = drizzle(pool);

3. EXACT IMPORTS (copy these exactly):
import {{ NextRequest, NextResponse }} from "next/server";
import {{ drizzle }} from "drizzle-orm/node-postgres";
import {{ Pool }} from "pg";
import {{ {name}, type {cls}, type New{cls} }} from "@/db/schema";
import {{ desc, eq, and, count }} from "drizzle-orm";

4. FUNCTION STRUCTURE - Each function must be complete:
export async function GET(request: NextRequest) {{
  try {{
    return NextResponse.json({{ success: true, data: result }});
  }} catch (error) {{
    return NextResponse.json({{ success: false, error: "Error message" }}, {{ status: 500 }});
  }}
}}

5. PARAMETER VALIDATION must be INSIDE functions, not orphaned:
   - URL parameters: const {{ searchParams }} = new URL(request.url);
   - Body validation: const body = await request.json();

Table Information:
- Table name: {name}
- Class name: {cls}
- Has user_id field: {has_user_id}
- Fields: {fields_json}

REQUIRED FUNCTIONALITY:
- GET: Support id parameter for single record, pagination (limit/offset), filtering by user_id
- POST: Create new record with validation of required fields
- PUT: Update record by id (?id=) with validation
- DELETE: Delete record by id (?id=)

Consistent error response format: {{ success: false, error: "message" }}
Consistent success response format: {{ success: true, data: result }}

Generate ONLY the complete TypeScript code. No explanations, no markdown formatting, no comments.

START YOUR RESPONSE WITH:
import {{ NextRequest, NextResponse }} from "next/server";"""


def build_repair_prompt(base_prompt: str, errors: Sequence[str]) -> str:
    """Base prompt plus the rules the previous attempt broke."""
    itemized = "\n".join(f"- {e}" for e in errors)
    return f"""{base_prompt}

PREVIOUS ATTEMPT FAILED WITH THESE ERRORS:
{itemized}

FIX THESE SPECIFIC ISSUES in your response. Pay special attention to:
- Proper brace balancing
- Complete function declarations
- Database initialization
- No orphaned code"""
