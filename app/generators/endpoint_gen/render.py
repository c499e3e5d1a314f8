"""Deterministic route templates for a table's CRUD endpoints.

Templates use %-style placeholders so the TypeScript braces stay readable.
"""
from app.planning.types import TableDefinition

DEFAULT_CONNECTION_STRING = "postgresql://localhost:5432/spotify_clone"

ROUTE_HEADER = """import { NextRequest, NextResponse } from "next/server";
import { drizzle } from "drizzle-orm/node-postgres";
import { Pool } from "pg";
import { %(table)s, type %(cls)s, type New%(cls)s } from "@/db/schema";
import { desc, eq, and, count } from "drizzle-orm";

const pool = new Pool({
  connectionString: process.env.DATABASE_URL || "%(conn)s"
});
const db = drizzle(pool);
"""

USER_FILTER = """
    if (userId) {
      whereConditions.push(eq(%(table)s.user_id, userId));
    }
"""

COLLECTION_HANDLERS = """
export async function GET(request: NextRequest) {
  try {
    const { searchParams } = new URL(request.url);
    const limit = Math.min(parseInt(searchParams.get('limit') || '10'), 100);
    const offset = Math.max(parseInt(searchParams.get('offset') || '0'), 0);
    const userId = searchParams.get('user_id');
    const id = searchParams.get('id');

    if (id) {
      const record = await db
        .select()
        .from(%(table)s)
        .where(eq(%(table)s.id, parseInt(id)))
        .limit(1);

      if (record.length === 0) {
        return NextResponse.json(
          { success: false, error: '%(cls)s not found' },
          { status: 404 }
        );
      }

      return NextResponse.json({ success: true, data: record[0] });
    }

    let query = db.select().from(%(table)s).$dynamic();
    let countQuery = db.select({ count: count() }).from(%(table)s).$dynamic();

    const whereConditions = [];
%(user_filter)s
    if (whereConditions.length > 0) {
      const whereClause = whereConditions.length === 1
        ? whereConditions[0]
        : and(...whereConditions);
      query = query.where(whereClause);
      countQuery = countQuery.where(whereClause);
    }

    const [totalResult] = await countQuery;
    const total = totalResult.count;

    const records = await query
      .orderBy(desc(%(table)s.created_at))
      .limit(limit)
      .offset(offset);

    return NextResponse.json({
      success: true,
      data: records,
      pagination: {
        limit,
        offset,
        total,
        hasMore: offset + limit < total
      }
    });
  } catch (error) {
    console.error('Error fetching %(table)s:', error);
    return NextResponse.json(
      { success: false, error: 'Failed to fetch %(table)s' },
      { status: 500 }
    );
  }
}

export async function POST(request: NextRequest) {
  try {
    const body = await request.json();

    if (!body || typeof body !== 'object') {
      return NextResponse.json(
        { success: false, error: 'Invalid request body' },
        { status: 400 }
      );
    }

    const { id, created_at, updated_at, ...createData } = body;

    const requiredFields = [%(required)s];
    for (const field of requiredFields) {
      if (createData[field] === undefined || createData[field] === null || createData[field] === '') {
        return NextResponse.json(
          { success: false, error: `Missing required field: ${field}` },
          { status: 400 }
        );
      }
    }

    const newRecord = await db
      .insert(%(table)s)
      .values(createData as New%(cls)s)
      .returning();

    return NextResponse.json(
      { success: true, data: newRecord[0] },
      { status: 201 }
    );
  } catch (error) {
    console.error('Error creating %(table)s:', error);
    return NextResponse.json(
      { success: false, error: 'Failed to create %(table)s' },
      { status: 500 }
    );
  }
}

export async function PUT(request: NextRequest) {
  try {
    const { searchParams } = new URL(request.url);
    const id = searchParams.get('id');

    if (!id) {
      return NextResponse.json(
        { success: false, error: 'ID is required' },
        { status: 400 }
      );
    }

    const body = await request.json();
    if (!body || typeof body !== 'object') {
      return NextResponse.json(
        { success: false, error: 'Invalid request body' },
        { status: 400 }
      );
    }

    const { id: bodyId, created_at, ...updateData } = body;
%(touch_updated)s
    const updatedRecord = await db
      .update(%(table)s)
      .set(updateData)
      .where(eq(%(table)s.id, parseInt(id)))
      .returning();

    if (updatedRecord.length === 0) {
      return NextResponse.json(
        { success: false, error: '%(cls)s not found' },
        { status: 404 }
      );
    }

    return NextResponse.json({ success: true, data: updatedRecord[0] });
  } catch (error) {
    console.error('Error updating %(table)s:', error);
    return NextResponse.json(
      { success: false, error: 'Failed to update %(table)s' },
      { status: 500 }
    );
  }
}

export async function DELETE(request: NextRequest) {
  try {
    const { searchParams } = new URL(request.url);
    const id = searchParams.get('id');

    if (!id) {
      return NextResponse.json(
        { success: false, error: 'ID is required' },
        { status: 400 }
      );
    }

    const deletedRecord = await db
      .delete(%(table)s)
      .where(eq(%(table)s.id, parseInt(id)))
      .returning();

    if (deletedRecord.length === 0) {
      return NextResponse.json(
        { success: false, error: '%(cls)s not found' },
        { status: 404 }
      );
    }

    return NextResponse.json({
      success: true,
      message: '%(cls)s deleted successfully',
      data: deletedRecord[0]
    });
  } catch (error) {
    console.error('Error deleting %(table)s:', error);
    return NextResponse.json(
      { success: false, error: 'Failed to delete %(table)s' },
      { status: 500 }
    );
  }
}
"""

ID_ROUTE = """import { NextRequest, NextResponse } from "next/server";
import { drizzle } from "drizzle-orm/node-postgres";
import { Pool } from "pg";
import { eq } from "drizzle-orm";
import { %(table)s } from "@/db/schema";

const pool = new Pool({
  connectionString: process.env.DATABASE_URL || "%(conn)s"
});
const db = drizzle(pool);

type RouteContext = { params: Promise<{ id: string }> };

async function parseId(context: RouteContext): Promise<number | null> {
  const { id } = await context.params;
  const parsed = parseInt(id);
  return Number.isNaN(parsed) ? null : parsed;
}

export async function GET(request: NextRequest, context: RouteContext) {
  try {
    const id = await parseId(context);
    if (id === null) {
      return NextResponse.json({ success: false, error: 'Invalid ID' }, { status: 400 });
    }

    const record = await db.select().from(%(table)s).where(eq(%(table)s.id, id)).limit(1);
    if (record.length === 0) {
      return NextResponse.json({ success: false, error: '%(cls)s not found' }, { status: 404 });
    }
    return NextResponse.json({ success: true, data: record[0] });
  } catch (error) {
    console.error('Error fetching %(table)s:', error);
    return NextResponse.json({ success: false, error: 'Failed to fetch %(table)s' }, { status: 500 });
  }
}

export async function PUT(request: NextRequest, context: RouteContext) {
  try {
    const id = await parseId(context);
    if (id === null) {
      return NextResponse.json({ success: false, error: 'Invalid ID' }, { status: 400 });
    }

    const body = await request.json();
    if (!body || typeof body !== 'object') {
      return NextResponse.json({ success: false, error: 'Invalid request body' }, { status: 400 });
    }

    const { id: bodyId, created_at, ...updateData } = body;
%(touch_updated)s
    const updatedRecord = await db
      .update(%(table)s)
      .set(updateData)
      .where(eq(%(table)s.id, id))
      .returning();

    if (updatedRecord.length === 0) {
      return NextResponse.json({ success: false, error: '%(cls)s not found' }, { status: 404 });
    }
    return NextResponse.json({ success: true, data: updatedRecord[0] });
  } catch (error) {
    console.error('Error updating %(table)s:', error);
    return NextResponse.json({ success: false, error: 'Failed to update %(table)s' }, { status: 500 });
  }
}

export async function DELETE(request: NextRequest, context: RouteContext) {
  try {
    const id = await parseId(context);
    if (id === null) {
      return NextResponse.json({ success: false, error: 'Invalid ID' }, { status: 400 });
    }

    const deletedRecord = await db.delete(%(table)s).where(eq(%(table)s.id, id)).returning();
    if (deletedRecord.length === 0) {
      return NextResponse.json({ success: false, error: '%(cls)s not found' }, { status: 404 });
    }
    return NextResponse.json({
      success: true,
      message: '%(cls)s deleted successfully',
      data: deletedRecord[0]
    });
  } catch (error) {
    console.error('Error deleting %(table)s:', error);
    return NextResponse.json({ success: false, error: 'Failed to delete %(table)s' }, { status: 500 });
  }
}
"""


def _values(table: TableDefinition) -> dict:
    has_updated_at = table.has_field("updated_at")
    return {
        "table": table.table_name,
        "cls": table.class_name,
        "conn": DEFAULT_CONNECTION_STRING,
        "required": ", ".join(f"'{name}'" for name in table.required_fields()),
        "user_filter": USER_FILTER % {"table": table.table_name} if table.has_field("user_id") else "",
        "touch_updated": "    updateData.updated_at = new Date();\n" if has_updated_at else "",
    }


def render_collection_route(table: TableDefinition) -> str:
    """Generate src/app/api/<slug>/route.ts content."""
    values = _values(table)
    return ROUTE_HEADER % values + COLLECTION_HANDLERS % values


def render_id_route(table: TableDefinition) -> str:
    """Generate src/app/api/<slug>/[id]/route.ts content."""
    return ID_ROUTE % _values(table)


def endpoint_usage(table: TableDefinition) -> list:
    """Human-readable list of the routes generated for ``table``."""
    api = table.api_path
    lines = [
        f"GET    {api}  - Fetch all records",
        f"GET    {api}?id=123  - Fetch specific record",
        f"GET    {api}?limit=10&offset=0  - Paginated fetch",
    ]
    if table.has_field("user_id"):
        lines.append(f"GET    {api}?user_id=abc  - Filter by user")
    lines += [
        f"POST   {api}  - Create new record",
        f"PUT    {api}?id=123  - Update record",
        f"DELETE {api}?id=123  - Delete record",
        f"GET|PUT|DELETE {api}/123  - Record by id",
    ]
    return lines
