"""React data hook template and hooks index."""
from typing import Iterable

from app.planning.types import TableDefinition

HOOK_TEMPLATE = """"use client";

import { useState, useCallback } from "react";
import type { %(cls)s, New%(cls)s } from "@/db/schema";

interface %(cls)sState {
  records: %(cls)s[];
  loading: boolean;
  error: string | null;
  pagination: {
    limit: number;
    offset: number;
    total: number;
    hasMore: boolean;
  } | null;
}

interface %(cls)sActions {
  fetchAll: (params?: { limit?: number; offset?: number; user_id?: string }) => Promise<void>;
  fetchById: (id: number) => Promise<%(cls)s | null>;
  create: (data: New%(cls)s) => Promise<%(cls)s | null>;
  update: (id: number, data: Partial<New%(cls)s>) => Promise<%(cls)s | null>;
  delete: (id: number) => Promise<boolean>;
  clearError: () => void;
}

function errorMessage(error: unknown): string {
  return error instanceof Error ? error.message : "Unknown error";
}

export function %(hook)s() {
  const [state, setState] = useState<%(cls)sState>({
    records: [],
    loading: false,
    error: null,
    pagination: null,
  });

  const clearError = useCallback(() => {
    setState(prev => ({ ...prev, error: null }));
  }, []);

  const fetchAll = useCallback(async (params?: { limit?: number; offset?: number; user_id?: string }) => {
    setState(prev => ({ ...prev, loading: true, error: null }));
    try {
      const searchParams = new URLSearchParams();
      if (params?.limit) searchParams.set("limit", params.limit.toString());
      if (params?.offset) searchParams.set("offset", params.offset.toString());
      if (params?.user_id) searchParams.set("user_id", params.user_id);

      const response = await fetch(`%(api)s?${searchParams}`);
      const result = await response.json();
      if (!response.ok) {
        throw new Error(result.error || "Failed to fetch %(table)s");
      }

      setState(prev => ({
        ...prev,
        records: result.data,
        pagination: result.pagination,
        loading: false,
      }));
    } catch (error) {
      setState(prev => ({ ...prev, error: errorMessage(error), loading: false }));
    }
  }, []);

  const fetchById = useCallback(async (id: number): Promise<%(cls)s | null> => {
    setState(prev => ({ ...prev, loading: true, error: null }));
    try {
      const response = await fetch(`%(api)s/${id}`);
      const result = await response.json();
      if (!response.ok) {
        throw new Error(result.error || "Failed to fetch %(table)s");
      }
      setState(prev => ({ ...prev, loading: false }));
      return result.data;
    } catch (error) {
      setState(prev => ({ ...prev, error: errorMessage(error), loading: false }));
      return null;
    }
  }, []);

  const create = useCallback(async (data: New%(cls)s): Promise<%(cls)s | null> => {
    setState(prev => ({ ...prev, loading: true, error: null }));
    try {
      const response = await fetch("%(api)s", {
        method: "POST",
        headers: { "Content-Type": "application/json" },
        body: JSON.stringify(data),
      });
      const result = await response.json();
      if (!response.ok) {
        throw new Error(result.error || "Failed to create %(table)s");
      }
      setState(prev => ({
        ...prev,
        records: [result.data, ...prev.records],
        loading: false,
      }));
      return result.data;
    } catch (error) {
      setState(prev => ({ ...prev, error: errorMessage(error), loading: false }));
      return null;
    }
  }, []);

  const update = useCallback(async (id: number, data: Partial<New%(cls)s>): Promise<%(cls)s | null> => {
    setState(prev => ({ ...prev, loading: true, error: null }));
    try {
      const response = await fetch(`%(api)s/${id}`, {
        method: "PUT",
        headers: { "Content-Type": "application/json" },
        body: JSON.stringify(data),
      });
      const result = await response.json();
      if (!response.ok) {
        throw new Error(result.error || "Failed to update %(table)s");
      }
      setState(prev => ({
        ...prev,
        records: prev.records.map(record => (record.id === id ? result.data : record)),
        loading: false,
      }));
      return result.data;
    } catch (error) {
      setState(prev => ({ ...prev, error: errorMessage(error), loading: false }));
      return null;
    }
  }, []);

  const deleteRecord = useCallback(async (id: number): Promise<boolean> => {
    setState(prev => ({ ...prev, loading: true, error: null }));
    try {
      const response = await fetch(`%(api)s/${id}`, { method: "DELETE" });
      const result = await response.json();
      if (!response.ok) {
        throw new Error(result.error || "Failed to delete %(table)s");
      }
      setState(prev => ({
        ...prev,
        records: prev.records.filter(record => record.id !== id),
        loading: false,
      }));
      return true;
    } catch (error) {
      setState(prev => ({ ...prev, error: errorMessage(error), loading: false }));
      return false;
    }
  }, []);

  const actions: %(cls)sActions = {
    fetchAll,
    fetchById,
    create,
    update,
    delete: deleteRecord,
    clearError,
  };

  return {
    data: state,
    loading: state.loading,
    error: state.error,
    ...actions,
  };
}
"""


def hook_file_stem(table: TableDefinition) -> str:
    return f"use-{table.slug}"


def render_hook(table: TableDefinition) -> str:
    """Generate src/hooks/use-<slug>.ts content."""
    return HOOK_TEMPLATE % {
        "cls": table.class_name,
        "hook": table.hook_name,
        "api": table.api_path,
        "table": table.table_name,
    }


def render_hooks_index(stems: Iterable[str]) -> str:
    return "".join(f"export * from './{stem}';\n" for stem in stems)
