# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database operations.
# It implements the singleton pattern to reuse a single client connection
# and provides specialized methods for the lookups every service repeats:
# - Judges by id or email (admin checks, scan validation)
# - Sauces and suppliers by id or email
# - Row counts (bottle scans, box assignments, active judges)
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   judge = SupabaseClient.fetch_judge_by_email("judge@example.com")
# =============================================================================

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from supabase import create_client, Client

from app.config import settings

# Set up logging for this module
logger = logging.getLogger(__name__)

# Postgres error code for unique constraint violations
UNIQUE_VIOLATION = "23505"


class SupabaseClientError(Exception):
    """
    Error during Supabase operations.

    Provides actionable error messages: what failed, and how to fix it.
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


def is_unique_violation(error: Exception) -> bool:
    """Return True when a PostgREST error reports a unique constraint violation."""
    return getattr(error, "code", None) == UNIQUE_VIOLATION or UNIQUE_VIOLATION in str(error)


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation.

    Example:
        judge = SupabaseClient.fetch_judge_by_email(user.email)
        if judge and judge["type"] == "admin":
            ...
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        Authorization is enforced by the API layer instead.

        Returns:
            Client: Supabase client instance

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    @classmethod
    def _normalize_uuid(cls, uuid_value: str | UUID) -> str:
        """Convert UUID to string for queries."""
        return str(uuid_value) if isinstance(uuid_value, UUID) else uuid_value

    @classmethod
    def _fetch_one(
        cls,
        table: str,
        column: str,
        value: Any,
        columns: str = "*",
    ) -> dict[str, Any] | None:
        """Fetch the first row where column == value, or None."""
        client = cls.get_client()

        try:
            response = (
                client.table(table)
                .select(columns)
                .eq(column, value)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch from {table}: {e}",
                code="FETCH_FAILED",
                details={"table": table, column: value},
            )

        rows = response.data or []
        return rows[0] if rows else None

    # -------------------------------------------------------------------------
    # Judges
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_judge(cls, judge_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch a judge by ID.

        Args:
            judge_id: The judge UUID

        Returns:
            Judge dict, or None if not found
        """
        return cls._fetch_one("judges", "id", cls._normalize_uuid(judge_id))

    @classmethod
    def fetch_judge_by_email(cls, email: str) -> dict[str, Any] | None:
        """
        Fetch a judge by email.

        Emails are stored lowercased, so the lookup value is normalized too.

        Args:
            email: Judge email address

        Returns:
            Judge dict, or None if not found
        """
        return cls._fetch_one("judges", "email", email.strip().lower())

    # -------------------------------------------------------------------------
    # Suppliers and Sauces
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_supplier(cls, supplier_id: str | UUID) -> dict[str, Any] | None:
        """Fetch a supplier by ID."""
        return cls._fetch_one("suppliers", "id", cls._normalize_uuid(supplier_id))

    @classmethod
    def fetch_supplier_by_email(cls, email: str) -> dict[str, Any] | None:
        """Fetch a supplier by email."""
        return cls._fetch_one("suppliers", "email", email.strip().lower())

    @classmethod
    def fetch_sauce(cls, sauce_id: str | UUID) -> dict[str, Any] | None:
        """Fetch a sauce by ID."""
        return cls._fetch_one("sauces", "id", cls._normalize_uuid(sauce_id))

    @classmethod
    def fetch_payment(cls, payment_id: str | UUID) -> dict[str, Any] | None:
        """Fetch a supplier payment quote by ID."""
        return cls._fetch_one("supplier_payments", "id", cls._normalize_uuid(payment_id))

    @classmethod
    def fetch_by_ids(
        cls,
        table: str,
        ids: list[str],
        columns: str = "*",
    ) -> dict[str, dict[str, Any]]:
        """
        Fetch many rows by ID and index them.

        Used in place of PostgREST embedded selects so that joins stay
        explicit in Python.

        Args:
            table: Table name
            ids: Row IDs to fetch (duplicates are ignored)
            columns: Columns to select (must include "id")

        Returns:
            Dict mapping id -> row
        """
        unique_ids = sorted({str(i) for i in ids if i})
        if not unique_ids:
            return {}

        client = cls.get_client()

        try:
            response = (
                client.table(table)
                .select(columns)
                .in_("id", unique_ids)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch from {table}: {e}",
                code="FETCH_FAILED",
                details={"table": table, "count": len(unique_ids)},
            )

        return {str(row["id"]): row for row in response.data or []}

    # -------------------------------------------------------------------------
    # Counts
    # -------------------------------------------------------------------------

    @classmethod
    def count_rows(cls, table: str, **filters: Any) -> int:
        """
        Count rows in a table matching equality filters.

        Args:
            table: Table name
            **filters: column=value equality filters

        Returns:
            Exact row count

        Example:
            scans = SupabaseClient.count_rows("bottle_scans", sauce_id=sauce_id)
        """
        client = cls.get_client()

        try:
            query = client.table(table).select("id", count="exact")
            for column, value in filters.items():
                query = query.eq(column, value)
            response = query.execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to count {table}: {e}",
                code="COUNT_FAILED",
                details={"table": table, **filters},
            )

        return response.count or 0
