"""
Data store adapter: the hosted Supabase project, spoken to over its PostgREST API.

Two collections:
  incidents  -- columns are snake_case on the wire, records are camelCase here
  profiles   -- staff profiles, stored and returned as-is

Every call is blocking; the async layers run them with asyncio.to_thread.
Any transport error or non-2xx answer becomes a TransientStoreError, except
ping_reachable() which only ever answers True/False.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Optional

import requests as http_requests

from buddyguard.core.errors import TransientStoreError

logger = logging.getLogger(__name__)

SUPABASE_URL: str = os.getenv("SUPABASE_URL", "").strip().rstrip("/")
SUPABASE_ANON_KEY: str = os.getenv("SUPABASE_ANON_KEY", "").strip()
STORE_TIMEOUT: float = float(os.getenv("STORE_TIMEOUT", "10"))

INCIDENTS = "incidents"
PROFILES = "profiles"

# wire column -> record field; anything not listed passes through unchanged
INCIDENT_FIELD_MAP: dict[str, str] = {
    "student_name": "studentName",
    "grade_section": "gradeSection",
    "incident_type": "incidentType",
    "reported_by": "reportedBy",
    "admin_notes": "adminNotes",
    "teacher_remarks": "teacherRemarks",
    "guidance_notes": "guidanceNotes",
}
_RECORD_TO_WIRE: dict[str, str] = {v: k for k, v in INCIDENT_FIELD_MAP.items()}


def incident_from_wire(row: dict[str, Any]) -> dict[str, Any]:
    return {INCIDENT_FIELD_MAP.get(key, key): value for key, value in row.items()}


def incident_to_wire(record: dict[str, Any]) -> dict[str, Any]:
    return {_RECORD_TO_WIRE.get(key, key): value for key, value in record.items()}


class DataStore:
    """Thin CRUD client over the incidents and profiles tables."""

    def __init__(
        self,
        url: str = SUPABASE_URL,
        api_key: str = SUPABASE_ANON_KEY,
        timeout: float = STORE_TIMEOUT,
        session: Optional[http_requests.Session] = None,
    ):
        self.url = url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._http = session or http_requests.Session()

    @property
    def configured(self) -> bool:
        return bool(self.url and self.api_key)

    # ── incidents ──

    def query_incidents(self, order_by_date_desc: bool = True) -> list[dict[str, Any]]:
        params = {"select": "*"}
        if order_by_date_desc:
            params["order"] = "date.desc"
        rows = self._request("GET", INCIDENTS, params=params)
        return [incident_from_wire(row) for row in rows]

    def insert_incident(self, record: dict[str, Any]) -> dict[str, Any]:
        """Insert one incident record (camelCase) and return the stored record, id included."""
        rows = self._request(
            "POST",
            INCIDENTS,
            json=[incident_to_wire(record)],
            headers={"Prefer": "return=representation"},
        )
        if not rows:
            raise TransientStoreError("Insert into incidents returned no row")
        return incident_from_wire(rows[0])

    def update_incident_fields(self, incident_id: str, fields: dict[str, Any]) -> Optional[dict[str, Any]]:
        """Patch only the given fields. Returns the updated record, or None if no row matched."""
        rows = self._request(
            "PATCH",
            INCIDENTS,
            params={"id": f"eq.{incident_id}"},
            json=incident_to_wire(fields),
            headers={"Prefer": "return=representation"},
        )
        return incident_from_wire(rows[0]) if rows else None

    # ── profiles ──

    def query_profiles(self, order_by_name_asc: bool = True) -> list[dict[str, Any]]:
        params = {"select": "*"}
        if order_by_name_asc:
            params["order"] = "name.asc"
        return self._request("GET", PROFILES, params=params)

    def insert_profile(self, record: dict[str, Any]) -> dict[str, Any]:
        rows = self._request(
            "POST",
            PROFILES,
            json=[record],
            headers={"Prefer": "return=representation"},
        )
        if not rows:
            raise TransientStoreError("Insert into profiles returned no row")
        return rows[0]

    def update_profile_active(self, profile_id: str, active: bool) -> Optional[dict[str, Any]]:
        rows = self._request(
            "PATCH",
            PROFILES,
            params={"id": f"eq.{profile_id}"},
            json={"active": active},
            headers={"Prefer": "return=representation"},
        )
        return rows[0] if rows else None

    def delete_profile(self, profile_id: str) -> bool:
        """Hard delete. Returns False when no row matched."""
        rows = self._request(
            "DELETE",
            PROFILES,
            params={"id": f"eq.{profile_id}"},
            headers={"Prefer": "return=representation"},
        )
        return bool(rows)

    # ── liveness ──

    def ping_reachable(self) -> bool:
        if not self.configured:
            return False
        try:
            r = self._http.get(
                f"{self.url}/rest/v1/{INCIDENTS}",
                params={"select": "id", "limit": "1"},
                headers=self._headers(),
                timeout=self.timeout,
            )
            return r.status_code == 200
        except http_requests.RequestException as e:
            logger.debug("Store ping failed: %s", e)
            return False

    # ── internals ──

    def _headers(self, extra: Optional[dict[str, str]] = None) -> dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if extra:
            headers.update(extra)
        return headers

    def _request(
        self,
        method: str,
        table: str,
        params: Optional[dict[str, str]] = None,
        json: Any = None,
        headers: Optional[dict[str, str]] = None,
    ) -> list[dict[str, Any]]:
        if not self.configured:
            raise TransientStoreError("Data store is not configured (set SUPABASE_URL and SUPABASE_ANON_KEY)")
        try:
            r = self._http.request(
                method,
                f"{self.url}/rest/v1/{table}",
                params=params,
                json=json,
                headers=self._headers(headers),
                timeout=self.timeout,
            )
        except http_requests.RequestException as e:
            raise TransientStoreError(f"{method} {table} failed: {e}") from e
        if r.status_code >= 400:
            raise TransientStoreError(f"{method} {table} returned HTTP {r.status_code}: {r.text[:200]}")
        if not r.content:
            return []
        try:
            data = r.json()
        except ValueError as e:
            raise TransientStoreError(f"{method} {table} returned a non-JSON body") from e
        return data if isinstance(data, list) else [data]
