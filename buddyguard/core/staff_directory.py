"""Staff profile management. Admin only."""

from __future__ import annotations

import asyncio
import logging

from buddyguard.core import access_policy
from buddyguard.core.errors import (
    Forbidden,
    ProfileNotFound,
    TransientStoreError,
    ValidationError,
)
from buddyguard.core.fallback import sample_staff
from buddyguard.schemas.incident import STAFF_ROLES, Role, StaffProfile
from buddyguard.services.data_store import DataStore

logger = logging.getLogger(__name__)


class StaffDirectory:

    def __init__(self, store: DataStore):
        self._store = store

    async def list(self, acting_role: Role) -> tuple[list[StaffProfile], bool]:
        """Profiles ordered by name, and whether they came from the fallback set."""
        _require_admin(acting_role)
        try:
            rows = await asyncio.to_thread(self._store.query_profiles, True)
        except TransientStoreError as e:
            logger.warning("Profile read failed, serving fallback staff list: %s", e)
            return sample_staff(), True
        return [StaffProfile.model_validate(row) for row in rows], False

    async def create(self, acting_role: Role, name: str, role: Role) -> StaffProfile:
        _require_admin(acting_role)
        if not name or not name.strip():
            raise ValidationError(["name"])
        if role not in STAFF_ROLES:
            # Anonymous is a portal choice, never a stored profile
            raise ValidationError(["role"])
        row = await asyncio.to_thread(
            self._store.insert_profile,
            {"name": name.strip(), "role": role.value, "active": True},
        )
        profile = StaffProfile.model_validate(row)
        logger.info("Staff profile %s created (%s)", profile.id, profile.role.value)
        return profile

    async def set_active(self, acting_role: Role, profile_id: str, active: bool) -> StaffProfile:
        _require_admin(acting_role)
        row = await asyncio.to_thread(self._store.update_profile_active, profile_id, active)
        if row is None:
            raise ProfileNotFound(profile_id)
        return StaffProfile.model_validate(row)

    async def delete(self, acting_role: Role, profile_id: str) -> None:
        """Permanent removal; deactivate instead when the account may come back."""
        _require_admin(acting_role)
        deleted = await asyncio.to_thread(self._store.delete_profile, profile_id)
        if not deleted:
            raise ProfileNotFound(profile_id)
        logger.info("Staff profile %s deleted", profile_id)


def _require_admin(role: Role) -> None:
    if not access_policy.can_manage_staff(role):
        raise Forbidden(f"{role.value} may not manage staff")
