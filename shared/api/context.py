"""Explicit per-request caller context.

Built once, right after DRF has authenticated the request, and handed to
service functions instead of letting them reach for ``request.user``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class RequestContext:
    user_id: int
    role: str

    ADMIN_ROLE = "admin"

    @property
    def is_admin(self) -> bool:
        return self.role == self.ADMIN_ROLE

    def can_access(self, owner_id: Any) -> bool:
        """Admins see everything, other callers only what they own."""
        return self.is_admin or owner_id == self.user_id

    @classmethod
    def from_user(cls, user) -> "RequestContext | None":
        if user is None or not getattr(user, "is_authenticated", False):
            return None
        role = cls.ADMIN_ROLE if getattr(user, "is_superuser", False) else getattr(user, "role", "")
        return cls(user_id=user.pk, role=role)
