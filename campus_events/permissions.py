# -*- coding: utf-8 -*-
"""
Roles and the capability checks every service operation goes through.
"""

from dataclasses import dataclass
from enum import Enum

from campus_events.exceptions import AuthorizationError


class Role(str, Enum):
    ADMIN = "admin"
    SOCIETY = "society"
    STUDENT = "student"


@dataclass(frozen=True)
class Caller:
    """The authenticated user on whose behalf an operation runs."""

    user_id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_society(self) -> bool:
        return self.role == Role.SOCIETY

    @property
    def is_student(self) -> bool:
        return self.role == Role.STUDENT


def require_role(caller: Caller, *roles: Role, message: str = None) -> None:
    if caller.role not in roles:
        raise AuthorizationError(message or f"Role '{caller.role.value}' is not authorized to access this route")


def can_manage_society_resource(caller: Caller, society_id: int) -> bool:
    """Admins manage everything; a society manages what it owns."""
    return caller.is_admin or (caller.is_society and caller.user_id == society_id)


def require_society_owner_or_admin(caller: Caller, society_id: int, message: str = None) -> None:
    if not can_manage_society_resource(caller, society_id):
        raise AuthorizationError(message or "Not authorized")


def require_self_or_admin(caller: Caller, user_id: int, message: str = None) -> None:
    if not (caller.is_admin or caller.user_id == user_id):
        raise AuthorizationError(message or "Not authorized")
