from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import UserProfile


class UserRepository(Protocol):
    """Repository interface for user_profiles.

    Services depend on this protocol; the MySQL implementation lives in
    mysql_user_repository.py and tests use in-memory fakes.
    """

    def get_by_id(self, user_id: int) -> Optional[UserProfile]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[UserProfile]:
        raise NotImplementedError

    def create_user(self, *, nama: str, email: str, password_hash: str, roles: Sequence[Role]) -> int:
        raise NotImplementedError

    def set_roles(self, user_id: int, *, roles: Sequence[Role]) -> bool:
        raise NotImplementedError

    def set_active_role(self, user_id: int, *, role: Role) -> bool:
        raise NotImplementedError

    def delete_by_id(self, user_id: int) -> bool:
        raise NotImplementedError

    def list_all(self) -> Sequence[UserProfile]:
        raise NotImplementedError

    def list_by_role(self, role: Role) -> Sequence[UserProfile]:
        raise NotImplementedError
