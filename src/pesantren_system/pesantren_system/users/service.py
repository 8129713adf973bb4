from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_min_length, require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from .model import UserProfile
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    user_id: int
    nama: str
    email: str
    role: Role
    roles: tuple[Role, ...]


class AuthService:
    """Use case: login dan pergantian peran aktif."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, email: str, password: str) -> SessionUser:
        user = self._users.get_by_email((email or "").strip().lower())
        if not user or not user.is_active:
            raise AuthenticationError("Email atau password salah")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # placeholder hashes seeded by hand
            ok = False
        if not ok:
            raise AuthenticationError("Email atau password salah")

        role = user.default_role
        if role is None:
            raise AuthenticationError("Akun belum memiliki peran, hubungi admin")

        logger.info("login user_id=%s role=%s", user.user_id, role.value)
        return SessionUser(user_id=user.user_id, nama=user.nama, email=user.email, role=role, roles=user.roles)

    def switch_role(self, *, user_id: int, role: str) -> Role:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise AuthenticationError("Sesi tidak valid, silakan login ulang")
        try:
            target = Role(role)
        except ValueError:
            raise AuthorizationError("Peran tidak dikenal")
        if not user.has_role(target):
            raise AuthorizationError("Anda tidak memiliki peran tersebut")
        self._users.set_active_role(user.user_id, role=target)
        return target


def _parse_roles(values: Iterable[str]) -> list[Role]:
    roles: list[Role] = []
    for v in values:
        try:
            role = Role(v)
        except ValueError:
            raise ValidationError(f"Peran tidak valid: {v}")
        if role not in roles:
            roles.append(role)
    return roles


class UserService:
    """Use case: kelola akun (admin)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def create_account(self, *, nama: str, email: str, password: str, roles: Sequence[str]) -> int:
        nama = require_non_empty(nama, "Nama")
        email = require_non_empty(email, "Email").lower()
        require_min_length(password, "Password", 6)
        parsed = _parse_roles(roles)
        if not parsed:
            raise ValidationError("Pilih minimal satu peran")

        if self._users.get_by_email(email):
            raise ValidationError("Email sudah terdaftar")

        return self._users.create_user(
            nama=nama,
            email=email,
            password_hash=generate_password_hash(password),
            roles=parsed,
        )

    def list_users(self) -> Sequence[UserProfile]:
        return self._users.list_all()

    def list_by_role(self, role: Role) -> Sequence[UserProfile]:
        return self._users.list_by_role(role)

    def set_roles(self, *, current_role: Role, user_id: int, roles: Sequence[str]) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Anda tidak memiliki akses")
        parsed = _parse_roles(roles)
        if not parsed:
            raise ValidationError("Pilih minimal satu peran")
        if not self._users.set_roles(int(user_id), roles=parsed):
            raise ValidationError("Pengguna tidak ditemukan")

    def delete_user(self, *, current_role: Role, user_id: int) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Anda tidak memiliki akses")

        user = self._users.get_by_id(int(user_id))
        if not user:
            raise ValidationError("Pengguna tidak ditemukan")
        if user.has_role(Role.ADMIN):
            raise ValidationError("Akun admin tidak dapat dihapus")

        if not self._users.delete_by_id(user.user_id):
            raise ValidationError("Gagal menghapus pengguna")
