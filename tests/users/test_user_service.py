from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

import pytest
from werkzeug.security import generate_password_hash

from src.pesantren_system.pesantren_system.core.enums import Role
from src.pesantren_system.pesantren_system.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ValidationError,
)
from src.pesantren_system.pesantren_system.users.model import UserProfile
from src.pesantren_system.pesantren_system.users.service import AuthService, UserService


class InMemoryUsers:
    def __init__(self, users: Sequence[UserProfile] = ()):
        self.by_id = {u.user_id: u for u in users}
        self._next_id = max(self.by_id, default=0) + 1

    def get_by_id(self, user_id: int) -> Optional[UserProfile]:
        return self.by_id.get(user_id)

    def get_by_email(self, email: str) -> Optional[UserProfile]:
        return next((u for u in self.by_id.values() if u.email == email), None)

    def create_user(self, *, nama: str, email: str, password_hash: str, roles: Sequence[Role]) -> int:
        user_id = self._next_id
        self._next_id += 1
        self.by_id[user_id] = UserProfile(user_id=user_id, nama=nama, email=email, password_hash=password_hash, roles=tuple(roles))
        return user_id

    def set_roles(self, user_id: int, *, roles: Sequence[Role]) -> bool:
        if user_id not in self.by_id:
            return False
        self.by_id[user_id] = replace(self.by_id[user_id], roles=tuple(roles))
        return True

    def set_active_role(self, user_id: int, *, role: Role) -> bool:
        self.by_id[user_id] = replace(self.by_id[user_id], active_role=role)
        return True

    def delete_by_id(self, user_id: int) -> bool:
        return self.by_id.pop(user_id, None) is not None

    def list_all(self):
        return list(self.by_id.values())

    def list_by_role(self, role: Role):
        return [u for u in self.by_id.values() if u.has_role(role)]


def _user(user_id: int, email: str, roles: tuple[Role, ...], password: str = "rahasia123", **kw) -> UserProfile:
    return UserProfile(
        user_id=user_id,
        nama=email.split("@")[0].title(),
        email=email,
        password_hash=generate_password_hash(password),
        roles=roles,
        **kw,
    )


def test_authenticate_uses_active_role_when_present():
    repo = InMemoryUsers([_user(1, "ustadz@pesantren.id", (Role.GURU, Role.MUSYRIF), active_role=Role.MUSYRIF)])

    s_user = AuthService(repo).authenticate(" Ustadz@Pesantren.id ", "rahasia123")

    assert s_user.role == Role.MUSYRIF
    assert s_user.roles == (Role.GURU, Role.MUSYRIF)


def test_authenticate_falls_back_to_first_role():
    repo = InMemoryUsers([_user(1, "wali@pesantren.id", (Role.WALI,))])
    assert AuthService(repo).authenticate("wali@pesantren.id", "rahasia123").role == Role.WALI


@pytest.mark.parametrize(
    "email, password",
    [("wali@pesantren.id", "salah"), ("tidak.ada@pesantren.id", "rahasia123"), ("nonaktif@pesantren.id", "rahasia123")],
)
def test_authenticate_rejects_bad_credentials(email, password):
    repo = InMemoryUsers(
        [_user(1, "wali@pesantren.id", (Role.WALI,)), _user(2, "nonaktif@pesantren.id", (Role.WALI,), is_active=False)]
    )
    with pytest.raises(AuthenticationError):
        AuthService(repo).authenticate(email, password)


def test_authenticate_rejects_account_without_role():
    repo = InMemoryUsers([_user(1, "baru@pesantren.id", ())])
    with pytest.raises(AuthenticationError):
        AuthService(repo).authenticate("baru@pesantren.id", "rahasia123")


def test_switch_role_only_to_owned_role():
    repo = InMemoryUsers([_user(1, "ustadz@pesantren.id", (Role.GURU, Role.MUSYRIF))])
    svc = AuthService(repo)

    assert svc.switch_role(user_id=1, role="musyrif") == Role.MUSYRIF
    assert repo.get_by_id(1).active_role == Role.MUSYRIF

    with pytest.raises(AuthorizationError):
        svc.switch_role(user_id=1, role="admin")
    with pytest.raises(AuthorizationError):
        svc.switch_role(user_id=1, role="kepala")
    with pytest.raises(AuthenticationError):
        svc.switch_role(user_id=9, role="guru")


def test_create_account_validation_and_duplicates():
    repo = InMemoryUsers()
    svc = UserService(repo)

    user_id = svc.create_account(nama="Bu Aisyah", email="Aisyah@Pesantren.id", password="123456", roles=["bendahara", "ota", "ota"])

    created = repo.get_by_id(user_id)
    assert created.email == "aisyah@pesantren.id"
    assert created.roles == (Role.BENDAHARA, Role.OTA)
    assert AuthService(repo).authenticate("aisyah@pesantren.id", "123456").user_id == user_id

    with pytest.raises(ValidationError):
        svc.create_account(nama="X", email="aisyah@pesantren.id", password="123456", roles=["wali"])
    with pytest.raises(ValidationError):
        svc.create_account(nama="X", email="x@pesantren.id", password="123", roles=["wali"])
    with pytest.raises(ValidationError):
        svc.create_account(nama="X", email="x@pesantren.id", password="123456", roles=[])
    with pytest.raises(ValidationError):
        svc.create_account(nama="X", email="x@pesantren.id", password="123456", roles=["kepala"])


def test_admin_only_role_changes_and_admin_cannot_be_deleted():
    repo = InMemoryUsers([_user(1, "admin@pesantren.id", (Role.ADMIN,)), _user(2, "guru@pesantren.id", (Role.GURU,))])
    svc = UserService(repo)

    with pytest.raises(AuthorizationError):
        svc.set_roles(current_role=Role.GURU, user_id=2, roles=["musyrif"])
    svc.set_roles(current_role=Role.ADMIN, user_id=2, roles=["guru", "musyrif"])
    assert repo.get_by_id(2).roles == (Role.GURU, Role.MUSYRIF)

    with pytest.raises(ValidationError):
        svc.delete_user(current_role=Role.ADMIN, user_id=1)
    svc.delete_user(current_role=Role.ADMIN, user_id=2)
    assert repo.get_by_id(2) is None
