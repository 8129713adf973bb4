from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class UserProfile:
    """Akun pengguna aplikasi.

    Satu akun bisa memegang beberapa peran (mis. guru sekaligus musyrif);
    `active_role` adalah peran yang sedang dipakai di sesi.
    """

    user_id: int
    nama: str
    email: str
    password_hash: str
    roles: tuple[Role, ...] = field(default_factory=tuple)
    active_role: Optional[Role] = None
    is_active: bool = True

    def has_role(self, role: Role) -> bool:
        return role in self.roles

    @property
    def default_role(self) -> Optional[Role]:
        if self.active_role and self.active_role in self.roles:
            return self.active_role
        return self.roles[0] if self.roles else None
