"""Konfigurasi peran: label, deskripsi dan dashboard tujuan setelah login."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .enums import Role

DEFAULT_REDIRECT = "/"


@dataclass(frozen=True)
class RoleConfig:
    role: Role
    label: str
    description: str
    dashboard: str


ROLE_CONFIG: dict[Role, RoleConfig] = {
    Role.ADMIN: RoleConfig(Role.ADMIN, "Administrator", "Akses penuh ke seluruh modul", "/dashboard/admin"),
    Role.GURU: RoleConfig(Role.GURU, "Guru", "Presensi, jadwal dan jurnal mengajar", "/dashboard/akademik"),
    Role.BENDAHARA: RoleConfig(Role.BENDAHARA, "Bendahara", "Data santri dan keuangan", "/dashboard/bendahara"),
    Role.MUSYRIF: RoleConfig(Role.MUSYRIF, "Musyrif", "Pembinaan halaqoh santri", "/dashboard/musyrif"),
    Role.WALI: RoleConfig(Role.WALI, "Wali Santri", "Pantau perkembangan anak", "/wali"),
    Role.OTA: RoleConfig(Role.OTA, "Orang Tua Asuh", "Program donasi dan penyaluran", "/dashboard/ota"),
    Role.PENGURUS: RoleConfig(Role.PENGURUS, "Pengurus", "Pengumuman dan komunikasi", "/dashboard/pengurus"),
}


def parse_role(value: Optional[str]) -> Optional[Role]:
    if not value:
        return None
    try:
        return Role(value)
    except ValueError:
        return None


def get_role_config(role: Optional[str]) -> Optional[RoleConfig]:
    parsed = parse_role(role)
    return ROLE_CONFIG.get(parsed) if parsed else None


def dashboard_for(role: Optional[str]) -> str:
    cfg = get_role_config(role)
    return cfg.dashboard if cfg else DEFAULT_REDIRECT


# fallback tujuan bila peran tidak diizinkan, per kelompok route
AKADEMIK_FALLBACK = "/dashboard/admin"
OTA_FALLBACK = "/dashboard/ota"
PENGURUS_FALLBACK = "/dashboard/pengurus"
