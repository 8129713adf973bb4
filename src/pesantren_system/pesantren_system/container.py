from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from .audit.mysql_audit_repository import MySQLAuditRepository, MySQLSuspiciousAccountRepository
from .audit.service import AuditService
from .core.constants import DEFAULT_TAHUN_AJARAN, LOW_BALANCE_THRESHOLD
from .database.connection import DBConfig, DatabaseConnection
from .guru.mysql_guru_repository import MySQLGuruRepository
from .guru.service import GuruService
from .halaqoh.mysql_halaqoh_repository import MySQLHalaqohRepository
from .halaqoh.service import HalaqohService
from .jadwal.mysql_jadwal_repository import MySQLJadwalRepository, MySQLMapelRepository
from .jadwal.service import JadwalService, MapelService
from .jurnal.mysql_jurnal_repository import MySQLJurnalRepository
from .jurnal.service import JurnalService
from .kalender.mysql_kalender_repository import MySQLKalenderRepository
from .kalender.service import KalenderService
from .komunikasi.mysql_komunikasi_repository import MySQLPengumumanRepository, MySQLPesanRepository
from .komunikasi.service import PengumumanService, PesanService
from .ota.donor_service import DonorService, KategoriService, LinkingService, PenerimaService
from .ota.ledger_service import LedgerService
from .ota.mysql_donor_repository import (
    MySQLDonorRepository,
    MySQLKategoriRepository,
    MySQLLinkRepository,
    MySQLPenerimaRepository,
)
from .ota.mysql_ledger_repository import MySQLPemasukanRepository, MySQLPengeluaranRepository, MySQLPenyaluranRepository
from .ota.report_service import LaporanService
from .presensi.mysql_presensi_repository import MySQLPresensiRepository
from .presensi.service import PresensiService
from .santri.mysql_santri_repository import MySQLKelasRepository, MySQLSantriRepository
from .santri.service import KelasService, SantriService
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    auth_service: AuthService
    user_service: UserService
    audit_service: AuditService

    santri_service: SantriService
    kelas_service: KelasService
    guru_service: GuruService
    halaqoh_service: HalaqohService
    presensi_service: PresensiService
    jadwal_service: JadwalService
    mapel_service: MapelService
    jurnal_service: JurnalService
    kalender_service: KalenderService

    donor_service: DonorService
    kategori_service: KategoriService
    linking_service: LinkingService
    penerima_service: PenerimaService
    ledger_service: LedgerService
    laporan_service: LaporanService

    pesan_service: PesanService
    pengumuman_service: PengumumanService


def build_container(
    *,
    db_config: dict,
    default_tahun_ajaran: str = DEFAULT_TAHUN_AJARAN,
    low_balance_threshold: int = LOW_BALANCE_THRESHOLD,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    users_repo = MySQLUserRepository(conn)
    santri_repo = MySQLSantriRepository(conn)
    jadwal_repo = MySQLJadwalRepository(conn)

    donors_repo = MySQLDonorRepository(conn)
    links_repo = MySQLLinkRepository(conn)
    penerima_repo = MySQLPenerimaRepository(conn)
    pemasukan_repo = MySQLPemasukanRepository(conn)
    pengeluaran_repo = MySQLPengeluaranRepository(conn)
    penyaluran_repo = MySQLPenyaluranRepository(conn)

    audit_service = AuditService(MySQLAuditRepository(conn), MySQLSuspiciousAccountRepository(conn))

    return Container(
        conn=conn,
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo),
        audit_service=audit_service,
        santri_service=SantriService(santri_repo, audit_service),
        kelas_service=KelasService(MySQLKelasRepository(conn)),
        guru_service=GuruService(MySQLGuruRepository(conn), audit_service),
        halaqoh_service=HalaqohService(MySQLHalaqohRepository(conn), santri_repo, audit_service),
        presensi_service=PresensiService(MySQLPresensiRepository(conn), santri_repo, audit_service),
        jadwal_service=JadwalService(jadwal_repo, default_tahun_ajaran),
        mapel_service=MapelService(MySQLMapelRepository(conn)),
        jurnal_service=JurnalService(MySQLJurnalRepository(conn), jadwal_repo, santri_repo, audit_service),
        kalender_service=KalenderService(MySQLKalenderRepository(conn)),
        donor_service=DonorService(donors_repo, links_repo, pemasukan_repo, pengeluaran_repo, users_repo, audit_service),
        kategori_service=KategoriService(MySQLKategoriRepository(conn)),
        linking_service=LinkingService(links_repo, santri_repo, donors_repo, audit_service),
        penerima_service=PenerimaService(penerima_repo, santri_repo),
        ledger_service=LedgerService(
            donors_repo, pemasukan_repo, pengeluaran_repo, penyaluran_repo, santri_repo, audit_service
        ),
        laporan_service=LaporanService(
            donors_repo,
            links_repo,
            pemasukan_repo,
            pengeluaran_repo,
            penyaluran_repo,
            penerima_repo,
            low_balance_threshold=Decimal(low_balance_threshold),
        ),
        pesan_service=PesanService(MySQLPesanRepository(conn), santri_repo),
        pengumuman_service=PengumumanService(MySQLPengumumanRepository(conn), audit_service),
    )
