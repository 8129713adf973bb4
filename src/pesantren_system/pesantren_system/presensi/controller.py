from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date

from flask import Flask, flash, redirect, render_template, request, url_for

from ..common.datetime_utils import parse_optional_date, resolve_period
from ..common.exporters import EXPORT_FORMATS, export_response
from ..common.validators import parse_optional_int
from ..container import Container
from ..core.enums import Role, StatusPresensi
from ..core.exceptions import ValidationError
from ..core.roles import AKADEMIK_FALLBACK
from ..users.guards import current_actor, roles_required
from .model import PresensiSheet
from .service import mark_all, parse_status

logger = logging.getLogger(__name__)

ROLES = (Role.ADMIN, Role.GURU)


def _apply_form(sheet: PresensiSheet) -> PresensiSheet:
    rows = []
    for r in sheet.rows:
        status = request.form.get(f"status_{r.santri_id}")
        rows.append(
            replace(
                r,
                status=parse_status(status) if status else r.status,
                keterangan=request.form.get(f"keterangan_{r.santri_id}", r.keterangan),
            )
        )
    return replace(sheet, rows=tuple(rows))


def register(app: Flask, container: Container) -> None:
    @app.route("/akademik/presensi", methods=["GET", "POST"], endpoint="presensi_harian")
    @roles_required(*ROLES, fallback=AKADEMIK_FALLBACK)
    def presensi_harian():
        source = request.form if request.method == "POST" else request.args
        kelas_id = parse_optional_int(source.get("kelas_id"))
        tanggal_s = source.get("tanggal") or date.today().isoformat()
        sheet = None

        try:
            tanggal = parse_optional_date(tanggal_s)
            if kelas_id:
                sheet = container.presensi_service.load_sheet(kelas_id=kelas_id, tanggal=tanggal)

            if request.method == "POST":
                if sheet is None:
                    raise ValidationError("Pilih kelas dan tanggal terlebih dahulu")
                sheet = _apply_form(sheet)
                action = request.form.get("action", "save")
                if action.startswith("mark_all:"):
                    sheet = replace(sheet, rows=mark_all(sheet.rows, parse_status(action.split(":", 1)[1])))
                else:
                    count = container.presensi_service.save(tanggal=sheet.tanggal, rows=sheet.rows, actor=current_actor())
                    flash(f"Presensi {count} santri berhasil disimpan", "success")
                    return redirect(url_for("presensi_harian", kelas_id=kelas_id, tanggal=tanggal_s))
        except ValidationError as e:
            flash(str(e), "warning")
        except ValueError:
            flash("Format tanggal tidak valid", "warning")
        except Exception:
            logger.exception("presensi harian failed")
            flash("Gagal memproses presensi", "danger")

        return render_template(
            "presensi/harian.html",
            sheet=sheet,
            kelas_list=container.kelas_service.list(),
            statuses=list(StatusPresensi),
            kelas_id=kelas_id,
            tanggal=tanggal_s,
            active_page="presensi",
        )

    def _rekap_args():
        year, month = resolve_period(request.args.get("tahun"), request.args.get("bulan"))
        kelas_id = parse_optional_int(request.args.get("kelas_id"))
        return year, month, kelas_id

    @app.route("/akademik/presensi/rekap", endpoint="presensi_rekap")
    @roles_required(*ROLES, fallback=AKADEMIK_FALLBACK)
    def presensi_rekap():
        year, month, kelas_id = _rekap_args()
        rekap = container.presensi_service.rekap_bulanan(year=year, month=month, kelas_id=kelas_id)
        return render_template(
            "presensi/rekap.html",
            rekap=rekap,
            kelas_list=container.kelas_service.list(),
            kelas_id=kelas_id,
            active_page="presensi_rekap",
        )

    @app.route("/akademik/presensi/rekap.<fmt>", endpoint="presensi_rekap_export")
    @roles_required(*ROLES, fallback=AKADEMIK_FALLBACK)
    def presensi_rekap_export(fmt: str):
        if fmt not in EXPORT_FORMATS:
            flash("Format export tidak dikenal", "warning")
            return redirect(url_for("presensi_rekap"))
        year, month, kelas_id = _rekap_args()
        try:
            rekap = container.presensi_service.rekap_bulanan(year=year, month=month, kelas_id=kelas_id)
            return export_response(fmt, **container.presensi_service.rekap_export(rekap))
        except Exception as e:
            logger.exception("export rekap presensi failed")
            flash(f"Gagal export: {e}", "danger")
            return redirect(url_for("presensi_rekap", tahun=year, bulan=month))
