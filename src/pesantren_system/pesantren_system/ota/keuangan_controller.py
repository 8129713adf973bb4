from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from flask import Flask, flash, redirect, render_template, request, url_for

from ..common.exporters import EXPORT_FORMATS, export_response
from ..common.validators import parse_optional_int
from ..container import Container
from ..core.enums import MetodePembayaran, Role
from ..core.exceptions import NotFoundError, ValidationError
from ..core.roles import OTA_FALLBACK
from ..users.guards import current_actor, roles_required
from . import ledger
from .report_service import (
    laporan_export,
    laporan_penyaluran_export,
    pemasukan_export,
    pengeluaran_export,
    penyaluran_export,
)

logger = logging.getLogger(__name__)

ROLES = (Role.ADMIN, Role.OTA)


def _period_args(*, default_all: bool) -> tuple[int, Optional[int]]:
    """(tahun, bulan) dari query string; bulan None berarti 'all'."""
    today = date.today()
    year = parse_optional_int(request.args.get("tahun")) or today.year
    raw = request.args.get("bulan")
    if raw is None:
        return year, None if default_all else today.month
    month = parse_optional_int(raw)
    if month is None or not 1 <= month <= 12:
        return year, None
    return year, month


def _period_query(year: int, month: Optional[int]) -> dict:
    return {"tahun": year, "bulan": month if month else "all"}


def _edit_row(getter):
    edit_id = parse_optional_int(request.args.get("edit"))
    if not edit_id:
        return None
    try:
        return getter(edit_id)
    except NotFoundError as e:
        flash(str(e), "warning")
        return None


def register(app: Flask, container: Container) -> None:
    ledger_service = container.ledger_service
    laporan_service = container.laporan_service

    def _export(fmt: str, build, back: str, **back_args):
        if fmt not in EXPORT_FORMATS:
            flash("Format export tidak dikenal", "warning")
            return redirect(url_for(back, **back_args))
        try:
            return export_response(fmt, **build())
        except Exception as e:
            logger.exception("export %s failed", back)
            flash(f"Gagal export: {e}", "danger")
            return redirect(url_for(back, **back_args))

    @app.route("/ota/pemasukan", methods=["GET", "POST"], endpoint="ota_pemasukan")
    @roles_required(*ROLES, fallback=OTA_FALLBACK)
    def ota_pemasukan():
        year, month = _period_args(default_all=False)
        search = request.args.get("q", "")

        if request.method == "POST":
            try:
                if request.form.get("action") == "delete":
                    ledger_service.delete_pemasukan(int(request.form.get("pemasukan_id", 0)), actor=current_actor())
                    flash("Data pemasukan dihapus", "success")
                else:
                    pemasukan_id = parse_optional_int(request.form.get("pemasukan_id"))
                    saved_id = ledger_service.save_pemasukan(
                        pemasukan_id=pemasukan_id,
                        ota_id=parse_optional_int(request.form.get("ota_id")),
                        tanggal=request.form.get("tanggal"),
                        jumlah=request.form.get("jumlah"),
                        metode=request.form.get("metode"),
                        keterangan=request.form.get("keterangan"),
                        actor=current_actor(),
                    )
                    flash("Data pemasukan disimpan", "success")
                    if not pemasukan_id:
                        link = ledger_service.confirmation_link(saved_id)
                        if link:
                            flash(link, "whatsapp")
            except (ValidationError, NotFoundError) as e:
                flash(str(e), "warning")
            except Exception as e:
                logger.exception("save pemasukan failed")
                flash(f"Gagal menyimpan: {e}", "danger")
            return redirect(url_for("ota_pemasukan", **_period_query(year, month)))

        rows = ledger_service.list_pemasukan(year=year, month=month, search=search)
        return render_template(
            "ota/pemasukan.html",
            rows=rows,
            total=ledger.total(rows),
            editing=_edit_row(ledger_service.get_pemasukan),
            donors=container.donor_service.list(active_only=True),
            metode_list=list(MetodePembayaran),
            year=year,
            month=month,
            q=search,
            today=date.today(),
            active_page="ota_pemasukan",
        )

    @app.route("/ota/pemasukan.<fmt>", endpoint="ota_pemasukan_export")
    @roles_required(*ROLES, fallback=OTA_FALLBACK)
    def ota_pemasukan_export(fmt: str):
        year, month = _period_args(default_all=False)
        search = request.args.get("q", "")
        return _export(
            fmt,
            lambda: pemasukan_export(ledger_service.list_pemasukan(year=year, month=month, search=search), year=year, month=month),
            "ota_pemasukan",
            **_period_query(year, month),
        )

    @app.route("/ota/pengeluaran", methods=["GET", "POST"], endpoint="ota_pengeluaran")
    @roles_required(*ROLES, fallback=OTA_FALLBACK)
    def ota_pengeluaran():
        year, month = _period_args(default_all=False)
        search = request.args.get("q", "")

        if request.method == "POST":
            try:
                if request.form.get("action") == "delete":
                    ledger_service.delete_pengeluaran(int(request.form.get("pengeluaran_id", 0)), actor=current_actor())
                    flash("Data pengeluaran dihapus", "success")
                else:
                    ledger_service.save_pengeluaran(
                        pengeluaran_id=parse_optional_int(request.form.get("pengeluaran_id")),
                        tanggal=request.form.get("tanggal"),
                        keperluan=request.form.get("keperluan"),
                        jumlah=request.form.get("jumlah"),
                        keterangan=request.form.get("keterangan"),
                        ota_id=parse_optional_int(request.form.get("ota_id")),
                        actor=current_actor(),
                    )
                    flash("Data pengeluaran disimpan", "success")
            except (ValidationError, NotFoundError) as e:
                flash(str(e), "warning")
            except Exception as e:
                logger.exception("save pengeluaran failed")
                flash(f"Gagal menyimpan: {e}", "danger")
            return redirect(url_for("ota_pengeluaran", **_period_query(year, month)))

        rows = ledger_service.list_pengeluaran(year=year, month=month, search=search)
        saldo = ledger_service.saldo()
        return render_template(
            "ota/pengeluaran.html",
            rows=rows,
            total=ledger.total(rows),
            saldo=saldo,
            low_balance=ledger.is_low_balance(saldo, laporan_service.low_balance_threshold),
            editing=_edit_row(ledger_service.get_pengeluaran),
            donors=container.donor_service.list(active_only=True),
            year=year,
            month=month,
            q=search,
            today=date.today(),
            active_page="ota_pengeluaran",
        )

    @app.route("/ota/pengeluaran.<fmt>", endpoint="ota_pengeluaran_export")
    @roles_required(*ROLES, fallback=OTA_FALLBACK)
    def ota_pengeluaran_export(fmt: str):
        year, month = _period_args(default_all=False)
        search = request.args.get("q", "")
        return _export(
            fmt,
            lambda: pengeluaran_export(
                ledger_service.list_pengeluaran(year=year, month=month, search=search), year=year, month=month
            ),
            "ota_pengeluaran",
            **_period_query(year, month),
        )

    @app.route("/ota/penyaluran", methods=["GET", "POST"], endpoint="ota_penyaluran")
    @roles_required(*ROLES, fallback=OTA_FALLBACK)
    def ota_penyaluran():
        year, month = _period_args(default_all=True)

        if request.method == "POST":
            try:
                if request.form.get("action") == "delete":
                    ledger_service.delete_penyaluran(int(request.form.get("penyaluran_id", 0)), actor=current_actor())
                    flash("Data penyaluran dihapus", "success")
                else:
                    ledger_service.save_penyaluran(
                        penyaluran_id=parse_optional_int(request.form.get("penyaluran_id")),
                        santri_id=parse_optional_int(request.form.get("santri_id")),
                        tanggal=request.form.get("tanggal"),
                        nominal=request.form.get("nominal"),
                        keterangan=request.form.get("keterangan"),
                        actor=current_actor(),
                    )
                    flash("Data penyaluran disimpan", "success")
            except (ValidationError, NotFoundError) as e:
                flash(str(e), "warning")
            except Exception as e:
                logger.exception("save penyaluran failed")
                flash(f"Gagal menyimpan: {e}", "danger")
            return redirect(url_for("ota_penyaluran", **_period_query(year, month)))

        rows = ledger_service.list_penyaluran(year=year, month=month)
        return render_template(
            "ota/penyaluran.html",
            rows=rows,
            filtered_total=ledger.total(rows, "nominal"),
            saldo_tersedia=ledger_service.saldo_tersedia(),
            editing=_edit_row(ledger_service.get_penyaluran),
            penerima=container.penerima_service.list_active(),
            year=year,
            month=month,
            today=date.today(),
            active_page="ota_penyaluran",
        )

    @app.route("/ota/penyaluran.<fmt>", endpoint="ota_penyaluran_export")
    @roles_required(*ROLES, fallback=OTA_FALLBACK)
    def ota_penyaluran_export(fmt: str):
        year, month = _period_args(default_all=True)
        return _export(
            fmt,
            lambda: penyaluran_export(ledger_service.list_penyaluran(year=year, month=month), year=year, month=month),
            "ota_penyaluran",
            **_period_query(year, month),
        )

    @app.route("/ota/laporan", endpoint="ota_laporan")
    @roles_required(*ROLES, fallback=OTA_FALLBACK)
    def ota_laporan():
        year, month = _period_args(default_all=True)
        ota_id = parse_optional_int(request.args.get("ota_id"))
        return render_template(
            "ota/laporan.html",
            laporan=laporan_service.laporan(year=year, month=month, ota_id=ota_id),
            donors=container.donor_service.list(),
            active_page="ota_laporan",
        )

    @app.route("/ota/laporan.<fmt>", endpoint="ota_laporan_export")
    @roles_required(*ROLES, fallback=OTA_FALLBACK)
    def ota_laporan_export(fmt: str):
        year, month = _period_args(default_all=True)
        ota_id = parse_optional_int(request.args.get("ota_id"))
        return _export(
            fmt,
            lambda: laporan_export(laporan_service.laporan(year=year, month=month, ota_id=ota_id)),
            "ota_laporan",
            **_period_query(year, month),
        )

    @app.route("/ota/laporan-penyaluran", endpoint="ota_laporan_penyaluran")
    @roles_required(*ROLES, fallback=OTA_FALLBACK)
    def ota_laporan_penyaluran():
        year, month = _period_args(default_all=True)
        return render_template(
            "ota/laporan_penyaluran.html",
            laporan=laporan_service.laporan_penyaluran(year=year, month=month),
            active_page="ota_laporan_penyaluran",
        )

    @app.route("/ota/laporan-penyaluran.<fmt>", endpoint="ota_laporan_penyaluran_export")
    @roles_required(*ROLES, fallback=OTA_FALLBACK)
    def ota_laporan_penyaluran_export(fmt: str):
        year, month = _period_args(default_all=True)
        return _export(
            fmt,
            lambda: laporan_penyaluran_export(laporan_service.laporan_penyaluran(year=year, month=month)),
            "ota_laporan_penyaluran",
            **_period_query(year, month),
        )

    @app.route("/dashboard/ota", endpoint="dashboard_ota")
    @roles_required(*ROLES, fallback=OTA_FALLBACK)
    def dashboard_ota():
        return render_template(
            "ota/dashboard.html",
            data=laporan_service.dashboard(),
            pengumuman=container.pengumuman_service.list_visible(limit=3),
            active_page="dashboard",
        )
