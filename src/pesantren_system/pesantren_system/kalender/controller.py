from __future__ import annotations

import logging
from datetime import date

from flask import Flask, flash, redirect, render_template, request, url_for

from ..common.datetime_utils import resolve_period
from ..common.validators import parse_optional_int
from ..container import Container
from ..core.enums import JenisAgenda, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..core.roles import AKADEMIK_FALLBACK
from ..users.guards import current_actor, current_role, roles_required
from .service import EDITOR_ROLES, month_grid

logger = logging.getLogger(__name__)

ROLES = (Role.ADMIN, Role.GURU, Role.MUSYRIF)


def register(app: Flask, container: Container) -> None:
    @app.route("/akademik/kalender", methods=["GET", "POST"], endpoint="kalender")
    @roles_required(*ROLES, fallback=AKADEMIK_FALLBACK)
    def kalender():
        year, month = resolve_period(request.args.get("tahun"), request.args.get("bulan"))

        if request.method == "POST":
            try:
                container.kalender_service.save(
                    current_role=current_role(),
                    agenda_id=parse_optional_int(request.form.get("agenda_id")),
                    judul=request.form.get("judul", ""),
                    deskripsi=request.form.get("deskripsi"),
                    tanggal_mulai=request.form.get("tanggal_mulai"),
                    tanggal_selesai=request.form.get("tanggal_selesai"),
                    jenis=request.form.get("jenis"),
                    actor=current_actor(),
                )
                flash("Agenda disimpan", "success")
                return redirect(url_for("kalender", tahun=year, bulan=month))
            except (ValidationError, AuthorizationError, NotFoundError) as e:
                flash(str(e), "warning")
            except Exception:
                logger.exception("save agenda failed")
                flash("Gagal menyimpan agenda", "danger")

        events = container.kalender_service.list_month(year, month)
        prev_year, prev_month = (year - 1, 12) if month == 1 else (year, month - 1)
        next_year, next_month = (year + 1, 1) if month == 12 else (year, month + 1)

        return render_template(
            "kalender/index.html",
            year=year,
            month=month,
            weeks=month_grid(year, month, events),
            agenda_tahun=container.kalender_service.list_year(year),
            jenis_list=list(JenisAgenda),
            prev={"tahun": prev_year, "bulan": prev_month},
            next={"tahun": next_year, "bulan": next_month},
            can_edit=current_role() in EDITOR_ROLES,
            today=date.today(),
            active_page="kalender",
        )

    @app.route("/akademik/kalender/<int:agenda_id>/delete", methods=["POST"], endpoint="kalender_delete")
    @roles_required(*ROLES, fallback=AKADEMIK_FALLBACK)
    def kalender_delete(agenda_id: int):
        try:
            container.kalender_service.delete(current_role=current_role(), agenda_id=agenda_id)
            flash("Agenda dihapus", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "warning")
        except Exception:
            logger.exception("delete agenda failed")
            flash("Gagal menghapus agenda", "danger")
        return redirect(url_for("kalender"))
