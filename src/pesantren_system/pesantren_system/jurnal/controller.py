from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date

from flask import Flask, flash, redirect, render_template, request, session, url_for

from ..common.datetime_utils import parse_iso_date
from ..container import Container
from ..core.enums import Role, StatusJurnal, StatusKehadiranMapel
from ..core.exceptions import NotFoundError, ValidationError
from ..core.roles import AKADEMIK_FALLBACK
from ..users.guards import current_actor, current_role, roles_required
from .model import JurnalForm
from .service import mark_all, parse_status_kehadiran

logger = logging.getLogger(__name__)


def _tanggal_arg(source) -> date:
    value = source.get("tanggal")
    try:
        return parse_iso_date(value) if value else date.today()
    except ValueError:
        return date.today()


def _apply_form(form: JurnalForm) -> JurnalForm:
    rows = []
    for r in form.rows:
        status = request.form.get(f"status_{r.santri_id}")
        rows.append(
            replace(
                r,
                status=parse_status_kehadiran(status) if status else r.status,
                keterangan=request.form.get(f"keterangan_{r.santri_id}", r.keterangan),
            )
        )
    return replace(form, rows=tuple(rows))


def register(app: Flask, container: Container) -> None:
    @app.route("/akademik/jurnal", endpoint="jurnal_list")
    @roles_required(Role.ADMIN, Role.GURU, fallback=AKADEMIK_FALLBACK)
    def jurnal_list():
        tanggal = _tanggal_arg(request.args)
        entries = []
        if current_role() == Role.ADMIN:
            entries = container.jurnal_service.list_for_date(tanggal=tanggal)
        else:
            guru = container.guru_service.find_by_email(session.get("email"))
            if guru:
                entries = container.jurnal_service.list_for_date(tanggal=tanggal, guru_id=guru.guru_id)
            else:
                flash("Akun ini belum terhubung dengan data guru", "warning")

        return render_template("jurnal/list.html", entries=entries, tanggal=tanggal, active_page="jurnal")

    @app.route("/akademik/jurnal/<int:jadwal_id>", methods=["GET", "POST"], endpoint="jurnal_form")
    @roles_required(Role.ADMIN, Role.GURU, fallback=AKADEMIK_FALLBACK)
    def jurnal_form(jadwal_id: int):
        source = request.form if request.method == "POST" else request.args
        tanggal = _tanggal_arg(source)
        try:
            form = container.jurnal_service.open_form(jadwal_id=jadwal_id, tanggal=tanggal)
        except NotFoundError as e:
            flash(str(e), "warning")
            return redirect(url_for("jurnal_list", tanggal=tanggal.isoformat()))

        materi = form.header.materi if form.header else ""
        catatan = form.header.catatan if form.header else ""
        status = form.header.status.value if form.header else StatusJurnal.TERLAKSANA.value

        if request.method == "POST":
            materi = request.form.get("materi", "")
            catatan = request.form.get("catatan", "")
            status = request.form.get("status", StatusJurnal.TERLAKSANA.value)
            try:
                form = _apply_form(form)
                action = request.form.get("action", "save")
                if action.startswith("mark_all:"):
                    form = replace(form, rows=mark_all(form.rows, parse_status_kehadiran(action.split(":", 1)[1])))
                else:
                    container.jurnal_service.save(
                        form=form, materi=materi, catatan=catatan, status=status, actor=current_actor()
                    )
                    flash("Jurnal berhasil disimpan", "success")
                    return redirect(url_for("jurnal_list", tanggal=tanggal.isoformat()))
            except ValidationError as e:
                flash(str(e), "warning")
            except Exception as e:
                logger.exception("save jurnal failed")
                flash(f"Gagal menyimpan: {e}", "danger")

        return render_template(
            "jurnal/form.html",
            form=form,
            materi=materi,
            catatan=catatan,
            status=status,
            statuses=list(StatusKehadiranMapel),
            status_jurnal=list(StatusJurnal),
            active_page="jurnal",
        )
