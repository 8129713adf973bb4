from __future__ import annotations

import logging

from flask import Flask, flash, redirect, render_template, request, url_for

from ..common.validators import parse_optional_int
from ..container import Container
from ..core.enums import Hari, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..core.roles import AKADEMIK_FALLBACK
from ..users.guards import current_role, roles_required

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/akademik/jadwal", methods=["GET", "POST"], endpoint="jadwal_list")
    @roles_required(Role.ADMIN, Role.GURU, fallback=AKADEMIK_FALLBACK)
    def jadwal_list():
        source = request.form if request.method == "POST" else request.args
        kelas_id = parse_optional_int(source.get("kelas_id"))
        tahun_ajaran = source.get("tahun_ajaran") or container.jadwal_service.default_tahun_ajaran

        if request.method == "POST":
            try:
                container.jadwal_service.save(
                    current_role=current_role(),
                    jadwal_id=parse_optional_int(request.form.get("jadwal_id")),
                    kelas_id=kelas_id,
                    mapel_id=parse_optional_int(request.form.get("mapel_id")),
                    guru_id=parse_optional_int(request.form.get("guru_id")),
                    hari=request.form.get("hari", ""),
                    jam_ke=request.form.get("jam_ke"),
                    jam_mulai=request.form.get("jam_mulai"),
                    jam_selesai=request.form.get("jam_selesai"),
                    tahun_ajaran=tahun_ajaran,
                )
                flash("Jadwal disimpan", "success")
                return redirect(url_for("jadwal_list", kelas_id=kelas_id, tahun_ajaran=tahun_ajaran))
            except (ValidationError, AuthorizationError, NotFoundError) as e:
                flash(str(e), "warning")
            except Exception:
                logger.exception("save jadwal failed")
                flash("Gagal menyimpan jadwal", "danger")

        grouped = None
        if kelas_id:
            grouped = container.jadwal_service.grouped_by_day(kelas_id=kelas_id, tahun_ajaran=tahun_ajaran)

        edit_id = parse_optional_int(request.args.get("edit"))
        editing = None
        if edit_id:
            try:
                editing = container.jadwal_service.get(edit_id)
            except NotFoundError as e:
                flash(str(e), "warning")

        return render_template(
            "jadwal/list.html",
            grouped=grouped,
            editing=editing,
            kelas_id=kelas_id,
            tahun_ajaran=tahun_ajaran,
            kelas_list=container.kelas_service.list(),
            mapel_list=container.mapel_service.list(),
            guru_list=container.guru_service.list(),
            hari_list=Hari.ordered(),
            can_edit=current_role() == Role.ADMIN,
            active_page="jadwal",
        )

    @app.route("/akademik/jadwal/<int:jadwal_id>/delete", methods=["POST"], endpoint="jadwal_delete")
    @roles_required(Role.ADMIN, Role.GURU, fallback=AKADEMIK_FALLBACK)
    def jadwal_delete(jadwal_id: int):
        try:
            container.jadwal_service.delete(current_role=current_role(), jadwal_id=jadwal_id)
            flash("Jadwal dihapus", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "warning")
        except Exception:
            logger.exception("delete jadwal failed")
            flash("Gagal menghapus jadwal", "danger")
        return redirect(url_for("jadwal_list", kelas_id=request.form.get("kelas_id", "")))

    @app.route("/mapel", methods=["GET", "POST"], endpoint="mapel_list")
    @roles_required(Role.ADMIN, Role.GURU, Role.BENDAHARA, Role.MUSYRIF, fallback=AKADEMIK_FALLBACK)
    def mapel_list():
        if request.method == "POST":
            if current_role() != Role.ADMIN:
                flash("Anda tidak memiliki akses untuk mengubah mapel", "warning")
                return redirect(url_for("mapel_list"))
            try:
                container.mapel_service.save(
                    mapel_id=parse_optional_int(request.form.get("mapel_id")),
                    nama=request.form.get("nama", ""),
                    kode=request.form.get("kode"),
                )
                flash("Mapel disimpan", "success")
                return redirect(url_for("mapel_list"))
            except ValidationError as e:
                flash(str(e), "warning")
        return render_template("jadwal/mapel.html", rows=container.mapel_service.list(), active_page="mapel")

    @app.route("/mapel/<int:mapel_id>/delete", methods=["POST"], endpoint="mapel_delete")
    @roles_required(Role.ADMIN, fallback=AKADEMIK_FALLBACK)
    def mapel_delete(mapel_id: int):
        try:
            container.mapel_service.delete(mapel_id)
            flash("Mapel dihapus", "success")
        except ValidationError as e:
            flash(str(e), "warning")
        except Exception:
            logger.exception("delete mapel failed")
            flash("Mapel masih dipakai di jadwal", "danger")
        return redirect(url_for("mapel_list"))
