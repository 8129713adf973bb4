from __future__ import annotations

import logging

from flask import Flask, flash, redirect, render_template, request, url_for

from ..common.validators import parse_optional_int
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import NotFoundError, ValidationError
from ..core.roles import AKADEMIK_FALLBACK
from ..users.guards import current_actor, roles_required

logger = logging.getLogger(__name__)

ROLES = (Role.ADMIN, Role.GURU, Role.MUSYRIF)


def register(app: Flask, container: Container) -> None:
    @app.route("/halaqoh", methods=["GET", "POST"], endpoint="halaqoh_list")
    @roles_required(*ROLES, fallback=AKADEMIK_FALLBACK)
    def halaqoh_list():
        if request.method == "POST":
            try:
                container.halaqoh_service.save(
                    halaqoh_id=parse_optional_int(request.form.get("halaqoh_id")),
                    nama=request.form.get("nama", ""),
                    musyrif_id=parse_optional_int(request.form.get("musyrif_id")),
                    waktu=request.form.get("waktu"),
                    keterangan=request.form.get("keterangan"),
                    actor=current_actor(),
                )
                flash("Halaqoh disimpan", "success")
                return redirect(url_for("halaqoh_list"))
            except (ValidationError, NotFoundError) as e:
                flash(str(e), "warning")
            except Exception:
                logger.exception("save halaqoh failed")
                flash("Gagal menyimpan halaqoh", "danger")

        return render_template(
            "halaqoh/list.html",
            rows=container.halaqoh_service.list(),
            guru_list=container.guru_service.list(),
            active_page="halaqoh",
        )

    @app.route("/halaqoh/<int:halaqoh_id>/delete", methods=["POST"], endpoint="halaqoh_delete")
    @roles_required(Role.ADMIN, fallback=AKADEMIK_FALLBACK)
    def halaqoh_delete(halaqoh_id: int):
        try:
            container.halaqoh_service.delete(halaqoh_id, actor=current_actor())
            flash("Halaqoh dihapus", "success")
        except (ValidationError, NotFoundError) as e:
            flash(str(e), "warning")
        except Exception:
            logger.exception("delete halaqoh failed")
            flash("Gagal menghapus halaqoh", "danger")
        return redirect(url_for("halaqoh_list"))

    @app.route("/halaqoh/<int:halaqoh_id>/anggota", methods=["GET", "POST"], endpoint="halaqoh_anggota")
    @roles_required(*ROLES, fallback=AKADEMIK_FALLBACK)
    def halaqoh_anggota(halaqoh_id: int):
        try:
            halaqoh = container.halaqoh_service.get(halaqoh_id)
        except NotFoundError as e:
            flash(str(e), "warning")
            return redirect(url_for("halaqoh_list"))

        if request.method == "POST":
            santri_id = parse_optional_int(request.form.get("santri_id"))
            action = request.form.get("action", "add")
            try:
                if santri_id is None:
                    raise ValidationError("Pilih santri terlebih dahulu")
                if action == "remove":
                    container.halaqoh_service.remove_member(halaqoh_id, santri_id)
                    flash("Santri dikeluarkan dari halaqoh", "success")
                else:
                    container.halaqoh_service.add_member(halaqoh_id, santri_id)
                    flash("Santri ditambahkan ke halaqoh", "success")
            except ValidationError as e:
                flash(str(e), "warning")
            return redirect(url_for("halaqoh_anggota", halaqoh_id=halaqoh_id))

        q = request.args.get("q", "")
        return render_template(
            "halaqoh/anggota.html",
            halaqoh=halaqoh,
            members=container.halaqoh_service.members(halaqoh_id),
            candidates=container.halaqoh_service.search_candidates(halaqoh_id, q),
            q=q,
            active_page="halaqoh",
        )
