from __future__ import annotations

import logging

from flask import Flask, flash, redirect, render_template, request, url_for

from ..container import Container
from ..core.enums import Role
from ..core.exceptions import NotFoundError, ValidationError
from ..core.roles import AKADEMIK_FALLBACK
from ..users.guards import current_actor, roles_required

logger = logging.getLogger(__name__)

_FIELDS = ("nip", "nama", "email", "no_hp", "jabatan", "status")


def register(app: Flask, container: Container) -> None:
    @app.route("/guru", endpoint="guru_list")
    @roles_required(Role.ADMIN, Role.GURU, Role.BENDAHARA, Role.MUSYRIF, fallback=AKADEMIK_FALLBACK)
    def guru_list():
        return render_template("guru/list.html", rows=container.guru_service.list(), active_page="guru")

    @app.route("/guru/create", methods=["GET", "POST"], endpoint="guru_create")
    @roles_required(Role.ADMIN, fallback=AKADEMIK_FALLBACK)
    def guru_create():
        if request.method == "POST":
            try:
                container.guru_service.create({f: request.form.get(f, "") for f in _FIELDS}, actor=current_actor())
                flash("Guru berhasil ditambahkan", "success")
                return redirect(url_for("guru_list"))
            except ValidationError as e:
                flash(str(e), "warning")
            except Exception:
                logger.exception("create guru failed")
                flash("Gagal menyimpan data guru", "danger")
        return render_template("guru/form.html", guru=None, active_page="guru")

    @app.route("/guru/<int:guru_id>/edit", methods=["GET", "POST"], endpoint="guru_edit")
    @roles_required(Role.ADMIN, Role.BENDAHARA, fallback=AKADEMIK_FALLBACK)
    def guru_edit(guru_id: int):
        try:
            guru = container.guru_service.get(guru_id)
        except NotFoundError as e:
            flash(str(e), "warning")
            return redirect(url_for("guru_list"))

        if request.method == "POST":
            try:
                container.guru_service.update(
                    guru_id, {f: request.form.get(f, "") for f in _FIELDS}, actor=current_actor()
                )
                flash("Data guru diperbarui", "success")
                return redirect(url_for("guru_list"))
            except ValidationError as e:
                flash(str(e), "warning")
            except Exception:
                logger.exception("update guru failed")
                flash("Gagal menyimpan data guru", "danger")
        return render_template("guru/form.html", guru=guru, active_page="guru")

    @app.route("/guru/<int:guru_id>/delete", methods=["POST"], endpoint="guru_delete")
    @roles_required(Role.ADMIN, fallback=AKADEMIK_FALLBACK)
    def guru_delete(guru_id: int):
        try:
            container.guru_service.delete(guru_id, actor=current_actor())
            flash("Guru dihapus", "success")
        except (ValidationError, NotFoundError) as e:
            flash(str(e), "warning")
        except Exception:
            logger.exception("delete guru failed")
            flash("Guru masih memiliki jadwal dan tidak dapat dihapus", "danger")
        return redirect(url_for("guru_list"))
