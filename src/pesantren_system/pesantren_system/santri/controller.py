from __future__ import annotations

import logging

from flask import Flask, flash, redirect, render_template, request, url_for

from ..common.validators import parse_optional_int
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import NotFoundError, ValidationError
from ..core.roles import AKADEMIK_FALLBACK
from ..users.guards import admin_required, current_actor, roles_required
from .model import STATUS_SANTRI

logger = logging.getLogger(__name__)

VIEW_ROLES = (Role.ADMIN, Role.GURU, Role.BENDAHARA, Role.MUSYRIF)


def _santri_form() -> dict:
    return {
        "nis": request.form.get("nis", ""),
        "nama": request.form.get("nama", ""),
        "jenis_kelamin": request.form.get("jenis_kelamin", ""),
        "kelas_id": parse_optional_int(request.form.get("kelas_id")),
        "halaqoh_id": parse_optional_int(request.form.get("halaqoh_id")),
        "status": request.form.get("status", ""),
    }


def register(app: Flask, container: Container) -> None:
    def _form_context(santri=None):
        return {
            "santri": santri,
            "kelas_list": container.kelas_service.list(),
            "halaqoh_list": container.halaqoh_service.list(),
            "status_list": STATUS_SANTRI,
            "active_page": "santri",
        }

    @app.route("/santri", endpoint="santri_list")
    @roles_required(*VIEW_ROLES, fallback=AKADEMIK_FALLBACK)
    def santri_list():
        kelas_id = parse_optional_int(request.args.get("kelas_id"))
        status = request.args.get("status") or None
        search = request.args.get("q", "")
        rows = container.santri_service.list(kelas_id=kelas_id, status=status, search=search)
        return render_template(
            "santri/list.html",
            rows=rows,
            kelas_list=container.kelas_service.list(),
            status_list=STATUS_SANTRI,
            filters={"kelas_id": kelas_id, "status": status, "q": search},
            active_page="santri",
        )

    @app.route("/santri/create", methods=["GET", "POST"], endpoint="santri_create")
    @roles_required(Role.ADMIN, fallback=AKADEMIK_FALLBACK)
    def santri_create():
        if request.method == "POST":
            try:
                container.santri_service.create(_santri_form(), actor=current_actor())
                flash("Santri berhasil ditambahkan", "success")
                return redirect(url_for("santri_list"))
            except ValidationError as e:
                flash(str(e), "warning")
            except Exception:
                logger.exception("create santri failed")
                flash("Gagal menyimpan data santri", "danger")
        return render_template("santri/form.html", **_form_context())

    @app.route("/santri/<int:santri_id>/edit", methods=["GET", "POST"], endpoint="santri_edit")
    @roles_required(Role.ADMIN, Role.BENDAHARA, fallback=AKADEMIK_FALLBACK)
    def santri_edit(santri_id: int):
        try:
            santri = container.santri_service.get(santri_id)
        except NotFoundError as e:
            flash(str(e), "warning")
            return redirect(url_for("santri_list"))

        if request.method == "POST":
            try:
                container.santri_service.update(santri_id, _santri_form(), actor=current_actor())
                flash("Data santri diperbarui", "success")
                return redirect(url_for("santri_list"))
            except ValidationError as e:
                flash(str(e), "warning")
            except Exception:
                logger.exception("update santri failed")
                flash("Gagal menyimpan data santri", "danger")
        return render_template("santri/form.html", **_form_context(santri))

    @app.route("/santri/<int:santri_id>/delete", methods=["POST"], endpoint="santri_delete")
    @roles_required(Role.ADMIN, fallback=AKADEMIK_FALLBACK)
    def santri_delete(santri_id: int):
        try:
            container.santri_service.delete(santri_id, actor=current_actor())
            flash("Santri dihapus", "success")
        except (ValidationError, NotFoundError) as e:
            flash(str(e), "warning")
        except Exception:
            logger.exception("delete santri failed")
            flash("Gagal menghapus santri", "danger")
        return redirect(url_for("santri_list"))

    @app.route("/kelas", methods=["GET", "POST"], endpoint="kelas_list")
    @roles_required(*VIEW_ROLES, fallback=AKADEMIK_FALLBACK)
    def kelas_list():
        if request.method == "POST":
            try:
                container.kelas_service.save(
                    kelas_id=parse_optional_int(request.form.get("kelas_id")),
                    nama=request.form.get("nama", ""),
                    wali_kelas_id=parse_optional_int(request.form.get("wali_kelas_id")),
                )
                flash("Kelas disimpan", "success")
                return redirect(url_for("kelas_list"))
            except ValidationError as e:
                flash(str(e), "warning")
        return render_template(
            "santri/kelas.html",
            rows=container.kelas_service.list(),
            guru_list=container.guru_service.list(),
            active_page="kelas",
        )

    @app.route("/kelas/<int:kelas_id>/delete", methods=["POST"], endpoint="kelas_delete")
    @admin_required
    def kelas_delete(kelas_id: int):
        try:
            container.kelas_service.delete(kelas_id)
            flash("Kelas dihapus", "success")
        except ValidationError as e:
            flash(str(e), "warning")
        except Exception:
            logger.exception("delete kelas failed")
            flash("Kelas masih dipakai dan tidak dapat dihapus", "danger")
        return redirect(url_for("kelas_list"))

    @app.route("/admin/wali/<int:wali_id>", methods=["GET", "POST"], endpoint="admin_wali_santri")
    @admin_required
    def admin_wali_santri(wali_id: int):
        if request.method == "POST":
            ids = [int(v) for v in request.form.getlist("santri_ids") if v.isdigit()]
            container.santri_service.link_to_wali(wali_id=wali_id, santri_ids=ids)
            flash("Santri untuk wali diperbarui", "success")
            return redirect(url_for("admin_wali_santri", wali_id=wali_id))

        linked = {s.santri_id for s in container.santri_service.list_for_wali(wali_id)}
        return render_template(
            "santri/wali_link.html",
            wali_id=wali_id,
            rows=container.santri_service.list(status="Aktif"),
            linked=linked,
            active_page="admin_users",
        )
