from __future__ import annotations

import logging

from flask import Flask, flash, redirect, render_template, request, url_for

from ..common.datetime_utils import parse_optional_date
from ..common.validators import parse_optional_int
from ..container import Container
from ..core.enums import Role, StatusPenerima
from ..core.exceptions import NotFoundError, ValidationError
from ..core.roles import OTA_FALLBACK
from ..santri.model import STATUS_AKTIF
from ..users.guards import current_actor, roles_required
from .donor_service import FILTER_ALL, FILTER_CONNECTED, FILTER_UNCONNECTED

logger = logging.getLogger(__name__)

ROLES = (Role.ADMIN, Role.OTA)


def _donor_form() -> dict:
    return {
        "nama": request.form.get("nama", ""),
        "email": request.form.get("email"),
        "no_hp": request.form.get("no_hp"),
        "alamat": request.form.get("alamat"),
        "kategori_id": parse_optional_int(request.form.get("kategori_id")),
        "status": request.form.get("status", "1") == "1",
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/admin/ota", endpoint="ota_list")
    @roles_required(*ROLES, fallback=OTA_FALLBACK)
    def ota_list():
        show_all = request.args.get("status") == "all"
        donors = container.donor_service.list(active_only=not show_all)
        return render_template(
            "ota/list.html",
            rows=donors,
            stats=container.donor_service.stats(donors),
            show_all=show_all,
            active_page="ota",
        )

    @app.route("/admin/ota/create", methods=["GET", "POST"], endpoint="ota_create")
    @roles_required(*ROLES, fallback=OTA_FALLBACK)
    def ota_create():
        if request.method == "POST":
            try:
                ota_id = container.donor_service.save(ota_id=None, actor=current_actor(), **_donor_form())
                flash("Data OTA berhasil ditambahkan", "success")
                return redirect(url_for("ota_detail", ota_id=ota_id))
            except ValidationError as e:
                flash(str(e), "warning")
            except Exception:
                logger.exception("create ota failed")
                flash("Gagal menyimpan data OTA", "danger")
        return render_template(
            "ota/form.html", donor=None, kategori_list=container.kategori_service.list(), active_page="ota"
        )

    @app.route("/admin/ota/<int:ota_id>", endpoint="ota_detail")
    @roles_required(*ROLES, fallback=OTA_FALLBACK)
    def ota_detail(ota_id: int):
        try:
            detail = container.donor_service.detail(ota_id)
        except NotFoundError as e:
            flash(str(e), "warning")
            return redirect(url_for("ota_list"))
        return render_template(
            "ota/detail.html",
            detail=detail,
            accounts=container.donor_service.candidate_accounts() if detail.donor.user_id is None else [],
            active_page="ota",
        )

    @app.route("/admin/ota/<int:ota_id>/edit", methods=["GET", "POST"], endpoint="ota_edit")
    @roles_required(*ROLES, fallback=OTA_FALLBACK)
    def ota_edit(ota_id: int):
        try:
            donor = container.donor_service.get(ota_id)
        except NotFoundError as e:
            flash(str(e), "warning")
            return redirect(url_for("ota_list"))

        if request.method == "POST":
            try:
                container.donor_service.save(ota_id=donor.ota_id, actor=current_actor(), **_donor_form())
                flash("Data OTA berhasil diperbarui", "success")
                return redirect(url_for("ota_detail", ota_id=donor.ota_id))
            except ValidationError as e:
                flash(str(e), "warning")
            except Exception:
                logger.exception("update ota failed")
                flash("Gagal menyimpan data OTA", "danger")
        return render_template(
            "ota/form.html", donor=donor, kategori_list=container.kategori_service.list(), active_page="ota"
        )

    @app.route("/admin/ota/<int:ota_id>/delete", methods=["POST"], endpoint="ota_delete")
    @roles_required(*ROLES, fallback=OTA_FALLBACK)
    def ota_delete(ota_id: int):
        try:
            container.donor_service.delete(ota_id, actor=current_actor())
            flash("Data OTA dihapus", "success")
        except (ValidationError, NotFoundError) as e:
            flash(str(e), "warning")
        except Exception:
            logger.exception("delete ota failed")
            flash("Data OTA masih memiliki riwayat donasi", "danger")
        return redirect(url_for("ota_list"))

    @app.route("/admin/ota/<int:ota_id>/akun", methods=["POST"], endpoint="ota_akun")
    @roles_required(Role.ADMIN, fallback=OTA_FALLBACK)
    def ota_akun(ota_id: int):
        try:
            if request.form.get("action") == "unlink":
                container.donor_service.unlink_account(ota_id=ota_id, actor=current_actor())
                flash("Akun login dilepas dari data OTA", "success")
            else:
                container.donor_service.link_account(
                    ota_id=ota_id, user_id=parse_optional_int(request.form.get("user_id")), actor=current_actor()
                )
                flash("Akun login berhasil dihubungkan", "success")
        except (ValidationError, NotFoundError) as e:
            flash(str(e), "warning")
        except Exception:
            logger.exception("link ota account failed")
            flash("Gagal menghubungkan akun", "danger")
        return redirect(url_for("ota_detail", ota_id=ota_id))

    @app.route("/admin/ota/<int:ota_id>/santri", methods=["GET", "POST"], endpoint="ota_linking")
    @roles_required(*ROLES, fallback=OTA_FALLBACK)
    def ota_linking(ota_id: int):
        try:
            donor = container.donor_service.get(ota_id)
        except NotFoundError as e:
            flash(str(e), "warning")
            return redirect(url_for("ota_list"))

        if request.method == "POST":
            action = request.form.get("action", "link")
            try:
                if action == "unlink":
                    container.linking_service.unlink(
                        ota_id=donor.ota_id, link_id=int(request.form.get("link_id", 0)), actor=current_actor()
                    )
                    flash("Santri dilepas dari OTA", "success")
                else:
                    container.linking_service.link(
                        ota_id=donor.ota_id, santri_id=int(request.form.get("santri_id", 0)), actor=current_actor()
                    )
                    flash("Santri berhasil ditautkan", "success")
            except (ValidationError, NotFoundError) as e:
                flash(str(e), "warning")
            except Exception:
                logger.exception("ota linking failed")
                flash("Gagal memproses tautan santri", "danger")
            return redirect(url_for("ota_linking", ota_id=donor.ota_id))

        q = request.args.get("q", "")
        return render_template(
            "ota/linking.html",
            donor=donor,
            linked=container.linking_service.linked(donor.ota_id),
            candidates=container.linking_service.search_santri_for_donor(donor.ota_id, q),
            q=q,
            active_page="ota",
        )

    @app.route("/ota/kategori", methods=["GET", "POST"], endpoint="ota_kategori")
    @roles_required(Role.ADMIN, fallback=OTA_FALLBACK)
    def ota_kategori():
        if request.method == "POST":
            try:
                if request.form.get("action") == "delete":
                    container.kategori_service.delete(int(request.form.get("kategori_id", 0)))
                    flash("Kategori dihapus", "success")
                else:
                    container.kategori_service.save(
                        kategori_id=parse_optional_int(request.form.get("kategori_id")),
                        nama=request.form.get("nama", ""),
                        keterangan=request.form.get("keterangan"),
                    )
                    flash("Kategori disimpan", "success")
            except (ValidationError, NotFoundError) as e:
                flash(str(e), "warning")
            except Exception:
                logger.exception("save kategori failed")
                flash("Kategori masih dipakai", "danger")
            return redirect(url_for("ota_kategori"))
        return render_template("ota/kategori.html", rows=container.kategori_service.list(), active_page="ota_kategori")

    @app.route("/ota/santri", methods=["GET", "POST"], endpoint="ota_santri")
    @roles_required(*ROLES, fallback=OTA_FALLBACK)
    def ota_santri():
        filters = {
            "q": request.args.get("q", ""),
            "kelas_id": parse_optional_int(request.args.get("kelas_id")),
            "status": request.args.get("status") or FILTER_CONNECTED,
        }
        if filters["status"] not in (FILTER_ALL, FILTER_CONNECTED, FILTER_UNCONNECTED):
            filters["status"] = FILTER_CONNECTED

        if request.method == "POST":
            try:
                container.linking_service.relink(
                    santri_id=int(request.form.get("santri_id", 0)),
                    ota_id=parse_optional_int(request.form.get("ota_id")),
                    actor=current_actor(),
                )
                flash("Data OTA santri diperbarui", "success")
            except (ValidationError, NotFoundError) as e:
                flash(str(e), "warning")
            except Exception:
                logger.exception("relink santri failed")
                flash("Gagal memperbarui OTA santri", "danger")
            return redirect(url_for("ota_santri", **{k: v for k, v in filters.items() if v}))

        return render_template(
            "ota/santri.html",
            rows=container.linking_service.santri_view(
                search=filters["q"], kelas_id=filters["kelas_id"], status_filter=filters["status"]
            ),
            donors=container.donor_service.list(active_only=True),
            kelas_list=container.kelas_service.list(),
            filters=filters,
            active_page="ota_santri",
        )

    @app.route("/ota/penerima", methods=["GET", "POST"], endpoint="ota_penerima")
    @roles_required(*ROLES, fallback=OTA_FALLBACK)
    def ota_penerima():
        status = request.args.get("status") or StatusPenerima.AKTIF.value
        if request.method == "POST":
            action = request.form.get("action", "enroll")
            try:
                if action == "enroll":
                    container.penerima_service.enroll(
                        santri_id=parse_optional_int(request.form.get("santri_id")),
                        tanggal_mulai=parse_optional_date(request.form.get("tanggal_mulai")),
                        keterangan=request.form.get("keterangan"),
                    )
                    flash("Santri ditambahkan sebagai penerima", "success")
                elif action == "delete":
                    container.penerima_service.delete(int(request.form.get("penerima_id", 0)))
                    flash("Penerima dihapus", "success")
                else:
                    container.penerima_service.set_status(int(request.form.get("penerima_id", 0)), action)
                    flash("Status penerima diperbarui", "success")
            except ValidationError as e:
                flash(str(e), "warning")
            except ValueError:
                flash("Format tanggal tidak valid", "warning")
            except Exception:
                logger.exception("penerima update failed")
                flash("Gagal memproses data penerima", "danger")
            return redirect(url_for("ota_penerima", status=status))

        try:
            rows = container.penerima_service.list(status=status)
        except ValidationError as e:
            flash(str(e), "warning")
            rows = container.penerima_service.list_active()
        return render_template(
            "ota/penerima.html",
            rows=rows,
            santri_list=container.santri_service.list(status=STATUS_AKTIF),
            status=status,
            statuses=list(StatusPenerima),
            active_page="ota_penerima",
        )
