from __future__ import annotations

import logging
from datetime import date

from flask import Flask, flash, redirect, render_template, request, url_for

from ..common.datetime_utils import resolve_period
from ..common.validators import parse_optional_int
from ..container import Container
from ..core.enums import Role, StatusPesan
from ..core.exceptions import NotFoundError, ValidationError
from ..core.roles import PENGURUS_FALLBACK
from ..presensi.service import build_rekap
from ..users.guards import current_actor, current_user_id, roles_required
from .model import KATEGORI_PENGUMUMAN, KATEGORI_PESAN
from .service import SEMUA

logger = logging.getLogger(__name__)

STAFF_ROLES = (Role.ADMIN, Role.PENGURUS)


def register(app: Flask, container: Container) -> None:
    # -- portal wali -------------------------------------------------------

    @app.route("/wali", endpoint="wali_home")
    @roles_required(Role.WALI)
    def wali_home():
        wali_id = current_user_id()
        pesan = container.pesan_service.inbox(wali_id=wali_id)
        return render_template(
            "wali/home.html",
            santri=container.santri_service.list_for_wali(wali_id),
            pengumuman=container.pengumuman_service.list_visible(limit=3),
            pesan_dibalas=sum(1 for p in pesan if p.sudah_dibalas),
            pesan_total=len(pesan),
            active_page="dashboard",
        )

    @app.route("/wali/santri", endpoint="wali_santri")
    @roles_required(Role.WALI)
    def wali_santri():
        return render_template(
            "wali/santri.html",
            santri=container.santri_service.list_for_wali(current_user_id()),
            active_page="wali_santri",
        )

    @app.route("/wali/kehadiran", endpoint="wali_kehadiran")
    @roles_required(Role.WALI)
    def wali_kehadiran():
        year, month = resolve_period(request.args.get("tahun"), request.args.get("bulan"))

        santri = container.santri_service.list_for_wali(current_user_id())
        santri_ids = [s.santri_id for s in santri]
        selected = parse_optional_int(request.args.get("santri_id"))
        if selected in santri_ids:
            santri_ids = [selected]

        records = container.presensi_service.riwayat(santri_ids=santri_ids, year=year, month=month) if santri_ids else []
        return render_template(
            "wali/kehadiran.html",
            santri=santri,
            selected=selected,
            records=records,
            rekap=build_rekap(year, month, records),
            active_page="wali_kehadiran",
        )

    @app.route("/wali/pesan", endpoint="wali_pesan")
    @roles_required(Role.WALI)
    def wali_pesan():
        status = request.args.get("status") or SEMUA
        try:
            rows = container.pesan_service.inbox(wali_id=current_user_id(), status=status)
        except ValidationError as e:
            flash(str(e), "warning")
            status = SEMUA
            rows = container.pesan_service.inbox(wali_id=current_user_id())
        return render_template(
            "wali/pesan.html",
            rows=rows,
            status=status,
            statuses=list(StatusPesan),
            active_page="wali_pesan",
        )

    @app.route("/wali/pesan/kirim", methods=["GET", "POST"], endpoint="wali_pesan_kirim")
    @roles_required(Role.WALI)
    def wali_pesan_kirim():
        wali_id = current_user_id()
        if request.method == "POST":
            try:
                container.pesan_service.send(
                    wali_id=wali_id,
                    judul=request.form.get("judul"),
                    isi=request.form.get("isi"),
                    kategori=request.form.get("kategori"),
                    santri_id=parse_optional_int(request.form.get("santri_id")),
                )
                flash("Pesan berhasil dikirim", "success")
                return redirect(url_for("wali_pesan"))
            except ValidationError as e:
                flash(str(e), "warning")
            except Exception:
                logger.exception("send pesan failed")
                flash("Gagal mengirim pesan", "danger")
        return render_template(
            "wali/kirim_pesan.html",
            santri=container.santri_service.list_for_wali(wali_id),
            kategori_list=KATEGORI_PESAN,
            form=request.form,
            active_page="wali_pesan",
        )

    @app.route("/wali/pengumuman", endpoint="wali_pengumuman")
    @roles_required(Role.WALI)
    def wali_pengumuman():
        kategori = request.args.get("kategori") or SEMUA
        return render_template(
            "wali/pengumuman.html",
            rows=container.pengumuman_service.list_visible(kategori=kategori),
            kategori=kategori,
            kategori_list=KATEGORI_PENGUMUMAN,
            active_page="wali_pengumuman",
        )

    # -- staf --------------------------------------------------------------

    @app.route("/admin/pesan", methods=["GET", "POST"], endpoint="admin_pesan")
    @roles_required(*STAFF_ROLES, fallback=PENGURUS_FALLBACK)
    def admin_pesan():
        status = request.args.get("status") or SEMUA
        if request.method == "POST":
            pesan_id = int(request.form.get("pesan_id", 0))
            action = request.form.get("action", "read")
            try:
                if action == "reply":
                    container.pesan_service.reply(pesan_id, balasan=request.form.get("balasan"), actor=current_actor())
                    flash("Balasan terkirim", "success")
                elif action == "process":
                    container.pesan_service.mark_processing(pesan_id)
                else:
                    container.pesan_service.mark_read(pesan_id)
            except (ValidationError, NotFoundError) as e:
                flash(str(e), "warning")
            except Exception:
                logger.exception("update pesan failed")
                flash("Gagal memproses pesan", "danger")
            return redirect(url_for("admin_pesan", status=status))

        try:
            rows = container.pesan_service.list_all(status=status)
        except ValidationError as e:
            flash(str(e), "warning")
            status = SEMUA
            rows = container.pesan_service.list_all()
        return render_template(
            "komunikasi/pesan.html",
            rows=rows,
            status=status,
            statuses=list(StatusPesan),
            active_page="admin_pesan",
        )

    @app.route("/pengurus/pengumuman", methods=["GET", "POST"], endpoint="pengurus_pengumuman")
    @roles_required(*STAFF_ROLES, fallback=PENGURUS_FALLBACK)
    def pengurus_pengumuman():
        archived = request.args.get("arsip") == "1"
        search = request.args.get("q", "")

        if request.method == "POST":
            action = request.form.get("action", "save")
            pengumuman_id = parse_optional_int(request.form.get("pengumuman_id"))
            try:
                if action == "delete":
                    container.pengumuman_service.delete(pengumuman_id or 0, actor=current_actor())
                    flash("Pengumuman dihapus", "success")
                elif action in ("archive", "unarchive"):
                    container.pengumuman_service.set_archived(pengumuman_id or 0, action == "archive")
                    flash("Pengumuman diarsipkan" if action == "archive" else "Pengumuman dipulihkan", "success")
                else:
                    container.pengumuman_service.save(
                        pengumuman_id=pengumuman_id,
                        judul=request.form.get("judul"),
                        isi=request.form.get("isi"),
                        kategori=request.form.get("kategori"),
                        prioritas=request.form.get("prioritas"),
                        mulai_tampil=request.form.get("mulai_tampil"),
                        selesai_tampil=request.form.get("selesai_tampil"),
                        is_active=request.form.get("is_active", "1") == "1",
                        actor=current_actor(),
                    )
                    flash("Pengumuman disimpan", "success")
            except (ValidationError, NotFoundError) as e:
                flash(str(e), "warning")
            except Exception:
                logger.exception("save pengumuman failed")
                flash("Gagal menyimpan pengumuman", "danger")
            return redirect(url_for("pengurus_pengumuman", arsip="1" if archived else None))

        editing = None
        edit_id = parse_optional_int(request.args.get("edit"))
        if edit_id:
            try:
                editing = container.pengumuman_service.get(edit_id)
            except NotFoundError as e:
                flash(str(e), "warning")

        return render_template(
            "komunikasi/pengumuman.html",
            rows=container.pengumuman_service.list(archived=archived, search=search),
            editing=editing,
            archived=archived,
            q=search,
            kategori_list=KATEGORI_PENGUMUMAN,
            today=date.today(),
            active_page="pengumuman",
        )
