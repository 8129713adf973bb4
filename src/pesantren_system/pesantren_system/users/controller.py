from __future__ import annotations

import logging
from datetime import timedelta

from flask import Flask, flash, redirect, render_template, request, session, url_for

from ..container import Container
from ..core.constants import DEFAULT_SESSION_DAYS
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from ..core.roles import ROLE_CONFIG, dashboard_for
from .guards import admin_required, current_role, login_required, roles_required

logger = logging.getLogger(__name__)

# dashboard sederhana per peran; OTA dan wali punya halaman sendiri
_SIMPLE_DASHBOARDS = {
    "admin": Role.ADMIN,
    "akademik": Role.GURU,
    "bendahara": Role.BENDAHARA,
    "musyrif": Role.MUSYRIF,
    "pengurus": Role.PENGURUS,
}


def register(app: Flask, container: Container) -> None:
    @app.context_processor
    def inject_current_user():
        role = current_role()
        return {
            "current_user": {
                "user_id": session.get("user_id"),
                "nama": session.get("name"),
                "role": role.value if role else None,
                "roles": session.get("roles", []),
            },
            "role_config": ROLE_CONFIG,
        }

    @app.route("/", endpoint="index")
    def index():
        if "user_id" not in session:
            return redirect(url_for("login"))
        return redirect(dashboard_for(session.get("role")))

    @app.route("/login", methods=["GET", "POST"], endpoint="login")
    def login():
        if "user_id" in session:
            return redirect(dashboard_for(session.get("role")))

        if request.method == "POST":
            email = request.form.get("email", "")
            password = request.form.get("password", "")
            try:
                s_user = container.auth_service.authenticate(email, password)

                session.permanent = bool(request.form.get("remember_me"))
                app.permanent_session_lifetime = timedelta(days=DEFAULT_SESSION_DAYS)
                session["user_id"] = s_user.user_id
                session["name"] = s_user.nama
                session["email"] = s_user.email
                session["role"] = s_user.role.value
                session["roles"] = [r.value for r in s_user.roles]

                flash(f"Selamat datang, {s_user.nama}", "success")
                if len(s_user.roles) > 1:
                    return redirect(url_for("pilih_peran"))
                return redirect(request.args.get("next") or dashboard_for(s_user.role.value))
            except AuthenticationError as e:
                flash(str(e), "danger")
            except Exception:
                logger.exception("login failed")
                flash("Terjadi kesalahan sistem saat login", "danger")

        return render_template("login.html")

    @app.route("/logout", endpoint="logout")
    def logout():
        session.clear()
        flash("Anda telah keluar.", "info")
        return redirect(url_for("login"))

    @app.route("/pilih-peran", methods=["GET", "POST"], endpoint="pilih_peran")
    @login_required
    def pilih_peran():
        if request.method == "POST":
            try:
                role = container.auth_service.switch_role(
                    user_id=int(session["user_id"]), role=request.form.get("role", "")
                )
                session["role"] = role.value
                return redirect(dashboard_for(role.value))
            except (AuthenticationError, AuthorizationError) as e:
                flash(str(e), "danger")

        roles = [ROLE_CONFIG[Role(r)] for r in session.get("roles", []) if r in {x.value for x in Role}]
        return render_template("pilih_peran.html", roles=roles)

    def _simple_dashboard(slug: str, role: Role):
        @roles_required(role, Role.ADMIN)
        def view():
            cfg = ROLE_CONFIG[role]
            return render_template("dashboard.html", config=cfg, slug=slug, active_page="dashboard")

        app.add_url_rule(f"/dashboard/{slug}", endpoint=f"dashboard_{slug}", view_func=view)

    for slug, role in _SIMPLE_DASHBOARDS.items():
        _simple_dashboard(slug, role)

    @app.route("/admin/users", methods=["GET", "POST"], endpoint="admin_users")
    @admin_required
    def admin_users():
        if request.method == "POST":
            try:
                container.user_service.create_account(
                    nama=request.form.get("nama", ""),
                    email=request.form.get("email", ""),
                    password=request.form.get("password", ""),
                    roles=request.form.getlist("roles"),
                )
                flash("Akun berhasil dibuat", "success")
                return redirect(url_for("admin_users"))
            except ValidationError as e:
                flash(str(e), "warning")
            except Exception:
                logger.exception("create user failed")
                flash("Gagal membuat akun", "danger")

        users = container.user_service.list_users()
        return render_template("admin/users.html", users=users, all_roles=list(Role), active_page="admin_users")

    @app.route("/admin/users/<int:user_id>/roles", methods=["POST"], endpoint="admin_user_roles")
    @admin_required
    def admin_user_roles(user_id: int):
        try:
            container.user_service.set_roles(
                current_role=current_role(), user_id=user_id, roles=request.form.getlist("roles")
            )
            flash("Peran diperbarui", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        return redirect(url_for("admin_users"))

    @app.route("/admin/users/<int:user_id>/delete", methods=["POST"], endpoint="admin_user_delete")
    @admin_required
    def admin_user_delete(user_id: int):
        try:
            container.user_service.delete_user(current_role=current_role(), user_id=user_id)
            flash("Akun dihapus", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("delete user failed")
            flash("Gagal menghapus akun", "danger")
        return redirect(url_for("admin_users"))
