"""Decorator hak akses untuk route Flask.

Peran yang dicek adalah peran aktif di sesi (`session["role"]`). Pengguna yang
belum login diarahkan ke halaman login; peran yang tidak diizinkan diarahkan
ke `fallback` (atau dashboard perannya sendiri) dengan pesan flash.
"""

from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import flash, redirect, request, session, url_for

from ..core.constants import ACCESS_DENIED_MESSAGE
from ..core.enums import Role
from ..core.roles import DEFAULT_REDIRECT, dashboard_for, parse_role

DENIED_REDIRECT_KEY = "access_denied_redirect"


def current_role() -> Optional[Role]:
    return parse_role(session.get("role"))


def current_user_id() -> Optional[int]:
    uid = session.get("user_id")
    return int(uid) if uid is not None else None


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            flash("Silakan login terlebih dahulu", "warning")
            return redirect(url_for("login", next=request.path))
        return view(*args, **kwargs)

    return wrapper


def resolve_fallback(role: Optional[Role], fallback: Optional[str]) -> str:
    target = fallback or (dashboard_for(role.value) if role else DEFAULT_REDIRECT)
    # never bounce back to the page that just refused the user
    if target == request.path:
        own = dashboard_for(role.value) if role else DEFAULT_REDIRECT
        return own if own != request.path else DEFAULT_REDIRECT
    return target


def roles_required(*allowed: Role, fallback: Optional[str] = None):
    allowed_values = {r.value for r in allowed}

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                flash("Silakan login terlebih dahulu", "warning")
                return redirect(url_for("login", next=request.path))

            # tujuan redirect penolakan sebelumnya; pesannya sudah di-flash
            bounced_to = session.pop(DENIED_REDIRECT_KEY, None)

            if session.get("role") not in allowed_values:
                if bounced_to != request.path:
                    flash(ACCESS_DENIED_MESSAGE, "danger")
                target = resolve_fallback(current_role(), fallback)
                session[DENIED_REDIRECT_KEY] = target
                return redirect(target)

            return view(*args, **kwargs)

        return wrapper

    return decorator


def admin_required(view):
    return roles_required(Role.ADMIN)(view)


def current_actor():
    from ..audit.model import Actor

    return Actor(user_id=current_user_id(), email=session.get("email"))
