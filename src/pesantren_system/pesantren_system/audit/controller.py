from __future__ import annotations

import logging

from flask import Flask, flash, redirect, render_template, request, url_for

from ..container import Container
from ..core.enums import AuditAction, RiskLevel
from ..core.exceptions import AuthorizationError, ValidationError
from ..users.guards import admin_required, current_role

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/admin/audit-log", endpoint="audit_log")
    @admin_required
    def audit_log():
        filters = {
            "action": request.args.get("action") or "ALL",
            "module": request.args.get("module") or "ALL",
            "q": request.args.get("q", ""),
        }
        try:
            rows = container.audit_service.list_logs(
                action=filters["action"], module=filters["module"], search=filters["q"]
            )
        except ValidationError as e:
            flash(str(e), "warning")
            rows = container.audit_service.list_logs()
        return render_template(
            "audit/log.html",
            rows=rows,
            filters=filters,
            actions=list(AuditAction),
            modules=container.audit_service.list_modules(),
            active_page="audit_log",
        )

    @app.route("/admin/suspicious-accounts", methods=["GET", "POST"], endpoint="suspicious_accounts")
    @admin_required
    def suspicious_accounts():
        level = request.args.get("level") or RiskLevel.ALL.value
        if request.method == "POST":
            try:
                container.audit_service.reset_suspicious(
                    current_role=current_role(), account_id=int(request.form.get("account_id", 0))
                )
                flash("Status akun direset", "success")
            except (ValidationError, AuthorizationError) as e:
                flash(str(e), "warning")
            except Exception:
                logger.exception("reset suspicious account failed")
                flash("Gagal mereset akun", "danger")
            return redirect(url_for("suspicious_accounts", level=level))

        return render_template(
            "audit/suspicious.html",
            rows=container.audit_service.list_suspicious(level),
            level=level,
            levels=list(RiskLevel),
            active_page="suspicious",
        )
