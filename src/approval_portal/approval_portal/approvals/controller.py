from __future__ import annotations

from flask import Flask, jsonify

from ..common.datetime_utils import format_datetime
from ..common.web import current_user, error_response, login_required, request_data, server_error
from ..core.enums import ApprovalAction
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..container import Container
from ..forms.model import Form
from .service import can_approve
from .status import resolve


def _form_summary(form: Form) -> dict:
    return {
        "id": form.form_id,
        "type": form.type,
        "requesterName": form.requester_name,
        "deptId": form.dept_id,
        "status": form.status,
        "createdAt": format_datetime(form.created_dt),
        "finalStatus": resolve(form.approval_flow).as_dict(),
        "approvalFlow": [s.to_dict() for s in form.approval_flow],
    }


def register(app: Flask, container: Container) -> None:
    principal_required = login_required(container)

    @app.route("/dashboard", methods=["GET"], endpoint="dashboard")
    @principal_required
    def dashboard():
        user = current_user(container)
        try:
            counts = container.approval_service.summarize_own(user=user)
        except Exception:
            app.logger.exception("Failed to load dashboard for %s", user.uid)
            return jsonify({"success": False, "user": user.as_dict(), "counts": {}, "error": "Failed to fetch data."})
        return jsonify({"success": True, "user": user.as_dict(), "counts": counts})

    @app.route("/history", methods=["GET"], endpoint="history")
    @principal_required
    def history():
        user = current_user(container)
        try:
            forms = container.approval_service.list_own(user=user)
        except Exception:
            app.logger.exception("Failed to load history for %s", user.uid)
            return jsonify({"success": False, "forms": [], "error": "Failed to fetch data."})
        return jsonify({"success": True, "forms": [_form_summary(f) for f in forms]})

    @app.route("/approvals", methods=["GET"], endpoint="approvals")
    @principal_required
    def approvals():
        user = current_user(container)
        try:
            forms = container.approval_service.list_queue(user=user)
        except Exception:
            app.logger.exception("Failed to load approval queue for %s", user.uid)
            return jsonify({"success": False, "forms": [], "error": "Failed to fetch data."})

        items = []
        for form in forms:
            item = _form_summary(form)
            item["canApprove"] = can_approve(user, form)
            items.append(item)
        return jsonify({"success": True, "forms": items})

    @app.route("/approvals/<form_id>/<action>", methods=["POST"], endpoint="decide_approval")
    @principal_required
    def decide_approval(form_id: str, action: str):
        try:
            decision = ApprovalAction(action)
        except ValueError:
            return jsonify({"success": False, "message": "Unknown action"}), 404

        try:
            form = container.approval_service.decide(
                user=current_user(container),
                form_id=form_id,
                action=decision,
                comment=str(request_data().get("comment") or ""),
            )
        except (ValidationError, AuthorizationError, NotFoundError) as e:
            return error_response(e)
        except Exception:
            return server_error("Failed to update the approval")

        return jsonify({"success": True, "form": _form_summary(form)})
