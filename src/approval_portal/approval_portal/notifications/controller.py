from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import error_response
from ..core.exceptions import NotFoundError, ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/send-full-broadcast", methods=["POST"], endpoint="send_full_broadcast")
    def send_full_broadcast():
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            data = {}
        try:
            message = container.notification_service.send_for_form(data.get("formId"))
            return jsonify({"success": True, "message": message})
        except (ValidationError, NotFoundError) as e:
            return error_response(e)
        except Exception:
            app.logger.exception("Error sending email for form %s", data.get("formId"))
            return jsonify({"success": False, "message": "Failed to send email."}), 500
