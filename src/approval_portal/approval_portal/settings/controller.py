from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import error_response, recap_access_required, request_data, server_error
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    admin_required = recap_access_required(container)

    @app.route("/admin/settings/broadcast-emails", methods=["GET", "POST"], endpoint="broadcast_settings")
    @admin_required
    def broadcast_settings():
        if request.method == "POST":
            try:
                saved = container.broadcast_settings_service.save(request_data())
                return jsonify({"success": True, "settings": saved.as_dict(), "message": "Settings saved."})
            except ValidationError as e:
                return error_response(e)
            except Exception:
                return server_error("Failed to save settings")

        try:
            settings = container.broadcast_settings_service.load()
        except Exception:
            app.logger.exception("Failed to load broadcast settings")
            return jsonify({"success": False, "settings": {}, "error": "Failed to fetch data."})
        return jsonify({"success": True, "settings": settings.as_dict()})
