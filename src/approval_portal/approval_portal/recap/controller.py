from __future__ import annotations

from flask import Flask, jsonify, request, send_file

from ..common.datetime_utils import parse_optional_date
from ..common.web import error_response, recap_access_required
from ..core.exceptions import NotFoundError, ValidationError
from ..container import Container
from .exporter import XLSX_MIMETYPE


def register(app: Flask, container: Container) -> None:
    recap_required = recap_access_required(container)

    def _filters() -> dict:
        try:
            start_date = parse_optional_date(request.args.get("start"))
            end_date = parse_optional_date(request.args.get("end"))
        except ValueError:
            raise ValidationError("Dates must use the YYYY-MM-DD format")
        return {
            "start_date": start_date,
            "end_date": end_date,
            "department": request.args.get("dept") or None,
        }

    @app.route("/admin/recapitulation", methods=["GET"], endpoint="recap_index")
    @recap_required
    def recap_index():
        return jsonify({"success": True, "reports": container.recap_service.list_reports()})

    @app.route("/admin/recapitulation/<report>", methods=["GET"], endpoint="recap_report")
    @recap_required
    def recap_report(report: str):
        try:
            result = container.recap_service.build_report(report, **_filters())
        except (ValidationError, NotFoundError) as e:
            return error_response(e)
        except Exception:
            app.logger.exception("Failed to load %s recapitulation", report)
            return jsonify({
                "success": False,
                "report": report,
                "rows": [],
                "error": "Failed to fetch data.",
            })

        return jsonify({
            "success": True,
            "report": result.report,
            "title": result.title,
            "departments": result.departments,
            "total_forms": result.total_forms,
            "rows": result.rows,
        })

    @app.route("/admin/recapitulation/<report>/export", methods=["GET"], endpoint="recap_export")
    @recap_required
    def recap_export(report: str):
        try:
            output, filename = container.recap_service.export(report, **_filters())
            return send_file(
                output,
                download_name=filename,
                as_attachment=True,
                mimetype=XLSX_MIMETYPE,
            )
        except (ValidationError, NotFoundError) as e:
            return error_response(e)
        except Exception:
            app.logger.exception("Failed to export %s recapitulation", report)
            return jsonify({"success": False, "message": "Failed to export data."}), 500
