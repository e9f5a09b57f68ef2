from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import current_user, error_response, recap_access_required, request_data, server_error
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..container import Container
from .service import EDITABLE_FIELDS


def register(app: Flask, container: Container) -> None:
    admin_required = recap_access_required(container)

    @app.route("/admin/departments", methods=["GET", "POST"], endpoint="departments")
    @admin_required
    def departments():
        if request.method == "POST":
            try:
                dept_id = container.department_service.add_department(name=str(request_data().get("name") or ""))
                return jsonify({"success": True, "id": dept_id, "message": "Department added."}), 201
            except ValidationError as e:
                return error_response(e)
            except Exception:
                return server_error("Failed to add department")

        try:
            items = container.department_service.list_departments(search=request.args.get("q"))
            candidates = container.department_service.list_manager_candidates()
        except Exception:
            app.logger.exception("Failed to load departments")
            return jsonify({"success": False, "departments": [], "managers": [], "error": "Failed to fetch data."})

        return jsonify({
            "success": True,
            "departments": [d.as_dict() for d in items],
            "managers": [{"uid": u.uid, "nama": u.nama, "nik": u.nik} for u in candidates],
        })

    @app.route("/admin/departments/<dept_id>/delete", methods=["POST"], endpoint="delete_department")
    @admin_required
    def delete_department(dept_id: str):
        try:
            container.department_service.delete_department(dept_id=dept_id)
            return jsonify({"success": True, "message": "Department deleted."})
        except (ValidationError, NotFoundError) as e:
            return error_response(e)
        except Exception:
            return server_error("Failed to delete department")

    @app.route("/admin/departments/<dept_id>/manager", methods=["POST"], endpoint="assign_manager")
    @admin_required
    def assign_manager(dept_id: str):
        try:
            dept = container.department_service.assign_manager(
                dept_id=dept_id,
                manager_uid=request_data().get("managerId"),
            )
            return jsonify({"success": True, "department": dept.as_dict()})
        except (ValidationError, NotFoundError) as e:
            return error_response(e)
        except Exception:
            return server_error("Failed to assign manager")

    @app.route("/admin/users", methods=["GET"], endpoint="users")
    @admin_required
    def users():
        try:
            items = container.user_service.list_users()
        except Exception:
            app.logger.exception("Failed to load users")
            return jsonify({"success": False, "users": [], "error": "Failed to fetch data."})
        return jsonify({"success": True, "users": [u.as_dict() for u in items]})

    @app.route("/admin/users/<uid>", methods=["POST"], endpoint="update_user")
    @admin_required
    def update_user(uid: str):
        data = request_data()
        changes = {k: data[k] for k in EDITABLE_FIELDS if k in data}
        try:
            user = container.user_service.update_user(current_user=current_user(container), uid=uid, changes=changes)
            return jsonify({"success": True, "user": user.as_dict()})
        except (ValidationError, AuthorizationError, NotFoundError) as e:
            return error_response(e)
        except Exception:
            return server_error("Failed to update user")

    @app.route("/admin/users/<uid>/delete", methods=["POST"], endpoint="delete_user")
    @admin_required
    def delete_user(uid: str):
        try:
            container.user_service.delete_user(current_user=current_user(container), uid=uid)
            return jsonify({"success": True, "message": "User deleted."})
        except (ValidationError, AuthorizationError, NotFoundError) as e:
            return error_response(e)
        except Exception:
            return server_error("Failed to delete user")
