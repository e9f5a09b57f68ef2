from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import current_user, error_response, login_required, request_data, server_error
from ..core.exceptions import NotFoundError, ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    principal_required = login_required(container)

    @app.route("/forms/<form_type>", methods=["POST"], endpoint="submit_form")
    @principal_required
    def submit_form(form_type: str):
        user = current_user(container)
        try:
            form = container.form_service.submit(user=user, form_type=form_type, data=request_data())
        except (ValidationError, NotFoundError) as e:
            return error_response(e)
        except Exception:
            return server_error("Failed to submit the form")

        # The form is stored either way; a failed mail is reported, not rolled back.
        try:
            email_sent = container.notification_service.send_approval_request(form)
        except Exception:
            app.logger.exception("Approval request e-mail for form %s failed", form.form_id)
            email_sent = False

        return (
            jsonify(
                {
                    "success": True,
                    "id": form.form_id,
                    "status": form.status,
                    "emailSent": email_sent,
                    "message": "Form submitted successfully.",
                }
            ),
            201,
        )
