from __future__ import annotations

import io

import pandas as pd
import pytest

from src.approval_portal.approval_portal.approvals.model import ApprovalStep
from src.approval_portal.approval_portal.container import wire
from src.approval_portal.approval_portal.main import create_app
from src.approval_portal.approval_portal.users.department_model import Department
from src.approval_portal.approval_portal.users.model import User
from tests.fakes import FakeDepartmentsRepo, FakeFormsRepo, FakeMailer, FakeSettingsRepo, FakeUsersRepo, make_form


class ExplodingFormsRepo(FakeFormsRepo):
    def list_forms(self, **kwargs):
        raise RuntimeError("db down")


@pytest.fixture
def repos():
    return {
        "users_repo": FakeUsersRepo(
            [
                User(uid="admin", nama="Adi", role="admin", email="adi@example.com"),
                User(uid="mgr", nama="Mira", role="manager", dept="d1", email="mira@example.com"),
                User(uid="staff", nama="Sony", role="staff", dept="d1", email="sony@example.com"),
            ]
        ),
        "departments_repo": FakeDepartmentsRepo([Department("d1", "Sales"), Department("d2", "IT")]),
        "forms_repo": FakeFormsRepo(
            [
                make_form(
                    "f1",
                    type="overtime",
                    dept_id="d1",
                    requester_id="staff",
                    created_at="2024-01-20T08:00:00",
                    approval_flow=(ApprovalStep(role="manager", approver_id="mgr"), ApprovalStep(role="general_manager")),
                    entries=({"employee": {"nik": "1", "nama": "Sony"}, "tanggal": "2024-01-19"},),
                )
            ]
        ),
        "settings_repo": FakeSettingsRepo(),
        "mailer": FakeMailer(),
    }


@pytest.fixture
def client_for(monkeypatch, repos):
    monkeypatch.setenv("APP_ENV", "testing")

    def make(uid=None, **overrides):
        container = wire(**{**repos, **overrides})
        app = create_app(container=container)
        client = app.test_client()
        if uid:
            with client.session_transaction() as sess:
                sess["uid"] = uid
        return client

    return make


def test_admin_pages_redirect_without_principal(client_for):
    resp = client_for().get("/admin/recapitulation")
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/")


def test_admin_pages_redirect_staff_to_dashboard(client_for):
    resp = client_for("staff").get("/admin/departments")
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/dashboard")


def test_unknown_uid_is_treated_as_no_principal(client_for):
    resp = client_for("ghost").get("/dashboard")
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/")


def test_recap_rows(client_for):
    resp = client_for("mgr").get("/admin/recapitulation/overtime?start=2024-01-01&end=2024-01-31&dept=Sales")
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["success"] is True
    assert body["total_forms"] == 1
    assert body["rows"][0]["Form ID"] == "f1"


def test_recap_bad_date_and_unknown_report(client_for):
    client = client_for("admin")
    assert client.get("/admin/recapitulation/overtime?start=01-01-2024").status_code == 400
    assert client.get("/admin/recapitulation/payroll").status_code == 404


def test_recap_fetch_failure_returns_empty_rows(client_for):
    resp = client_for("admin", forms_repo=ExplodingFormsRepo()).get("/admin/recapitulation/leave")
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["rows"] == []
    assert body["error"]


def test_recap_export_download(client_for):
    resp = client_for("admin").get("/admin/recapitulation/overtime/export")
    assert resp.status_code == 200
    assert "overtime_recapitulation.xlsx" in resp.headers["Content-Disposition"]
    df = pd.read_excel(io.BytesIO(resp.data), engine="openpyxl")
    assert df["Form ID"].tolist() == ["f1"]


def test_department_add_and_delete(client_for, repos):
    client = client_for("admin")

    resp = client.post("/admin/departments", json={"name": "sales"})
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "A department with that name already exists."

    resp = client.post("/admin/departments", json={"name": "Finance"})
    assert resp.status_code == 201

    resp = client.post("/admin/departments/d1/delete")
    assert resp.status_code == 400
    assert repos["departments_repo"].deleted == []

    assert client.post("/admin/departments/d2/delete").status_code == 200
    assert client.post("/admin/departments/missing/delete").status_code == 404


def test_department_list_and_manager_assignment(client_for):
    client = client_for("admin")
    client.post("/admin/departments/d1/manager", data={"managerId": "mgr"})

    body = client.get("/admin/departments?q=sal").get_json()
    assert [d["name"] for d in body["departments"]] == ["Sales"]
    assert body["departments"][0]["managerName"] == "Mira"
    assert body["departments"][0]["employeeCount"] == 2
    assert {m["uid"] for m in body["managers"]} == {"mgr"}


def test_user_admin_endpoints(client_for, repos):
    client = client_for("admin")
    assert len(client.get("/admin/users").get_json()["users"]) == 3

    resp = client.post("/admin/users/staff", json={"jabatan": "Supervisor"})
    assert resp.get_json()["user"]["jabatan"] == "Supervisor"

    assert client.post("/admin/users/admin/delete").status_code == 400
    assert client.post("/admin/users/staff/delete").status_code == 200
    assert "staff" not in repos["users_repo"].users


def test_broadcast_settings_roundtrip(client_for):
    client = client_for("admin")
    resp = client.post("/admin/settings/broadcast-emails", json={"hrd": ["hr@example.com", ""]})
    assert resp.status_code == 200

    body = client.get("/admin/settings/broadcast-emails").get_json()
    assert body["settings"]["hrd"] == ["hr@example.com"]

    resp = client.post("/admin/settings/broadcast-emails", json={"hrd": [f"h{i}@example.com" for i in range(6)]})
    assert resp.status_code == 400


def test_broadcast_settings_accepts_form_posts(client_for):
    client = client_for("admin")

    resp = client.post("/admin/settings/broadcast-emails", data={"hrd": "hr@example.com"})
    assert resp.status_code == 200
    assert resp.get_json()["settings"]["hrd"] == ["hr@example.com"]

    resp = client.post("/admin/settings/broadcast-emails", data={"finance": ["f1@example.com", "f2@example.com"]})
    assert resp.status_code == 200
    assert resp.get_json()["settings"]["finance"] == ["f1@example.com", "f2@example.com"]

    assert client.post("/admin/settings/broadcast-emails", data={"managers": "m@example.com"}).status_code == 400


def test_approval_queue_and_decision(client_for, repos):
    client = client_for("mgr")

    forms = client.get("/approvals").get_json()["forms"]
    assert [(f["id"], f["canApprove"]) for f in forms] == [("f1", True)]

    resp = client.post("/approvals/f1/approve", json={"comment": "ok"})
    assert resp.status_code == 200
    assert resp.get_json()["form"]["status"] == "manager_approved"
    assert repos["forms_repo"].forms["f1"].approval_flow[0].status == "approved"

    assert client.post("/approvals/f1/approve").status_code == 403
    assert client.post("/approvals/f1/maybe").status_code == 404


def test_dashboard_and_history(client_for):
    client = client_for("staff")
    assert client.get("/dashboard").get_json()["counts"] == {"pending": 1}
    forms = client.get("/history").get_json()["forms"]
    assert forms[0]["finalStatus"]["text"] == "PENDING"


def test_send_full_broadcast(client_for, repos):
    client = client_for()

    resp = client.post("/api/send-full-broadcast", json={})
    assert resp.status_code == 400
    assert resp.get_json() == {"success": False, "message": "Form ID is required."}

    assert client.post("/api/send-full-broadcast", json={"formId": "nope"}).status_code == 404

    resp = client.post("/api/send-full-broadcast", json={"formId": "f1"})
    assert resp.get_json() == {"success": True, "message": "Approval request email sent successfully."}
    assert [m.to for m in repos["mailer"].sent] == ["mira@example.com"]


def test_send_full_broadcast_mailer_failure(client_for):
    resp = client_for(mailer=FakeMailer(fail=True)).post("/api/send-full-broadcast", json={"formId": "f1"})
    assert resp.status_code == 500
    assert resp.get_json() == {"success": False, "message": "Failed to send email."}


def test_submit_form_stores_it_and_mails_the_manager(client_for, repos):
    client = client_for("staff")

    resp = client.post(
        "/forms/leave",
        json={"jenisCuti": "Annual", "alasan": "Family", "entry": {"tanggalMulai": "2024-03-11", "tanggalSelesai": "2024-03-12"}},
    )

    assert resp.status_code == 201
    body = resp.get_json()
    assert body["success"] is True
    assert body["emailSent"] is True
    assert body["id"].startswith("cuti-")

    stored = repos["forms_repo"].forms[body["id"]]
    assert stored.requester_id == "staff"
    assert stored.approval_flow[0].approver_id == "mgr"
    assert stored.entries[0]["totalHari"] == 2
    assert [m.to for m in repos["mailer"].sent] == ["mira@example.com"]


def test_submit_form_keeps_the_form_when_mail_fails(client_for, repos):
    forms_repo = repos["forms_repo"]
    resp = client_for("staff", mailer=FakeMailer(fail=True)).post(
        "/forms/overtime",
        json={"entry": {"tanggal": "2024-03-01", "jamMulai": "17:00", "jamSelesai": "19:00"}},
    )

    assert resp.status_code == 201
    assert resp.get_json()["emailSent"] is False
    assert len(forms_repo.created) == 1


def test_submit_form_errors(client_for):
    assert client_for().post("/forms/leave", json={}).status_code == 302

    client = client_for("staff")
    resp = client.post("/forms/leave", json={"entry": {"tanggalMulai": "2024-03-11", "tanggalSelesai": "2024-03-11"}})
    assert resp.status_code == 400
    assert client.post("/forms/resign", json={}).status_code == 404

    resp = client_for("admin").post("/forms/sick_leave", json={"entry": {"tanggalMulai": "2024-03-11", "tanggalSelesai": "2024-03-11"}})
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Manager data not found for your department. Please contact HR."
