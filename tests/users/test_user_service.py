from __future__ import annotations

import pytest

from src.approval_portal.approval_portal.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.approval_portal.approval_portal.users.model import User
from src.approval_portal.approval_portal.users.service import UserService
from tests.fakes import FakeUsersRepo

ADMIN = User(uid="a1", nama="Adi", role="admin")
STAFF = User(uid="s1", nama="Sony", role="staff")


def _service():
    repo = FakeUsersRepo([ADMIN, STAFF, User(uid="u1", nama="Ani", role="staff", email="ani@example.com")])
    return UserService(repo), repo


def test_admin_access_roles():
    svc, _ = _service()
    assert svc.has_admin_access(ADMIN)
    assert svc.has_admin_access(User(uid="h", nama="H", role="hrd"))
    assert not svc.has_admin_access(User(uid="f", nama="F", role="finance"))
    assert not svc.has_admin_access(None)


def test_get_principal():
    svc, _ = _service()
    assert svc.get("a1") == ADMIN
    assert svc.get(None) is None
    assert svc.get("") is None


def test_update_user_cleans_editable_fields():
    svc, repo = _service()
    user = svc.update_user(
        current_user=ADMIN,
        uid="u1",
        changes={"nama": " Ani S ", "jabatan": "Supervisor", "password": "x"},
    )
    assert user.nama == "Ani S"
    assert user.jabatan == "Supervisor"
    assert repo.updated == [("u1", {"nama": "Ani S", "jabatan": "Supervisor"})]


def test_update_user_validation():
    svc, repo = _service()
    with pytest.raises(ValidationError):
        svc.update_user(current_user=ADMIN, uid="u1", changes={"nama": ""})
    with pytest.raises(ValidationError):
        svc.update_user(current_user=ADMIN, uid="u1", changes={"email": "not-an-email"})
    with pytest.raises(ValidationError):
        svc.update_user(current_user=ADMIN, uid="u1", changes={})
    with pytest.raises(NotFoundError):
        svc.update_user(current_user=ADMIN, uid="ghost", changes={"nama": "X"})
    with pytest.raises(AuthorizationError):
        svc.update_user(current_user=STAFF, uid="u1", changes={"nama": "X"})
    assert repo.updated == []


def test_delete_user():
    svc, repo = _service()
    with pytest.raises(ValidationError):
        svc.delete_user(current_user=ADMIN, uid="a1")
    with pytest.raises(AuthorizationError):
        svc.delete_user(current_user=STAFF, uid="u1")

    svc.delete_user(current_user=ADMIN, uid="u1")
    assert repo.get_by_uid("u1") is None
