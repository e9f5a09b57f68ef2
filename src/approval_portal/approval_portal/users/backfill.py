"""One-off data migrations for legacy user and form records."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..forms.repository import FormRepository
from .department_repository import DepartmentRepository
from .eligibility import derive_capabilities
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BackfillResult:
    users: int = 0
    forms: int = 0


def backfill_capabilities(users: UserRepository, *, overwrite: bool = False) -> BackfillResult:
    """Persist explicit capabilities derived from role/jabatan.

    Users that already carry capabilities are skipped unless ``overwrite``.
    """

    changed = 0
    for user in users.list_all():
        if user.capabilities is not None and not overwrite:
            continue
        caps = derive_capabilities(user)
        users.set_capabilities(user.uid, caps)
        changed += 1
        logger.info("User %s capabilities -> %s", user.uid, sorted(c.value for c in caps))
    return BackfillResult(users=changed)


def backfill_department_ids(
    users: UserRepository,
    departments: DepartmentRepository,
    forms: FormRepository,
) -> BackfillResult:
    """Rewrite department names stored in ``dept`` fields as department ids.

    Names are matched case-insensitively. Values that match neither an id
    nor a name are left as they are and logged.
    """

    known = departments.list_all()
    ids = {d.dept_id for d in known}
    by_name = {d.name.strip().lower(): d.dept_id for d in known}

    def _to_id(value: str):
        if not value or value in ids:
            return None
        dept_id = by_name.get(value.strip().lower())
        if dept_id is None:
            logger.warning("Unknown department value %r left unchanged", value)
        return dept_id

    user_count = 0
    for user in users.list_all():
        dept_id = _to_id(user.dept)
        if dept_id:
            users.update_user(user.uid, changes={"dept": dept_id})
            user_count += 1

    form_count = 0
    for form in forms.list_forms():
        dept_id = _to_id(form.dept_id or "")
        if dept_id:
            forms.set_department(form.form_id, dept_id)
            form_count += 1

    logger.info("Department ids backfilled: %d user(s), %d form(s)", user_count, form_count)
    return BackfillResult(users=user_count, forms=form_count)


def backfill_created_timestamps(forms: FormRepository) -> BackfillResult:
    """Store the normalized submission time next to each raw ``created_at``.

    Forms whose ``created_at`` cannot be parsed keep a NULL timestamp and
    sort after every dated form.
    """

    changed = 0
    for form in forms.list_forms():
        created = form.created_dt
        if created is None:
            logger.warning("Form %s has unreadable createdAt %r", form.form_id, form.created_at)
            continue
        forms.set_created_ts(form.form_id, created)
        changed += 1

    logger.info("Created timestamps backfilled: %d form(s)", changed)
    return BackfillResult(forms=changed)
