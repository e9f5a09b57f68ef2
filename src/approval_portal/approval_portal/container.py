from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .approvals.service import ApprovalService
from .core.constants import DEFAULT_APP_NAME
from .database.connection import DBConfig, DatabaseConnection
from .forms.mysql_form_repository import MySQLFormRepository
from .forms.repository import FormRepository
from .forms.service import FormService
from .notifications.mailer import Mailer, SMTPConfig, SMTPMailer
from .notifications.service import NotificationService
from .recap.service import RecapService
from .settings.mysql_settings_repository import MySQLSettingsRepository
from .settings.repository import SettingsRepository
from .settings.service import BroadcastSettingsService
from .users.department_repository import DepartmentRepository
from .users.department_service import DepartmentService
from .users.mysql_department_repository import MySQLDepartmentRepository
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import UserService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    departments_repo: DepartmentRepository
    forms_repo: FormRepository
    settings_repo: SettingsRepository
    mailer: Mailer

    user_service: UserService
    department_service: DepartmentService
    form_service: FormService
    approval_service: ApprovalService
    recap_service: RecapService
    broadcast_settings_service: BroadcastSettingsService
    notification_service: NotificationService


def wire(
    *,
    users_repo: UserRepository,
    departments_repo: DepartmentRepository,
    forms_repo: FormRepository,
    settings_repo: SettingsRepository,
    mailer: Mailer,
    conn: Optional[DatabaseConnection] = None,
    base_url: str = "",
    app_name: str = DEFAULT_APP_NAME,
) -> Container:
    """Build the services on top of the given repositories."""

    broadcast_settings_service = BroadcastSettingsService(settings_repo)
    return Container(
        conn=conn,
        users_repo=users_repo,
        departments_repo=departments_repo,
        forms_repo=forms_repo,
        settings_repo=settings_repo,
        mailer=mailer,
        user_service=UserService(users_repo),
        department_service=DepartmentService(departments_repo, users_repo),
        form_service=FormService(forms_repo, users_repo, departments_repo),
        approval_service=ApprovalService(forms_repo),
        recap_service=RecapService(forms_repo, departments_repo),
        broadcast_settings_service=broadcast_settings_service,
        notification_service=NotificationService(
            forms=forms_repo,
            users=users_repo,
            settings=broadcast_settings_service,
            mailer=mailer,
            base_url=base_url,
            app_name=app_name,
        ),
    )


def build_container(*, db_config: dict, mail_config: SMTPConfig, base_url: str = "", app_name: str = DEFAULT_APP_NAME) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return wire(
        conn=conn,
        users_repo=MySQLUserRepository(conn),
        departments_repo=MySQLDepartmentRepository(conn),
        forms_repo=MySQLFormRepository(conn),
        settings_repo=MySQLSettingsRepository(conn),
        mailer=SMTPMailer(mail_config),
        base_url=base_url,
        app_name=app_name,
    )
