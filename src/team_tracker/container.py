from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Optional

from .activity.client import HubstaffClient
from .activity.service import ActivityReportService, ActivitySource
from .auth.mysql_user_repository import MySQLUserRepository
from .auth.policy import AccessPolicy
from .auth.repository import UserRepository
from .auth.service import AuthService
from .database.connection import DBConfig, DatabaseConnection
from .notifications.dispatch import NotificationDispatcher
from .notifications.mailer import EmailSender, build_email_sender
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .notifications.outbox import Outbox, build_outbox
from .notifications.repository import NotificationRepository
from .notifications.service import NotificationService
from .reports.service import BudgetService, TaskReportService
from .tasks.mysql_task_repository import MySQLTaskRepository
from .tasks.repository import TaskRepository
from .tasks.service import TaskService
from .teams.mysql_team_repository import MySQLPCRepository, MySQLTeamRepository
from .teams.repository import PCRepository, TeamRepository
from .teams.service import TeamService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]
    clock: Callable[[], date]
    access_policy: AccessPolicy

    users_repo: UserRepository
    teams_repo: TeamRepository
    pcs_repo: PCRepository
    tasks_repo: TaskRepository
    notifications_repo: NotificationRepository

    email_sender: EmailSender
    outbox: Outbox
    dispatcher: NotificationDispatcher

    auth_service: AuthService
    team_service: TeamService
    task_service: TaskService
    notification_service: NotificationService
    activity_service: ActivityReportService
    task_report_service: TaskReportService
    budget_service: BudgetService


def assemble_container(
    *,
    settings: Any,
    users_repo: UserRepository,
    teams_repo: TeamRepository,
    pcs_repo: PCRepository,
    tasks_repo: TaskRepository,
    notifications_repo: NotificationRepository,
    activity_source: ActivitySource,
    email_sender: EmailSender,
    outbox: Outbox,
    clock: Callable[[], date] = date.today,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services on top of the given repositories and adapters."""
    dispatcher = NotificationDispatcher(
        notifications_repo,
        pcs_repo,
        email_sender,
        outbox,
        tracker_url=getattr(settings, "TRACKER_URL", ""),
        cc=getattr(settings, "NOTIFICATION_CC", ()),
    )

    return Container(
        conn=conn,
        clock=clock,
        access_policy=AccessPolicy(),
        users_repo=users_repo,
        teams_repo=teams_repo,
        pcs_repo=pcs_repo,
        tasks_repo=tasks_repo,
        notifications_repo=notifications_repo,
        email_sender=email_sender,
        outbox=outbox,
        dispatcher=dispatcher,
        auth_service=AuthService(
            users_repo,
            pcs_repo,
            manager_passkey=getattr(settings, "MANAGER_PASSKEY", ""),
            pc_passkey=getattr(settings, "PC_PASSKEY", ""),
        ),
        team_service=TeamService(teams_repo, pcs_repo),
        task_service=TaskService(tasks_repo, dispatcher, clock=clock),
        notification_service=NotificationService(notifications_repo),
        activity_service=ActivityReportService(activity_source, teams_repo),
        task_report_service=TaskReportService(teams_repo),
        budget_service=BudgetService(),
    )


def build_container(*, settings: Any) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(getattr(settings, "DB_CONFIG")))

    return assemble_container(
        settings=settings,
        users_repo=MySQLUserRepository(conn),
        teams_repo=MySQLTeamRepository(conn),
        pcs_repo=MySQLPCRepository(conn),
        tasks_repo=MySQLTaskRepository(conn),
        notifications_repo=MySQLNotificationRepository(conn),
        activity_source=HubstaffClient(
            base_url=getattr(settings, "HUBSTAFF_API_URL", ""),
            token=getattr(settings, "HUBSTAFF_TOKEN", ""),
            org_id=getattr(settings, "HUBSTAFF_ORG_ID", ""),
        ),
        email_sender=build_email_sender(settings),
        outbox=build_outbox(getattr(settings, "NOTIFICATION_WORKERS", 0)),
        conn=conn,
    )
