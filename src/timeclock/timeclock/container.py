from __future__ import annotations

from dataclasses import dataclass

from .attendance.classifier import AttendanceClassifier
from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .audit.mysql_audit_repository import MySQLAuditRepository
from .audit.service import AuditService
from .database.connection import DBConfig, DatabaseConnection
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .notifications.service import NotificationService
from .policy.mysql_policy_repository import MySQLPolicyRepository
from .policy.service import PolicyService
from .reports.service import AttendanceReportService
from .requests.mysql_leave_balance_repository import MySQLLeaveBalanceRepository
from .requests.mysql_request_repository import MySQLRequestRepository
from .requests.service import RequestService
from .users.mysql_department_repository import MySQLDepartmentRepository
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import DepartmentService, UserService


@dataclass(frozen=True)
class Container:
    """Wiring of repositories and services.

    Controllers only see services; tests build one with in-memory fakes.
    """

    users_repo: UserRepository
    user_service: UserService
    department_service: DepartmentService
    policy_service: PolicyService
    attendance_service: AttendanceService
    request_service: RequestService
    notification_service: NotificationService
    audit_service: AuditService
    report_service: AttendanceReportService


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    users_repo = MySQLUserRepository(conn)
    departments_repo = MySQLDepartmentRepository(conn)
    policy_repo = MySQLPolicyRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    requests_repo = MySQLRequestRepository(conn)
    balances_repo = MySQLLeaveBalanceRepository(conn)
    notifications_repo = MySQLNotificationRepository(conn)
    audit_repo = MySQLAuditRepository(conn)

    return wire(
        users_repo=users_repo,
        departments_repo=departments_repo,
        policy_repo=policy_repo,
        attendance_repo=attendance_repo,
        requests_repo=requests_repo,
        balances_repo=balances_repo,
        notifications_repo=notifications_repo,
        audit_repo=audit_repo,
    )


def wire(
    *,
    users_repo,
    departments_repo,
    policy_repo,
    attendance_repo,
    requests_repo,
    balances_repo,
    notifications_repo,
    audit_repo,
) -> Container:
    classifier = AttendanceClassifier(strategy_factory=AttendanceStrategyFactory())

    audit_service = AuditService(audit_repo)
    user_service = UserService(users_repo, departments_repo, audit_service)
    department_service = DepartmentService(departments_repo, users_repo, audit_service)
    policy_service = PolicyService(policy_repo, audit_service)
    notification_service = NotificationService(notifications_repo)
    attendance_service = AttendanceService(
        attendance_repo,
        users_repo,
        policy_service,
        requests_repo,
        classifier=classifier,
    )
    request_service = RequestService(
        requests_repo,
        balances_repo,
        attendance_repo,
        user_service,
        policy_service,
        notification_service,
        audit_service,
        classifier=classifier,
    )
    report_service = AttendanceReportService(attendance_service, user_service, departments_repo, policy_service)

    return Container(
        users_repo=users_repo,
        user_service=user_service,
        department_service=department_service,
        policy_service=policy_service,
        attendance_service=attendance_service,
        request_service=request_service,
        notification_service=notification_service,
        audit_service=audit_service,
        report_service=report_service,
    )
