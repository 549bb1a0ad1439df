# Hippies Portal - Services
# Business logic layer

from .audit import AuditService, AuditQuery
from .auth import AuthService, AuthenticationError, AuthorizationError
from .errors import NotFoundError
from .mail import BrevoMailer, MailError, MailService
from .realtime import ConnectionManager, NullNotifier
from .employee import EmployeeService
from .schedule import ScheduleService
from .shift import ShiftService
from .time_off import TimeOffService
from .payroll import PayrollService
from .task import TaskService
from .security import SecurityService
from .training import TrainingService
from .agreement import AgreementService
from .hiring import HiringService
from .announcement import AnnouncementService
from .messaging import MessagingService

__all__ = [
    "AuditService",
    "AuditQuery",
    "AuthService",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "BrevoMailer",
    "MailError",
    "MailService",
    "ConnectionManager",
    "NullNotifier",
    "EmployeeService",
    "ScheduleService",
    "ShiftService",
    "TimeOffService",
    "PayrollService",
    "TaskService",
    "SecurityService",
    "TrainingService",
    "AgreementService",
    "HiringService",
    "AnnouncementService",
    "MessagingService",
]
