# Hippies Portal - SQLAlchemy Models

from .base import Base, TimestampMixin, AuditMixin
from .employee import Employee
from .user_session import UserSession
from .audit_log import AuditLog
from .schedule import Schedule
from .shift_log import ShiftLog
from .time_off import TimeOffRequest
from .payroll import PayrollPeriod, PayrollItem, PayrollInvoice
from .task import Task, TaskSubitem, TaskComment
from .security import (
    CctvCamera,
    CctvLog,
    SoldOutLog,
    DoorLog,
    EmployeeViolation,
    IncidentReport,
    SafeRoomLog,
    CashRemovalLog,
)
from .training import Training, TrainingQuiz, TrainingTracker
from .agreement import Agreement, AgreementTracker
from .hiring import JobOpening, Application
from .announcement import Announcement
from .message import Message

__all__ = [
    "Base",
    "TimestampMixin",
    "AuditMixin",
    "Employee",
    "UserSession",
    "AuditLog",
    "Schedule",
    "ShiftLog",
    "TimeOffRequest",
    "PayrollPeriod",
    "PayrollItem",
    "PayrollInvoice",
    "Task",
    "TaskSubitem",
    "TaskComment",
    "CctvCamera",
    "CctvLog",
    "SoldOutLog",
    "DoorLog",
    "EmployeeViolation",
    "IncidentReport",
    "SafeRoomLog",
    "CashRemovalLog",
    "Training",
    "TrainingQuiz",
    "TrainingTracker",
    "Agreement",
    "AgreementTracker",
    "JobOpening",
    "Application",
    "Announcement",
    "Message",
]
