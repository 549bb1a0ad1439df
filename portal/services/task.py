# Hippies Portal - Task Service
# Task assignment, checklists and comments

from datetime import date
from typing import Any, Optional
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload, selectinload

from portal.models.employee import Employee
from portal.models.task import Task, TaskComment, TaskSubitem, TASK_PRIORITIES, TASK_STATUSES
from portal.services.audit import AuditService
from portal.services.auth import AuthorizationError
from portal.services.errors import NotFoundError
from portal.services.realtime import NullNotifier
from portal.services.validation import optional_text, require_choice, require_text


logger = logging.getLogger(__name__)


def task_summary(task: Task) -> dict[str, Any]:
    """Payload pushed with task.assigned."""
    return {
        "task_id": task.task_id,
        "title": task.title,
        "priority": task.priority,
        "status": task.status,
        "due_date": task.due_date.isoformat() if task.due_date else None,
    }


class TaskService:
    """
    Service for tasks and their subitems / comments.

    Usage:
        service = TaskService(db, admin.employee_id, ip, notifier=request.app.state.notifier)

        task = service.create_task({"title": "Count the safe", "assigned_to": 7})
        service.add_subitem(task.task_id, "Count twenties")

        # employee side
        TaskService(db, 7).toggle_subitem(employee, subitem_id)

    The assignee is notified after the caller commits; call
    notify_assigned() then.
    """

    def __init__(
        self,
        db: Session,
        current_user_id: Optional[int],
        ip_address: Optional[str] = None,
        notifier=None,
    ):
        self.db = db
        self.current_user_id = current_user_id
        self.audit = AuditService(db, current_user_id, ip_address)
        self.notifier = notifier or NullNotifier()

    def get_task(self, task_id: int) -> Task:
        task = self.db.get(Task, task_id)
        if not task:
            raise NotFoundError(f"Task {task_id} not found")
        return task

    def get_task_for(self, viewer: Employee, task_id: int) -> Task:
        """Task with subitems and comments; employees only see their own."""
        task = self.db.execute(
            select(Task)
            .options(
                joinedload(Task.assignee),
                selectinload(Task.subitems),
                selectinload(Task.comments).joinedload(TaskComment.commenter),
            )
            .where(Task.task_id == task_id)
        ).scalars().first()
        if not task:
            raise NotFoundError(f"Task {task_id} not found")
        self._check_access(viewer, task)
        return task

    def list_tasks(
        self,
        status: Optional[str] = None,
        assigned_to: Optional[int] = None,
    ) -> list[Task]:
        query = select(Task).options(joinedload(Task.assignee), selectinload(Task.subitems))

        if status:
            require_choice(status, TASK_STATUSES, "Status")
            query = query.where(Task.status == status)
        if assigned_to is not None:
            query = query.where(Task.assigned_to == assigned_to)

        return self.db.execute(
            query.order_by(Task.created_at.desc(), Task.task_id.desc())
        ).scalars().all()

    def my_tasks(self, employee_id: int, open_only: bool = False) -> list[Task]:
        query = (
            select(Task)
            .options(selectinload(Task.subitems))
            .where(Task.assigned_to == employee_id)
        )
        if open_only:
            query = query.where(Task.status != "Completed")

        return self.db.execute(
            query.order_by(Task.due_date.is_(None), Task.due_date, Task.task_id)
        ).scalars().all()

    # =========================================================================
    # Admin
    # =========================================================================

    def create_task(self, fields: dict[str, Any]) -> Task:
        values = self._clean_task(fields, creating=True)

        task = Task(**values, created_by=self.current_user_id)
        self.db.add(task)
        self.db.flush()
        self.audit.log_insert(task)

        for title in fields.get("subitems") or []:
            task.subitems.append(TaskSubitem(title=require_text(title, "Subitem title")))
        self.db.flush()
        return task

    def update_task(self, task_id: int, fields: dict[str, Any]) -> tuple[Task, bool]:
        """
        Partial update. Returns (task, reassigned) so the caller can
        notify a new assignee after committing.
        """
        task = self.get_task(task_id)
        values = self._clean_task(fields, creating=False)
        reassigned = "assigned_to" in values and values["assigned_to"] not in (None, task.assigned_to)

        self.audit.update_fields(task, values)
        return task, reassigned

    def delete_task(self, task_id: int) -> None:
        task = self.get_task(task_id)
        self.audit.log_delete(task)
        self.db.delete(task)

    def add_subitem(self, task_id: int, title: str) -> TaskSubitem:
        task = self.get_task(task_id)
        subitem = TaskSubitem(title=require_text(title, "Subitem title"))
        task.subitems.append(subitem)
        self.db.flush()
        return subitem

    def rename_subitem(self, subitem_id: int, title: str) -> TaskSubitem:
        subitem = self._get_subitem(subitem_id)
        subitem.title = require_text(title, "Subitem title")
        return subitem

    def delete_subitem(self, subitem_id: int) -> None:
        subitem = self._get_subitem(subitem_id)
        self.db.delete(subitem)

    # =========================================================================
    # Assignee
    # =========================================================================

    def update_status(self, viewer: Employee, task_id: int, status: str) -> Task:
        require_choice(status, TASK_STATUSES, "Status")
        task = self.get_task(task_id)
        self._check_access(viewer, task)

        self.audit.update_fields(task, {"status": status})
        return task

    def toggle_subitem(self, viewer: Employee, subitem_id: int, completed: Optional[bool] = None) -> TaskSubitem:
        """Flip (or set) a checklist entry on a task the viewer can see."""
        subitem = self._get_subitem(subitem_id)
        self._check_access(viewer, subitem.task)

        subitem.completed = (not subitem.completed) if completed is None else bool(completed)
        return subitem

    def add_comment(self, viewer: Employee, task_id: int, content: str) -> TaskComment:
        task = self.get_task(task_id)
        self._check_access(viewer, task)

        comment = TaskComment(
            commenter_id=viewer.employee_id,
            content=require_text(content, "Comment"),
        )
        task.comments.append(comment)
        self.db.flush()
        return comment

    def notify_assigned(self, task: Task) -> None:
        if task.assigned_to is None:
            return
        self.notifier.publish([task.assigned_to], "task.assigned", task_summary(task))
        logger.info("Task %s assigned to employee %s", task.task_id, task.assigned_to)

    # Validation helpers

    def _get_subitem(self, subitem_id: int) -> TaskSubitem:
        subitem = self.db.get(TaskSubitem, subitem_id)
        if not subitem:
            raise NotFoundError(f"Subitem {subitem_id} not found")
        return subitem

    def _check_access(self, viewer: Employee, task: Task) -> None:
        if viewer.is_admin:
            return
        if task.assigned_to != viewer.employee_id:
            raise AuthorizationError("This task is not assigned to you")

    def _clean_task(self, fields: dict[str, Any], creating: bool) -> dict[str, Any]:
        values = {}

        if creating or "title" in fields:
            values["title"] = require_text(fields.get("title"), "Title")
        if "description" in fields:
            values["description"] = optional_text(fields.get("description"))
        if creating or "priority" in fields:
            values["priority"] = require_choice(fields.get("priority") or "Medium", TASK_PRIORITIES, "Priority")
        if creating or "status" in fields:
            values["status"] = require_choice(fields.get("status") or "Pending", TASK_STATUSES, "Status")
        if "due_date" in fields:
            due = fields.get("due_date")
            if due is not None and not isinstance(due, date):
                raise ValueError("Due date must be a date")
            values["due_date"] = due
        if "assigned_to" in fields:
            assignee = fields.get("assigned_to")
            if assignee is not None:
                exists = self.db.execute(
                    select(Employee.employee_id)
                    .where(Employee.employee_id == assignee)
                    .where(Employee.is_active == True)
                ).scalar_one_or_none()
                if not exists:
                    raise ValueError(f"Employee {assignee} not found or inactive")
            values["assigned_to"] = assignee

        return values
