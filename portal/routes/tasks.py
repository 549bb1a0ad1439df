# Hippies Portal - Task Routes

from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from portal.database import get_db
from portal.dependencies import client_ip, get_current_user, get_notifier, require_admin
from portal.models.employee import Employee
from portal.models.task import Task
from portal.services.task import TaskService


router = APIRouter(prefix="/api/tasks", tags=["tasks"])


# Request/Response models

class TaskCreate(BaseModel):
    title: str
    description: Optional[str] = None
    assigned_to: Optional[int] = None
    priority: Optional[str] = None
    status: Optional[str] = None
    due_date: Optional[date] = None
    subitems: list[str] = []


class TaskUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    assigned_to: Optional[int] = None
    priority: Optional[str] = None
    status: Optional[str] = None
    due_date: Optional[date] = None


class StatusUpdate(BaseModel):
    status: str


class SubitemIn(BaseModel):
    title: str


class SubitemToggle(BaseModel):
    completed: Optional[bool] = None


class CommentIn(BaseModel):
    content: str


class SubitemResponse(BaseModel):
    subitem_id: int
    title: str
    completed: bool


class CommentResponse(BaseModel):
    comment_id: int
    commenter_id: int
    commenter_name: Optional[str] = None
    content: str
    created_at: datetime


class TaskResponse(BaseModel):
    task_id: int
    title: str
    description: Optional[str] = None
    assigned_to: Optional[int] = None
    assignee_name: Optional[str] = None
    priority: str
    status: str
    due_date: Optional[date] = None
    progress: int
    subitems: list[SubitemResponse] = []
    comments: Optional[list[CommentResponse]] = None


def task_response(task: Task, with_comments: bool = False) -> TaskResponse:
    return TaskResponse(
        task_id=task.task_id,
        title=task.title,
        description=task.description,
        assigned_to=task.assigned_to,
        assignee_name=task.assignee.full_name if task.assignee else None,
        priority=task.priority,
        status=task.status,
        due_date=task.due_date,
        progress=task.progress,
        subitems=[
            SubitemResponse(subitem_id=s.subitem_id, title=s.title, completed=s.completed)
            for s in task.subitems
        ],
        comments=[
            CommentResponse(
                comment_id=c.comment_id,
                commenter_id=c.commenter_id,
                commenter_name=c.commenter.full_name if c.commenter else None,
                content=c.content,
                created_at=c.created_at,
            )
            for c in task.comments
        ] if with_comments else None,
    )


def task_service(request: Request, db: Session, user: Employee) -> TaskService:
    return TaskService(db, user.employee_id, client_ip(request), notifier=get_notifier(request))


# Listing and detail

@router.get("", response_model=list[TaskResponse])
def list_tasks(
    status_filter: Optional[str] = Query(None, alias="status"),
    assigned_to: Optional[int] = Query(None),
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return [task_response(t) for t in TaskService(db, user.employee_id).list_tasks(status_filter, assigned_to)]


@router.get("/me", response_model=list[TaskResponse])
def my_tasks(
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return [task_response(t) for t in TaskService(db, user.employee_id).my_tasks(user.employee_id)]


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: int,
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Task with subitems and comments (oldest first)."""
    return task_response(TaskService(db, user.employee_id).get_task_for(user, task_id), with_comments=True)


# Admin

@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    payload: TaskCreate,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    service = task_service(request, db, user)
    task = service.create_task(payload.model_dump())
    db.commit()
    service.notify_assigned(task)
    return task_response(task)


@router.patch("/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: int,
    payload: TaskUpdate,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    service = task_service(request, db, user)
    task, reassigned = service.update_task(task_id, payload.model_dump(exclude_unset=True))
    db.commit()
    if reassigned:
        service.notify_assigned(task)
    return task_response(task)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    task_id: int,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    task_service(request, db, user).delete_task(task_id)
    db.commit()


@router.post("/{task_id}/subitems", response_model=SubitemResponse, status_code=status.HTTP_201_CREATED)
def add_subitem(
    task_id: int,
    payload: SubitemIn,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    subitem = task_service(request, db, user).add_subitem(task_id, payload.title)
    db.commit()
    return SubitemResponse(subitem_id=subitem.subitem_id, title=subitem.title, completed=subitem.completed)


@router.patch("/subitems/{subitem_id}", response_model=SubitemResponse)
def rename_subitem(
    subitem_id: int,
    payload: SubitemIn,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    subitem = task_service(request, db, user).rename_subitem(subitem_id, payload.title)
    db.commit()
    return SubitemResponse(subitem_id=subitem.subitem_id, title=subitem.title, completed=subitem.completed)


@router.delete("/subitems/{subitem_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_subitem(
    subitem_id: int,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    task_service(request, db, user).delete_subitem(subitem_id)
    db.commit()


# Assignee (admins pass the same checks)

@router.post("/{task_id}/status", response_model=TaskResponse)
def update_status(
    task_id: int,
    payload: StatusUpdate,
    request: Request,
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    task = task_service(request, db, user).update_status(user, task_id, payload.status)
    db.commit()
    return task_response(task)


@router.post("/subitems/{subitem_id}/toggle", response_model=SubitemResponse)
def toggle_subitem(
    subitem_id: int,
    payload: SubitemToggle,
    request: Request,
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    subitem = task_service(request, db, user).toggle_subitem(user, subitem_id, payload.completed)
    db.commit()
    return SubitemResponse(subitem_id=subitem.subitem_id, title=subitem.title, completed=subitem.completed)


@router.post("/{task_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
def add_comment(
    task_id: int,
    payload: CommentIn,
    request: Request,
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    comment = task_service(request, db, user).add_comment(user, task_id, payload.content)
    db.commit()
    return CommentResponse(
        comment_id=comment.comment_id,
        commenter_id=comment.commenter_id,
        commenter_name=user.full_name,
        content=comment.content,
        created_at=comment.created_at,
    )
