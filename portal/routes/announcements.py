# Hippies Portal - Announcement Routes

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from portal.database import get_db
from portal.dependencies import client_ip, get_current_user, get_notifier, require_admin
from portal.models.announcement import Announcement
from portal.models.employee import Employee
from portal.services.announcement import AnnouncementService


router = APIRouter(prefix="/api/announcements", tags=["announcements"])


class AnnouncementCreate(BaseModel):
    title: str
    content: str


class AnnouncementUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None


class AnnouncementResponse(BaseModel):
    announcement_id: int
    title: str
    content: str
    created_by: Optional[int] = None
    author_name: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class AnnouncementPage(BaseModel):
    items: list[AnnouncementResponse]
    page: int
    page_size: int
    total: int
    pages: int


def announcement_response(announcement: Announcement) -> AnnouncementResponse:
    return AnnouncementResponse(
        announcement_id=announcement.announcement_id,
        title=announcement.title,
        content=announcement.content,
        created_by=announcement.created_by,
        author_name=announcement.author.full_name if announcement.author else None,
        created_at=announcement.created_at,
        updated_at=announcement.updated_at,
    )


@router.get("", response_model=AnnouncementPage)
def list_announcements(
    page: int = Query(1),
    page_size: Optional[int] = Query(None, ge=1, le=100),
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = AnnouncementService(db, user.employee_id).list_page(page, page_size)
    result["items"] = [announcement_response(a) for a in result["items"]]
    return result


@router.get("/{announcement_id}", response_model=AnnouncementResponse)
def get_announcement(
    announcement_id: int,
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return announcement_response(AnnouncementService(db, user.employee_id).get(announcement_id))


@router.post("", response_model=AnnouncementResponse, status_code=status.HTTP_201_CREATED)
def create_announcement(
    payload: AnnouncementCreate,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Saved, then pushed to everyone connected."""
    service = AnnouncementService(db, user.employee_id, client_ip(request), notifier=get_notifier(request))
    announcement = service.create(payload.title, payload.content)
    db.commit()
    service.broadcast(announcement)
    return announcement_response(announcement)


@router.patch("/{announcement_id}", response_model=AnnouncementResponse)
def update_announcement(
    announcement_id: int,
    payload: AnnouncementUpdate,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    announcement = AnnouncementService(db, user.employee_id, client_ip(request)).update(
        announcement_id, payload.title, payload.content
    )
    db.commit()
    return announcement_response(announcement)


@router.delete("/{announcement_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_announcement(
    announcement_id: int,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    AnnouncementService(db, user.employee_id, client_ip(request)).delete(announcement_id)
    db.commit()
