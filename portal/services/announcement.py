# Hippies Portal - Announcement Service

from datetime import datetime
from math import ceil
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from portal.config import get_settings
from portal.models.announcement import Announcement
from portal.services.audit import AuditService
from portal.services.errors import NotFoundError
from portal.services.realtime import NullNotifier
from portal.services.validation import require_text


settings = get_settings()


class AnnouncementService:
    """
    Staff announcements, newest first.

    Usage:
        service = AnnouncementService(db, admin.employee_id, ip, notifier=notifier)
        announcement = service.create("Inventory Friday", "Everyone in at 9.")
        db.commit()
        service.broadcast(announcement)
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

    def get(self, announcement_id: int) -> Announcement:
        announcement = self.db.get(Announcement, announcement_id)
        if not announcement:
            raise NotFoundError(f"Announcement {announcement_id} not found")
        return announcement

    def list_page(self, page: int = 1, page_size: Optional[int] = None) -> dict[str, Any]:
        """One page of announcements plus total and page count."""
        if page < 1:
            raise ValueError("Page must be 1 or greater")
        page_size = page_size or settings.announcements_page_size

        total = self.db.execute(select(func.count(Announcement.announcement_id))).scalar_one()
        items = self.db.execute(
            select(Announcement)
            .options(joinedload(Announcement.author))
            .order_by(Announcement.created_at.desc(), Announcement.announcement_id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        ).scalars().all()

        return {
            "items": items,
            "page": page,
            "page_size": page_size,
            "total": total,
            "pages": max(1, ceil(total / page_size)),
        }

    def latest(self, limit: int = 3) -> list[Announcement]:
        return self.db.execute(
            select(Announcement)
            .order_by(Announcement.created_at.desc(), Announcement.announcement_id.desc())
            .limit(limit)
        ).scalars().all()

    def create(self, title: str, content: str) -> Announcement:
        announcement = Announcement(
            title=require_text(title, "Title"),
            content=require_text(content, "Content"),
            created_by=self.current_user_id,
            created_at=datetime.utcnow(),
        )
        self.db.add(announcement)
        self.db.flush()
        self.audit.log_insert(announcement)
        return announcement

    def update(self, announcement_id: int, title: Optional[str] = None, content: Optional[str] = None) -> Announcement:
        announcement = self.get(announcement_id)
        changes = {}
        if title is not None:
            changes["title"] = require_text(title, "Title")
        if content is not None:
            changes["content"] = require_text(content, "Content")
        self.audit.update_fields(announcement, changes)
        return announcement

    def delete(self, announcement_id: int) -> None:
        announcement = self.get(announcement_id)
        self.audit.log_delete(announcement)
        self.db.delete(announcement)

    def broadcast(self, announcement: Announcement) -> None:
        self.notifier.publish(
            None,
            "announcement.new",
            {
                "announcement_id": announcement.announcement_id,
                "title": announcement.title,
                "created_at": announcement.created_at.isoformat(),
            },
        )
