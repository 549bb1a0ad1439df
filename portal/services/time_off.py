# Hippies Portal - Time Off Service

from datetime import date, datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from portal.models.employee import Employee
from portal.models.time_off import TimeOffRequest, TIME_OFF_STATUSES
from portal.services.audit import AuditService
from portal.services.auth import AuthorizationError
from portal.services.errors import NotFoundError
from portal.services.validation import require_choice, require_date_order, require_text


class TimeOffService:
    """
    Leave requests: employees submit, admins approve or deny.

    Usage:
        service = TimeOffService(db, user.employee_id, request.client.host)
        req = service.request_time_off(user.employee_id, date(2025, 7, 1), date(2025, 7, 3), "Family trip")
        service.set_status(req.request_id, "Approved")
    """

    def __init__(
        self,
        db: Session,
        current_user_id: Optional[int],
        ip_address: Optional[str] = None,
    ):
        self.db = db
        self.current_user_id = current_user_id
        self.audit = AuditService(db, current_user_id, ip_address)

    def get_request(self, request_id: int) -> TimeOffRequest:
        request = self.db.get(TimeOffRequest, request_id)
        if not request:
            raise NotFoundError(f"Time off request {request_id} not found")
        return request

    def request_time_off(
        self,
        employee_id: int,
        start_date: date,
        end_date: date,
        reason: Optional[str],
    ) -> TimeOffRequest:
        """
        Raises:
            ValueError: If dates are out of order or reason is blank
        """
        reason_text = require_text(reason, "Reason")
        require_date_order(start_date, end_date)

        exists = self.db.execute(
            select(Employee.employee_id).where(Employee.employee_id == employee_id)
        ).scalar_one_or_none()
        if not exists:
            raise ValueError(f"Employee {employee_id} not found")

        request = TimeOffRequest(
            employee_id=employee_id,
            start_date=start_date,
            end_date=end_date,
            reason=reason_text,
            status="Pending",
            created_by=self.current_user_id,
        )
        self.db.add(request)
        self.db.flush()
        self.audit.log_insert(request)
        return request

    def my_requests(self, employee_id: int) -> list[TimeOffRequest]:
        return self.db.execute(
            select(TimeOffRequest)
            .where(TimeOffRequest.employee_id == employee_id)
            .order_by(TimeOffRequest.start_date.desc(), TimeOffRequest.request_id.desc())
        ).scalars().all()

    def cancel_request(self, employee_id: int, request_id: int) -> None:
        """Employees may withdraw their own request while it is Pending."""
        request = self.get_request(request_id)
        if request.employee_id != employee_id:
            raise AuthorizationError("You can only cancel your own requests")
        if not request.is_pending:
            raise ValueError("Only pending requests can be cancelled")

        self.audit.log_delete(request, context="cancelled by employee")
        self.db.delete(request)

    def list_requests(self, status: Optional[str] = None) -> list[TimeOffRequest]:
        """All requests with their employee loaded, newest first."""
        query = select(TimeOffRequest).options(joinedload(TimeOffRequest.employee))
        if status:
            require_choice(status, TIME_OFF_STATUSES, "Status")
            query = query.where(TimeOffRequest.status == status)

        return self.db.execute(
            query.order_by(TimeOffRequest.created_at.desc(), TimeOffRequest.request_id.desc())
        ).scalars().all()

    def set_status(self, request_id: int, status: str) -> TimeOffRequest:
        require_choice(status, TIME_OFF_STATUSES, "Status")
        request = self.get_request(request_id)

        self.audit.update_fields(
            request,
            {
                "status": status,
                "reviewed_by": self.current_user_id,
                "reviewed_at": datetime.utcnow(),
            },
        )
        return request

    def delete_request(self, request_id: int) -> None:
        request = self.get_request(request_id)
        self.audit.log_delete(request)
        self.db.delete(request)
