# Hippies Portal - Page Routes
# Public pages and the two role dashboards

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from portal.database import get_db
from portal.dependencies import RequirePage, client_ip, get_current_user_optional, get_mail_service
from portal.models.employee import Employee
from portal.models.hiring import Application
from portal.models.time_off import TimeOffRequest
from portal.services.announcement import AnnouncementService
from portal.services.hiring import HiringService
from portal.services.mail import MailService
from portal.services.messaging import MessagingService
from portal.services.schedule import ScheduleService
from portal.services.shift import ShiftService
from portal.services.task import TaskService


router = APIRouter(tags=["pages"])


def render(request: Request, template: str, context: dict, status_code: int = 200):
    return request.app.state.templates.TemplateResponse(request, template, context, status_code=status_code)


# Public

@router.get("/", response_class=HTMLResponse)
def home(request: Request, user: Optional[Employee] = Depends(get_current_user_optional)):
    return render(request, "pages/home.html", {"user": user})


@router.get("/about", response_class=HTMLResponse)
def about(request: Request, user: Optional[Employee] = Depends(get_current_user_optional)):
    return render(request, "pages/about.html", {"user": user})


@router.get("/contact", response_class=HTMLResponse)
def contact(request: Request, user: Optional[Employee] = Depends(get_current_user_optional)):
    return render(request, "pages/contact.html", {"user": user})


@router.get("/hiring", response_class=HTMLResponse)
def hiring_page(
    request: Request,
    user: Optional[Employee] = Depends(get_current_user_optional),
    db: Session = Depends(get_db),
):
    """Open jobs plus the general application form."""
    jobs = HiringService(db, None).list_jobs(open_only=True)
    return render(request, "pages/hiring.html", {"user": user, "jobs": jobs})


@router.post("/hiring", response_class=HTMLResponse)
def hiring_submit(
    request: Request,
    full_name: str = Form(""),
    email: str = Form(""),
    contact_number: str = Form(""),
    message: str = Form(""),
    preferred_interview_date: str = Form(""),
    preferred_interview_time: str = Form(""),
    db: Session = Depends(get_db),
    mail: MailService = Depends(get_mail_service),
):
    service = HiringService(db, None, client_ip(request), mail=mail)
    form = {
        "full_name": full_name,
        "email": email,
        "contact_number": contact_number,
        "message": message,
        "preferred_interview_date": preferred_interview_date,
        "preferred_interview_time": preferred_interview_time,
    }
    jobs = HiringService(db, None).list_jobs(open_only=True)

    try:
        application = service.submit_general_application(form)
    except ValueError as e:
        return render(
            request,
            "pages/hiring.html",
            {"user": None, "jobs": jobs, "error": str(e), "form": form},
            status_code=400,
        )

    db.commit()
    service.send_application_confirmation(application)
    return render(request, "pages/hiring.html", {"user": None, "jobs": jobs, "submitted": True})


# Dashboards

@router.get("/admin-dashboard", response_class=HTMLResponse)
def admin_dashboard(
    request: Request,
    user: Employee = Depends(RequirePage("admin")),
    db: Session = Depends(get_db),
):
    summary = {
        "active_employees": db.execute(
            select(func.count(Employee.employee_id)).where(Employee.is_active == True)
        ).scalar_one(),
        "pending_time_off": db.execute(
            select(func.count(TimeOffRequest.request_id)).where(TimeOffRequest.status == "Pending")
        ).scalar_one(),
        "pending_applications": db.execute(
            select(func.count(Application.application_id)).where(Application.status == "pending")
        ).scalar_one(),
        "unread_messages": MessagingService(db).unread_count(user.employee_id),
        "announcements": AnnouncementService(db, user.employee_id).latest(),
        "open_tasks": [t for t in TaskService(db, user.employee_id).list_tasks() if t.status != "Completed"],
        "todays_schedule": ScheduleService(db, user.employee_id).list_range(date.today(), date.today()),
    }
    return render(request, "dashboard/admin.html", {"user": user, "summary": summary})


@router.get("/employee-dashboard", response_class=HTMLResponse)
def employee_dashboard(
    request: Request,
    user: Employee = Depends(RequirePage("employee")),
    db: Session = Depends(get_db),
):
    summary = {
        "unread_messages": MessagingService(db).unread_count(user.employee_id),
        "announcements": AnnouncementService(db, user.employee_id).latest(),
        "open_tasks": TaskService(db, user.employee_id).my_tasks(user.employee_id, open_only=True),
        "todays_schedule": ScheduleService(db, user.employee_id).today_for(user.employee_id),
        "open_shift": ShiftService(db, user.employee_id).current_shift(user.employee_id),
    }
    return render(request, "dashboard/employee.html", {"user": user, "summary": summary})
