# Hippies Portal - Training Routes
# Training materials, quiz versions and completion tracking

from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from portal.database import get_db
from portal.dependencies import client_ip, get_current_user, require_admin
from portal.models.employee import Employee
from portal.models.training import Training, TrainingTracker
from portal.services.training import TrainingService


router = APIRouter(prefix="/api/trainings", tags=["trainings"])


# Request/Response models

class MediaItem(BaseModel):
    title: Optional[str] = None
    type: str
    url: str


class TrainingCreate(BaseModel):
    title: str
    description: Optional[str] = None
    media: list[MediaItem] = []


class TrainingUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    media: Optional[list[MediaItem]] = None


class QuizQuestion(BaseModel):
    question: str
    choices: list[str]
    answer: str


class QuizSave(BaseModel):
    content: list[QuizQuestion]


class QuizSubmit(BaseModel):
    answers: dict[str, str]


class TrackerResponse(BaseModel):
    tracker_id: int
    employee_id: int
    training_id: int
    quiz_score: int
    quiz_version: int
    quiz_answers: list[dict[str, Any]]
    completed_at: datetime


class TrainingResponse(BaseModel):
    training_id: int
    title: str
    description: Optional[str] = None
    media: list[dict[str, Any]]
    has_quiz: bool
    quiz_version: Optional[int] = None
    created_at: datetime
    my_tracker: Optional[TrackerResponse] = None


def tracker_response(tracker: TrainingTracker) -> TrackerResponse:
    return TrackerResponse(
        tracker_id=tracker.tracker_id,
        employee_id=tracker.employee_id,
        training_id=tracker.training_id,
        quiz_score=tracker.quiz_score,
        quiz_version=tracker.quiz_version,
        quiz_answers=tracker.quiz_answers,
        completed_at=tracker.completed_at,
    )


def training_response(training: Training, tracker: Optional[TrainingTracker] = None) -> TrainingResponse:
    quiz = training.active_quiz
    return TrainingResponse(
        training_id=training.training_id,
        title=training.title,
        description=training.description,
        media=training.media,
        has_quiz=quiz is not None,
        quiz_version=quiz.version if quiz else None,
        created_at=training.created_at,
        my_tracker=tracker_response(tracker) if tracker else None,
    )


# Everyone logged in

@router.get("", response_model=list[TrainingResponse])
def list_trainings(
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Trainings with the caller's own completion, if any."""
    service = TrainingService(db, user.employee_id)
    completed = {t.training_id: t for t in service.my_trackers(user.employee_id)}
    return [training_response(t, completed.get(t.training_id)) for t in service.list_trainings()]


@router.get("/tracker")
def tracker_summary(
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
) -> list[dict[str, Any]]:
    return TrainingService(db, user.employee_id).tracker_summary()


@router.get("/{training_id}", response_model=TrainingResponse)
def get_training(
    training_id: int,
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    service = TrainingService(db, user.employee_id)
    training = service.get_training(training_id)
    return training_response(training, service.get_tracker(user.employee_id, training_id))


@router.get("/{training_id}/quiz")
def get_quiz(
    training_id: int,
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Active quiz without answers, shuffled on every call."""
    return TrainingService(db, user.employee_id).get_quiz(training_id)


@router.post("/{training_id}/quiz/submit", response_model=TrackerResponse, status_code=status.HTTP_201_CREATED)
def submit_quiz(
    training_id: int,
    payload: QuizSubmit,
    request: Request,
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    tracker = TrainingService(db, user.employee_id, client_ip(request)).submit_quiz(
        user.employee_id, training_id, payload.answers
    )
    db.commit()
    return tracker_response(tracker)


# Admin

@router.post("", response_model=TrainingResponse, status_code=status.HTTP_201_CREATED)
def create_training(
    payload: TrainingCreate,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    training = TrainingService(db, user.employee_id, client_ip(request)).create_training(payload.model_dump())
    db.commit()
    return training_response(training)


@router.patch("/{training_id}", response_model=TrainingResponse)
def update_training(
    training_id: int,
    payload: TrainingUpdate,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    training = TrainingService(db, user.employee_id, client_ip(request)).update_training(
        training_id, payload.model_dump(exclude_unset=True)
    )
    db.commit()
    return training_response(training)


@router.delete("/{training_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_training(
    training_id: int,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    TrainingService(db, user.employee_id, client_ip(request)).delete_training(training_id)
    db.commit()


@router.put("/{training_id}/quiz")
def save_quiz(
    training_id: int,
    payload: QuizSave,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Store a new quiz version; the previous one is retired."""
    quiz = TrainingService(db, user.employee_id, client_ip(request)).save_quiz(
        training_id, [q.model_dump() for q in payload.content]
    )
    db.commit()
    return {
        "quiz_id": quiz.quiz_id,
        "training_id": quiz.training_id,
        "version": quiz.version,
        "questions": len(quiz.content),
    }


@router.delete("/{training_id}/tracker/{employee_id}", status_code=status.HTTP_204_NO_CONTENT)
def reset_quiz(
    training_id: int,
    employee_id: int,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Let the employee take the quiz again."""
    TrainingService(db, user.employee_id, client_ip(request)).reset_quiz(employee_id, training_id)
    db.commit()
