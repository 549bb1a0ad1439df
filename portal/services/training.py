# Hippies Portal - Training Service
# Training modules, versioned quizzes and completion tracking

import random
from datetime import datetime
from typing import Any, Optional
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from portal.models.training import MEDIA_TYPES, Training, TrainingQuiz, TrainingTracker
from portal.services.audit import AuditService
from portal.services.errors import NotFoundError
from portal.services.validation import optional_text, require_choice, require_text


logger = logging.getLogger(__name__)


def clean_media(media: Optional[list[dict[str, Any]]]) -> list[dict[str, str]]:
    cleaned = []
    for index, entry in enumerate(media or [], start=1):
        cleaned.append({
            "title": require_text(entry.get("title"), f"Media {index} title"),
            "type": require_choice(entry.get("type"), MEDIA_TYPES, f"Media {index} type"),
            "url": require_text(entry.get("url"), f"Media {index} URL"),
        })
    return cleaned


def clean_quiz_content(content: Any) -> list[dict[str, Any]]:
    """
    Validate quiz JSON: a non-empty list of
    {"question": str, "choices": [str, ...], "answer": str}
    with at least two distinct choices and the answer among them.
    """
    if not isinstance(content, list) or not content:
        raise ValueError("Quiz must contain at least one question")

    cleaned = []
    for index, entry in enumerate(content, start=1):
        if not isinstance(entry, dict):
            raise ValueError(f"Question {index} is not an object")

        question = require_text(entry.get("question"), f"Question {index}")
        raw_choices = entry.get("choices")
        if not isinstance(raw_choices, list):
            raise ValueError(f"Question {index} choices must be a list")
        choices = [require_text(str(c), f"Question {index} choice") for c in raw_choices]
        if len(set(choices)) < 2:
            raise ValueError(f"Question {index} needs at least two different choices")

        answer = (entry.get("answer") or "").strip()
        if answer not in choices:
            raise ValueError(f"Question {index} answer must be one of its choices")

        cleaned.append({"question": question, "choices": choices, "answer": answer})
    return cleaned


class TrainingService:
    """
    Service for trainings and their quizzes.

    Usage:
        service = TrainingService(db, admin.employee_id, ip)
        training = service.create_training({"title": "Register basics", "media": [...]})
        service.save_quiz(training.training_id, [{"question": ..., "choices": [...], "answer": ...}])

        # employee side
        quiz = TrainingService(db, 7).get_quiz(training.training_id)
        tracker = TrainingService(db, 7).submit_quiz(7, training.training_id, {"Q1": "A"})
    """

    def __init__(
        self,
        db: Session,
        current_user_id: Optional[int],
        ip_address: Optional[str] = None,
        rng: Optional[random.Random] = None,
    ):
        self.db = db
        self.current_user_id = current_user_id
        self.audit = AuditService(db, current_user_id, ip_address)
        self.rng = rng or random.Random()

    def get_training(self, training_id: int) -> Training:
        training = self.db.get(Training, training_id)
        if not training:
            raise NotFoundError(f"Training {training_id} not found")
        return training

    def list_trainings(self) -> list[Training]:
        return self.db.execute(select(Training).order_by(Training.title)).scalars().all()

    def create_training(self, fields: dict[str, Any]) -> Training:
        training = Training(
            title=require_text(fields.get("title"), "Title"),
            description=optional_text(fields.get("description")),
            media=clean_media(fields.get("media")),
            created_by=self.current_user_id,
        )
        self.db.add(training)
        self.db.flush()
        self.audit.log_insert(training)
        return training

    def update_training(self, training_id: int, fields: dict[str, Any]) -> Training:
        training = self.get_training(training_id)
        changes = {}
        if "title" in fields:
            changes["title"] = require_text(fields.get("title"), "Title")
        if "description" in fields:
            changes["description"] = optional_text(fields.get("description"))
        if "media" in fields:
            changes["media"] = clean_media(fields.get("media"))

        self.audit.update_fields(training, changes)
        return training

    def delete_training(self, training_id: int) -> None:
        training = self.get_training(training_id)
        self.audit.log_delete(training)
        self.db.delete(training)

    # =========================================================================
    # Quizzes
    # =========================================================================

    def save_quiz(self, training_id: int, content: Any) -> TrainingQuiz:
        """Store a new quiz version and retire the previous one."""
        training = self.get_training(training_id)
        cleaned = clean_quiz_content(content)

        latest = 0
        for quiz in training.quizzes:
            latest = max(latest, quiz.version)
            if quiz.is_active:
                self.audit.update_fields(quiz, {"is_active": False}, context="quiz replaced")

        quiz = TrainingQuiz(
            content=cleaned,
            version=latest + 1,
            is_active=True,
            created_by=self.current_user_id,
        )
        training.quizzes.append(quiz)
        self.db.flush()
        self.audit.log_insert(quiz)

        logger.info("Saved quiz v%s for training %s (%s questions)", quiz.version, training_id, len(cleaned))
        return quiz

    def get_active_quiz(self, training_id: int) -> TrainingQuiz:
        quiz = self.get_training(training_id).active_quiz
        if quiz is None:
            raise NotFoundError("This training has no quiz")
        return quiz

    def get_quiz(self, training_id: int) -> dict[str, Any]:
        """Active quiz for taking: shuffled, without answers."""
        quiz = self.get_active_quiz(training_id)

        questions = []
        for entry in quiz.content:
            choices = list(entry["choices"])
            self.rng.shuffle(choices)
            questions.append({"question": entry["question"], "choices": choices})
        self.rng.shuffle(questions)

        return {
            "training_id": training_id,
            "version": quiz.version,
            "questions": questions,
        }

    def get_tracker(self, employee_id: int, training_id: int) -> Optional[TrainingTracker]:
        return self.db.execute(
            select(TrainingTracker)
            .where(TrainingTracker.employee_id == employee_id)
            .where(TrainingTracker.training_id == training_id)
        ).scalars().first()

    def submit_quiz(self, employee_id: int, training_id: int, answers: dict[str, str]) -> TrainingTracker:
        """
        Grade a quiz attempt. answers maps question text to the chosen
        choice; unanswered questions count as wrong.

        Raises:
            ValueError: If the employee already completed this training
        """
        quiz = self.get_active_quiz(training_id)
        if self.get_tracker(employee_id, training_id):
            raise ValueError("Quiz already completed")

        graded = []
        correct = 0
        for entry in quiz.content:
            selected = answers.get(entry["question"])
            is_correct = selected == entry["answer"]
            correct += is_correct
            graded.append({
                "question": entry["question"],
                "selected": selected,
                "correct": is_correct,
            })

        score = round(correct / len(quiz.content) * 100) if quiz.content else 0

        tracker = TrainingTracker(
            employee_id=employee_id,
            training_id=training_id,
            quiz_score=score,
            quiz_version=quiz.version,
            quiz_answers=graded,
            completed_at=datetime.utcnow(),
        )
        self.db.add(tracker)
        self.db.flush()

        logger.info("Employee %s scored %s%% on training %s", employee_id, score, training_id)
        return tracker

    def reset_quiz(self, employee_id: int, training_id: int) -> None:
        """Let an employee retake a quiz."""
        tracker = self.get_tracker(employee_id, training_id)
        if tracker is None:
            raise NotFoundError("No completed quiz to reset")
        self.db.delete(tracker)

    def my_trackers(self, employee_id: int) -> list[TrainingTracker]:
        return self.db.execute(
            select(TrainingTracker).where(TrainingTracker.employee_id == employee_id)
        ).scalars().all()

    def tracker_summary(self) -> list[dict[str, Any]]:
        rows = self.db.execute(
            select(TrainingTracker)
            .options(joinedload(TrainingTracker.employee), joinedload(TrainingTracker.training))
            .order_by(TrainingTracker.completed_at.desc())
        ).scalars().all()

        return [
            {
                "tracker_id": row.tracker_id,
                "employee_id": row.employee_id,
                "employee_name": row.employee.full_name,
                "training_id": row.training_id,
                "training_title": row.training.title,
                "quiz_score": row.quiz_score,
                "quiz_version": row.quiz_version,
                "completed_at": row.completed_at,
            }
            for row in rows
        ]
