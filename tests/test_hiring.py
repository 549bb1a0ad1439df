# Hippies Portal - Hiring Tests

import random

import pytest
from sqlalchemy import select

from portal.models.hiring import Application
from portal.services.applicant_quiz import QUESTIONS, grade_answers, randomized_quiz
from portal.services.hiring import clean_interview_schedules


@pytest.fixture
def job(admin_client):
    response = admin_client.post(
        "/api/admin/jobs",
        json={"title": "Night VA", "description": "Overnight coverage", "employment_type": "VA"},
    )
    assert response.status_code == 201, response.text
    return response.json()


def application_form(**overrides):
    form = {
        "full_name": "Casey Lee",
        "email": "casey.lee@gmail.com",
        "contact_number": "555-0199",
        "interview_schedules": [{"date": "2025-04-01", "slot": "8 AM - 11 AM"}],
        "quiz_answers": {},
    }
    form.update(overrides)
    return form


class TestQuestionnaire:
    def test_quiz_hides_answers_and_keeps_choices(self):
        quiz = randomized_quiz(random.Random(7))

        assert len(quiz) == len(QUESTIONS)
        by_id = {q[0]: q for q in QUESTIONS}
        for question in quiz:
            assert "answer" not in question
            assert sorted(question["choices"]) == sorted(by_id[question["id"]][2])

    def test_grade_counts_correct_answers(self):
        answers = {qid: choices[correct] for qid, _, choices, correct in QUESTIONS[:4]}
        answers["q5"] = "Yell back"
        answers["nope"] = "ignored"

        score, graded = grade_answers(answers)

        assert score == 4
        assert len(graded) == len(QUESTIONS)
        assert graded[4]["correct"] is False
        assert graded[5]["selected"] is None

    def test_public_endpoint(self, client):
        quiz = client.get("/api/jobs/quiz").json()

        assert {q["id"] for q in quiz} == {q[0] for q in QUESTIONS}


class TestInterviewSlots:
    def test_at_most_three(self):
        slots = [{"date": f"2025-04-0{d}", "slot": "8 AM - 11 AM"} for d in range(1, 5)]

        with pytest.raises(ValueError, match="at most 3"):
            clean_interview_schedules(slots)

    def test_unknown_slot(self):
        with pytest.raises(ValueError, match="Interview slot must be one of"):
            clean_interview_schedules([{"date": "2025-04-01", "slot": "noon"}])

    def test_duplicates_rejected(self):
        slot = {"date": "2025-04-01", "slot": "2 PM - 5 PM"}

        with pytest.raises(ValueError, match="must be different"):
            clean_interview_schedules([slot, dict(slot)])


class TestJobBoard:
    def test_only_open_jobs_listed(self, client, admin_client, job):
        closed = admin_client.post("/api/admin/jobs", json={"title": "Store clerk", "status": "Closed"}).json()

        titles = [j["title"] for j in client.get("/api/jobs").json()]

        assert titles == ["Night VA"]
        assert client.get(f"/api/jobs/{closed['job_id']}").status_code == 404
        assert client.get(f"/api/jobs/{job['job_id']}").json()["title"] == "Night VA"

    def test_toggle(self, admin_client, job):
        toggled = admin_client.post(f"/api/admin/jobs/{job['job_id']}/toggle").json()
        assert toggled["status"] == "Closed"

        toggled = admin_client.post(f"/api/admin/jobs/{job['job_id']}/toggle").json()
        assert toggled["status"] == "Open"

    def test_update_job(self, admin_client, job):
        response = admin_client.patch(f"/api/admin/jobs/{job['job_id']}", json={"employment_type": "Store"})

        assert response.json()["employment_type"] == "Store"

    def test_employees_cannot_manage_jobs(self, employee_client):
        assert employee_client.get("/api/admin/jobs").status_code == 403
        assert employee_client.get("/api/admin/applications").status_code == 403


class TestApplying:
    def test_apply_sends_confirmation(self, client, job, mailer):
        q1 = QUESTIONS[0]
        response = client.post(
            f"/api/jobs/{job['job_id']}/apply",
            json=application_form(quiz_answers={"q1": q1[2][q1[3]]}),
        )

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "pending"
        assert body["quiz_score"] == 1
        assert body["email_sent"] is True
        assert mailer.sent[0]["to"] == "casey.lee@gmail.com"
        assert "Night VA" in mailer.sent[0]["subject"]

    def test_application_saved_when_mail_fails(self, client, job, mailer, db):
        mailer.fail = True

        response = client.post(f"/api/jobs/{job['job_id']}/apply", json=application_form())

        assert response.status_code == 201
        assert response.json()["email_sent"] is False
        assert db.execute(select(Application)).scalars().first() is not None

    @pytest.mark.parametrize("email", ["test@gmail.com", "casey@mailinator.com", "not-an-email"])
    def test_throwaway_emails_rejected(self, client, job, email):
        response = client.post(f"/api/jobs/{job['job_id']}/apply", json=application_form(email=email))

        assert response.status_code == 400
        assert response.json()["detail"] == "Please enter a valid personal or business email address."

    def test_closed_job_rejects_applications(self, client, admin_client, job):
        admin_client.post(f"/api/admin/jobs/{job['job_id']}/toggle")

        response = client.post(f"/api/jobs/{job['job_id']}/apply", json=application_form())

        assert response.status_code == 404

    def test_general_application_form(self, client, mailer):
        response = client.post(
            "/hiring",
            data={
                "full_name": "Casey Lee",
                "email": "casey.lee@gmail.com",
                "preferred_interview_date": "2025-04-02",
                "preferred_interview_time": "Afternoon",
            },
        )

        assert response.status_code == 200
        assert "We received your application" in response.text
        assert mailer.sent[0]["subject"] == "We received your application!"

    def test_general_application_form_error(self, client):
        response = client.post("/hiring", data={"full_name": "Casey Lee", "email": "test@x.com"})

        assert response.status_code == 400
        assert "Please enter a valid personal or business email address." in response.text


class TestPipeline:
    @pytest.fixture
    def application(self, client, job):
        response = client.post(f"/api/jobs/{job['job_id']}/apply", json=application_form())
        return response.json()

    def test_list_and_filter(self, admin_client, job, application):
        listed = admin_client.get("/api/admin/applications", params={"job_id": job["job_id"]}).json()
        accepted = admin_client.get("/api/admin/applications", params={"status": "accepted"}).json()

        assert [a["application_id"] for a in listed] == [application["application_id"]]
        assert listed[0]["job_title"] == "Night VA"
        assert listed[0]["interview_schedules"] == [{"date": "2025-04-01", "slot": "8 AM - 11 AM"}]
        assert accepted == []

    def test_interview_set_requires_time(self, admin_client, application):
        response = admin_client.patch(
            f"/api/admin/applications/{application['application_id']}/status",
            json={"status": "interview_set"},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Interview time is required"

    def test_interview_set_emails_applicant(self, admin_client, application, mailer):
        response = admin_client.patch(
            f"/api/admin/applications/{application['application_id']}/status",
            json={"status": "interview_set", "interview_time": "2025-01-06T20:00:00Z"},
        )

        assert response.status_code == 200
        assert response.json()["status"] == "interview_set"
        assert response.json()["email_sent"] is True
        assert mailer.sent[-1]["subject"] == "Interview Scheduled for Night VA 🌿"
        assert "Monday, January 6 at 2:00 PM" in mailer.sent[-1]["html"]

    def test_other_statuses_send_nothing(self, admin_client, application, mailer):
        before = len(mailer.sent)

        response = admin_client.patch(
            f"/api/admin/applications/{application['application_id']}/status",
            json={"status": "declined"},
        )

        assert response.json()["email_sent"] is None
        assert len(mailer.sent) == before

    def test_unknown_status_rejected(self, admin_client, application):
        response = admin_client.patch(
            f"/api/admin/applications/{application['application_id']}/status",
            json={"status": "hired"},
        )

        assert response.status_code == 400

    def test_deleting_job_keeps_applications(self, admin_client, job, application):
        assert admin_client.delete(f"/api/admin/jobs/{job['job_id']}").status_code == 204

        kept = admin_client.get(f"/api/admin/applications/{application['application_id']}").json()
        assert kept["job_id"] is None
        assert kept["job_title"] is None

    def test_delete_application(self, admin_client, application):
        url = f"/api/admin/applications/{application['application_id']}"

        assert admin_client.delete(url).status_code == 204
        assert admin_client.get(url).status_code == 404
