# Hippies Portal - Training Tests

import pytest

from portal.services.training import clean_quiz_content


QUIZ = [
    {"question": "Who can buy glass?", "choices": ["Anyone", "21 and over with ID"], "answer": "21 and over with ID"},
    {"question": "When is the drawer counted?", "choices": ["Open and close", "Never", "Weekly"], "answer": "Open and close"},
    {"question": "Where do deposits go?", "choices": ["Safe room", "Back office"], "answer": "Safe room"},
]


@pytest.fixture
def training(admin_client):
    response = admin_client.post(
        "/api/trainings",
        json={
            "title": "Register basics",
            "description": "Opening and closing the register",
            "media": [{"title": "Walkthrough", "type": "video", "url": "https://videos.example/register"}],
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def quiz(admin_client, training):
    response = admin_client.put(f"/api/trainings/{training['training_id']}/quiz", json={"content": QUIZ})
    assert response.status_code == 200, response.text
    return response.json()


def test_create_training(training):
    assert training["media"][0]["type"] == "video"
    assert training["has_quiz"] is False


def test_media_type_validated(admin_client):
    response = admin_client.post(
        "/api/trainings",
        json={"title": "Bad", "media": [{"title": "x", "type": "podcast", "url": "https://x"}]},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Media 1 type must be one of: video, document"


def test_save_quiz_versions(admin_client, training, quiz):
    assert quiz["version"] == 1
    assert quiz["questions"] == 3

    second = admin_client.put(f"/api/trainings/{training['training_id']}/quiz", json={"content": QUIZ[:1]}).json()

    assert second["version"] == 2
    detail = admin_client.get(f"/api/trainings/{training['training_id']}").json()
    assert detail["quiz_version"] == 2


class TestQuizContent:
    def test_answer_must_be_a_choice(self):
        with pytest.raises(ValueError, match="answer must be one of its choices"):
            clean_quiz_content([{"question": "Q", "choices": ["A", "B"], "answer": "C"}])

    def test_needs_two_distinct_choices(self):
        with pytest.raises(ValueError, match="at least two different choices"):
            clean_quiz_content([{"question": "Q", "choices": ["A", "A"], "answer": "A"}])

    def test_empty_quiz_rejected(self):
        with pytest.raises(ValueError, match="at least one question"):
            clean_quiz_content([])

    def test_bad_answer_is_400(self, admin_client, training):
        response = admin_client.put(
            f"/api/trainings/{training['training_id']}/quiz",
            json={"content": [{"question": "Q", "choices": ["A", "B"], "answer": "C"}]},
        )

        assert response.status_code == 400


def test_quiz_hides_answers(employee_client, training, quiz):
    body = employee_client.get(f"/api/trainings/{training['training_id']}/quiz").json()

    assert body["version"] == 1
    assert {q["question"] for q in body["questions"]} == {q["question"] for q in QUIZ}
    for question in body["questions"]:
        assert "answer" not in question


def test_training_without_quiz_is_404(employee_client, training):
    assert employee_client.get(f"/api/trainings/{training['training_id']}/quiz").status_code == 404


def test_submit_quiz_scores_percentage(employee_client, training, quiz):
    answers = {
        "Who can buy glass?": "21 and over with ID",
        "When is the drawer counted?": "Weekly",
        "Where do deposits go?": "Safe room",
    }

    response = employee_client.post(f"/api/trainings/{training['training_id']}/quiz/submit", json={"answers": answers})

    assert response.status_code == 201
    body = response.json()
    assert body["quiz_score"] == 67
    assert body["quiz_version"] == 1
    assert [a["correct"] for a in body["quiz_answers"]] == [True, False, True]

    listed = employee_client.get("/api/trainings").json()
    assert listed[0]["my_tracker"]["quiz_score"] == 67


def test_quiz_taken_once(employee_client, training, quiz):
    url = f"/api/trainings/{training['training_id']}/quiz/submit"
    employee_client.post(url, json={"answers": {}})

    response = employee_client.post(url, json={"answers": {}})

    assert response.status_code == 400
    assert response.json()["detail"] == "Quiz already completed"


def test_admin_reset_allows_retake(admin_client, employee_client, employee, training, quiz):
    url = f"/api/trainings/{training['training_id']}/quiz/submit"
    employee_client.post(url, json={"answers": {}})

    reset = admin_client.delete(f"/api/trainings/{training['training_id']}/tracker/{employee.employee_id}")

    assert reset.status_code == 204
    assert employee_client.post(url, json={"answers": {}}).status_code == 201


def test_tracker_summary(admin_client, employee_client, training, quiz):
    employee_client.post(f"/api/trainings/{training['training_id']}/quiz/submit", json={"answers": {}})

    summary = admin_client.get("/api/trainings/tracker").json()

    assert len(summary) == 1
    assert summary[0]["employee_name"] == "Sam Rivera"
    assert summary[0]["training_title"] == "Register basics"
    assert summary[0]["quiz_score"] == 0


def test_employee_cannot_manage_trainings(employee_client, training):
    assert employee_client.post("/api/trainings", json={"title": "x"}).status_code == 403
    assert employee_client.get("/api/trainings/tracker").status_code == 403
    assert employee_client.delete(f"/api/trainings/{training['training_id']}").status_code == 403


def test_update_and_delete_training(admin_client, training):
    updated = admin_client.patch(f"/api/trainings/{training['training_id']}", json={"title": "Register 101"})
    assert updated.json()["title"] == "Register 101"

    assert admin_client.delete(f"/api/trainings/{training['training_id']}").status_code == 204
    assert admin_client.get(f"/api/trainings/{training['training_id']}").status_code == 404
