# Hippies Portal - Announcement Tests

from datetime import datetime, timedelta

from portal.models.announcement import Announcement


def post(client, title="Inventory Friday", content="Everyone in at 9."):
    return client.post("/api/announcements", json={"title": title, "content": content})


def test_create_and_broadcast(admin_client, notifier):
    response = post(admin_client)

    assert response.status_code == 201
    assert response.json()["author_name"] == "Alex Morgan"

    events = notifier.named("announcement.new")
    assert len(events) == 1
    assert events[0]["to"] is None
    assert events[0]["data"]["title"] == "Inventory Friday"


def test_blank_content_rejected(admin_client):
    response = post(admin_client, content="  ")

    assert response.status_code == 400
    assert response.json()["detail"] == "Content is required"


def test_employees_read_but_cannot_post(employee_client, admin_client):
    post(admin_client)

    assert post(employee_client).status_code == 403
    assert employee_client.get("/api/announcements").json()["total"] == 1


def test_pagination_newest_first(employee_client, admin, db):
    start = datetime(2025, 3, 1, 9, 0)
    for i in range(12):
        db.add(Announcement(
            title=f"Note {i}",
            content="...",
            created_by=admin.employee_id,
            created_at=start + timedelta(hours=i),
        ))
    db.commit()

    first = employee_client.get("/api/announcements").json()
    second = employee_client.get("/api/announcements", params={"page": 2, "page_size": 10}).json()

    assert first["total"] == 12
    assert first["pages"] == 2
    assert first["page_size"] == 10
    assert first["items"][0]["title"] == "Note 11"
    assert [a["title"] for a in second["items"]] == ["Note 1", "Note 0"]


def test_empty_list_has_one_page(employee_client):
    body = employee_client.get("/api/announcements").json()

    assert body == {"items": [], "page": 1, "page_size": 10, "total": 0, "pages": 1}


def test_page_must_be_positive(employee_client):
    response = employee_client.get("/api/announcements", params={"page": 0})

    assert response.status_code == 400
    assert response.json()["detail"] == "Page must be 1 or greater"


def test_update_and_delete(admin_client):
    announcement_id = post(admin_client).json()["announcement_id"]

    updated = admin_client.patch(f"/api/announcements/{announcement_id}", json={"title": "Inventory Saturday"})
    assert updated.json()["title"] == "Inventory Saturday"
    assert updated.json()["updated_at"] is not None

    assert admin_client.delete(f"/api/announcements/{announcement_id}").status_code == 204
    assert admin_client.get(f"/api/announcements/{announcement_id}").status_code == 404
