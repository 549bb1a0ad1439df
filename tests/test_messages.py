# Hippies Portal - Messaging Tests


def send(client, receiver_id, text):
    response = client.post("/api/messages", json={"receiver_id": receiver_id, "message": text})
    assert response.status_code == 201, response.text
    return response.json()


def test_send_message_pushes_events(employee_client, employee, coworker, notifier):
    message = send(employee_client, coworker.employee_id, "  Can you cover Saturday?  ")

    assert message["message"] == "Can you cover Saturday?"
    assert message["is_read"] is False

    new = notifier.named("message.new")
    assert new[0]["to"] == sorted([employee.employee_id, coworker.employee_id])
    assert new[0]["data"]["message_id"] == message["message_id"]

    unread = notifier.named("unread.count")
    assert unread == [{"to": [coworker.employee_id], "event": "unread.count", "data": {"count": 1}}]


def test_cannot_message_yourself(employee_client, employee):
    response = employee_client.post("/api/messages", json={"receiver_id": employee.employee_id, "message": "hi"})

    assert response.status_code == 400
    assert response.json()["detail"] == "You cannot message yourself"


def test_empty_message_rejected(employee_client, coworker):
    response = employee_client.post("/api/messages", json={"receiver_id": coworker.employee_id, "message": "   "})

    assert response.status_code == 400
    assert response.json()["detail"] == "Message cannot be empty"


def test_inactive_or_unknown_receiver(employee_client, coworker, db):
    coworker.is_active = False
    db.commit()

    inactive = employee_client.post("/api/messages", json={"receiver_id": coworker.employee_id, "message": "hi"})
    unknown = employee_client.post("/api/messages", json={"receiver_id": 9999, "message": "hi"})

    assert inactive.json()["detail"] == "Recipient not found"
    assert unknown.status_code == 400


def test_conversation_oldest_first(employee_client, coworker_client, employee, coworker):
    send(employee_client, coworker.employee_id, "first")
    send(coworker_client, employee.employee_id, "second")
    send(employee_client, coworker.employee_id, "third")

    texts = [m["message"] for m in employee_client.get(f"/api/messages/{coworker.employee_id}").json()]
    last_two = employee_client.get(f"/api/messages/{coworker.employee_id}", params={"limit": 2}).json()

    assert texts == ["first", "second", "third"]
    assert [m["message"] for m in last_two] == ["second", "third"]


def test_threads_and_unread(employee_client, coworker_client, admin_client, employee, coworker, admin):
    send(coworker_client, employee.employee_id, "hey")
    send(coworker_client, employee.employee_id, "you there?")
    send(admin_client, employee.employee_id, "staff meeting at 3")

    threads = employee_client.get("/api/messages/threads").json()

    assert [t["partner_name"] for t in threads] == ["Alex Morgan", "Jo Park"]
    assert threads[1]["unread_count"] == 2
    assert threads[1]["last_message"] == "you there?"
    assert employee_client.get("/api/messages/unread-count").json() == {"count": 3}


def test_mark_read(employee_client, coworker_client, employee, coworker, notifier):
    send(coworker_client, employee.employee_id, "hey")
    send(coworker_client, employee.employee_id, "you there?")

    response = employee_client.post(f"/api/messages/{coworker.employee_id}/read")

    assert response.json() == {"marked_read": 2}
    assert employee_client.get("/api/messages/unread-count").json() == {"count": 0}

    read = notifier.named("message.read")
    assert read == [{
        "to": [coworker.employee_id],
        "event": "message.read",
        "data": {"reader_id": employee.employee_id, "count": 2},
    }]
    assert notifier.named("unread.count")[-1] == {
        "to": [employee.employee_id],
        "event": "unread.count",
        "data": {"count": 0},
    }


def test_mark_read_with_nothing_unread_is_quiet(employee_client, coworker, notifier):
    response = employee_client.post(f"/api/messages/{coworker.employee_id}/read")

    assert response.json() == {"marked_read": 0}
    assert notifier.named("message.read") == []


def test_messaging_requires_login(client):
    assert client.get("/api/messages/threads").status_code == 401
