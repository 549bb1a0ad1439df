# Hippies Portal - Realtime Tests

import asyncio
import logging

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from portal.services.realtime import ConnectionManager, NullNotifier

from conftest import session_cookie


class FakeSocket:
    def __init__(self, fail=False):
        self.accepted = False
        self.sent = []
        self.fail = fail

    async def accept(self):
        self.accepted = True

    async def send_json(self, message):
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(message)


def ws_client(app, logged_in_client):
    return TestClient(app, headers={"cookie": f"portal_session={session_cookie(logged_in_client)}"})


class TestConnectionManager:
    def test_publish_from_worker_thread(self):
        manager = ConnectionManager()
        socket = FakeSocket()

        async def scenario():
            await manager.connect(socket, 7)
            await asyncio.to_thread(manager.publish, [7], "task.assigned", {"task_id": 1})
            await asyncio.sleep(0.05)

        asyncio.run(scenario())

        assert socket.accepted
        assert socket.sent == [{"event": "task.assigned", "data": {"task_id": 1}}]

    def test_publish_on_the_event_loop(self):
        manager = ConnectionManager()
        socket = FakeSocket()

        async def scenario():
            await manager.connect(socket, 7)
            manager.publish([7], "unread.count", {"count": 2})
            await asyncio.sleep(0)

        asyncio.run(scenario())

        assert socket.sent == [{"event": "unread.count", "data": {"count": 2}}]

    def test_broadcast_reaches_everyone(self):
        manager = ConnectionManager()
        first, second, other_tab = FakeSocket(), FakeSocket(), FakeSocket()

        async def scenario():
            await manager.connect(first, 1)
            await manager.connect(second, 2)
            await manager.connect(other_tab, 2)
            manager.publish(None, "announcement.new", {"announcement_id": 3})
            await asyncio.sleep(0)

        asyncio.run(scenario())

        for socket in (first, second, other_tab):
            assert socket.sent == [{"event": "announcement.new", "data": {"announcement_id": 3}}]

    def test_only_addressed_employees_receive(self):
        manager = ConnectionManager()
        mine, theirs = FakeSocket(), FakeSocket()

        async def scenario():
            await manager.connect(mine, 1)
            await manager.connect(theirs, 2)
            manager.publish([1], "message.read", {"reader_id": 2, "count": 1})
            await asyncio.sleep(0)

        asyncio.run(scenario())

        assert len(mine.sent) == 1
        assert theirs.sent == []

    def test_failing_socket_is_dropped(self):
        manager = ConnectionManager()
        broken = FakeSocket(fail=True)

        async def scenario():
            await manager.connect(broken, 4)
            manager.publish([4], "message.new", {})
            await asyncio.sleep(0)

        asyncio.run(scenario())

        assert not manager.is_online(4)

    def test_publish_without_connections_is_a_no_op(self):
        ConnectionManager().publish([1], "message.new", {})
        NullNotifier().publish(None, "announcement.new", {})

    def test_unexpected_delivery_error_is_logged(self, caplog):
        manager = ConnectionManager()

        class ExplodingSocket(FakeSocket):
            async def send_json(self, message):
                raise ValueError("bad payload")

        async def scenario():
            await manager.connect(ExplodingSocket(), 5)
            manager.publish([5], "message.new", {})
            assert len(manager._pending) == 1
            await asyncio.sleep(0.01)

        with caplog.at_level(logging.ERROR, logger="portal.services.realtime"):
            asyncio.run(scenario())

        assert "Realtime delivery failed: bad payload" in caplog.text
        assert manager._pending == set()


class TestSocketRoute:
    def test_rejects_without_session(self, client):
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with client.websocket_connect("/ws") as websocket:
                websocket.receive_json()

        assert exc_info.value.code == 1008

    def test_connected_event_and_ping(self, app, employee_client, coworker_client, employee, coworker):
        coworker_client.post("/api/messages", json={"receiver_id": employee.employee_id, "message": "hey"})

        with ws_client(app, employee_client).websocket_connect("/ws") as websocket:
            assert websocket.receive_json() == {
                "event": "connected",
                "data": {"employee_id": employee.employee_id, "unread_count": 1},
            }
            websocket.send_text("ping")
            assert websocket.receive_json() == {"event": "pong", "data": {}}

    def test_message_pushed_to_receiver(self, app, employee_client, coworker_client, employee, coworker):
        with ws_client(app, coworker_client).websocket_connect("/ws") as websocket:
            websocket.receive_json()

            employee_client.post("/api/messages", json={"receiver_id": coworker.employee_id, "message": "shift swap?"})

            pushed = websocket.receive_json()
            assert pushed["event"] == "message.new"
            assert pushed["data"]["message"] == "shift swap?"
            assert websocket.receive_json() == {"event": "unread.count", "data": {"count": 1}}

    def test_database_session_released_while_listening(self, app, employee_client, session_factory):
        opened = []

        def tracking_factory():
            session = session_factory()
            opened.append(session)
            return session

        app.state.session_factory = tracking_factory

        with ws_client(app, employee_client).websocket_connect("/ws") as websocket:
            websocket.receive_json()
            websocket.send_text("ping")
            websocket.receive_json()

            assert len(opened) == 1
            assert not opened[0].in_transaction()
