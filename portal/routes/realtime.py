# Hippies Portal - Realtime Route
# One WebSocket per browser tab, authenticated by the session cookie

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from portal.database import get_db_context
from portal.dependencies import SESSION_COOKIE_NAME
from portal.services.auth import AuthService
from portal.services.messaging import MessagingService


logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


@router.websocket("/ws")
async def realtime_socket(websocket: WebSocket):
    """
    Push channel for message.new, message.read, unread.count,
    announcement.new and task.assigned events.

    The database session is only held while the cookie is checked and
    the unread count read; the receive loop runs without one.

    The client may send "ping" to keep the connection alive; anything
    else it sends is ignored.
    """
    token = websocket.cookies.get(SESSION_COOKIE_NAME)
    employee_id = None
    unread_count = 0

    with get_db_context(websocket.app.state.session_factory) as db:
        user = AuthService(db).validate_session(token) if token else None
        if user is not None:
            employee_id = user.employee_id
            unread_count = MessagingService(db).unread_count(employee_id)

    if employee_id is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    manager = websocket.app.state.notifier
    await manager.connect(websocket, employee_id)

    try:
        await websocket.send_json({
            "event": "connected",
            "data": {"employee_id": employee_id, "unread_count": unread_count},
        })
        while True:
            text = await websocket.receive_text()
            if text == "ping":
                await websocket.send_json({"event": "pong", "data": {}})
    except WebSocketDisconnect:
        logger.debug("Socket closed by employee %s", employee_id)
    finally:
        manager.disconnect(websocket, employee_id)
