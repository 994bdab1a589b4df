import asyncio
import json

from channels.generic.websocket import AsyncWebsocketConsumer
from rest_framework.exceptions import APIException

from ..sessions import BUSY_MESSAGE, OrganizationFormSession, PointOfInterestFormSession, SessionError

CLOSE_UNAUTHENTICATED = 4003


def _authenticated(scope) -> bool:
    user = scope.get("user")
    return bool(user is not None and user.is_authenticated)


class UpdatesConsumer(AsyncWebsocketConsumer):
    """Pushes cache refresh notices to dashboards."""

    GROUP = "updates"

    async def connect(self):
        if not _authenticated(self.scope):
            await self.close(code=CLOSE_UNAUTHENTICATED)
            return
        await self.channel_layer.group_add(self.GROUP, self.channel_name)
        await self.accept()
        await self.send(json.dumps({"type": "welcome", "message": "connected"}))

    async def disconnect(self, close_code):
        await self.channel_layer.group_discard(self.GROUP, self.channel_name)

    async def broadcast_refresh(self, event):
        # event: {"type": "broadcast.refresh", "version": int, "ts": "...", "keys": [...]}
        await self.send(json.dumps(event))


class FormSessionConsumer(AsyncWebsocketConsumer):
    """Drives one modal form; the session lives as long as the socket.

    Client messages are ``{"type": ..., ...}``; field and dropdown
    messages are answered with the new ``state``.  Submits run as a task so
    the socket keeps answering while the save is in flight; their outcome
    arrives as a ``toast`` followed by ``state`` or ``closed``.
    """

    session_class = None

    async def connect(self):
        if not _authenticated(self.scope):
            await self.close(code=CLOSE_UNAUTHENTICATED)
            return
        self.session = self.session_class(self.scope["user"], on_update=self.send_state)
        self.submit_task = None
        self.connected = True
        await self.accept()

    async def disconnect(self, close_code):
        self.connected = False
        session = getattr(self, "session", None)
        if session is not None:
            session.close()
        task = getattr(self, "submit_task", None)
        if task is not None and not task.done():
            await task

    async def send_json(self, payload: dict):
        await self.send(text_data=json.dumps(payload, default=str))

    async def send_state(self):
        await self.send_json({"type": "state", "data": self.session.state()})

    async def send_error(self, message: str, code: str = "invalid_message"):
        await self.send_json({"type": "error", "code": code, "message": message})

    async def receive(self, text_data=None, bytes_data=None):
        if not text_data:
            return
        try:
            message = json.loads(text_data)
        except json.JSONDecodeError:
            await self.send_error("Invalid JSON")
            return
        if not isinstance(message, dict) or not isinstance(message.get("type"), str):
            await self.send_error("Messages must be objects with a type")
            return

        handler = getattr(self, "on_" + message["type"].replace(".", "_"), None)
        if handler is None:
            await self.send_error(f"Unsupported message type: {message['type']}", code="unsupported_type")
            return
        try:
            await handler(message)
        except SessionError as e:
            await self.send_error(str(e), code="rejected")
        except APIException as e:
            await self.send_error(str(e.detail), code=str(e.default_code))

    async def on_open(self, message):
        await self.session.open(message.get("mode", "create"), message.get("id"),
                                **self.open_context(message))
        await self.send_state()

    def open_context(self, message) -> dict:
        return {}

    async def on_field_set(self, message):
        self.session.set_field(message.get("name"), message.get("value"))
        await self.send_state()

    async def on_field_blur(self, message):
        self.session.blur(message.get("name"))
        await self.send_state()

    async def on_select_toggle(self, message):
        self.session.select_toggle(message.get("name"))
        await self.send_state()

    async def on_select_outside(self, message):
        self.session.select_outside()
        await self.send_state()

    async def on_select_key(self, message):
        self.session.select_key(message.get("name"), message.get("key", ""))
        await self.send_state()

    async def on_select_search(self, message):
        self.session.select_search(message.get("name"), message.get("query", ""))
        await self.send_state()

    async def on_select_choose(self, message):
        if not self.session.select_choose(message.get("name"), message.get("value")):
            await self.send_error("Option is not available", code="rejected")
        await self.send_state()

    async def on_submit(self, message):
        if self.submit_task is not None and not self.submit_task.done():
            raise SessionError(BUSY_MESSAGE)
        self.submit_task = asyncio.ensure_future(self._submit(self.session.start_submit()))

    async def _submit(self, pending):
        toast = await pending
        if not self.connected:
            return
        if toast is not None:
            await self.send_json({"type": "toast", **toast})
        if self.session.is_open:
            await self.send_state()
        else:
            await self.send_json({"type": "closed", "data": {"id": self.session.record_id}})

    async def on_close(self, message):
        if self.session.submitting:
            raise SessionError(BUSY_MESSAGE)
        self.session.close()
        await self.send_json({"type": "closed", "data": {"id": self.session.record_id}})


class OrganizationFormConsumer(FormSessionConsumer):
    session_class = OrganizationFormSession


class PointOfInterestFormConsumer(FormSessionConsumer):
    session_class = PointOfInterestFormSession

    def open_context(self, message) -> dict:
        return {"organization_id": message.get("organizationId")}

    async def on_marker_set(self, message):
        self.session.set_marker(message.get("lat"), message.get("lng"))
        await self.send_state()
