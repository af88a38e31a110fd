"""HTTP server for receiving events and reading session state."""

import json
from datetime import datetime, timezone

import structlog
from aiohttp import web
from pydantic import ValidationError

from deckchat.application.services.session import ChatSession
from deckchat.config.models import ServerConfig
from deckchat.domain.entities.event import (
    AddRelayEvent,
    CloseEvent,
    DeleteChannelEvent,
    Event,
    EventType,
    KeyEvent,
    MessageEvent,
    NoteActionEvent,
    OpenEditDialogEvent,
    RemoveRelayEvent,
    SelectChannelEvent,
    SubmitChannelEvent,
    SwitcherQueryEvent,
    SwitchIdentityEvent,
)
from deckchat.infrastructure.event_queue import EventQueue
from deckchat.presentation.http.views import blocks_view, channel_list_view


class HTTPServer:
    """HTTP server for receiving events and health checks.

    This server provides endpoints for:
    - POST /api/v1/events: Receive and enqueue events
    - GET /api/v1/session: Surfaces, relays, reactions and notifications
    - GET /api/v1/users/{user}/channels: An identity's channel list
    - GET /api/v1/users/{user}/blocks: Message blocks of the selected channel
    - GET /healthz: Kubernetes liveness probe

    Read endpoints never create state; an identity without a channel list
    answers 404.

    Args:
        config: Server configuration containing host and port.
        event_queue: EventQueue instance for enqueuing received events.
        session: Session read by the GET endpoints.
        logger: Structured logger for logging.
    """

    # Event types accepted from outside; reaction events are internal only
    EVENT_TYPE_MAP: dict[str, type[Event]] = {
        EventType.MESSAGE.value: MessageEvent,
        EventType.ACTION.value: NoteActionEvent,
        EventType.KEY.value: KeyEvent,
        EventType.CLOSE.value: CloseEvent,
        EventType.SELECT_CHANNEL.value: SelectChannelEvent,
        EventType.OPEN_EDIT_DIALOG.value: OpenEditDialogEvent,
        EventType.SUBMIT_CHANNEL.value: SubmitChannelEvent,
        EventType.DELETE_CHANNEL.value: DeleteChannelEvent,
        EventType.SWITCHER_QUERY.value: SwitcherQueryEvent,
        EventType.SWITCH_IDENTITY.value: SwitchIdentityEvent,
        EventType.ADD_RELAY.value: AddRelayEvent,
        EventType.REMOVE_RELAY.value: RemoveRelayEvent,
    }

    def __init__(
        self,
        config: ServerConfig,
        event_queue: EventQueue,
        session: ChatSession,
        logger: structlog.stdlib.BoundLogger,
    ) -> None:
        self.config = config
        self._event_queue = event_queue
        self._session = session
        self._logger = logger
        self._app: web.Application | None = None
        self._runner: web.AppRunner | None = None
        self._site: web.TCPSite | None = None

    @property
    def is_running(self) -> bool:
        """Return True if the server is running."""
        return self._site is not None

    @property
    def actual_port(self) -> int:
        """Return the actual port the server is listening on.

        Raises:
            RuntimeError: If the server is not running.
        """
        if self._site is None:
            raise RuntimeError("Server is not running")
        server = getattr(self._site, "_server", None)
        if server is None:
            raise RuntimeError("Server is not running")
        sockets = getattr(server, "sockets", None)
        if sockets:
            return sockets[0].getsockname()[1]
        raise RuntimeError("No sockets available")

    def create_app(self) -> web.Application:
        """Create and return the aiohttp Application."""
        app = web.Application()
        app.router.add_get("/healthz", self._handle_health_check)
        app.router.add_post("/api/v1/events", self._handle_event)
        app.router.add_get("/api/v1/session", self._handle_session)
        app.router.add_get("/api/v1/users/{user}/channels", self._handle_channels)
        app.router.add_get("/api/v1/users/{user}/blocks", self._handle_blocks)
        return app

    async def start(self) -> None:
        """Start the HTTP server."""
        self._app = self.create_app()
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()
        self._site = web.TCPSite(self._runner, self.config.host, self.config.port)
        await self._site.start()
        self._logger.info(
            "HTTP server started",
            host=self.config.host,
            port=self.actual_port,
        )

    async def stop(self) -> None:
        """Stop the HTTP server."""
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
            self._site = None
            self._app = None
            self._logger.info("HTTP server stopped")

    async def _handle_health_check(self, request: web.Request) -> web.Response:
        return web.json_response({"status": "ok"})

    async def _handle_event(self, request: web.Request) -> web.Response:
        """Handle POST /api/v1/events requests.

        The body is ``{"type": ..., "payload": {...}, "delay": seconds}``;
        the payload carries the event's own fields.

        Returns:
            JSON response with event_id on success, or error message on failure.
        """
        try:
            body = await request.json()
        except json.JSONDecodeError:
            return web.json_response({"error": "Invalid JSON"}, status=400)

        if not isinstance(body, dict):
            return web.json_response({"error": "Invalid JSON"}, status=400)

        if "type" not in body:
            return web.json_response(
                {"error": "Missing required field: type"}, status=400
            )

        event_type = body["type"]
        if event_type not in self.EVENT_TYPE_MAP:
            return web.json_response(
                {"error": f"Invalid event type: {event_type}"}, status=400
            )

        event_class = self.EVENT_TYPE_MAP[event_type]
        payload = body.get("payload", {})
        delay = body.get("delay", 0)

        if not isinstance(payload, dict):
            return web.json_response({"error": "Invalid payload"}, status=400)

        try:
            event = event_class.model_validate(payload)
        except ValidationError as e:
            self._logger.info(
                "Rejected event payload", event_type=event_type, error=str(e)
            )
            return web.json_response(
                {
                    "error": "Invalid payload",
                    "details": e.errors(include_url=False, include_context=False),
                },
                status=400,
            )

        try:
            await self._event_queue.enqueue(event, delay=delay)
        except Exception as e:
            self._logger.error("Failed to enqueue event", error=str(e))
            return web.json_response({"error": "Failed to enqueue event"}, status=500)

        self._logger.info(
            "Event received",
            event_id=event.id,
            event_type=event_type,
            delay=delay,
        )

        return web.json_response({"event_id": event.id})

    async def _handle_session(self, request: web.Request) -> web.Response:
        return web.json_response(self._session.snapshot())

    async def _handle_channels(self, request: web.Request) -> web.Response:
        user = request.match_info["user"]
        channel_list = self._session.store.by_user.get(user)
        if channel_list is None:
            return _not_found(user)
        return web.json_response(channel_list_view(user, channel_list))

    async def _handle_blocks(self, request: web.Request) -> web.Response:
        user = request.match_info["user"]
        channel_list = self._session.store.by_user.get(user)
        if channel_list is None:
            return _not_found(user)

        channel = channel_list.selected_channel()
        messages = self._session.messages(user)
        blocks = self._session.blocks(user)
        reacted = set(self._session.router.reactions.snapshot())
        return web.json_response(
            {
                "user": user,
                "channel_id": channel.id if channel else None,
                "blocks": blocks_view(
                    blocks, messages, reacted, datetime.now(timezone.utc)
                ),
            }
        )


def _not_found(user: str) -> web.Response:
    return web.json_response({"error": f"Unknown user: {user}"}, status=404)
