"""Chat session context wiring the channel and rendering state together."""

import asyncio
from collections.abc import Callable, Coroutine
from datetime import datetime
from typing import Any

from structlog.stdlib import BoundLogger

from deckchat.application.services.action_router import ActionRouter
from deckchat.application.services.channel_dialog import ChannelDialog
from deckchat.application.services.channel_store import ChannelStore, utc_now
from deckchat.application.services.grouping_engine import GroupingEngine
from deckchat.application.services.notifications import NotificationCenter
from deckchat.application.services.quick_switcher import QuickSwitcher
from deckchat.application.services.shortcut_dispatcher import (
    ShortcutAction,
    ShortcutContext,
    ShortcutDispatcher,
)
from deckchat.application.services.subscription_bridge import SubscriptionBridge
from deckchat.application.services.thread_overlay import ThreadOverlayController
from deckchat.config.models import ReactionConfig, SessionConfig
from deckchat.domain.entities.channel import Channel, ChannelList
from deckchat.domain.entities.event import (
    CloseTrigger,
    Key,
    ReactionResultEvent,
    ReactionRetryEvent,
    Surface,
)
from deckchat.domain.entities.message import Message, MessageBlock
from deckchat.domain.entities.note_action import NoteAction
from deckchat.domain.entities.relay_config import RelayConfig
from deckchat.domain.errors import (
    ChannelIndexError,
    ChannelNotFoundError,
    ChannelValidationError,
    PersistenceError,
)
from deckchat.domain.repositories.gateways import ReactionPublisher, Timeline
from deckchat.domain.repositories.session_repository import SessionRepository
from deckchat.infrastructure.event_queue import EventQueue
from deckchat.infrastructure.logging import bind_identity, get_logger

NAVIGATION_KEYS = frozenset({Key.ARROW_UP, Key.ARROW_DOWN, Key.ENTER})


class ChatSession:
    """Explicit session context for one running client.

    Owns every piece of mutable UI state and is only mutated from the session
    loop. Persistence writes run as background tasks serialized by a lock;
    each write snapshots the current state of its document when it runs, so
    a failed write is repaired by the next one.
    """

    def __init__(
        self,
        config: SessionConfig,
        repository: SessionRepository,
        timeline: Timeline,
        publisher: ReactionPublisher,
        event_queue: EventQueue,
        reactions: ReactionConfig | None = None,
        clock: Callable[[], datetime] = utc_now,
        logger: BoundLogger | None = None,
    ) -> None:
        """Initialize the session.

        Args:
            config: Session configuration.
            repository: Durable store for channel lists and relays.
            timeline: Timeline collaborator owning subscriptions.
            publisher: Network collaborator for reactions.
            event_queue: Queue feeding the session loop.
            reactions: Reaction retry configuration.
            clock: Source of the current time.
            logger: Logger instance.
        """
        self._config = config
        self._repository = repository
        self._timeline = timeline
        self._clock = clock
        self._logger = logger or get_logger(__name__)

        self.active_user = config.identity
        self.relay_config = RelayConfig(relays=set(config.default_relays))
        self.notifications = NotificationCenter()
        self.bridge = SubscriptionBridge(timeline)
        self.store = ChannelStore(
            self.bridge,
            default_channels=config.default_channels,
            clock=clock,
            on_change=self._persist_channels,
        )
        self.grouping = GroupingEngine(config.group_threshold_seconds)
        self.overlay = ThreadOverlayController()
        self.dialog = ChannelDialog()
        self.switcher = QuickSwitcher()
        self.shortcuts = ShortcutDispatcher()
        self.router = ActionRouter(
            self.overlay, publisher, event_queue, self.notifications, reactions
        )

        self._write_lock = asyncio.Lock()
        self._writes: set[asyncio.Task[None]] = set()
        self._dirty_users: set[str] = set()
        self._relays_dirty = False

    @classmethod
    async def load(
        cls,
        config: SessionConfig,
        repository: SessionRepository,
        timeline: Timeline,
        publisher: ReactionPublisher,
        event_queue: EventQueue,
        reactions: ReactionConfig | None = None,
        clock: Callable[[], datetime] = utc_now,
        logger: BoundLogger | None = None,
    ) -> "ChatSession":
        """Create a session from persisted state.

        A repository that cannot be read leaves the session with defaults.
        """
        session = cls(
            config,
            repository,
            timeline,
            publisher,
            event_queue,
            reactions=reactions,
            clock=clock,
            logger=logger,
        )

        try:
            lists = await repository.load_channels_cache()
        except PersistenceError as e:
            session._logger.error("Failed to load channel lists", error=str(e))
            lists = {}
        session.store.install(lists)

        try:
            relay_config = await repository.load_relay_config()
        except PersistenceError as e:
            session._logger.error("Failed to load relay config", error=str(e))
            relay_config = None
        if relay_config is not None:
            session.relay_config = relay_config

        session.switch_identity(config.identity)
        return session

    async def close(self) -> None:
        """Wait for background work and flush every document."""
        await self.router.drain()
        await self.wait_for_writes()
        async with self._write_lock:
            for user, channel_list in list(self.store.by_user.items()):
                await self._save_channels(user, channel_list)
            await self._save_relays()
        self._logger.info("Session closed", identities=len(self.store.by_user))

    async def wait_for_writes(self) -> None:
        """Wait until every scheduled persistence write has finished."""
        while self._writes:
            await asyncio.gather(*self._writes)

    # Identity

    def _user(self, user: str | None) -> str:
        return user or self.active_user

    def channels(self, user: str | None = None) -> ChannelList:
        return self.store.channels(self._user(user))

    def switch_identity(self, user: str) -> None:
        """Make another identity's channel list the active one."""
        self.active_user = user
        self.store.channels(user)
        self.switcher.close()
        self.dialog.close()
        bind_identity(user)
        self._logger.info("Switched identity", user=user)

    def remove_user(self, user: str) -> None:
        """Forget an identity and its persisted channel list."""
        self.store.remove_user(user)
        self._dirty_users.discard(user)
        self._spawn(self._delete_channels(user))

    # Timeline

    def ingest(self, message: Message) -> None:
        """Deliver a message to every channel whose filter matches it."""
        for handle in self._timeline.ingest(message):
            for user, channel_id in self.bridge.channels_for(handle):
                self.store.record_incoming(user, channel_id, message)

    def messages(self, user: str | None = None) -> list[Message]:
        """Return the messages of the identity's selected channel."""
        channel = self.store.selected_channel(self._user(user))
        if channel is None:
            return []
        handle = self.bridge.handle_for(channel)
        if handle is None:
            return []
        return list(self._timeline.messages(handle))

    def blocks(self, user: str | None = None) -> list[MessageBlock]:
        """Return the message blocks of the identity's selected channel."""
        channel = self.store.selected_channel(self._user(user))
        if channel is None:
            return []
        return self.grouping.blocks_for(channel.id, self.messages(user))

    # Keyboard and surfaces

    def shortcut_context(self) -> ShortcutContext:
        return ShortcutContext(
            thread_open=self.overlay.is_open,
            dialog_open=self.dialog.is_open,
            switcher_open=self.switcher.is_open,
        )

    def handle_key(self, key: Key) -> ShortcutAction | None:
        """Resolve and apply one key press.

        Navigation keys nobody else claims go to the open quick switcher.
        """
        action = self.shortcuts.resolve(key, self.shortcut_context())
        if action is not None:
            self._apply_shortcut(action)
            return action

        if self.switcher.is_open and key in NAVIGATION_KEYS:
            index = self.switcher.handle_key(key, self.channels())
            if index is not None:
                self.select_channel(index)
        return None

    def _apply_shortcut(self, action: ShortcutAction) -> None:
        if action == ShortcutAction.CLOSE_THREAD:
            self.overlay.close(CloseTrigger.CANCEL_KEY)
        elif action == ShortcutAction.CLOSE_DIALOG:
            self.dialog.close()
        elif action == ShortcutAction.CLOSE_SWITCHER:
            self.switcher.close()
        elif action == ShortcutAction.OPEN_CREATE_DIALOG:
            self.dialog.open()
        elif action == ShortcutAction.TOGGLE_SWITCHER:
            self.switcher.toggle()
        self._logger.debug("Applied shortcut", action=action.value)

    def close_surface(
        self, surface: Surface, trigger: CloseTrigger = CloseTrigger.DISMISS
    ) -> None:
        """Close a surface from a dismiss button or an outside click."""
        if surface == Surface.THREAD:
            self.overlay.close(trigger)
        elif surface == Surface.DIALOG:
            self.dialog.close()
        elif surface == Surface.SWITCHER:
            self.switcher.close()

    def set_switcher_query(self, query: str) -> None:
        if self.switcher.is_open:
            self.switcher.set_query(query)

    # Channels

    def select_channel(self, index: int, user: str | None = None) -> bool:
        """Select a channel; an invalid index is logged and ignored."""
        try:
            self.store.select_channel(self._user(user), index)
        except ChannelIndexError as e:
            self._logger.warning(
                "Ignoring channel selection", index=index, error=str(e)
            )
            return False
        self.switcher.close()
        return True

    def open_edit_dialog(self, index: int, user: str | None = None) -> bool:
        channel = self.channels(user).get(index)
        if channel is None:
            self._logger.warning("Ignoring edit of missing channel", index=index)
            return False
        self.dialog.open_for_edit(channel.id, channel.name, channel.hashtags)
        return True

    def submit_channel(
        self, name: str, hashtags: str, user: str | None = None
    ) -> Channel | None:
        """Create or edit a channel from the dialog form.

        Validation failures keep the dialog open with the submitted values
        and an inline error.
        """
        owner = self._user(user)
        editing_id = self.dialog.editing_id if self.dialog.is_open else None
        index = None
        if editing_id is not None:
            # Positions shift on delete; the id is what the form was opened for
            index = self.channels(owner).index_of(editing_id)
            if index is None:
                self.dialog.close()
                self._logger.warning(
                    "Edited channel no longer exists", channel_id=editing_id
                )
                return None
        try:
            if index is not None:
                channel = self.store.edit_channel(owner, index, name, hashtags)
            else:
                channel = self.store.create_channel(owner, name, hashtags)
        except ChannelValidationError as e:
            self.dialog.reject(name, hashtags, str(e))
            self._logger.info("Channel form rejected", error=str(e))
            return None
        except ChannelIndexError as e:
            self.dialog.close()
            self._logger.warning("Edited channel no longer exists", error=str(e))
            return None

        self.dialog.close()
        self.grouping.invalidate()
        return channel

    def delete_channel(self, channel_id: str, user: str | None = None) -> bool:
        try:
            self.store.delete_channel(self._user(user), channel_id)
        except ChannelNotFoundError as e:
            self._logger.warning("Ignoring channel deletion", error=str(e))
            return False
        if self.dialog.editing_id == channel_id:
            self.dialog.close()
        self.grouping.invalidate()
        return True

    # Relays

    def add_relay(self, url: str) -> bool:
        added = self.relay_config.add_relay(url)
        if added:
            self._logger.info("Added relay", url=url.strip())
            self._persist_relays()
        return added

    def remove_relay(self, url: str) -> bool:
        removed = self.relay_config.remove_relay(url)
        if removed:
            self._logger.info("Removed relay", url=url)
            self._persist_relays()
        return removed

    # Note actions

    def route_action(self, action: NoteAction) -> None:
        self.router.route(action)

    async def reconcile_reaction(self, result: ReactionResultEvent) -> None:
        await self.router.reconcile(result)

    def retry_reaction(self, event: ReactionRetryEvent) -> None:
        self.router.retry(event)

    # Views

    def snapshot(self) -> dict[str, Any]:
        """Return a JSON-ready view of the surfaces and global state."""
        return {
            "active_user": self.active_user,
            "thread": {"open": self.overlay.is_open, "anchor": self.overlay.anchor},
            "dialog": {
                "open": self.dialog.is_open,
                "editing_id": self.dialog.editing_id,
                "name": self.dialog.name,
                "hashtags": self.dialog.hashtags,
                "error": self.dialog.error,
            },
            "switcher": {
                "open": self.switcher.is_open,
                "query": self.switcher.query,
                "highlighted": self.switcher.highlighted,
                "results": [
                    index for index, _ in self.switcher.results(self.channels())
                ],
            },
            "relays": sorted(self.relay_config.relays),
            "reactions": {
                note_id: status.value
                for note_id, status in self.router.reactions.snapshot().items()
            },
            "notifications": [
                item.model_dump(mode="json") for item in self.notifications.items()
            ],
        }

    # Persistence

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.create_task(coro)
        self._writes.add(task)
        task.add_done_callback(self._writes.discard)

    def _persist_channels(self, user: str) -> None:
        if user in self._dirty_users:
            return
        self._dirty_users.add(user)
        self._spawn(self._write_channels(user))

    def _persist_relays(self) -> None:
        if self._relays_dirty:
            return
        self._relays_dirty = True
        self._spawn(self._write_relays())

    async def _write_channels(self, user: str) -> None:
        async with self._write_lock:
            # Cleared before the write so later mutations schedule another one.
            if user not in self._dirty_users:
                return
            self._dirty_users.discard(user)
            channel_list = self.store.by_user.get(user)
            if channel_list is not None:
                await self._save_channels(user, channel_list)

    async def _write_relays(self) -> None:
        async with self._write_lock:
            self._relays_dirty = False
            await self._save_relays()

    async def _delete_channels(self, user: str) -> None:
        async with self._write_lock:
            try:
                await self._repository.delete_channel_list(user)
            except PersistenceError as e:
                self._logger.error(
                    "Failed to delete channel list", user=user, error=str(e)
                )

    async def _save_channels(self, user: str, channel_list: ChannelList) -> None:
        try:
            await self._repository.save_channel_list(
                user, channel_list.model_copy(deep=True)
            )
        except PersistenceError as e:
            self._logger.error("Failed to save channel list", user=user, error=str(e))

    async def _save_relays(self) -> None:
        try:
            await self._repository.save_relay_config(
                self.relay_config.model_copy(deep=True)
            )
        except PersistenceError as e:
            self._logger.error("Failed to save relay config", error=str(e))
