"""Keyboard shortcut resolution across competing modal surfaces."""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict

from deckchat.domain.entities.event import Key


class ShortcutContext(BaseModel):
    """Which modal surfaces report themselves open for one key event."""

    model_config = ConfigDict(frozen=True)

    thread_open: bool = False
    dialog_open: bool = False
    switcher_open: bool = False

    @property
    def blocking_modal_open(self) -> bool:
        """The create dialog and the quick switcher block global shortcuts."""
        return self.dialog_open or self.switcher_open


class ShortcutAction(str, Enum):
    """Outcome of resolving one key event."""

    CLOSE_THREAD = "close_thread"
    CLOSE_DIALOG = "close_dialog"
    CLOSE_SWITCHER = "close_switcher"
    OPEN_CREATE_DIALOG = "open_create_dialog"
    TOGGLE_SWITCHER = "toggle_switcher"


@dataclass(frozen=True)
class ShortcutRule:
    key: Key
    applies: Callable[[ShortcutContext], bool]
    action: ShortcutAction


# Evaluated top to bottom; the first applicable rule consumes the event.
# Cancel closes the front-most surface only, thread panel first.
DEFAULT_RULES: tuple[ShortcutRule, ...] = (
    ShortcutRule(Key.CANCEL, lambda ctx: ctx.thread_open, ShortcutAction.CLOSE_THREAD),
    ShortcutRule(Key.CANCEL, lambda ctx: ctx.dialog_open, ShortcutAction.CLOSE_DIALOG),
    ShortcutRule(
        Key.CANCEL, lambda ctx: ctx.switcher_open, ShortcutAction.CLOSE_SWITCHER
    ),
    ShortcutRule(
        Key.CREATE_CHANNEL,
        lambda ctx: not ctx.blocking_modal_open,
        ShortcutAction.OPEN_CREATE_DIALOG,
    ),
    ShortcutRule(
        Key.QUICK_SWITCHER,
        lambda ctx: not ctx.dialog_open,
        ShortcutAction.TOGGLE_SWITCHER,
    ),
)


class ShortcutDispatcher:
    """Resolves a key event into at most one action by fixed priority."""

    def __init__(self, rules: tuple[ShortcutRule, ...] = DEFAULT_RULES) -> None:
        self._rules = rules

    def resolve(self, key: Key, context: ShortcutContext) -> ShortcutAction | None:
        """Resolve a key event.

        Args:
            key: The logical key pressed.
            context: Fresh snapshot of the open surfaces.

        Returns:
            The action of the first matching rule, or None if no rule consumes
            the event.
        """
        for rule in self._rules:
            if rule.key == key and rule.applies(context):
                return rule.action
        return None
