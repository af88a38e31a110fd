"""Create/edit channel dialog state."""


class ChannelDialog:
    """Modal form for creating or editing a channel.

    Attributes:
        is_open: Whether the dialog is shown.
        editing_id: Id of the edited channel, None in create mode. The id
            survives deletions that shift list positions.
        error: Inline validation message of the last failed submission.
    """

    def __init__(self) -> None:
        self.is_open = False
        self.editing_id: str | None = None
        self.name = ""
        self.hashtags = ""
        self.error: str | None = None

    @property
    def is_editing(self) -> bool:
        return self.editing_id is not None

    def open(self) -> None:
        """Open an empty form in create mode."""
        self.is_open = True
        self.editing_id = None
        self.name = ""
        self.hashtags = ""
        self.error = None

    def open_for_edit(self, channel_id: str, name: str, hashtags: list[str]) -> None:
        """Open the form prefilled with an existing channel."""
        self.is_open = True
        self.editing_id = channel_id
        self.name = name
        self.hashtags = ", ".join(hashtags)
        self.error = None

    def close(self) -> None:
        self.is_open = False
        self.editing_id = None
        self.error = None

    def reject(self, name: str, hashtags: str, error: str) -> None:
        """Keep the form open with the submitted values and an inline error."""
        self.name = name
        self.hashtags = hashtags
        self.error = error
