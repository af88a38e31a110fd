"""Domain error taxonomy.

None of these errors is fatal to the process. Callers either leave state
unchanged and inform the user, or keep an optimistic state and reconcile later.
"""


class DeckchatError(Exception):
    """Base exception for deckchat domain errors."""


class ChannelValidationError(DeckchatError, ValueError):
    """Raised when a channel has an empty name or an empty hashtag set."""


class ChannelIndexError(DeckchatError, IndexError):
    """Raised when a channel index does not exist in the list."""


class ChannelNotFoundError(DeckchatError, LookupError):
    """Raised when a channel id does not exist in the list."""


class PersistenceError(DeckchatError):
    """Raised when the durable store cannot be read or written."""


class NetworkDispatchError(DeckchatError):
    """Raised when an outbound publish request fails."""
