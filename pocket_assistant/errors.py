"""Exceptions raised by the store, the managers and the transport layer."""


class AssistantError(Exception):
    """Base class for errors surfaced to users as a reply."""


class ValidationError(AssistantError):
    """Bad or missing arguments. The message is shown to the user as-is."""


class NotFound(AssistantError):
    """The referenced record does not exist for the requesting owner."""

    def __init__(self, kind: str, record_id):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind.capitalize()} #{record_id} not found")


class StoreUnavailable(AssistantError):
    """The database has not been initialized."""


class TransportError(AssistantError):
    """Sending a message or resolving a file through Telegram failed."""
