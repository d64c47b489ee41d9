class ChatServiceError(Exception):
    """Base class for failures raised while handling a chat turn."""


class InvalidMessageError(ChatServiceError):
    """Raised when an inbound message fails validation."""


class CompletionError(ChatServiceError):
    """Raised when the model provider fails or returns no text."""
