"""Exceptions raised across Grocery Voice."""


class GroceryVoiceError(Exception):
    """Base class for all Grocery Voice errors."""


class AssistantUnavailableError(GroceryVoiceError):
    """No language model provider is configured for this process."""


class TurnFailedError(GroceryVoiceError):
    """A conversational turn failed because of an upstream model or transport error."""


class MalformedResponseError(GroceryVoiceError):
    """The language model returned a response that could not be parsed."""


class TranscriptionError(GroceryVoiceError):
    """Speech-to-text transcription failed."""
