"""Speech-to-text collaborator."""

from .transcriber import WhisperTranscriber

__all__ = ["WhisperTranscriber"]
