"""Speech-to-text via the OpenAI Whisper transcription endpoint."""

import logging
from typing import Optional

import httpx

from grocery_voice.errors import TranscriptionError

logger = logging.getLogger(__name__)


class WhisperTranscriber:
    """Turns recorded audio into text."""

    def __init__(
        self,
        api_key: str,
        model: str = "whisper-1",
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize transcriber.

        Args:
            api_key: OpenAI API key.
            model: Transcription model name.
            base_url: API root URL.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (used by tests).
        """
        self._api_key = api_key
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def is_available(self) -> bool:
        return bool(self._api_key)

    async def transcribe(
        self,
        audio: bytes,
        filename: str = "audio.ogg",
        mime_type: str = "audio/ogg",
    ) -> dict:
        """Transcribe an audio payload.

        Returns:
            ``{"text": str}``

        Raises:
            TranscriptionError: If the key is missing, the audio is empty or
                the request fails.
        """
        if not self._api_key:
            raise TranscriptionError("Missing OPENAI_API_KEY")
        if not audio:
            raise TranscriptionError("Missing audio")

        url = f"{self._base_url}/audio/transcriptions"
        headers = {"Authorization": f"Bearer {self._api_key}"}
        files = {"file": (filename, audio, mime_type)}
        data = {"model": self._model}

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(url, headers=headers, files=files, data=data)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(f"Transcription API error: {e.response.status_code} {e.response.text[:200]}")
            raise TranscriptionError(f"OpenAI error: {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Transcription failed: {e}")
            raise TranscriptionError("Transcription failed") from e

        text = payload.get("text") or ""
        logger.info(f"Transcribed {len(audio)} bytes of audio: {text[:50]}...")
        return {"text": text}
