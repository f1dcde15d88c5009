"""Voice session - one push-to-talk interaction.

A session is created and owned by the caller (CLI, web handler, kiosk
loop); nothing about it is global. It is single-shot: after ``start()``
one recording is submitted, transcribed, and reported through the
callbacks, and the session stops itself.

Error codes passed to ``on_error``:
- "no-speech": the recording contained no recognizable speech
- "not-allowed": the recording could not be read (missing or no permission)
- "network": the recognizer could not be reached (model download, remote service)
- "asr-failed": transcription kept failing after retries
- "aborted": the caller cancelled (not shown to the user)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

import requests

from ..domain.errors import ASRError, SpeechRecognitionError
from ..ports.asr import ASRModelPort
from .retry import RetryPolicy

ERROR_MESSAGES = {
    "no-speech": "Ich habe nichts gehört. Bitte sprich lauter oder näher am Mikrofon.",
    "not-allowed": "Mikrofon-Zugriff verweigert. Bitte überprüfe deine Einstellungen.",
    "network": "Netzwerkfehler. Bitte überprüfe deine Internetverbindung.",
    "asr-failed": "Die Spracherkennung ist fehlgeschlagen. Bitte versuche es noch einmal.",
}

# Outcomes a user causes by normal use, logged below warning level
_EXPECTED_CODES = {"no-speech", "aborted"}

_NETWORK_FAILURES = (
    ConnectionError,
    TimeoutError,
    requests.exceptions.ConnectionError,
    requests.exceptions.Timeout,
)


def error_message(code: str) -> Optional[str]:
    """Return the German message shown for an error code.

    "aborted" returns None since a cancelled session is not an error
    from the user's point of view.
    """
    if code == "aborted":
        return None
    return ERROR_MESSAGES.get(code, f"Fehler: {code}")


def failure_code(error: ASRError) -> str:
    """Map a transcription failure to the error code reported to the caller."""
    if error.is_unreadable_audio:
        return "not-allowed"
    if isinstance(error.cause, _NETWORK_FAILURES):
        return "network"
    return "asr-failed"


@dataclass
class VoiceSession:
    """Caller-owned speech recognition session.

    Attributes:
        asr: Speech-to-text model
        on_result: Called with the final transcript
        on_start: Called when the session starts listening
        on_end: Called when the session stops listening
        on_error: Called with an error code (see module docstring)
        retry_policy: Retries for failed transcriptions
        language: Recognition language
        beam_size: Decoder beam size
    """

    asr: ASRModelPort
    on_result: Optional[Callable[[str], None]] = None
    on_start: Optional[Callable[[], None]] = None
    on_end: Optional[Callable[[], None]] = None
    on_error: Optional[Callable[[str], None]] = None
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)
    language: str = "de"
    beam_size: int = 5

    transcript: str = field(default="", init=False)
    error: Optional[str] = field(default=None, init=False)
    _listening: bool = field(default=False, init=False, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    error_message = staticmethod(error_message)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    @property
    def is_listening(self) -> bool:
        return self._listening

    def start(self) -> None:
        """Start listening. Does nothing if already listening."""
        if self._listening:
            return
        self.transcript = ""
        self.error = None
        self._listening = True
        self._logger.debug("Voice session started")
        if self.on_start:
            self.on_start()

    def stop(self) -> None:
        """Stop listening. Does nothing if not listening."""
        if not self._listening:
            return
        self._listening = False
        self._logger.debug("Voice session ended")
        if self.on_end:
            self.on_end()

    def abort(self) -> None:
        """Cancel the session, reporting "aborted"."""
        if self._listening:
            self._fail("aborted")

    def reset(self) -> None:
        """Forget the last transcript and error."""
        self.stop()
        self.transcript = ""
        self.error = None

    def _fail(self, code: str) -> None:
        self.error = code
        if code in _EXPECTED_CODES:
            self._logger.debug("Voice session ended without result", extra={"code": code})
        else:
            self._logger.warning("Voice session error", extra={"code": code})
        if self.on_error:
            self.on_error(code)
        self.stop()

    def submit_audio(self, audio_path: Path) -> Optional[str]:
        """Transcribe one recording and report it through the callbacks.

        Args:
            audio_path: Recorded utterance.

        Returns:
            The transcript, or None if nothing usable was recognized.

        Raises:
            SpeechRecognitionError: If the session is not listening.
        """
        if not self._listening:
            raise SpeechRecognitionError(
                "Voice session is not listening", code="not-listening"
            )

        try:
            result = self.retry_policy.call(
                self.asr.transcribe,
                Path(audio_path),
                language=self.language,
                beam_size=self.beam_size,
                retry_on=(ASRError,),
            )
        except ASRError as e:
            self._logger.error(
                "Transcription failed",
                extra={"audio_path": str(audio_path), "error": str(e)},
            )
            self._fail(failure_code(e))
            return None

        text = result.full_text.strip()
        if not text:
            self._fail("no-speech")
            return None

        self.transcript = text
        self._logger.info("Speech recognized", extra={"transcript": text})
        if self.on_result:
            self.on_result(text)
        self.stop()
        return text

    def __enter__(self) -> "VoiceSession":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
