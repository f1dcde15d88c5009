"""ASR port - Abstraction for speech-to-text services.

This protocol defines the contract for ASR models, allowing
different implementations (Whisper, etc.) to be used by a VoiceSession.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Optional, Protocol

if TYPE_CHECKING:
    from ..domain.models import TranscriptionResult


class ASRModelPort(Protocol):
    """Port for ASR models.

    Implementation: adapters/asr/whisper_adapter.py

    ASR models convert recorded audio files to text transcriptions.
    """

    def transcribe(
        self,
        audio_path: Path,
        language: Optional[str] = "de",
        beam_size: int = 5,
    ) -> TranscriptionResult:
        """Transcribe an audio file to text.

        Args:
            audio_path: Path to the audio file.
            language: Language code hint (None for auto-detection).
            beam_size: Beam size for decoding (higher = more accurate, slower).

        Returns:
            TranscriptionResult with full text and segments.

        Raises:
            ASRError: If transcription fails.
        """
        ...

    @property
    def model_id(self) -> str:
        """Return the model identifier (e.g., 'small')."""
        ...

    def unload(self) -> None:
        """Unload the model from memory."""
        ...
