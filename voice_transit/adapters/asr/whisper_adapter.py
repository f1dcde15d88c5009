"""Faster-Whisper speech recognition adapter.

Transcribes a recorded German utterance to text for the voice session.
Loaded models are cached under the device they actually ended up on, so
a CUDA request that fell back to CPU is not reloaded on every call.

faster-whisper is an optional dependency (``pip install voice-transit[asr]``)
and is imported only when the first model is loaded.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from ...config import ASRConfig, get_config
from ...domain.errors import ASRError
from ...domain.models import TranscriptionResult, TranscriptionSegment
from ...ports.cache import CachePort
from ..cache.memory_cache import InMemoryCache


@dataclass
class WhisperASRAdapter:
    """ASRModelPort implementation using Faster-Whisper.

    Attributes:
        config: ASR configuration
        cache: Cache for model instances
    """

    config: ASRConfig = field(default_factory=lambda: get_config().asr)
    cache: CachePort[Any] = field(default_factory=lambda: InMemoryCache(name="whisper"))

    _model: Optional[Any] = field(default=None, repr=False)
    _actual_device: str = field(default="", repr=False)
    _actual_compute: str = field(default="", repr=False)
    _model_id: str = field(default="", repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def _load_model(self, model_id: Optional[str] = None) -> Any:
        """Load or get the cached Whisper model."""
        model_id = model_id or self.config.default_model
        requested_device: str = self.config.device
        requested_compute: str = self.config.compute_type

        if requested_device == "auto":
            requested_device = self._detect_device()

        cache_key = f"{model_id}:{requested_device}:{requested_compute}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            self._logger.debug("Model cache hit", extra={"key": cache_key})
            self._model = cached
            self._model_id = model_id
            self._actual_device = requested_device
            self._actual_compute = requested_compute
            return cached

        self._logger.info(
            "Loading Whisper model",
            extra={
                "model": model_id,
                "device": requested_device,
                "compute_type": requested_compute,
            },
        )

        from faster_whisper import WhisperModel

        actual_device: str = requested_device
        actual_compute: str = requested_compute

        try:
            model = WhisperModel(
                model_id,
                device=requested_device,
                compute_type=requested_compute,
            )
        except (RuntimeError, ValueError) as e:
            self._logger.warning(
                "Failed to load on requested device, falling back",
                extra={
                    "error": str(e),
                    "requested_device": requested_device,
                    "fallback_device": self.config.fallback_device,
                },
            )
            actual_device = self.config.fallback_device
            actual_compute = self.config.fallback_compute_type
            model = WhisperModel(
                model_id,
                device=actual_device,
                compute_type=actual_compute,
            )

        # Keyed by the device the model really runs on
        self.cache.set(f"{model_id}:{actual_device}:{actual_compute}", model)

        self._model = model
        self._model_id = model_id
        self._actual_device = actual_device
        self._actual_compute = actual_compute
        return model

    def _detect_device(self) -> str:
        """Return "cuda" if CTranslate2 sees a GPU, else "cpu"."""
        import ctranslate2

        if ctranslate2.get_cuda_device_count() > 0:
            return "cuda"
        return "cpu"

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
            beam_size: Beam size for decoding.

        Returns:
            TranscriptionResult with full text and segments.

        Raises:
            ASRError: If the model cannot be loaded or transcription fails.
        """
        try:
            model = self._load_model()
        except (ImportError, RuntimeError, ValueError, OSError) as e:
            raise ASRError(
                f"Could not load Whisper model: {e}",
                model_id=self.model_id,
                device=self.config.device,
                audio_path=str(audio_path),
                cause=e,
            )

        self._logger.info(
            "Starting transcription",
            extra={
                "audio_path": str(audio_path),
                "language": language,
                "beam_size": beam_size,
            },
        )
        start_time = time.time()

        try:
            segments_iter, info = model.transcribe(
                str(audio_path),
                language=language,
                beam_size=beam_size,
            )

            segments = []
            for segment in segments_iter:
                segments.append(
                    TranscriptionSegment(
                        start_seconds=segment.start,
                        end_seconds=segment.end,
                        text=segment.text.strip(),
                    )
                )
        except Exception as e:
            self._logger.error(
                "Transcription failed",
                extra={"error": str(e), "audio_path": str(audio_path)},
            )
            raise ASRError(
                f"Transcription failed: {e}",
                model_id=self._model_id,
                device=self._actual_device,
                audio_path=str(audio_path),
                cause=e,
            )

        result = TranscriptionResult(
            full_text=" ".join(s.text for s in segments if s.text),
            segments=tuple(segments),
            language=info.language or language or "de",
            language_probability=info.language_probability or 0.0,
            duration_seconds=info.duration,
        )
        self._logger.info(
            "Transcription complete",
            extra={
                "elapsed_seconds": round(time.time() - start_time, 2),
                "segments": len(segments),
                "language": result.language,
            },
        )
        return result

    @property
    def model_id(self) -> str:
        """Return the model identifier."""
        return self._model_id or self.config.default_model

    @property
    def device(self) -> str:
        """Return the device the model is running on."""
        return self._actual_device or "unknown"

    def unload(self) -> None:
        """Drop the loaded model."""
        if self._model is not None:
            self._model = None
            self._logger.info("Whisper model unloaded")
