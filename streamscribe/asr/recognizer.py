"""Incremental speech recognition using Vosk."""

import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Protocol, Union

import numpy as np
import vosk

from streamscribe.utils.exceptions import ModelLoadError, RecognitionError
from streamscribe.utils.logger import setup_logger

logger = setup_logger(__name__)


class DecodingState(Enum):
    """Outcome of feeding one chunk to the recognizer."""

    RUNNING = "running"
    FINALIZED = "finalized"
    FAILED = "failed"


@dataclass(frozen=True)
class Alternative:
    """One candidate transcription of a finished utterance."""

    text: str
    confidence: float = 0.0


@dataclass(frozen=True)
class SingleResult:
    """Finished utterance reported as a single transcription."""

    text: str


@dataclass(frozen=True)
class MultipleResult:
    """Finished utterance reported as ranked alternatives, best first."""

    alternatives: tuple[Alternative, ...]


CompleteResult = Union[SingleResult, MultipleResult]


def best_text(result: CompleteResult) -> str:
    """Return the text of the single result or of the first-ranked alternative."""
    if isinstance(result, SingleResult):
        return result.text
    if isinstance(result, MultipleResult):
        if not result.alternatives:
            return ""
        return result.alternatives[0].text
    raise TypeError(f"Unknown result type: {type(result).__name__}")


def parse_complete_result(payload: str) -> CompleteResult:
    """Parse a Vosk ``Result``/``FinalResult`` JSON document."""
    data = json.loads(payload)
    if "alternatives" in data:
        return MultipleResult(
            alternatives=tuple(
                Alternative(
                    text=alt.get("text", ""),
                    confidence=float(alt.get("confidence", 0.0)),
                )
                for alt in data["alternatives"]
            )
        )
    return SingleResult(text=data.get("text", ""))


class RecognitionEngine(Protocol):
    """Operations the transcription loop needs from a recognizer."""

    def accept_waveform(self, chunk: np.ndarray) -> DecodingState: ...

    def partial_result(self) -> str: ...

    def result(self) -> CompleteResult: ...

    def final_result(self) -> CompleteResult: ...


def set_log_level(level: int) -> None:
    """Set the Kaldi/Vosk log level (-1 silences the engine)."""
    vosk.SetLogLevel(level)


def load_model(path: Union[str, Path]) -> vosk.Model:
    """Load a Vosk model from an unpacked model directory.

    Args:
        path: Model directory.

    Returns:
        The loaded model.

    Raises:
        ModelLoadError: If the directory is missing or the model is corrupt.
    """
    model_path = Path(path)
    if not model_path.is_dir():
        raise ModelLoadError(f"Model directory not found: {model_path}")

    logger.info(f"Loading recognition model from {model_path}...")
    try:
        model = vosk.Model(str(model_path))
    except Exception as e:
        raise ModelLoadError(f"Failed to load model from {model_path}: {e}") from e

    logger.info("Recognition model loaded")
    return model


class Recognizer:
    """Stateful incremental decoder bound to one sample rate."""

    def __init__(
        self,
        model: vosk.Model,
        sample_rate: int,
        max_alternatives: int = 0,
        words: bool = False,
    ) -> None:
        """Initialize the recognizer.

        Args:
            model: Loaded Vosk model.
            sample_rate: Rate of every chunk that will be fed; fixed for the
                recognizer's lifetime.
            max_alternatives: Request this many ranked alternatives for each
                finished utterance (0 for a single result).
            words: Include word-level timings in results.

        Raises:
            RecognitionError: If the sample rate is not a positive integer.
        """
        if isinstance(sample_rate, bool) or not isinstance(
            sample_rate, (int, np.integer)
        ):
            raise RecognitionError(f"Sample rate must be an integer: {sample_rate!r}")
        if sample_rate <= 0:
            raise RecognitionError(f"Sample rate must be positive: {sample_rate}")

        self.sample_rate = int(sample_rate)
        self._recognizer = vosk.KaldiRecognizer(model, float(self.sample_rate))
        if max_alternatives > 0:
            self._recognizer.SetMaxAlternatives(max_alternatives)
        if words:
            self._recognizer.SetWords(True)

        logger.debug(
            f"Recognizer ready: {self.sample_rate}Hz, "
            f"max_alternatives={max_alternatives}"
        )

    def accept_waveform(self, chunk: np.ndarray) -> DecodingState:
        """Feed one chunk of int16 mono audio.

        Raises:
            RecognitionError: If the chunk is not 1-D int16 audio.
        """
        if not isinstance(chunk, np.ndarray) or chunk.dtype != np.int16:
            raise RecognitionError("Chunks must be int16 numpy arrays")
        if chunk.ndim != 1:
            raise RecognitionError(f"Chunks must be mono, got shape {chunk.shape}")

        try:
            status = self._recognizer.AcceptWaveform(chunk.tobytes())
        except Exception as e:
            logger.debug(f"Chunk could not be decoded: {e}")
            return DecodingState.FAILED

        # Older bindings return -1 instead of raising
        if status < 0:
            return DecodingState.FAILED
        return DecodingState.FINALIZED if status else DecodingState.RUNNING

    def partial_result(self) -> str:
        """Text of the utterance in progress (possibly empty)."""
        return json.loads(self._recognizer.PartialResult()).get("partial", "")

    def result(self) -> CompleteResult:
        """Transcription of the utterance that just finalized."""
        return parse_complete_result(self._recognizer.Result())

    def final_result(self) -> CompleteResult:
        """Flush and return whatever audio is still pending."""
        return parse_complete_result(self._recognizer.FinalResult())

    def reset(self) -> None:
        """Drop the utterance in progress."""
        self._recognizer.Reset()
