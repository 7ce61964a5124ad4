"""Transcription loop: consumes chunks, drives the recognizer, renders text."""

from dataclasses import dataclass
from typing import Callable, Optional, Union

import numpy as np

from streamscribe.asr.recognizer import DecodingState, RecognitionEngine, best_text
from streamscribe.pipeline.channel import TransferChannel
from streamscribe.ui.terminal import TerminalSink
from streamscribe.utils.exceptions import ChannelClosedError
from streamscribe.utils.logger import setup_logger

logger = setup_logger(__name__)


@dataclass(frozen=True)
class PartialText:
    """Provisional text of the utterance in progress; replaces the last one."""

    text: str


@dataclass(frozen=True)
class FinalText:
    """Confirmed, non-empty text of a completed utterance."""

    text: str


TranscriptionEvent = Union[PartialText, FinalText]


class TranscriptionLoop:
    """Consumer side of the pipeline.

    Each received chunk is fed to the engine exactly once, in arrival order.
    The resulting state decides what, if anything, is rendered.
    """

    def __init__(
        self,
        channel: TransferChannel,
        engine: RecognitionEngine,
        sink: TerminalSink,
        on_event: Optional[Callable[[TranscriptionEvent], None]] = None,
        backlog_warning: int = 0,
        on_tick: Optional[Callable[[], object]] = None,
    ) -> None:
        """Initialize the loop.

        Args:
            channel: Source of audio chunks.
            engine: Recognizer fed with every chunk.
            sink: Terminal output.
            on_event: Also receives every emitted event.
            backlog_warning: Log a warning when more chunks than this are
                waiting in the channel (0 disables).
            on_tick: Called on this thread before each chunk and once more
                at end of stream, e.g. to report capture faults.
        """
        self.channel = channel
        self.engine = engine
        self.sink = sink
        self.on_event = on_event
        self.backlog_warning = backlog_warning
        self.on_tick = on_tick
        self.chunks_processed = 0
        self._backlog_warned = False

    def _emit(self, event: TranscriptionEvent) -> TranscriptionEvent:
        if isinstance(event, FinalText):
            self.sink.write_final(event.text)
        else:
            self.sink.write_partial(event.text)
        if self.on_event is not None:
            self.on_event(event)
        return event

    def process_chunk(self, chunk: np.ndarray) -> Optional[TranscriptionEvent]:
        """Feed one chunk and render the outcome.

        Returns:
            The emitted event, or None if nothing was emitted.

        Raises:
            RecognitionError: If the engine rejects the chunk.
        """
        state = self.engine.accept_waveform(chunk)
        self.chunks_processed += 1
        self.sink.clear_current_line()

        if state is DecodingState.RUNNING:
            return self._emit(PartialText(self.engine.partial_result()))

        if state is DecodingState.FINALIZED:
            text = best_text(self.engine.result())
            if text:
                return self._emit(FinalText(text))
            return None

        logger.debug(f"Chunk {self.chunks_processed} failed to decode, skipping")
        return None

    def flush(self) -> Optional[TranscriptionEvent]:
        """Emit whatever the engine still holds for the last utterance."""
        self.sink.clear_current_line()
        text = best_text(self.engine.final_result())
        if text:
            return self._emit(FinalText(text))
        return None

    def _check_backlog(self) -> None:
        pending = self.channel.pending()
        if pending > self.backlog_warning and not self._backlog_warned:
            self.sink.clear_current_line()
            logger.warning(
                f"Recognition is falling behind capture: {pending} chunks queued"
            )
            self._backlog_warned = True
        elif pending <= self.backlog_warning // 2:
            self._backlog_warned = False

    def run(self) -> int:
        """Process chunks until the channel is closed.

        Returns:
            Number of chunks processed.

        Raises:
            RecognitionError: If the engine rejects a chunk.
        """
        while True:
            try:
                chunk = self.channel.receive()
            except ChannelClosedError:
                break

            if self.on_tick is not None:
                self.sink.clear_current_line()
                self.on_tick()
            if self.backlog_warning > 0:
                self._check_backlog()
            self.process_chunk(chunk)

        if self.on_tick is not None:
            self.sink.clear_current_line()
            self.on_tick()
        logger.debug("Channel closed, flushing recognizer")
        self.flush()
        return self.chunks_processed
