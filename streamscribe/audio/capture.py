"""Microphone capture feeding the transfer channel."""

import queue
from typing import Callable, Optional

import numpy as np
import sounddevice as sd

from streamscribe.audio.conversion import to_int16
from streamscribe.audio.stream_config import StreamConfig
from streamscribe.pipeline.channel import TransferChannel
from streamscribe.utils.exceptions import (
    ChannelClosedError,
    StreamRuntimeError,
    StreamStartError,
)
from streamscribe.utils.logger import setup_logger

logger = setup_logger(__name__)

ErrorCallback = Callable[[StreamRuntimeError], None]


def log_stream_error(error: StreamRuntimeError) -> None:
    """Default error callback: report stream faults to the log."""
    logger.error(f"Stream error: {error}")


class CaptureSource:
    """Owns the input stream and hands each callback's audio to a channel.

    The data callback runs on the audio thread. It converts the buffer to an
    int16 chunk and pushes it without blocking; it takes no locks and does
    no I/O. Stream faults seen there are only queued; ``report_faults`` hands
    them to the error callback from the consumer thread.
    """

    def __init__(
        self,
        stream_config: StreamConfig,
        channel: TransferChannel,
        on_error: Optional[ErrorCallback] = None,
    ) -> None:
        """Initialize the capture source.

        Args:
            stream_config: Resolved mono stream configuration.
            channel: Channel receiving one chunk per callback.
            on_error: Receives stream-level faults, always on the thread that
                calls ``report_faults``. Defaults to logging them.
        """
        self.stream_config = stream_config
        self.channel = channel
        self.on_error = on_error or log_stream_error

        self.stream: Optional[sd.InputStream] = None
        self.callback_count = 0
        self.failed = False
        self._stopping = False
        self._faults: queue.SimpleQueue = queue.SimpleQueue()

    def report_faults(self) -> int:
        """Pass faults queued by the audio thread to the error callback.

        Returns:
            Number of faults reported.
        """
        reported = 0
        while True:
            try:
                error = self._faults.get_nowait()
            except queue.Empty:
                return reported
            self.on_error(error)
            reported += 1

    def _audio_callback(
        self, indata: np.ndarray, frames: int, time_info, status: sd.CallbackFlags
    ) -> None:
        """Convert one hardware buffer and push it to the channel.

        Args:
            indata: Input audio data, shape (frames, 1).
            frames: Number of frames.
            time_info: Timing information.
            status: Stream status flags.
        """
        self.callback_count += 1

        if status:
            self._faults.put(StreamRuntimeError(f"Input status: {status}"))

        chunk = to_int16(indata[:, 0] if indata.ndim > 1 else indata)
        chunk.flags.writeable = False

        try:
            self.channel.send(chunk)
        except ChannelClosedError:
            # Consumer is gone; nothing left to deliver to
            pass

    def _finished_callback(self) -> None:
        if self._stopping:
            return
        self.failed = True
        self._faults.put(StreamRuntimeError("Input stream finished unexpectedly"))
        self.channel.close()

    def open(self) -> None:
        """Build the input stream without starting it.

        Raises:
            StreamStartError: If the stream cannot be created.
        """
        if self.stream is not None:
            return

        config = self.stream_config
        try:
            self.stream = sd.InputStream(
                device=config.device,
                channels=config.channels,
                samplerate=config.sample_rate,
                blocksize=config.blocksize,
                dtype=config.sample_format,
                callback=self._audio_callback,
                finished_callback=self._finished_callback,
            )
        except (sd.PortAudioError, ValueError) as e:
            raise StreamStartError(f"Failed to create input stream: {e}") from e

        logger.debug(
            f"Created stream: {config.channels}ch @ {config.sample_rate}Hz, "
            f"{config.sample_format}, blocksize={config.blocksize}"
        )

    def start(self) -> None:
        """Open (if needed) and start the input stream.

        Raises:
            StreamStartError: If the stream cannot be created or started.
        """
        self.open()
        self._stopping = False
        try:
            self.stream.start()
        except sd.PortAudioError as e:
            raise StreamStartError(f"Failed to start input stream: {e}") from e
        logger.info("Stream started")

    def stop(self) -> None:
        """Stop and close the input stream. Safe to call more than once."""
        if self.stream is None:
            return

        self._stopping = True
        stream, self.stream = self.stream, None
        try:
            stream.stop()
            stream.close()
        except sd.PortAudioError as e:
            logger.warning(f"Error while closing input stream: {e}")

    def close(self) -> None:
        """Stop the stream and close the channel's producer side."""
        self.stop()
        self.channel.close()

    def __enter__(self) -> "CaptureSource":
        self.start()
        return self

    def __exit__(self, *args) -> None:
        self.close()
