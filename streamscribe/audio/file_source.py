"""Replay of a WAV file through the transfer channel."""

import time
from pathlib import Path
from typing import Union

import numpy as np
import soundfile as sf

from streamscribe.audio.conversion import to_int16
from streamscribe.audio.stream_config import StreamConfig
from streamscribe.pipeline.channel import TransferChannel
from streamscribe.utils.exceptions import (
    ChannelClosedError,
    NoSuitableConfigError,
    StreamStartError,
)
from streamscribe.utils.logger import setup_logger

logger = setup_logger(__name__)


class FileSource:
    """Feeds a mono audio file to a channel one block at a time.

    Each block plays the role of one hardware callback, so the consumer sees
    the same chunk stream it would get from a microphone.
    """

    def __init__(
        self,
        path: Union[str, Path],
        channel: TransferChannel,
        blocksize: int = 4000,
        realtime: bool = False,
    ) -> None:
        """Initialize the file source.

        Args:
            path: Audio file readable by soundfile.
            channel: Channel receiving one chunk per block.
            blocksize: Frames per chunk.
            realtime: Sleep between blocks to match the file's sample rate.

        Raises:
            StreamStartError: If the file cannot be opened.
            NoSuitableConfigError: If the file is not mono.
        """
        self.path = Path(path)
        self.channel = channel
        self.blocksize = blocksize or 4000
        self.realtime = realtime
        self.chunk_count = 0

        try:
            info = sf.info(str(self.path))
        except (RuntimeError, OSError) as e:
            raise StreamStartError(f"Cannot open audio file {self.path}: {e}") from e

        if info.channels != 1:
            raise NoSuitableConfigError(
                f"{self.path} has {info.channels} channels, mono is required"
            )

        self.stream_config = StreamConfig(
            channels=1,
            sample_rate=int(info.samplerate),
            sample_format="float32",
            blocksize=self.blocksize,
        )
        logger.debug(
            f"Audio file info: {info.duration:.1f}s @ {info.samplerate}Hz "
            f"({self.path.name})"
        )

    def run(self) -> int:
        """Push the whole file into the channel, then close it.

        Returns:
            Number of chunks produced.
        """
        interval = self.blocksize / self.stream_config.sample_rate

        try:
            with sf.SoundFile(str(self.path)) as audio_file:
                for block in audio_file.blocks(self.blocksize, dtype=np.float32):
                    chunk = to_int16(block)
                    chunk.flags.writeable = False
                    try:
                        self.channel.send(chunk)
                    except ChannelClosedError:
                        break
                    self.chunk_count += 1
                    if self.realtime:
                        time.sleep(interval)
        finally:
            self.channel.close()

        logger.info(f"Replayed {self.chunk_count} chunks from {self.path.name}")
        return self.chunk_count
