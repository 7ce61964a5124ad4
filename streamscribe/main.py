"""Main entry point for streamscribe."""

import signal
import sys
import threading
from typing import Optional

from streamscribe.asr.recognizer import Recognizer, load_model, set_log_level
from streamscribe.audio.capture import CaptureSource
from streamscribe.audio.device_manager import (
    resolve_input_device,
    resolve_stream_config,
)
from streamscribe.audio.file_source import FileSource
from streamscribe.config.config_loader import config
from streamscribe.pipeline.channel import TransferChannel
from streamscribe.pipeline.transcription import TranscriptionLoop
from streamscribe.ui.terminal import TerminalSink
from streamscribe.utils.exceptions import RecognitionError, StartupError
from streamscribe.utils.logger import setup_logger

logger = setup_logger(__name__)

# Global app instance for signal handler
app_instance = None


class StreamScribeApp:
    """Wires capture, channel, recognizer and terminal together."""

    def __init__(self) -> None:
        self.settings = config.settings()
        self.channel = TransferChannel()
        self.sink = TerminalSink()
        self.capture: Optional[CaptureSource] = None
        self.file_source: Optional[FileSource] = None
        self.loop: Optional[TranscriptionLoop] = None
        self._producer: Optional[threading.Thread] = None

    def setup(self) -> None:
        """Resolve audio input, build the stream and load the model.

        The model is loaded before the stream starts so the first callbacks
        are not starved while the model is read from disk.

        Raises:
            StartupError: If any precondition is missing.
        """
        audio = self.settings.audio
        asr = self.settings.asr

        set_log_level(asr.log_level)

        if audio.input_file:
            self.file_source = FileSource(
                audio.input_file,
                self.channel,
                blocksize=audio.blocksize,
                realtime=audio.realtime_playback,
            )
            stream_config = self.file_source.stream_config
        else:
            device = resolve_input_device(audio.host_api, audio.device)
            stream_config = resolve_stream_config(device, audio.blocksize)
            self.capture = CaptureSource(stream_config, self.channel)
            self.capture.open()

        model = load_model(asr.model_path)
        recognizer = Recognizer(
            model,
            stream_config.sample_rate,
            max_alternatives=asr.max_alternatives,
            words=asr.words,
        )

        self.loop = TranscriptionLoop(
            self.channel,
            recognizer,
            self.sink,
            backlog_warning=self.settings.pipeline.backlog_warning_chunks,
            on_tick=self.capture.report_faults if self.capture is not None else None,
        )

    def run(self) -> int:
        """Start the producer and run the transcription loop to completion.

        Returns:
            Process exit code.
        """
        if self.capture is not None:
            self.capture.start()
            logger.info("Speak into your mic. Press Ctrl+C to stop.")
        else:
            self._producer = threading.Thread(
                target=self.file_source.run, name="file-source", daemon=True
            )
            self._producer.start()

        self.loop.run()

        if self.capture is not None and self.capture.failed:
            logger.error("Input stream stopped unexpectedly")
            return 1
        return 0

    def cleanup(self) -> None:
        """Stop capture and close the channel so the loop can finish."""
        if self.capture is not None:
            self.capture.close()
        else:
            self.channel.close()


def signal_handler(sig, frame):
    """Handle interrupt signals gracefully."""
    logger.info("Received interrupt signal, shutting down...")
    if app_instance is None:
        sys.exit(0)
    app_instance.cleanup()


def main() -> None:
    """Main function to run streamscribe."""
    global app_instance

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        app_instance = StreamScribeApp()
        app_instance.setup()
        exit_code = app_instance.run()

    except StartupError as e:
        logger.error(f"Startup failed: {e}")
        sys.exit(1)
    except RecognitionError as e:
        logger.error(f"Recognizer rejected audio: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted by user (Ctrl+C)")
        exit_code = 0
    finally:
        if app_instance is not None:
            app_instance.cleanup()

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
