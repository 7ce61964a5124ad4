"""Custom exception definitions for streamscribe."""


class StreamScribeError(Exception):
    """Base exception class for streamscribe errors."""

    pass


class StartupError(StreamScribeError):
    """Raised when an environment precondition is missing at startup.

    Startup errors are fatal: the process reports them and exits non-zero.
    """

    pass


class ConfigurationError(StartupError):
    """Raised when configuration is invalid or cannot be loaded."""

    pass


class NoInputDeviceError(StartupError):
    """Raised when no audio input device is available."""

    pass


class NoSuitableConfigError(StartupError):
    """Raised when the input device exposes no mono configuration."""

    pass


class ModelLoadError(StartupError):
    """Raised when the recognition model cannot be loaded."""

    pass


class StreamStartError(StartupError):
    """Raised when the input stream cannot be built or started."""

    pass


class StreamRuntimeError(StreamScribeError):
    """Reported when the running input stream signals a fault."""

    pass


class ChannelClosedError(StreamScribeError):
    """Raised when the transfer channel has been closed."""

    pass


class RecognitionError(StreamScribeError):
    """Raised when the recognizer rejects its input outright."""

    pass
