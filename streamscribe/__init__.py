"""Live microphone transcription to the terminal."""

__version__ = "0.1.0"
