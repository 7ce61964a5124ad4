"""Terminal output for partial and finalized transcripts."""

import sys
from typing import Optional, TextIO

CLEAR_LINE = "\r\033[K"


class TerminalSink:
    """Renders transcripts on a terminal stream.

    A partial transcript occupies the current line and is rewritten in
    place; a final transcript is written as a permanent line. The sink
    remembers whether a partial line is on screen so clearing is always safe.
    """

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        """Initialize the sink.

        Args:
            stream: Output stream. Defaults to stderr so stdout stays free.
        """
        self.stream = stream if stream is not None else sys.stderr
        self._partial_shown = False

    @property
    def partial_shown(self) -> bool:
        return self._partial_shown

    def clear_current_line(self) -> None:
        """Erase the partial line, if one is on screen."""
        if not self._partial_shown:
            return
        self.stream.write(CLEAR_LINE)
        self.stream.flush()
        self._partial_shown = False

    def write_partial(self, text: str) -> None:
        """Show text on the current line, replacing any previous partial."""
        self.clear_current_line()
        self.stream.write(text)
        self.stream.flush()
        self._partial_shown = True

    def write_final(self, text: str) -> None:
        """Append text as a permanent line."""
        self.clear_current_line()
        self.stream.write(f"{text}\n")
        self.stream.flush()
