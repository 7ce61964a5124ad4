"""Tests for the transcription loop."""

import io
import logging

import pytest

from fakes import ScriptedEngine
from streamscribe.asr.recognizer import Alternative, DecodingState, MultipleResult
from streamscribe.pipeline.channel import TransferChannel
from streamscribe.pipeline.transcription import (
    FinalText,
    PartialText,
    TranscriptionLoop,
)
from streamscribe.ui.terminal import CLEAR_LINE, TerminalSink
from streamscribe.utils.exceptions import RecognitionError

RUNNING = DecodingState.RUNNING
FINALIZED = DecodingState.FINALIZED
FAILED = DecodingState.FAILED


def run_script(script, make_chunk, final_text=""):
    channel = TransferChannel()
    for i in range(len(script)):
        channel.send(make_chunk([i]))
    channel.close()

    engine = ScriptedEngine(script, final_text=final_text)
    stream = io.StringIO()
    events = []
    loop = TranscriptionLoop(channel, engine, TerminalSink(stream), on_event=events.append)
    processed = loop.run()
    return engine, events, stream.getvalue(), processed


def test_each_chunk_fed_once_in_order(make_chunk):
    script = [(RUNNING, "a"), (RUNNING, "a b"), (FINALIZED, "a b c")]

    engine, events, _, processed = run_script(script, make_chunk)

    assert processed == 3
    assert [int(c[0]) for c in engine.fed] == [0, 1, 2]
    assert events == [PartialText("a"), PartialText("a b"), FinalText("a b c")]


def test_empty_final_is_suppressed(make_chunk):
    script = [(RUNNING, ""), (FINALIZED, ""), (RUNNING, "")]

    _, events, output, _ = run_script(script, make_chunk)

    assert FinalText("") not in events
    assert not any(isinstance(e, FinalText) for e in events)
    assert "\n" not in output


def test_first_alternative_is_emitted(make_chunk):
    result = MultipleResult(
        (Alternative("hello world", 220.0), Alternative("hollow world", 180.0))
    )

    _, events, output, _ = run_script([(FINALIZED, result)], make_chunk)

    assert events == [FinalText("hello world")]
    assert output == "hello world\n"


def test_failed_chunk_emits_nothing_and_loop_resumes(make_chunk):
    script = [
        (RUNNING, "hello"),
        (FAILED, None),
        (RUNNING, "hello world"),
        (FINALIZED, "hello world"),
    ]

    engine, events, output, _ = run_script(script, make_chunk)

    assert len(engine.fed) == 4
    assert events == [
        PartialText("hello"),
        PartialText("hello world"),
        FinalText("hello world"),
    ]
    # The stale partial is cleared on the failed chunk
    assert output == (
        "hello" + CLEAR_LINE + "hello world" + CLEAR_LINE + "hello world\n"
    )


def test_process_chunk_returns_event(make_chunk):
    engine = ScriptedEngine([(RUNNING, "hi"), (FAILED, None)])
    loop = TranscriptionLoop(TransferChannel(), engine, TerminalSink(io.StringIO()))

    assert loop.process_chunk(make_chunk([0])) == PartialText("hi")
    assert loop.process_chunk(make_chunk([1])) is None


def test_pending_audio_flushed_at_end_of_stream(make_chunk):
    script = [(RUNNING, "good"), (RUNNING, "good night")]

    _, events, output, _ = run_script(script, make_chunk, final_text="good night")

    assert events[-1] == FinalText("good night")
    assert output.endswith(CLEAR_LINE + "good night\n")


def test_recognition_error_propagates(make_chunk):
    class RejectingEngine(ScriptedEngine):
        def accept_waveform(self, chunk):
            raise RecognitionError("Chunks must be int16 numpy arrays")

    channel = TransferChannel()
    channel.send(make_chunk([0]))
    loop = TranscriptionLoop(channel, RejectingEngine([]), TerminalSink(io.StringIO()))

    with pytest.raises(RecognitionError):
        loop.run()


def test_backlog_warning_logged_once(make_chunk, caplog):
    channel = TransferChannel()
    for i in range(10):
        channel.send(make_chunk([i]))
    channel.close()
    engine = ScriptedEngine([(RUNNING, "")] * 10)
    loop = TranscriptionLoop(
        channel, engine, TerminalSink(io.StringIO()), backlog_warning=3
    )

    with caplog.at_level("WARNING"):
        loop.run()

    warnings = [r for r in caplog.records if "falling behind" in r.getMessage()]
    assert len(warnings) == 1


def test_backlog_warning_clears_partial_line_first(make_chunk):
    sink = TerminalSink(io.StringIO())
    channel = TransferChannel()
    engine = ScriptedEngine([(RUNNING, "hello")] * 11)
    loop = TranscriptionLoop(channel, engine, sink, backlog_warning=3)
    loop.process_chunk(make_chunk([0]))
    assert sink.partial_shown

    partial_on_screen = []

    class Recorder(logging.Handler):
        def emit(self, record):
            if "falling behind" in record.getMessage():
                partial_on_screen.append(sink.partial_shown)

    handler = Recorder()
    transcription_logger = logging.getLogger("streamscribe.pipeline.transcription")
    transcription_logger.addHandler(handler)
    try:
        for i in range(10):
            channel.send(make_chunk([i]))
        channel.close()
        loop.run()
    finally:
        transcription_logger.removeHandler(handler)

    assert partial_on_screen == [False]


def test_tick_runs_before_each_chunk_and_at_end_of_stream(make_chunk):
    channel = TransferChannel()
    for i in range(3):
        channel.send(make_chunk([i]))
    channel.close()
    engine = ScriptedEngine([(RUNNING, "a")] * 3)
    timeline = []

    def tick():
        timeline.append(("tick", len(engine.fed)))

    loop = TranscriptionLoop(
        channel, engine, TerminalSink(io.StringIO()), on_tick=tick
    )
    loop.run()

    assert timeline == [("tick", 0), ("tick", 1), ("tick", 2), ("tick", 3)]
