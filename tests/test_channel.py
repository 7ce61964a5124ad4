"""Tests for the transfer channel."""

import threading

import numpy as np
import pytest

from streamscribe.pipeline.channel import TransferChannel
from streamscribe.utils.exceptions import ChannelClosedError


def test_receive_preserves_send_order(make_chunk):
    channel = TransferChannel()
    chunks = [make_chunk([1]), make_chunk([2]), make_chunk([3])]
    for chunk in chunks:
        channel.send(chunk)

    received = [channel.receive() for _ in chunks]

    assert [c[0] for c in received] == [1, 2, 3]
    assert all(a is b for a, b in zip(received, chunks))


def test_send_after_close_fails(make_chunk):
    channel = TransferChannel()
    channel.close()

    with pytest.raises(ChannelClosedError):
        channel.send(make_chunk([0]))


def test_buffered_chunks_delivered_before_end_of_stream(make_chunk):
    channel = TransferChannel()
    channel.send(make_chunk([7]))
    channel.send(make_chunk([8]))
    channel.close()

    assert channel.receive()[0] == 7
    assert channel.receive()[0] == 8
    with pytest.raises(ChannelClosedError):
        channel.receive()
    # End of stream is sticky
    with pytest.raises(ChannelClosedError):
        channel.receive()


def test_end_of_stream_stays_sticky_after_late_send(make_chunk):
    channel = TransferChannel()
    channel.close()
    # A send that passed the closed check just before close lands afterwards
    channel._queue.put(make_chunk([9]))

    with pytest.raises(ChannelClosedError):
        channel.receive()
    with pytest.raises(ChannelClosedError):
        channel.receive()
    assert channel.pending() == 0


def test_close_is_idempotent_and_pending_ignores_marker(make_chunk):
    channel = TransferChannel()
    channel.send(make_chunk([1]))
    channel.close()
    channel.close()

    assert channel.closed
    assert channel.pending() == 1


def test_close_wakes_blocked_receiver():
    channel = TransferChannel()
    outcome = []

    def consume():
        try:
            channel.receive()
        except ChannelClosedError:
            outcome.append("closed")

    consumer = threading.Thread(target=consume)
    consumer.start()
    channel.close()
    consumer.join(timeout=2.0)

    assert not consumer.is_alive()
    assert outcome == ["closed"]


def test_iteration_stops_at_close(make_chunk):
    channel = TransferChannel()
    for i in range(5):
        channel.send(make_chunk([i]))
    channel.close()

    assert [int(c[0]) for c in channel] == [0, 1, 2, 3, 4]


def test_bursty_producer_order_is_preserved():
    channel = TransferChannel()
    total = 5000
    received = []

    def produce():
        # Bursts of back-to-back sends separated by short pauses
        seq = 0
        while seq < total:
            for _ in range(250):
                channel.send(np.array([seq % 30000, seq // 30000], dtype=np.int16))
                seq += 1
            threading.Event().wait(0.001)
        channel.close()

    def consume():
        for chunk in channel:
            received.append(int(chunk[1]) * 30000 + int(chunk[0]))

    producer = threading.Thread(target=produce)
    consumer = threading.Thread(target=consume)
    consumer.start()
    producer.start()
    producer.join(timeout=10.0)
    consumer.join(timeout=10.0)

    assert received == list(range(total))
