"""Unit tests for SpectrumPublisher."""

import threading

import pytest
import numpy as np
from pubsub import pub

from micscope.audio.spectrum_pub import SpectrumPublisher
from micscope.models.events import SessionEvent
from micscope.models.spectrum import SpectrumSnapshot


def make_snapshot(sequence_number):
    return SpectrumSnapshot(
        magnitudes=np.full(4, -60.0, dtype=np.float32),
        frequencies=np.arange(4, dtype=np.float32),
        sequence_number=sequence_number,
        timestamp=0.0,
        sample_rate=8.0,
        frame_size=8,
    )


@pytest.fixture
def publisher(unique_topic):
    frame_topic, session_topic = unique_topic
    publisher = SpectrumPublisher(topic=frame_topic, session_topic=session_topic)
    yield publisher
    publisher.stop()


@pytest.mark.unit
class TestSpectrumPublisher:
    """Test cases for SpectrumPublisher class."""

    def test_delivers_on_dispatch_thread(self, publisher):
        received = []
        delivered = threading.Event()

        def on_snapshot(snapshot):
            received.append((snapshot.sequence_number, threading.current_thread().name))
            delivered.set()

        pub.subscribe(on_snapshot, publisher.topic)
        publisher.start()
        publisher.offer(make_snapshot(1))

        assert delivered.wait(2.0)
        assert received == [(1, "SpectrumDispatchThread")]
        assert publisher.delivered == 1

    def test_slow_listener_only_sees_newest(self, publisher):
        received = []
        entered = threading.Event()
        release = threading.Event()
        got_last = threading.Event()

        def on_snapshot(snapshot):
            received.append(snapshot.sequence_number)
            if snapshot.sequence_number == 1:
                entered.set()
                release.wait(2.0)
            if snapshot.sequence_number == 4:
                got_last.set()

        pub.subscribe(on_snapshot, publisher.topic)
        publisher.start()
        publisher.offer(make_snapshot(1))
        assert entered.wait(2.0)

        # Offers never wait for the busy listener
        for n in (2, 3, 4):
            publisher.offer(make_snapshot(n))
        release.set()

        assert got_last.wait(2.0)
        assert received == [1, 4]
        assert publisher.slot.superseded == 2

    def test_failing_listener_does_not_stop_dispatch(self, publisher):
        received = []
        failed = threading.Event()
        second = threading.Event()

        def on_snapshot(snapshot):
            if snapshot.sequence_number == 1:
                failed.set()
                raise RuntimeError("listener failure")
            received.append(snapshot.sequence_number)
            second.set()

        pub.subscribe(on_snapshot, publisher.topic)
        publisher.start()
        publisher.offer(make_snapshot(1))
        assert failed.wait(2.0)
        publisher.offer(make_snapshot(2))

        assert second.wait(2.0)
        assert received == [2]
        assert publisher.is_running

    def test_stop_joins_thread_and_drops_pending(self, publisher):
        publisher.start()
        assert publisher.is_running

        publisher.stop()
        publisher.offer(make_snapshot(1))

        assert not publisher.is_running
        assert publisher.delivered == 0

    def test_stop_without_start(self, publisher):
        publisher.stop()
        assert not publisher.is_running

    def test_restart_after_stop(self, publisher):
        delivered = threading.Event()

        def on_snapshot(snapshot):
            delivered.set()

        pub.subscribe(on_snapshot, publisher.topic)
        publisher.start()
        publisher.stop()
        publisher.start()
        publisher.offer(make_snapshot(1))

        assert delivered.wait(2.0)

    def test_session_events_are_synchronous(self, publisher):
        events = []

        def on_event(event):
            events.append(event.event_type)

        pub.subscribe(on_event, publisher.session_topic)
        publisher.publish_session_event(SessionEvent(event_type="started"))
        publisher.publish_session_event(SessionEvent(event_type="stopped"))

        assert events == ["started", "stopped"]

    def test_publish_spectrum_on_calling_thread(self, publisher):
        received = []

        def on_snapshot(snapshot):
            received.append(threading.current_thread() is threading.main_thread())

        pub.subscribe(on_snapshot, publisher.topic)
        publisher.publish_spectrum(make_snapshot(1))

        assert received == [True]
        assert publisher.delivered == 1
