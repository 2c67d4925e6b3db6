"""Unit tests for the in-process notification hub."""

import asyncio
import json

import pytest

from edustack.core.models.domain.enums import NotificationEvent
from edustack.server.services.notifications import Notification, NotificationHub


class TestSubscriptions:
    def test_subscribe_and_unsubscribe(self):
        hub = NotificationHub()
        first = hub.subscribe("u1")
        second = hub.subscribe("u1")
        assert hub.subscriber_count("u1") == 2

        hub.unsubscribe("u1", first)
        assert hub.subscriber_count("u1") == 1
        hub.unsubscribe("u1", second)
        assert hub.subscriber_count("u1") == 0

    def test_unsubscribe_unknown_user_is_a_noop(self):
        hub = NotificationHub()
        hub.unsubscribe("nobody", asyncio.Queue())
        assert hub.subscriber_count("nobody") == 0


class TestPublish:
    def test_publish_reaches_every_stream_of_the_user(self):
        hub = NotificationHub()
        streams = [hub.subscribe("u1"), hub.subscribe("u1")]
        other = hub.subscribe("u2")

        delivered = hub.publish("u1", NotificationEvent.enrollment_success, {"courseId": "c1"})

        assert delivered == 2
        for queue in streams:
            notification = queue.get_nowait()
            assert isinstance(notification, Notification)
            assert notification.event == NotificationEvent.enrollment_success
            assert notification.data == {"courseId": "c1"}
        assert other.empty()

    def test_publish_without_subscribers(self):
        assert NotificationHub().publish("u1", NotificationEvent.progress_updated) == 0

    def test_full_queue_drops_the_oldest_event(self):
        hub = NotificationHub(max_queue_size=2)
        queue = hub.subscribe("u1")
        for progress in (10, 20, 30):
            hub.publish("u1", NotificationEvent.progress_updated, {"progress": progress})

        assert [queue.get_nowait().data["progress"] for _ in range(queue.qsize())] == [20, 30]


class TestStream:
    @pytest.mark.asyncio
    async def test_stream_yields_sse_messages_and_cleans_up(self):
        hub = NotificationHub()
        stream = hub.stream("u1")
        pending = asyncio.ensure_future(stream.__anext__())
        await asyncio.sleep(0)
        assert hub.subscriber_count("u1") == 1

        hub.publish("u1", NotificationEvent.course_completed, {"certificateNumber": "CERT-1"})
        message = await asyncio.wait_for(pending, timeout=1)

        assert message["event"] == "course-completed"
        payload = json.loads(message["data"])
        assert payload["event"] == "course-completed"
        assert payload["data"] == {"certificateNumber": "CERT-1"}
        assert "timestamp" in payload

        await stream.aclose()
        assert hub.subscriber_count("u1") == 0
