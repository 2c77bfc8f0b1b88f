"""Unit tests for the in-process live message broker."""

from tutorconnect.server.services.message_broker import MessageBroker, get_message_broker


class TestMessageBroker:
    def test_publish_without_subscribers(self):
        broker = MessageBroker()
        assert broker.publish("user-1", {"type": "message"}) == 0

    def test_fans_out_to_every_stream_of_the_user(self):
        broker = MessageBroker()
        first = broker.subscribe("user-1")
        second = broker.subscribe("user-1")
        other = broker.subscribe("user-2")

        delivered = broker.publish("user-1", {"type": "message", "message": {"id": "m1"}})

        assert delivered == 2
        assert first.get_nowait()["message"]["id"] == "m1"
        assert second.get_nowait()["message"]["id"] == "m1"
        assert other.empty()

    def test_unsubscribe_removes_stream(self):
        broker = MessageBroker()
        queue = broker.subscribe("user-1")
        assert broker.subscriber_count("user-1") == 1

        broker.unsubscribe("user-1", queue)

        assert broker.subscriber_count("user-1") == 0
        assert broker.publish("user-1", {"type": "message"}) == 0

    def test_unsubscribe_unknown_user_is_noop(self):
        broker = MessageBroker()
        broker.unsubscribe("nobody", broker.subscribe("user-1"))
        assert broker.subscriber_count("user-1") == 1

    def test_full_queue_drops_oldest_event(self):
        broker = MessageBroker(max_queue_size=2)
        queue = broker.subscribe("user-1")

        for n in range(3):
            broker.publish("user-1", {"n": n})

        assert [queue.get_nowait()["n"] for _ in range(queue.qsize())] == [1, 2]


def test_global_broker_is_singleton():
    assert get_message_broker() is get_message_broker()
