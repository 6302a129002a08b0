from deploy_notifications import tasks
from deploy_notifications.models import DeploymentEvent, DeployStatus


class FakeDispatcher:
    def __init__(self):
        self.events = []

    def deliver(self, event):
        self.events.append(event)
        return True


def test_send_deploy_notification_delivers_event(monkeypatch):
    dispatcher = FakeDispatcher()
    monkeypatch.setattr(tasks, "get_dispatcher", lambda: dispatcher)

    assert tasks.send_deploy_notification({"apply_id": 42, "mode": 1, "status": 1}) is True
    assert dispatcher.events == [DeploymentEvent(apply_id=42, mode=1, status=DeployStatus.SUCCESS)]


def test_send_deploy_notification_discards_unknown_status(monkeypatch, caplog):
    dispatcher = FakeDispatcher()
    monkeypatch.setattr(tasks, "get_dispatcher", lambda: dispatcher)

    assert tasks.send_deploy_notification({"apply_id": 42, "mode": 1, "status": 7}) is False
    assert dispatcher.events == []
    assert "Discarding malformed deploy event" in caplog.text


def test_enqueue_deploy_notification_serializes_event(monkeypatch):
    sent = []
    monkeypatch.setattr(tasks.send_deploy_notification, "delay", lambda payload: sent.append(payload))

    event = DeploymentEvent(apply_id=5, mode=1, status=DeployStatus.FAILED)
    assert tasks.enqueue_deploy_notification(event) is True
    assert sent == [{"apply_id": 5, "mode": 1, "status": 0, "title": ""}]


def test_enqueue_deploy_notification_logs_broker_errors(monkeypatch, caplog):
    def broken_delay(payload):
        raise ConnectionError("broker down")

    monkeypatch.setattr(tasks.send_deploy_notification, "delay", broken_delay)

    event = DeploymentEvent(apply_id=5, mode=1, status=DeployStatus.SUCCESS)
    assert tasks.enqueue_deploy_notification(event) is False
    assert "Failed to enqueue deploy notification" in caplog.text


def test_send_deploy_notification_logs_unexpected_errors(monkeypatch, caplog):
    class ExplodingDispatcher:
        def deliver(self, event):
            raise RuntimeError("database gone")

    monkeypatch.setattr(tasks, "get_dispatcher", lambda: ExplodingDispatcher())

    assert tasks.send_deploy_notification({"apply_id": 42, "mode": 1, "status": 1}) is False
    assert "Unexpected error while notifying apply 42" in caplog.text
