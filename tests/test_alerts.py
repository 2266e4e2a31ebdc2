from packages.core.alerts.sink import AlertBook
from packages.core.crash.types import AlertLevel


class CollectingNotifier:
    def __init__(self):
        self.seen = []

    def notify(self, title, body):
        self.seen.append((title, body))


class BrokenNotifier:
    def notify(self, title, body):
        raise RuntimeError("toast backend gone")


def test_persistent_alerts_survive_reload(tmp_path):
    path = tmp_path / "alerts.json"
    book = AlertBook(path)
    book.publish(True, AlertLevel.FATAL, "frequent-crashes-20260310", "Frequent crashes", "3 crashes")

    reloaded = AlertBook(path)
    assert reloaded.exists_including_read("frequent-crashes-20260310")
    [record] = reloaded.all()
    assert record.level is AlertLevel.FATAL
    assert record.body == "3 crashes"


def test_non_persistent_alerts_are_only_delivered(tmp_path):
    notifier = CollectingNotifier()
    book = AlertBook(tmp_path / "alerts.json", notifier=notifier)

    book.publish(False, AlertLevel.INFO, "hello", "Title", "Body")

    assert notifier.seen == [("Title", "Body")]
    assert not book.exists_including_read("hello")


def test_read_alerts_still_count_as_existing(tmp_path):
    book = AlertBook(tmp_path / "alerts.json")
    book.publish(True, AlertLevel.WARN, "unexpected-shutdown-1", "t", "b")

    assert [a.identifier for a in book.unread()] == ["unexpected-shutdown-1"]
    assert book.mark_read("unexpected-shutdown-1")
    assert not book.mark_read("unexpected-shutdown-1")
    assert book.unread() == []
    assert book.exists_including_read("unexpected-shutdown-1")
    assert AlertBook(tmp_path / "alerts.json").unread() == []


def test_notifier_failure_is_contained(tmp_path):
    book = AlertBook(tmp_path / "alerts.json", notifier=BrokenNotifier())
    book.publish(True, AlertLevel.FATAL, "x", "t", "b")
    assert book.exists_including_read("x")


def test_corrupt_store_starts_empty(tmp_path):
    path = tmp_path / "alerts.json"
    path.write_text("{not json")
    book = AlertBook(path)
    assert book.all() == []
    book.publish(True, AlertLevel.INFO, "y", "t", "b")
    assert AlertBook(path).exists_including_read("y")
