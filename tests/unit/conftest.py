import pytest

from trellis.notification import RunListener, RunNotifier


class RecordingListener(RunListener):
    """Keeps every event as a ``(kind, display_name)`` pair."""

    def __init__(self) -> None:
        self.events: list[tuple[str, str]] = []
        self.failures = []

    def test_run_started(self, description):
        self.events.append(("run_started", description.display_name))

    def test_run_finished(self, description):
        self.events.append(("run_finished", description.display_name))

    def test_started(self, description):
        self.events.append(("started", description.display_name))

    def test_failure(self, failure):
        self.failures.append(failure)
        self.events.append(("failure", failure.description.display_name))

    def test_assumption_failure(self, failure):
        self.events.append(("assumption_failure", failure.description.display_name))

    def test_ignored(self, description):
        self.events.append(("ignored", description.display_name))

    def test_finished(self, description):
        self.events.append(("finished", description.display_name))


@pytest.fixture
def recorder() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def notifier(recorder: RecordingListener) -> RunNotifier:
    notifier = RunNotifier()
    notifier.add_listener(recorder)
    return notifier
