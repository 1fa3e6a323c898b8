import importlib.util
from pathlib import Path
from unittest import mock

SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "live_monitor.py"


def _load_monitor():
    module_spec = importlib.util.spec_from_file_location("live_monitor", SCRIPT)
    module = importlib.util.module_from_spec(module_spec)
    with mock.patch("signal.signal"):
        module_spec.loader.exec_module(module)
    return module


class _ExpiringSession:
    """Login always succeeds, every poll answers 401."""

    def __init__(self, monitor, polls):
        self.monitor = monitor
        self.polls = polls
        self.logins = 0
        self.gets = 0

    def post(self, *args, **kwargs):
        self.logins += 1
        return mock.Mock(status_code=200)

    def get(self, *args, **kwargs):
        self.gets += 1
        if self.gets >= self.polls:
            self.monitor.running = False
        return mock.Mock(status_code=401)


def test_repeated_401_backs_off_between_logins():
    monitor = _load_monitor()
    session = _ExpiringSession(monitor, polls=3)

    with mock.patch.object(monitor.requests, "Session", return_value=session), \
            mock.patch.object(monitor.time, "sleep") as sleep:
        monitor.run()

    assert session.logins == 3
    start, cap = monitor.BACKOFF_0, monitor.BACKOFF_MAX
    assert [c.args[0] for c in sleep.call_args_list] == [
        min(start, cap), min(start * 2, cap), min(start * 4, cap),
    ]
