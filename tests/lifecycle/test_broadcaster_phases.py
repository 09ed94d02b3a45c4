import pytest

from autoboot import metrics
from autoboot.errors import ConfigurationError
from autoboot.events import on
from autoboot.lifecycle import StartupBroadcaster, StartupListener, StartupPhase


class Recorder(StartupListener):
    def __init__(self, name, calls, fail_on=None):
        self.name = name
        self.calls = calls
        self.fail_on = fail_on

    def _hit(self, phase, *args):
        self.calls.append((self.name, phase, args))
        if self.fail_on == phase:
            raise RuntimeError(f"{self.name} failed in {phase}")

    def starting(self):
        self._hit("starting")

    def environment_prepared(self, environment):
        self._hit("environment_prepared", environment)

    def context_prepared(self, context):
        self._hit("context_prepared", context)

    def context_loaded(self, context):
        self._hit("context_loaded", context)

    def started(self, context):
        self._hit("started", context)

    def running(self, context):
        self._hit("running", context)


def test_listeners_called_in_registration_order_for_each_phase():
    calls = []
    b = StartupBroadcaster(
        [Recorder("L1", calls), Recorder("L2", calls), Recorder("L3", calls)]
    )
    env, ctx = object(), object()
    b.starting()
    b.environment_prepared(env)
    b.context_prepared(ctx)
    b.context_loaded(ctx)
    b.started(ctx)
    b.running(ctx)
    phases = [
        "starting",
        "environment_prepared",
        "context_prepared",
        "context_loaded",
        "started",
        "running",
    ]
    assert [(n, p) for n, p, _ in calls] == [
        (n, p) for p in phases for n in ("L1", "L2", "L3")
    ]
    # payloads are passed through untouched
    assert all(args[0] is env for _, p, args in calls if p == "environment_prepared")
    assert all(args[0] is ctx for _, p, args in calls if p == "started")
    assert b.phase is StartupPhase.RUNNING
    assert b.phase.is_terminal


@pytest.mark.parametrize(
    "phase",
    [
        "starting",
        "environment_prepared",
        "context_prepared",
        "context_loaded",
        "started",
        "running",
    ],
)
def test_listener_error_aborts_phase_and_propagates(phase):
    calls = []
    b = StartupBroadcaster(
        [
            Recorder("L1", calls),
            Recorder("L2", calls, fail_on=phase),
            Recorder("L3", calls),
        ]
    )
    method = getattr(b, phase)
    args = () if phase == "starting" else (object(),)
    with pytest.raises(RuntimeError, match="L2 failed"):
        method(*args)
    assert [n for n, _, _ in calls] == ["L1", "L2"]
    labels = {"phase": phase, "error_type": "listener-error"}
    assert metrics.counter("listener_errors_total", labels) == 1


def test_error_object_propagates_unchanged():
    boom = KeyError("boom")

    class Bad(StartupListener):
        def starting(self):
            raise boom

    with pytest.raises(KeyError) as ei:
        StartupBroadcaster([Bad()]).starting()
    assert ei.value is boom


def test_framework_error_counted_under_its_error_type():
    class Strict(StartupListener):
        def context_loaded(self, context):
            raise ConfigurationError("bad wiring")

    with pytest.raises(ConfigurationError):
        StartupBroadcaster([Strict()]).context_loaded("ctx")
    labels = {"phase": "context_loaded", "error_type": "config-invalid"}
    assert metrics.counter("listener_errors_total", labels) == 1


def test_duck_typed_listeners_skip_missing_hooks():
    seen = []

    class OnlyRunning:
        def running(self, context):
            seen.append(context)

    b = StartupBroadcaster([OnlyRunning()])
    b.starting()
    b.context_loaded("ctx")
    b.running("ctx")
    b.failed(None, RuntimeError("x"))
    assert seen == ["ctx"]


def test_listener_list_is_fixed_at_construction():
    source = [StartupListener()]
    b = StartupBroadcaster(source)
    source.append(StartupListener())
    assert len(b.listeners) == 1
    assert isinstance(b.listeners, tuple)


def test_phase_metrics_and_events_recorded():
    got = []
    on(lambda name, payload: got.append((name, payload["phase"])))
    b = StartupBroadcaster([StartupListener(), StartupListener()])
    b.starting()
    b.environment_prepared({})
    assert ("StartupPhaseBroadcast", "starting") in got
    assert ("StartupPhaseBroadcast", "environment_prepared") in got
    snap = metrics.snapshot()
    assert snap["counters"]["startup_phase_total{phase=starting}"] == 1
    assert "startup_phase_latency_ms{phase=environment_prepared}" in snap["histograms"]


def test_phase_values_and_terminal_states():
    assert [p.name for p in StartupPhase] == [
        "STARTING",
        "ENV_PREPARED",
        "CONTEXT_PREPARED",
        "CONTEXT_LOADED",
        "STARTED",
        "RUNNING",
        "FAILED",
    ]
    assert {p for p in StartupPhase if p.is_terminal} == {
        StartupPhase.RUNNING,
        StartupPhase.FAILED,
    }
