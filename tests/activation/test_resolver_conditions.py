from autoboot import metrics
from autoboot.activation import (
    ModuleCatalog,
    ModuleDescriptor,
    SnapshotContext,
    resolve,
)
from autoboot.events import on


def _module(ident, *conditions, **kw):
    return ModuleDescriptor(id=ident, conditions=list(conditions), **kw)


POOL = "acme.db.ConnectionPool"


def test_component_absent_depends_on_registry_state():
    descriptor = _module(
        "acme.db.PoolModule", {"kind": "component-absent", "types": [POOL]}
    )
    catalog = ModuleCatalog([descriptor])

    present = resolve(catalog, environment=SnapshotContext(components=[POOL]))
    absent = resolve(catalog, environment=SnapshotContext())

    assert present.identities == ()
    assert absent.identities == ("acme.db.PoolModule",)


def test_conditions_are_and_ed_and_short_circuit():
    asked = []

    class Ctx(SnapshotContext):
        def is_component_registered(self, type_name):
            asked.append(type_name)
            return super().is_component_registered(type_name)

    descriptor = _module(
        "acme.web.ServerModule",
        {"kind": "library-present", "names": ["missing_lib"]},
        {"kind": "component-present", "types": ["acme.web.Router"]},
    )
    result = resolve(ModuleCatalog([descriptor]), environment=Ctx())
    assert result.identities == ()
    assert asked == []
    outcome = result.report.outcomes["acme.web.ServerModule"]
    assert not outcome.match
    assert "missing_lib" in outcome.message


def test_failing_condition_is_reported_once_and_not_as_error():
    descriptor = _module(
        "opt.Module", {"kind": "library-absent", "names": ["yaml"]}
    )
    catalog = ModuleCatalog([descriptor, descriptor])
    result = resolve(catalog, environment=SnapshotContext(libraries=["yaml"]))
    assert result.identities == ()
    assert result.report.unmatched() == ("opt.Module",)
    assert result.excluded == ()
    snap = metrics.snapshot()["counters"]
    assert snap["activation_condition_skipped_total{module=opt.Module}"] == 2


def test_later_matching_duplicate_wins_over_earlier_miss():
    miss = _module("dup", {"kind": "property", "name": "feature.on"})
    hit = _module("dup")
    result = resolve(ModuleCatalog([miss, hit]), environment=SnapshotContext())
    assert result.identities == ("dup",)
    assert result.report.matched() == ("dup",)


def test_modules_resolved_event_emitted():
    got = []
    on(lambda name, payload: got.append((name, payload)))
    catalog = ModuleCatalog(
        [
            _module("a"),
            _module("b", {"kind": "library-present", "names": ["nope"]}),
        ]
    )
    resolve(catalog, environment=SnapshotContext())
    events = [p for n, p in got if n == "ModulesResolved"]
    assert len(events) == 1
    assert events[0]["candidates"] == ("a", "b")
    assert events[0]["activated"] == ("a",)
    assert events[0]["skipped"] == ("b",)
