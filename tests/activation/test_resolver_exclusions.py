import pytest

from autoboot.activation import (
    ExclusionRequest,
    ModuleCatalog,
    SnapshotContext,
    identity_of,
    resolve,
)
from autoboot.errors import ConfigurationError, ExcludedIdentityNotFound


class WebServerModule:
    pass


class CacheModule:
    pass


WEB = identity_of(WebServerModule)
CACHE = identity_of(CacheModule)


def _catalog():
    return ModuleCatalog.from_sources([WEB, "acme.db.PoolModule", CACHE])


def test_strong_reference_excludes_module():
    result = resolve(
        _catalog(),
        ExclusionRequest(references=(WebServerModule,)),
        SnapshotContext(),
    )
    assert WEB not in result.identities
    assert result.identities == ("acme.db.PoolModule", CACHE)
    assert result.excluded == (WEB,)


def test_loose_names_exclude_and_may_match_nothing():
    result = resolve(
        _catalog(),
        ExclusionRequest(names=("acme.db.PoolModule", "vendor.Unknown")),
        SnapshotContext(),
    )
    assert result.identities == (WEB, CACHE)
    assert result.excluded == ("acme.db.PoolModule",)


def test_unmatched_strong_reference_fails():
    class Stray:
        pass

    with pytest.raises(ExcludedIdentityNotFound) as ei:
        resolve(
            _catalog(),
            ExclusionRequest(references=(CacheModule, Stray, "x.Missing")),
            SnapshotContext(),
        )
    assert ei.value.identities == (identity_of(Stray), "x.Missing")
    assert isinstance(ei.value, ConfigurationError)
    assert ei.value.error_type == "excluded-identity-not-found"


def test_single_reference_and_name_not_split_into_characters():
    req = ExclusionRequest(references=WebServerModule, names="acme.db.PoolModule")
    assert req.references == (WebServerModule,)
    assert req.names == ("acme.db.PoolModule",)
    assert ExclusionRequest(references=CACHE).strong_identities() == (CACHE,)
    assert req.merged_with("vendor.Extra").names == (
        "acme.db.PoolModule",
        "vendor.Extra",
    )
    result = resolve(_catalog(), req, SnapshotContext())
    assert result.identities == (CACHE,)


def test_empty_request_is_falsy_and_catalog_membership():
    assert not ExclusionRequest()
    assert ExclusionRequest(names=("  ",)) == ExclusionRequest()
    assert ExclusionRequest(names=("x",))
    catalog = _catalog()
    assert WEB in catalog
    assert "x.Missing" not in catalog


def test_merged_names_follow_loose_semantics():
    req = ExclusionRequest(references=(CacheModule,)).merged_with(
        [" acme.db.PoolModule ", "", "nowhere.Module"]
    )
    assert req.names == ("acme.db.PoolModule", "nowhere.Module")
    result = resolve(_catalog(), req, SnapshotContext())
    assert result.identities == (WEB,)


def test_excluded_module_conditions_not_evaluated():
    calls = []

    class CountingContext(SnapshotContext):
        def is_library_available(self, name):
            calls.append(name)
            return True

    from autoboot.activation import ModuleDescriptor

    catalog = ModuleCatalog(
        [
            ModuleDescriptor(
                id="guarded",
                conditions=[{"kind": "library-present", "names": ["yaml"]}],
            )
        ]
    )
    result = resolve(
        catalog, ExclusionRequest(names=("guarded",)), CountingContext()
    )
    assert result.identities == ()
    assert calls == []
    assert "guarded" not in result.report.outcomes


def test_duplicate_identities_from_several_sources_kept_once():
    catalog = ModuleCatalog.from_sources(["A", "B", "A", "C", "B"])
    result = resolve(catalog, environment=SnapshotContext())
    assert result.identities == ("A", "B", "C")


def test_disabled_resolver_returns_empty_result():
    from autoboot.activation import ActivationResolver

    result = ActivationResolver(enabled=False).resolve(
        _catalog(), environment=SnapshotContext()
    )
    assert result.identities == ()
