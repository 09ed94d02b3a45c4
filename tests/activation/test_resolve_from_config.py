import textwrap
from pathlib import Path

from autoboot.activation import ExclusionRequest, SnapshotContext, resolve_from_config
from autoboot.config import clear_config_cache


def _setup(tmp_path: Path, monkeypatch, extra: str = "") -> None:
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "autoboot.factories").write_text(
        "autoboot.activation.EnableActivation=a.One,b.Two,c.Three\n",
        encoding="utf-8",
    )
    cfg_dir = tmp_path / "cfg"
    cfg_dir.mkdir()
    (cfg_dir / "base.yaml").write_text(
        textwrap.dedent(
            f"""
            activation:
              factories: ["{(tmp_path / 'src').as_posix()}"]
              manifests_dir: "{(tmp_path / 'modules').as_posix()}"
            {extra}
            """
        ),
        encoding="utf-8",
    )
    monkeypatch.setenv("AUTOBOOT_CONFIG_DIR", str(cfg_dir))
    clear_config_cache()


def test_configured_sources_resolve(tmp_path, monkeypatch):
    _setup(tmp_path, monkeypatch)
    result = resolve_from_config(SnapshotContext())
    assert result.identities == ("a.One", "b.Two", "c.Three")


def test_env_exclusion_list_merges_with_explicit_request(tmp_path, monkeypatch):
    _setup(tmp_path, monkeypatch)
    monkeypatch.setenv("AUTOBOOT__ACTIVATION__EXCLUDE", "b.Two, not.Deployed")
    clear_config_cache()
    result = resolve_from_config(
        SnapshotContext(), ExclusionRequest(references=("c.Three",))
    )
    assert result.identities == ("a.One",)
    assert result.excluded == ("b.Two", "c.Three")


def test_activation_kill_switch(tmp_path, monkeypatch):
    _setup(tmp_path, monkeypatch)
    monkeypatch.setenv("AUTOBOOT__ACTIVATION__ENABLED", "false")
    clear_config_cache()
    assert resolve_from_config(SnapshotContext()).identities == ()
