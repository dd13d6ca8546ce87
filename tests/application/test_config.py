from pathlib import Path

import pytest
from pydantic import ValidationError

from cardledger.application.config import AppConfig, resolve_config
from cardledger.application.factory import build_services, get_snapshot_repository
from cardledger.infrastructure.adapters.memory_repository import MemorySnapshotRepository
from cardledger.infrastructure.adapters.yaml_repository import YamlSnapshotRepository


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep the user's real config file out of the way."""
    monkeypatch.setattr("cardledger.application.config.CONFIG_FILE", tmp_path / "none.toml")
    for var in ("CARDLEDGER_BACKEND", "CARDLEDGER_DATA_FILE", "CARDLEDGER_YOUNG_MAX_INTERVAL"):
        monkeypatch.delenv(var, raising=False)


def test_defaults():
    config = resolve_config()
    assert config.backend == "yaml"
    assert config.session_history_limit == 100
    assert config.thresholds.young_max == 30
    assert config.data_file.name == "ledger.yaml"


def test_cli_overrides_ignore_none(tmp_path):
    config = resolve_config({"backend": None, "data_file": tmp_path / "x.yaml"})
    assert config.backend == "yaml"
    assert config.data_file == (tmp_path / "x.yaml").resolve()


def test_env_vars(monkeypatch):
    monkeypatch.setenv("CARDLEDGER_BACKEND", "memory")
    monkeypatch.setenv("CARDLEDGER_YOUNG_MAX_INTERVAL", "45")
    config = resolve_config()
    assert config.backend == "memory"
    assert config.thresholds.young_max == 45


def test_overrides_beat_env(monkeypatch):
    monkeypatch.setenv("CARDLEDGER_BACKEND", "memory")
    assert resolve_config({"backend": "yaml"}).backend == "yaml"


def test_toml_file(tmp_path, monkeypatch):
    toml = tmp_path / "config.toml"
    toml.write_text('backend = "memory"\nprogress_window_days = 14\n')
    monkeypatch.setattr("cardledger.application.config.CONFIG_FILE", toml)
    config = resolve_config()
    assert config.backend == "memory"
    assert config.progress_window_days == 14


def test_rejects_non_increasing_thresholds():
    with pytest.raises(ValidationError):
        AppConfig(new_max_interval=10, learning_max_interval=7)


def test_rejects_unknown_backend():
    with pytest.raises(ValidationError):
        AppConfig(backend="postgres")


def test_repository_selection(tmp_path):
    assert isinstance(get_snapshot_repository(AppConfig(backend="memory")), MemorySnapshotRepository)
    repo = get_snapshot_repository(AppConfig(backend="yaml", data_file=tmp_path / "d.yaml"))
    assert isinstance(repo, YamlSnapshotRepository)
    assert repo.path == (tmp_path / "d.yaml").resolve()


def test_build_services_share_one_store():
    services = build_services(AppConfig(backend="memory", data_file=Path("/tmp/unused.yaml")))
    services.study.add_card("q", "a")
    assert services.stats.get_basic_stats().total_cards == 1
