from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Dict

import pytest
from filelock import FileLock, Timeout

from feebid.util.config import (
    CONFIG_FILENAME,
    RPC_URL_ENV,
    config_path_for_filename,
    estimator_settings,
    load_config,
    load_env_file,
    lock_and_load_config,
    lock_config,
    override_config,
    resolve_rpc_url,
    save_config,
    str2bool,
)
from feebid.util.errors import InvalidPathError


def test_default_config(config: Dict[str, Any]) -> None:
    assert config["estimator"]["window_size"] == 4
    assert config["estimator"]["percentiles"] == [0.3, 0.6, 0.9]
    assert config["rpc"]["timeout"] == 30
    assert config["logging"]["log_level"] == "WARNING"
    assert estimator_settings(config) == (4, (0.3, 0.6, 0.9))


def test_save_and_load(root_path_populated_with_config: Path) -> None:
    root_path = root_path_populated_with_config
    with lock_and_load_config(root_path, CONFIG_FILENAME) as config:
        config["estimator"]["window_size"] = 12
        save_config(root_path, CONFIG_FILENAME, config)

    assert load_config(root_path, CONFIG_FILENAME)["estimator"]["window_size"] == 12
    assert load_config(root_path, CONFIG_FILENAME, sub_config="rpc")["url"] == "http://localhost:8545"


def test_missing_config(tmp_feebid_root: Path) -> None:
    with pytest.raises(InvalidPathError):
        load_config(tmp_feebid_root, CONFIG_FILENAME, exit_on_error=False)
    with pytest.raises(SystemExit):
        load_config(tmp_feebid_root, CONFIG_FILENAME)


def test_config_path_for_filename(tmp_path: Path) -> None:
    assert config_path_for_filename(tmp_path, "config.yaml") == tmp_path / "config" / "config.yaml"
    absolute = tmp_path / "elsewhere.yaml"
    assert config_path_for_filename(tmp_path, absolute) == absolute


def test_override_config(config: Dict[str, Any]) -> None:
    overridden = override_config(config, {"estimator.window_size": 8, "rpc.url": None, "extra.nested.key": 1})
    assert overridden["estimator"]["window_size"] == 8
    assert overridden["rpc"]["url"] == config["rpc"]["url"]
    assert overridden["extra"] == {"nested": {"key": 1}}
    # the input config is left untouched
    assert config["estimator"]["window_size"] == 4
    assert override_config(config, None) == config


def test_resolve_rpc_url(config: Dict[str, Any], monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(RPC_URL_ENV, raising=False)
    assert resolve_rpc_url(config) == "http://localhost:8545"
    monkeypatch.setenv(RPC_URL_ENV, "https://eth-mainnet.example/v2/key")
    assert resolve_rpc_url(config) == "https://eth-mainnet.example/v2/key"
    assert resolve_rpc_url(config, "http://10.0.0.2:8545") == "http://10.0.0.2:8545"


@pytest.fixture(name="clean_rpc_env")
def clean_rpc_env_fixture(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    # set then delete, so monkeypatch also undoes whatever a loaded .env puts there
    monkeypatch.setenv(RPC_URL_ENV, "")
    monkeypatch.delenv(RPC_URL_ENV)
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_load_env_file(config: Dict[str, Any], clean_rpc_env: Path) -> None:
    (clean_rpc_env / ".env").write_text(f"{RPC_URL_ENV}=http://from-dotenv:8545\n")
    assert load_env_file()
    assert resolve_rpc_url(config) == "http://from-dotenv:8545"
    assert resolve_rpc_url(config, "http://10.0.0.2:8545") == "http://10.0.0.2:8545"


def test_process_environment_wins_over_env_file(
    config: Dict[str, Any], clean_rpc_env: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    env_file = clean_rpc_env / "node.env"
    env_file.write_text(f"{RPC_URL_ENV}=http://from-dotenv:8545\n")
    monkeypatch.setenv(RPC_URL_ENV, "http://from-env:8545")
    load_env_file(env_file)
    assert resolve_rpc_url(config) == "http://from-env:8545"


def test_load_env_file_without_file(config: Dict[str, Any], clean_rpc_env: Path) -> None:
    assert not load_env_file(clean_rpc_env / "missing.env")
    assert resolve_rpc_url(config) == "http://localhost:8545"


def test_lock_config_holds_the_file_lock(tmp_path: Path) -> None:
    lock_path = config_path_for_filename(tmp_path, CONFIG_FILENAME).with_name(CONFIG_FILENAME + ".lock")
    with lock_config(tmp_path, CONFIG_FILENAME):
        with pytest.raises(Timeout):
            FileLock(lock_path).acquire(timeout=0)
    with FileLock(lock_path, timeout=0):
        pass


def test_estimator_settings_defaults() -> None:
    assert estimator_settings({}) == (4, (0.3, 0.6, 0.9))


@pytest.mark.parametrize("value, expected", [("yes", True), ("t", True), ("0", False), ("False", False), (True, True)])
def test_str2bool(value, expected: bool) -> None:
    assert str2bool(value) is expected


def test_str2bool_invalid() -> None:
    with pytest.raises(argparse.ArgumentTypeError):
        str2bool("maybe")
