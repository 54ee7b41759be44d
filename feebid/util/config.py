from __future__ import annotations

import argparse
import contextlib
import copy
import logging
import os
import shutil
import sys
import tempfile
import time
import traceback
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

import importlib_resources
import yaml
from dotenv import find_dotenv, load_dotenv
from filelock import FileLock

from feebid.estimator.fee_estimator_constants import DEFAULT_PERCENTILES, DEFAULT_WINDOW_SIZE
from feebid.util.errors import InvalidPathError

log = logging.getLogger(__name__)

CONFIG_FILENAME = "config.yaml"
RPC_URL_ENV = "FEEBID_RPC_URL"


def initial_config_file(filename: Union[str, Path]) -> str:
    initial_config_path = importlib_resources.files(__name__.rpartition(".")[0]).joinpath(f"initial-{filename}")
    contents: str = initial_config_path.read_text(encoding="utf-8")
    return contents


def create_default_feebid_config(root_path: Path, filenames: List[str] = [CONFIG_FILENAME]) -> None:
    for filename in filenames:
        default_config_file_data: str = initial_config_file(filename)
        path: Path = config_path_for_filename(root_path, filename)
        tmp_path: Path = path.with_suffix("." + str(os.getpid()))
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(tmp_path, "w") as f:
            f.write(default_config_file_data)
        try:
            os.replace(str(tmp_path), str(path))
        except PermissionError:
            shutil.move(str(tmp_path), str(path))


def config_path_for_filename(root_path: Path, filename: Union[str, Path]) -> Path:
    path_filename = Path(filename)
    if path_filename.is_absolute():
        return path_filename
    return root_path / "config" / filename


@contextlib.contextmanager
def lock_config(root_path: Path, filename: Union[str, Path]) -> Iterator[None]:
    config_path = config_path_for_filename(root_path, filename)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with FileLock(config_path.with_name(config_path.name + ".lock")):
        yield


@contextlib.contextmanager
def lock_and_load_config(root_path: Path, filename: Union[str, Path]) -> Iterator[Dict[str, Any]]:
    with lock_config(root_path=root_path, filename=filename):
        config = _load_config_maybe_locked(root_path=root_path, filename=filename, acquire_lock=False)
        yield config


def save_config(root_path: Path, filename: Union[str, Path], config_data: Any) -> None:
    # This must be called under an acquired config lock
    path: Path = config_path_for_filename(root_path, filename)
    with tempfile.TemporaryDirectory(dir=path.parent) as tmp_dir:
        tmp_path: Path = Path(tmp_dir) / Path(filename)
        with open(tmp_path, "w") as f:
            yaml.safe_dump(config_data, f)
        try:
            os.replace(str(tmp_path), path)
        except PermissionError:
            shutil.move(str(tmp_path), str(path))


def load_config(
    root_path: Path,
    filename: Union[str, Path],
    sub_config: Optional[str] = None,
    exit_on_error: bool = True,
) -> Dict[str, Any]:
    return _load_config_maybe_locked(
        root_path=root_path,
        filename=filename,
        sub_config=sub_config,
        exit_on_error=exit_on_error,
        acquire_lock=True,
    )


def _load_config_maybe_locked(
    root_path: Path,
    filename: Union[str, Path],
    sub_config: Optional[str] = None,
    exit_on_error: bool = True,
    acquire_lock: bool = True,
) -> Dict[str, Any]:
    # This must be called under an acquired config lock, or acquire_lock should be True

    path = config_path_for_filename(root_path, filename)

    if not path.is_file():
        if not exit_on_error:
            raise InvalidPathError(path, "Config not found")
        print(f"can't find {path}")
        print("** please run `feebid init` to create a new config file **")
        sys.exit(-1)
    # A concurrent writer replaces the file atomically, an empty read is retried
    for i in range(10):
        try:
            r: Dict[str, Any]
            with contextlib.ExitStack() as exit_stack:
                if acquire_lock:
                    exit_stack.enter_context(lock_config(root_path, filename))
                with open(path) as opened_config_file:
                    r = yaml.safe_load(opened_config_file)
            if r is None:
                log.error(f"yaml.safe_load returned None: {path}")
                time.sleep(i * 0.1)
                continue
            if sub_config is not None:
                r = r[sub_config]
            return r
        except yaml.YAMLError as e:
            tb = traceback.format_exc()
            log.error(f"Error loading file: {tb} {e} Retrying {i}")
            time.sleep(i * 0.1)
    raise RuntimeError("Was not able to read config file successfully")


def add_property(d: Dict[str, Any], partial_key: str, value: Any) -> None:
    if "." not in partial_key:  # root of dict
        d[partial_key] = value
    else:
        key_1, key_2 = partial_key.split(".", maxsplit=1)
        if key_1 not in d:
            d[key_1] = {}
        if "." in key_2:
            add_property(d[key_1], key_2, value)
        else:
            d[key_1][key_2] = value


def override_config(config: Dict[str, Any], config_overrides: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Returns a copy of `config` with dotted keys ("estimator.window_size") replaced.
    None values in `config_overrides` are skipped.
    """
    new_config = copy.deepcopy(config)
    if config_overrides is None:
        return new_config
    for k, v in config_overrides.items():
        if v is not None:
            add_property(new_config, k, v)
    return new_config


def str2bool(v: Union[str, bool]) -> bool:
    # Source from https://stackoverflow.com/questions/15008758/parsing-boolean-values-with-argparse
    if isinstance(v, bool):
        return v
    if v.lower() in ("yes", "true", "t", "y", "1"):
        return True
    elif v.lower() in ("no", "false", "f", "n", "0"):
        return False
    else:
        raise argparse.ArgumentTypeError("Boolean value expected.")


def load_env_file(dotenv_path: Optional[Path] = None) -> bool:
    """
    Loads `.env` (searched upward from the working directory by default) into the environment.
    Variables already set in the process environment are kept.
    """
    if dotenv_path is None:
        found = find_dotenv(usecwd=True)
        if found == "":
            return False
        dotenv_path = Path(found)
    log.debug(f"Loading environment from {dotenv_path}")
    return load_dotenv(dotenv_path, override=False)


def resolve_rpc_url(config: Dict[str, Any], override: Optional[str] = None) -> str:
    """
    The command line wins over the environment (including a loaded `.env`), which wins over config.yaml
    """
    if override is not None:
        return override
    from_env = os.environ.get(RPC_URL_ENV)
    if from_env:
        return from_env
    url: str = config["rpc"]["url"]
    return url


def estimator_settings(config: Dict[str, Any]) -> Tuple[int, Tuple[float, ...]]:
    estimator_config = config.get("estimator", {})
    window_size = estimator_config.get("window_size", DEFAULT_WINDOW_SIZE)
    percentiles = tuple(float(p) for p in estimator_config.get("percentiles", DEFAULT_PERCENTILES))
    return window_size, percentiles
