from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

from feebid._tests.util.block_tools import FakeDataSource, make_block
from feebid.util.config import CONFIG_FILENAME, create_default_feebid_config, lock_and_load_config


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(scope="function")
def tmp_feebid_root(tmp_path: Path) -> Path:
    """
    Create a temp directory and populate it with an empty feebid root directory.
    """
    path: Path = tmp_path / "feebid_root"
    path.mkdir(parents=True, exist_ok=True)
    return path


@pytest.fixture(scope="function")
def root_path_populated_with_config(tmp_feebid_root: Path) -> Path:
    """
    Create a temp feebid root directory and populate it with a default config.yaml.
    Returns the root path.
    """
    root_path: Path = tmp_feebid_root
    create_default_feebid_config(root_path)
    return root_path


@pytest.fixture(scope="function")
def config(root_path_populated_with_config: Path) -> Dict[str, Any]:
    with lock_and_load_config(root_path_populated_with_config, CONFIG_FILENAME) as config:
        return config


@pytest.fixture(scope="function")
def mainnet_window() -> FakeDataSource:
    """
    Four mainnet-like blocks 15_000_000..15_000_003 mixing legacy and fee-market transactions,
    the chain head being 15_000_004.
    """
    fees: List[Optional[List[int]]] = [
        [1_000_000_000, 1_500_000_000, 1_500_000_000, 2_000_000_000, 3_000_000_000],
        [1_500_000_000, 1_500_000_000, 2_000_000_000],
        [1_000_000_000, 1_500_000_000, 2_000_000_000, 2_500_000_000],
        [1_500_000_000],
    ]
    blocks = [
        make_block(15_000_000 + i, priority_fees=block_fees, legacy_count=2, base_fee=12_000_000_000 + i)
        for i, block_fees in enumerate(fees)
    ]
    return FakeDataSource(blocks=blocks, head=15_000_004, pending_base_fee=13_969_109_554)
