from __future__ import annotations

from enum import Enum
from pathlib import Path


class Err(Enum):
    UNKNOWN = 1

    # arithmetic
    EMPTY_SAMPLE = 2

    # configuration, rejected before any fetch
    INVALID_WINDOW_SIZE = 3
    INVALID_PERCENTILES = 4

    # data source
    EMPTY_WINDOW = 5
    BLOCK_NOT_FOUND = 6
    MISSING_BASE_FEE = 7


class FeeBidError(Exception):
    def __init__(self, code: Err, error_msg: str = ""):
        super().__init__(f"Error code: {code.name} {error_msg}".rstrip())
        self.code = code
        self.error_msg = error_msg


##
#  Statistics errors
##


class EmptySampleError(FeeBidError, ValueError):
    def __init__(self, operation: str) -> None:
        super().__init__(Err.EMPTY_SAMPLE, f"{operation} of an empty sample sequence is undefined")
        self.operation = operation


##
#  Estimator errors
##


class InvalidConfigError(FeeBidError):
    pass


class EmptyWindowError(FeeBidError):
    def __init__(self, current_block: int) -> None:
        super().__init__(Err.EMPTY_WINDOW, f"no confirmed blocks before block {current_block}")
        self.current_block = current_block


class BlockNotFoundError(FeeBidError):
    def __init__(self, block: str) -> None:
        super().__init__(Err.BLOCK_NOT_FOUND, f"block {block} not found")
        self.block = block


class MissingBaseFeeError(FeeBidError):
    def __init__(self) -> None:
        super().__init__(Err.MISSING_BASE_FEE, "pending block has no baseFeePerGas")


##
#  Miscellaneous errors
##


class InvalidPathError(Exception):
    def __init__(self, path: Path, error_message: str):
        super().__init__(f"{error_message}: {str(path)!r}")
        self.path = path
