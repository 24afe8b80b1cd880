from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Protocol, Tuple

from eth_abi import encode
from eth_utils import keccak

from .errors import NotFound
from .project_constants import (
    ALIVE_CELL,
    DEAD_CELL,
    GRID_COLS,
    GRID_ROWS,
    RAW_STATE_WORDS,
    UINT256_MAX,
    WORD_BITS,
)

HashFn = Callable[[bytes], int]
RawState = Tuple[int, ...]


class SeedLookup(Protocol):
    def seed_of(self, token_id: int) -> int:
        """Return the seed recorded for token_id, or raise NotFound."""
        ...


@dataclass(frozen=True)
class Grid:
    rows: Tuple[Tuple[int, ...], ...]


def keccak_uint256(data: bytes) -> int:
    return int.from_bytes(keccak(data), "big")


def pack_uint256(value: int) -> bytes:
    # abi.encode(uint256) == 32-byte big-endian
    return encode(["uint256"], [value])


def check_seed(seed: int) -> None:
    if seed < 0 or seed > UINT256_MAX:
        raise ValueError(f"Seed out of uint256 range: {seed}")


def derive_raw_state(seed: int, hash_fn: HashFn = keccak_uint256) -> RawState:
    """
    Hash the integers 1..64 (packed as 32-byte words) in order.

    The seed is validated but does not take part in the derivation, so every
    seed yields the same raw state. This matches the deployed contract and is
    most likely a latent defect there; do not change it without a new
    collection.
    """
    check_seed(seed)
    return tuple(hash_fn(pack_uint256(i)) for i in range(1, RAW_STATE_WORDS + 1))


def grid_from_raw_state(raw_state: RawState) -> Grid:
    """
    Word k fills rows 2k (high 128 bits) and 2k+1 (low 128 bits).
    Column 0 of a row is its most significant bit.
    """
    if len(raw_state) != RAW_STATE_WORDS:
        raise ValueError(
            f"Raw state must hold {RAW_STATE_WORDS} words, got {len(raw_state)}"
        )

    rows_per_word = WORD_BITS // GRID_COLS
    rows = []
    for word in raw_state:
        if word < 0 or word > UINT256_MAX:
            raise ValueError(f"Raw state word out of uint256 range: {word}")
        for half in range(rows_per_word):
            shift = WORD_BITS - GRID_COLS * (half + 1)
            chunk = (word >> shift) & ((1 << GRID_COLS) - 1)
            rows.append(
                tuple((chunk >> (GRID_COLS - 1 - col)) & 1 for col in range(GRID_COLS))
            )
    return Grid(tuple(rows))


def derive_grid(seed: int, hash_fn: HashFn = keccak_uint256) -> Grid:
    return grid_from_raw_state(derive_raw_state(seed, hash_fn))


def render(grid: Grid) -> str:
    lines = []
    for row in grid.rows:
        lines.append("".join(ALIVE_CELL if bit else DEAD_CELL for bit in row))
        lines.append("\n")
    return "".join(lines)


def parse_rendering(text: str) -> Grid:
    """Inverse of render(); raises ValueError on malformed text."""
    if not isinstance(text, str):
        raise ValueError(f"Rendering must be text, got {type(text).__name__}")
    if not text.endswith("\n"):
        raise ValueError("Rendering must end with a newline")
    lines = text[:-1].split("\n")
    if len(lines) != GRID_ROWS:
        raise ValueError(f"Rendering must have {GRID_ROWS} rows, got {len(lines)}")

    rows = []
    for idx, line in enumerate(lines):
        if len(line) != GRID_COLS:
            raise ValueError(f"Row {idx}: expected {GRID_COLS} cells, got {len(line)}")
        bits = []
        for ch in line:
            if ch == ALIVE_CELL:
                bits.append(1)
            elif ch == DEAD_CELL:
                bits.append(0)
            else:
                raise ValueError(f"Row {idx}: unexpected cell symbol {ch!r}")
        rows.append(tuple(bits))
    return Grid(tuple(rows))


class StaticSeeds:
    """SeedLookup over a plain token_id -> seed mapping."""

    def __init__(self, seeds: Optional[Dict[int, int]] = None) -> None:
        self.seeds: Dict[int, int] = dict(seeds or {})

    def seed_of(self, token_id: int) -> int:
        try:
            return self.seeds[token_id]
        except KeyError:
            raise NotFound(f"Token {token_id} has no recorded seed") from None


class GridGenerator:
    def __init__(self, seeds: SeedLookup, hash_fn: HashFn = keccak_uint256) -> None:
        self.seeds = seeds
        self.hash_fn = hash_fn

    def get_initial_state(self, token_id: int) -> RawState:
        return derive_raw_state(self.seeds.seed_of(token_id), self.hash_fn)

    def grid(self, token_id: int) -> Grid:
        return grid_from_raw_state(self.get_initial_state(token_id))

    def draw(self, token_id: int) -> str:
        return render(self.grid(token_id))
