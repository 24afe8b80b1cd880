import pytest

from helpers import reference_hash
from nft_grid.errors import NotFound
from nft_grid.grid import (
    GridGenerator,
    StaticSeeds,
    derive_grid,
    derive_raw_state,
    grid_from_raw_state,
    keccak_uint256,
    pack_uint256,
    parse_rendering,
    render,
)

STRIPES = "xxxxxxxxoooooooo" * 8

KECCAK_OF_1 = 0xB10E2D527612073B26EECDFD717E6A320CF44B4AFAC2B0732D9FCBE2B7FA0CF6
KECCAK_OF_2 = 0x405787FA12A823E0F2B7631CC41B3BA8828B3321CA811111FA75CD3AA3BB5ACE


def test_pack_uint256_is_32_byte_big_endian():
    assert pack_uint256(1) == b"\x00" * 31 + b"\x01"
    assert len(pack_uint256(2**256 - 1)) == 32


def test_raw_state_is_keccak_of_1_to_64():
    state = derive_raw_state(1)
    assert len(state) == 64
    assert state[0] == KECCAK_OF_1
    assert state[1] == KECCAK_OF_2
    assert list(state) == [keccak_uint256(pack_uint256(i)) for i in range(1, 65)]
    assert all(0 <= w < 2**256 for w in state)


@pytest.mark.parametrize("seed", [0, 1, 7, 2**256 - 1])
def test_raw_state_does_not_depend_on_seed(seed):
    assert derive_raw_state(seed) == derive_raw_state(1)


@pytest.mark.parametrize("seed", [-1, 2**256])
def test_seed_out_of_range_is_rejected(seed):
    with pytest.raises(ValueError):
        derive_raw_state(seed)


def test_reference_rendering_for_seed_1():
    lines = render(derive_grid(1, hash_fn=reference_hash)).split("\n")
    assert lines[0] == "o" * 128
    assert lines[1] == "o" * 127 + "x"
    for row in lines[2:128]:
        assert row == STRIPES
    assert lines[128] == ""


def test_rendering_shape():
    segments = render(derive_grid(42)).split("\n")
    assert len(segments) == 129
    assert segments[-1] == ""
    assert all(len(row) == 128 for row in segments[:-1])
    assert set("".join(segments)) <= {"x", "o"}


def test_rendering_is_deterministic():
    assert render(derive_grid(5)) == render(derive_grid(5))


def test_bit_layout_high_half_first_msb_first():
    words = [0] * 64
    words[0] = (1 << 255) | 1
    words[63] = 1 << 128
    grid = grid_from_raw_state(tuple(words))
    assert grid.rows[0][0] == 1
    assert grid.rows[1][127] == 1
    assert grid.rows[126][127] == 1
    assert sum(sum(row) for row in grid.rows) == 3


def test_grid_from_raw_state_rejects_wrong_length():
    with pytest.raises(ValueError):
        grid_from_raw_state((0,) * 63)


def test_parse_rendering_recovers_grid():
    grid = derive_grid(3)
    assert parse_rendering(render(grid)) == grid


def test_parse_rendering_rejects_bad_symbol():
    text = render(derive_grid(3))
    with pytest.raises(ValueError):
        parse_rendering("z" + text[1:])


def test_generator_uses_injected_hash():
    gen = GridGenerator(StaticSeeds({1: 1}), hash_fn=reference_hash)
    assert gen.get_initial_state(1)[0] == 1
    assert gen.draw(1).split("\n")[2] == STRIPES


def test_generator_unknown_token_is_not_found():
    gen = GridGenerator(StaticSeeds({1: 1}))
    with pytest.raises(NotFound):
        gen.draw(2)
    with pytest.raises(NotFound):
        gen.get_initial_state(2)
