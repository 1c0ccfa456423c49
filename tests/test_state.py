import pytest

from ant_transport.chain.state import (
    Configuration,
    ProblemSpec,
    decode_key,
    initial_configuration,
)


def _config(x, y, carrying, source, target, problem=None):
    return Configuration(x, y, carrying, source, target, problem or ProblemSpec())


def test_initial_configuration_is_centre_with_full_source_row():
    start = initial_configuration()
    assert (start.x, start.y) == (2, 2)
    assert not start.carrying
    assert start.source == 0b11111
    assert start.target == 0
    assert start.is_valid()
    assert not start.is_terminal()


def test_carrying_over_empty_target_cell_is_invalid():
    assert not _config(2, 0, True, 0b01111, 0).is_valid()
    assert _config(2, 0, True, 0b00111, 0b00100).is_valid()


def test_standing_on_full_source_cell_without_marker_is_invalid():
    assert not _config(1, 4, False, 0b11111, 0).is_valid()
    assert _config(1, 4, False, 0b11101, 0b00010).is_valid()


def test_terminal_requires_target_row():
    assert not _config(0, 2, False, 0, 0b11111).is_valid()
    finished = _config(0, 0, False, 0, 0b11111)
    assert finished.is_valid()
    assert finished.is_terminal()


def test_marker_count_is_conserved():
    assert not _config(2, 2, False, 0b01111, 0).is_valid()
    assert not _config(2, 2, True, 0b11111, 0).is_valid()
    assert _config(2, 2, True, 0b01111, 0).is_valid()


def test_carrying_is_never_terminal():
    assert not _config(0, 0, True, 0, 0b11111).is_terminal()


def test_key_packing_matches_formula():
    start = initial_configuration()
    assert start.key() == ((31 * 5 + 2) * 5 + 2)
    carrying = _config(4, 3, True, 0b00001, 0b00110)
    expected = ((((1 << 5 | 0b00110) << 5 | 0b00001) * 5 + 4) * 5) + 3
    assert carrying.key() == expected


def test_decode_key_inverts_key():
    config = _config(3, 1, True, 0b01011, 0b10000)
    assert decode_key(config.key()) == config
    assert decode_key(initial_configuration().key()) == initial_configuration()


def test_decode_key_rejects_out_of_range():
    problem = ProblemSpec()
    assert problem.max_key == 51199
    with pytest.raises(ValueError):
        decode_key(problem.max_key + 1, problem)
    with pytest.raises(ValueError):
        decode_key(-1, problem)


def test_apply_side_effect_drop_and_pickup():
    drop = _config(3, 0, True, 0b01111, 0).apply_side_effect()
    assert not drop.carrying
    assert drop.target == 0b01000

    pickup = _config(0, 4, False, 0b11111, 0).apply_side_effect()
    assert pickup.carrying
    assert pickup.source == 0b11110

    idle = _config(2, 2, False, 0b11111, 0)
    assert idle.apply_side_effect() is idle


@pytest.mark.parametrize("grid_size,markers", [(1, 1), (3, 0), (3, 4)])
def test_problem_spec_rejects_bad_parameters(grid_size, markers):
    with pytest.raises(ValueError):
        ProblemSpec(grid_size=grid_size, markers=markers)


def test_two_by_two_start_picks_up_immediately():
    problem = ProblemSpec(grid_size=2, markers=2)
    start = initial_configuration(problem)
    assert (start.x, start.y) == (1, 1)
    assert start.carrying
    assert start.source == 0b01
    assert start.is_valid()
