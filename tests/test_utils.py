import pytest

from minerisk.utils import get_neighborhoods, spreading_caps, wrapped_scan


def test_neighborhood_sizes():
    nbrs = get_neighborhoods(4, 5)
    assert len(nbrs[(0, 0)]) == 3
    assert len(nbrs[(0, 2)]) == 5
    assert len(nbrs[(2, 2)]) == 8
    assert len(nbrs[(3, 4)]) == 3
    assert (1, 1) in nbrs[(0, 0)]
    assert (0, 0) not in nbrs[(0, 0)]


def test_neighborhoods_are_cached():
    assert get_neighborhoods(6, 7) is get_neighborhoods(6, 7)


def test_neighborhoods_reject_empty_grid():
    with pytest.raises(ValueError):
        get_neighborhoods(0, 3)


def test_spreading_caps():
    assert spreading_caps(9, 9) == (5, 5)
    assert spreading_caps(16, 30) == (9, 19)
    assert spreading_caps(2, 2) == (0, 0)


def test_wrapped_scan_visits_every_cell_once():
    order = wrapped_scan(3, 4, origin=(1, 2), direction=(-1, 1))
    assert order[0] == (1, 2)
    assert order[1] == (1, 3)
    assert order[2] == (1, 0)
    assert order[4] == (0, 2)
    assert len(order) == 12
    assert set(order) == {(r, c) for r in range(3) for c in range(4)}


def test_neighbours_are_row_major():
    assert get_neighborhoods(3, 3)[(1, 1)] == (
        (0, 0), (0, 1), (0, 2),
        (1, 0), (1, 2),
        (2, 0), (2, 1), (2, 2),
    )
