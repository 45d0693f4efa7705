"""Walk generation and pixel set assembly."""

import random

import pytest

from graffiti.grid import GridPoint, generate_pixel_set, generate_walk

FULL = (0, 999)


class ScriptedRandom:
    """Hands out a fixed list of ints and a fixed list of permutations."""

    def __init__(self, ints, perms=()):
        self.ints = list(ints)
        self.perms = list(perms)

    def randint(self, a, b):
        v = self.ints.pop(0)
        assert a <= v <= b
        return v

    def shuffle(self, seq):
        perm = self.perms.pop(0)
        seq[:] = [seq[i] for i in perm]


def _chebyshev(a: GridPoint, b: GridPoint) -> int:
    return max(abs(a.x - b.x), abs(a.y - b.y))


@pytest.mark.parametrize("seed", range(20))
def test_walk_invariants(seed):
    rng = random.Random(seed)
    x_bounds, y_bounds = (10, 30), (500, 520)
    walk = generate_walk(200, x_bounds, y_bounds, rng=rng)

    assert 1 <= len(walk) <= 200
    for p in walk:
        assert x_bounds[0] <= p.x <= x_bounds[1]
        assert y_bounds[0] <= p.y <= y_bounds[1]
    assert len(set(walk)) == len(walk)
    for a, b in zip(walk, walk[1:]):
        assert _chebyshev(a, b) == 1


def test_golden_walk_from_scripted_shuffles():
    perms = [
        [4, 3, 2, 0, 1, 5, 6, 7],  # W, SW, S are off canvas at (0, 0) -> E
        [4, 0, 1, 2, 3, 5, 6, 7],  # W is (0, 0), already visited -> E
        [6, 0, 1, 2, 3, 4, 5, 7],  # N
        [3, 4, 0, 1, 2, 5, 6, 7],  # SW is (1, 0), visited -> W
    ]
    rng = ScriptedRandom([0, 0], perms)

    walk = generate_walk(5, FULL, FULL, rng=rng)

    assert walk == [GridPoint(0, 0), GridPoint(1, 0), GridPoint(2, 0), GridPoint(2, 1), GridPoint(1, 1)]
    assert rng.perms == []


def test_single_point_walk():
    rng = ScriptedRandom([42, 7])
    assert generate_walk(1, FULL, FULL, rng=rng) == [GridPoint(42, 7)]


def test_boxed_in_start_returns_immediately():
    walk = generate_walk(10, (5, 5), (5, 5), rng=random.Random(1))
    assert walk == [GridPoint(5, 5)]


def test_walk_stops_when_grid_exhausted():
    walk = generate_walk(50, (0, 1), (0, 1), rng=random.Random(3))
    # 2x2 block: every cell neighbours every other, so the walk fills it
    assert len(walk) == 4
    assert set(walk) == {GridPoint(0, 0), GridPoint(0, 1), GridPoint(1, 0), GridPoint(1, 1)}


def test_walk_rejects_zero_length():
    with pytest.raises(ValueError):
        generate_walk(0)


def test_points_are_immutable_and_compare_by_value():
    p = GridPoint(3, 4)
    assert p == GridPoint(3, 4)
    assert p != GridPoint(4, 3)
    with pytest.raises(AttributeError):
        p.x = 5


@pytest.mark.parametrize("target", [1, 2, 3, 7, 50, 101])
@pytest.mark.parametrize("max_lines", [1, 2, 4, 8])
def test_pixel_set_has_exact_length(target, max_lines):
    ps = generate_pixel_set(target, max_lines, rng=random.Random(target * 31 + max_lines))
    assert len(ps) == target
    assert 1 <= ps.walks
    for pixel in ps:
        assert 0 <= pixel.color <= 7
        assert 0 <= pixel.x <= 999
        assert 0 <= pixel.y <= 999


def test_walk_starved_pixel_set_is_topped_up():
    # A 2x2 canvas can't hold a walk longer than 4, so 10 pixels need extra walks
    ps = generate_pixel_set(10, 1, x_bounds=(0, 1), y_bounds=(0, 1), rng=random.Random(0))
    assert len(ps) == 10
    assert ps.walks >= 3


def test_more_lines_than_pixels():
    rng = ScriptedRandom([4, 1, 1, 2, 2, 3, 3, 4, 4, 6, 6], perms=[])
    ps = generate_pixel_set(2, 4, rng=rng)
    # four single point walks, only the first two survive the cut
    assert ps.points == [GridPoint(1, 1), GridPoint(2, 2)]
    assert [p.color for p in ps] == [6, 6]
    assert ps.walks == 4


def test_pixel_set_validates_arguments():
    with pytest.raises(ValueError):
        generate_pixel_set(0)
    with pytest.raises(ValueError):
        generate_pixel_set(5, 0)
