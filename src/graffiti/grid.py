"""Random walks over the canvas grid.

A drawing is made of one or more walks. Each walk starts at a random pixel and
keeps stepping to a random unvisited neighbour (8 directions) until it reaches
its length budget or boxes itself in.
"""

import logging
import random
from dataclasses import dataclass

import graffiti.constants as C
from graffiti import randoms

log = logging.getLogger("graffiti.grid")

Bounds = tuple[int, int]

DEFAULT_X_BOUNDS: Bounds = (C.LENGTH_START, C.LENGTH_STOP)
DEFAULT_Y_BOUNDS: Bounds = (C.WEIGHT_START, C.WEIGHT_STOP)

# Base neighbour order before shuffling: E, SE, S, SW, W, NW, N, NE (y grows "north")
DIRECTIONS: tuple[tuple[int, int], ...] = (
    (1, 0),
    (1, -1),
    (0, -1),
    (-1, -1),
    (-1, 0),
    (-1, 1),
    (0, 1),
    (1, 1),
)


@dataclass(frozen=True, slots=True)
class GridPoint:
    x: int
    y: int

    def neighbours(self) -> list["GridPoint"]:
        return [GridPoint(self.x + dx, self.y + dy) for dx, dy in DIRECTIONS]

    def within(self, x_bounds: Bounds, y_bounds: Bounds) -> bool:
        return x_bounds[0] <= self.x <= x_bounds[1] and y_bounds[0] <= self.y <= y_bounds[1]


@dataclass(frozen=True, slots=True)
class Pixel:
    point: GridPoint
    color: int

    @property
    def x(self) -> int:
        return self.point.x

    @property
    def y(self) -> int:
        return self.point.y


@dataclass(slots=True)
class PixelSet:
    pixels: list[Pixel]
    walks: int = 1

    def __len__(self) -> int:
        return len(self.pixels)

    def __iter__(self):
        return iter(self.pixels)

    @property
    def points(self) -> list[GridPoint]:
        return [p.point for p in self.pixels]


def _next_point(walk: list[GridPoint], visited: set[GridPoint], x_bounds: Bounds, y_bounds: Bounds,
                rng: random.Random) -> GridPoint | None:
    candidates = walk[-1].neighbours()
    rng.shuffle(candidates)
    for point in candidates:
        if point not in visited and point.within(x_bounds, y_bounds):
            return point
    return None


def generate_walk(
    max_length: int,
    x_bounds: Bounds = DEFAULT_X_BOUNDS,
    y_bounds: Bounds = DEFAULT_Y_BOUNDS,
    rng: random.Random | None = None,
) -> list[GridPoint]:
    """Generate one self-avoiding walk of at most ``max_length`` points.

    Args:
        max_length: Length budget, at least 1.
        x_bounds: Closed interval for x.
        y_bounds: Closed interval for y.
        rng: Anything with ``randint`` and ``shuffle``. Defaults to the shared generator.

    Returns:
        The walk in visiting order. Shorter than ``max_length`` when every
        neighbour of the tail is visited or off the canvas.
    """
    if max_length < 1:
        raise ValueError(f"max_length must be >= 1, got {max_length}")
    if x_bounds[0] > x_bounds[1] or y_bounds[0] > y_bounds[1]:
        raise ValueError(f"Empty bounds x={x_bounds} y={y_bounds}")
    rng = rng or randoms.rng()

    start = GridPoint(rng.randint(*x_bounds), rng.randint(*y_bounds))
    walk = [start]
    visited = {start}

    while len(walk) < max_length:
        point = _next_point(walk, visited, x_bounds, y_bounds, rng)
        if point is None:
            log.debug("Walk boxed in at %s after %s points", walk[-1], len(walk))
            break
        walk.append(point)
        visited.add(point)

    return walk


def generate_pixel_set(
    target_count: int,
    max_lines_count: int = C.MAX_LINES,
    x_bounds: Bounds = DEFAULT_X_BOUNDS,
    y_bounds: Bounds = DEFAULT_Y_BOUNDS,
    max_color: int = C.MAX_COLOR,
    rng: random.Random | None = None,
) -> PixelSet:
    """Build ``target_count`` coloured pixels out of 1..``max_lines_count`` walks.

    The walks are concatenated in generation order and the result is cut to
    exactly ``target_count`` points, so the last walk may lose its tail or be
    dropped entirely. Walks that stop early are made up for with extra walks
    sized to the shortfall; nothing is ever padded.
    """
    if target_count < 1:
        raise ValueError(f"target_count must be >= 1, got {target_count}")
    if max_lines_count < 1:
        raise ValueError(f"max_lines_count must be >= 1, got {max_lines_count}")
    rng = rng or randoms.rng()

    lines = rng.randint(1, max_lines_count)
    max_line_length = max(1, target_count // lines)

    points: list[GridPoint] = []
    for _ in range(lines):
        points.extend(generate_walk(max_line_length, x_bounds, y_bounds, rng))

    walks = lines
    while len(points) < target_count:
        # Some walk got boxed in; keep drawing until we have enough
        points.extend(generate_walk(target_count - len(points), x_bounds, y_bounds, rng))
        walks += 1

    if walks > lines:
        log.debug("Topped up %s short walks with %s more", lines, walks - lines)

    pixels = [Pixel(point, rng.randint(0, max_color)) for point in points[:target_count]]
    return PixelSet(pixels=pixels, walks=walks)
