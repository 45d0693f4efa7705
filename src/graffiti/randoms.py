"""Process-wide randomness source.

Everything that draws random numbers goes through here so tests can swap in
a seeded or scripted generator.
"""
import random

_rng = random.Random()


def rng() -> random.Random:
    return _rng


def seed(value: int | None) -> None:
    _rng.seed(value)


def randint(a: int, b: int) -> int:
    return _rng.randint(a, b)


def uniform(a: float, b: float) -> float:
    return _rng.uniform(a, b)
