# herd_sim/sim/rng.py
import random

class RNG:
    _rng = random.Random()

    @classmethod
    def seed(cls, s: int):
        cls._rng.seed(s)

    @classmethod
    def uniform(cls, a: float, b: float) -> float:
        return cls._rng.uniform(a, b)

    @classmethod
    def randint(cls, a: int, b: int) -> int:
        return cls._rng.randint(a, b)

    @classmethod
    def random(cls) -> float:
        return cls._rng.random()
