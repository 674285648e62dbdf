from __future__ import annotations
import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Limit:
    """Closed interval [lower, upper] used for output and integral saturation.

    Inverted bounds are not rejected; keeping lower <= upper is up to the caller.
    """
    lower: float
    upper: float

    @classmethod
    def unbounded(cls) -> Limit:
        return cls(-math.inf, math.inf)

    def clamp(self, value: float) -> float:
        # below lower -> lower, above upper -> upper, otherwise value itself
        return min(max(self.lower, value), self.upper)
