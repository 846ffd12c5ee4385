"""Cursor ripples: expanding rings spawned along the pointer trail."""

from __future__ import annotations

import random
from collections import deque
from dataclasses import dataclass


@dataclass
class Ripple:
    x: float
    y: float
    max_radius: float
    speed: float
    radius: float = 0.0
    opacity: float = 0.6

    @property
    def visible(self) -> bool:
        return self.opacity > 0 and self.radius < self.max_radius


class RippleField:
    """Bounded set of ripples advanced once per frame.

    Each pointer move spawns a ripple with a random reach (50-80 px) and
    growth speed (2-4 px per frame); each frame grows rings and fades them
    by ``fade`` until they are no longer visible.
    """

    def __init__(
        self, max_ripples: int = 15, fade: float = 0.02, rng: random.Random | None = None
    ) -> None:
        self.fade = fade
        self._rng = rng or random.Random()
        self._ripples: deque[Ripple] = deque(maxlen=max_ripples)

    def spawn(self, x: float, y: float) -> Ripple:
        ripple = Ripple(
            x=x,
            y=y,
            max_radius=50 + self._rng.random() * 30,
            speed=2 + self._rng.random() * 2,
        )
        self._ripples.append(ripple)
        return ripple

    def advance(self) -> None:
        for ripple in self._ripples:
            ripple.radius += ripple.speed
            ripple.opacity -= self.fade
        alive = [r for r in self._ripples if r.visible]
        self._ripples.clear()
        self._ripples.extend(alive)

    def clear(self) -> None:
        self._ripples.clear()

    @property
    def ripples(self) -> list[Ripple]:
        return list(self._ripples)

    def __len__(self) -> int:
        return len(self._ripples)
