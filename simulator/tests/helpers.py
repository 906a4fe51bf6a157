from datetime import date
from itertools import cycle

import numpy as np

# Calendar anchors (January 2024 starts on a Monday)
SUNDAY = date(2024, 1, 7)
THURSDAY = date(2024, 1, 4)


class ScriptedRNG:
    """
    Stand-in for numpy's Generator that replays a fixed list of uniforms,
    cycling when it runs out. Only `random(size=None)` is implemented.
    """

    def __init__(self, values):
        self._values = cycle(values)

    def random(self, size=None):
        if size is None:
            return next(self._values)
        shape = (size,) if isinstance(size, int) else tuple(size)
        n = int(np.prod(shape))
        return np.array([next(self._values) for _ in range(n)], dtype=float).reshape(shape)
