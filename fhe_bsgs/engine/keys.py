"""
Rotation-key bookkeeping.

Key generation is the most expensive call an engine offers, so the store
generates each distinct step once and never on lookup: a transform must
declare its steps up front through `ensure`.
"""

import logging
import time
from typing import FrozenSet, Iterable, List

from fhe_bsgs.engine.interface import PackedEngine

logger = logging.getLogger(__name__)


class RotationKeyStore:
    """Tracks the rotation keys generated through one engine."""

    def __init__(self, engine: PackedEngine):
        self._engine = engine
        self._steps: set = set()

    # step in store
    def __contains__(self, step: int) -> bool:
        return step in self._steps

    # len(store) -> number of generated keys
    def __len__(self) -> int:
        return len(self._steps)

    def steps(self) -> FrozenSet[int]:
        return frozenset(self._steps)

    def ensure(self, steps: Iterable[int]) -> List[int]:
        """
        Generate keys for every step not generated yet.

        Args:
            steps: Signed rotation amounts a transform will use

        Returns:
            The steps whose keys were generated by this call, ascending
        """
        missing = sorted(set(steps) - self._steps)
        if not missing:
            return []
        start = time.time()
        for step in missing:
            self._engine.generate_rotation_key(self._engine.secret_key, step)
            self._steps.add(step)
        logger.info(
            "Generated %d rotation keys in %.2f seconds: %s",
            len(missing),
            time.time() - start,
            missing,
        )
        return missing
