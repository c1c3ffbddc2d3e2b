"""
In-process stand-in for a BGV-style packed engine over GF(p).

Slot layout follows a power-of-two cyclotomic: the slot_count slots form a
2 x (slot_count / 2) hypercube and a rotation by `step` shifts every row
cyclically to the left by `step` positions (slot t receives slot t + step).
Values are exact; there is no noise and no security. A ciphertext is the pair
(mask, body = message + mask * s) so decryption needs the secret key s, and
every linear operation acts on both halves.

All primitives are counted in `engine.counters` so tests and benchmarks can
check the rotation budget of a transform.
"""

import logging
from collections import Counter
from typing import Dict, List, Sequence, Set

import numpy as np

from fhe_bsgs.config import EngineParams
from fhe_bsgs.encoding.bits import is_power_of_two
from fhe_bsgs.errors import (
    EngineError,
    MissingRotationKeyError,
    PreconditionError,
    SlotCapacityError,
)
from fhe_bsgs.field import PrimeField

logger = logging.getLogger(__name__)


class SimulatedPlaintext:
    def __init__(self, slots: np.ndarray):
        self.slots = slots

    def __len__(self) -> int:
        return len(self.slots)


class SimulatedCiphertext:
    def __init__(self, mask: np.ndarray, body: np.ndarray):
        self.mask = mask
        self.body = body


class SimulatedSecretKey:
    def __init__(self, s: int):
        self._s = s


class SimulatedEngine:
    """Exact packed engine with explicit rotation-key bookkeeping."""

    def __init__(self, params: EngineParams):
        if not is_power_of_two(params.slot_count) or params.slot_count < 2:
            raise PreconditionError(
                f"slot_count must be a power of two >= 2, got {params.slot_count}"
            )
        self.params = params
        self.field = PrimeField(params.modulus)
        self._rng = np.random.default_rng(params.seed)
        s = 0
        while s == 0:
            s = self.field.random_element(self._rng)
        self._secret_key = SimulatedSecretKey(s)
        self._rotation_keys: Dict[int, int] = {}
        self.counters: Counter = Counter()
        self.rotation_steps_used: Set[int] = set()

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"SimulatedEngine(slot_count={self.slot_count}, "
            f"p={self.modulus}, rotation_keys={sorted(self._rotation_keys)})"
        )

    # ---------------------------------------------------------------------
    # Parameters
    # ---------------------------------------------------------------------
    @property
    def slot_count(self) -> int:
        return self.params.slot_count

    @property
    def row_length(self) -> int:
        return self.params.slot_count // 2

    @property
    def modulus(self) -> int:
        return self.params.modulus

    @property
    def secret_key(self) -> SimulatedSecretKey:
        return self._secret_key

    def reset_counters(self):
        self.counters.clear()
        self.rotation_steps_used.clear()

    # ---------------------------------------------------------------------
    # Encoding
    # ---------------------------------------------------------------------
    def encode(self, values: Sequence[int]) -> SimulatedPlaintext:
        if len(values) > self.slot_count:
            raise SlotCapacityError(len(values), self.slot_count)
        self.counters["encode"] += 1
        p = self.modulus
        slots = np.zeros(self.slot_count, dtype=object)
        slots[: len(values)] = [int(v) % p for v in values]
        return SimulatedPlaintext(slots)

    def decode(self, plaintext: SimulatedPlaintext) -> List[int]:
        if len(plaintext) > self.slot_count:
            raise SlotCapacityError(len(plaintext), self.slot_count)
        self.counters["decode"] += 1
        return [int(v) for v in plaintext.slots]

    # ---------------------------------------------------------------------
    # Encryption
    # ---------------------------------------------------------------------
    def encrypt_packed(self, plaintext: SimulatedPlaintext) -> SimulatedCiphertext:
        self.counters["encrypt"] += 1
        p = self.modulus
        mask = np.array(self.field.random_vector(self.slot_count, self._rng), dtype=object)
        body = (plaintext.slots + mask * self._secret_key._s) % p
        return SimulatedCiphertext(mask, body)

    def decrypt_packed(self, ciphertext: SimulatedCiphertext) -> SimulatedPlaintext:
        self.counters["decrypt"] += 1
        p = self.modulus
        return SimulatedPlaintext((ciphertext.body - ciphertext.mask * self._secret_key._s) % p)

    # ---------------------------------------------------------------------
    # Homomorphic operations
    # ---------------------------------------------------------------------
    def clone(self, ciphertext: SimulatedCiphertext) -> SimulatedCiphertext:
        self.counters["clone"] += 1
        return SimulatedCiphertext(ciphertext.mask.copy(), ciphertext.body.copy())

    def _roll_rows(self, slots: np.ndarray, step: int) -> np.ndarray:
        rows = slots.reshape(2, self.row_length)
        return np.roll(rows, -step, axis=1).reshape(-1)

    def rotate(self, ciphertext: SimulatedCiphertext, step: int) -> SimulatedCiphertext:
        if step == 0:
            return self.clone(ciphertext)
        if step not in self._rotation_keys:
            raise MissingRotationKeyError(step)
        self.counters["rotate"] += 1
        self.rotation_steps_used.add(step)
        return SimulatedCiphertext(
            self._roll_rows(ciphertext.mask, step), self._roll_rows(ciphertext.body, step)
        )

    def add(self, lhs: SimulatedCiphertext, rhs: SimulatedCiphertext) -> SimulatedCiphertext:
        self.counters["add"] += 1
        p = self.modulus
        return SimulatedCiphertext((lhs.mask + rhs.mask) % p, (lhs.body + rhs.body) % p)

    def add_in_place(self, lhs: SimulatedCiphertext, rhs: SimulatedCiphertext):
        self.counters["add"] += 1
        p = self.modulus
        lhs.mask = (lhs.mask + rhs.mask) % p
        lhs.body = (lhs.body + rhs.body) % p

    def multiply_by_packed_plaintext(
        self, ciphertext: SimulatedCiphertext, plaintext: SimulatedPlaintext
    ) -> SimulatedCiphertext:
        if len(plaintext) != self.slot_count:
            raise EngineError(
                f"Plaintext has {len(plaintext)} slots, engine has {self.slot_count}"
            )
        self.counters["multiply_plain"] += 1
        p = self.modulus
        return SimulatedCiphertext(
            (ciphertext.mask * plaintext.slots) % p, (ciphertext.body * plaintext.slots) % p
        )

    def multiply_by_scalar(
        self, ciphertext: SimulatedCiphertext, scalar: int
    ) -> SimulatedCiphertext:
        self.counters["multiply_scalar"] += 1
        p = self.modulus
        scalar = int(scalar) % p
        return SimulatedCiphertext((ciphertext.mask * scalar) % p, (ciphertext.body * scalar) % p)

    # ---------------------------------------------------------------------
    # Keys
    # ---------------------------------------------------------------------
    def generate_rotation_key(self, secret_key: SimulatedSecretKey, step: int):
        if secret_key is not self._secret_key:
            raise EngineError("Rotation keys must be derived from this engine's secret key")
        self.counters["keygen"] += 1
        self._rotation_keys[step] = len(self._rotation_keys)
        logger.debug("Generated rotation key for step %d", step)

    def has_rotation_key(self, step: int) -> bool:
        return step == 0 or step in self._rotation_keys

    def drop_rotation_key(self, step: int):
        self._rotation_keys.pop(step, None)

    def rotation_key_steps(self) -> Set[int]:
        return set(self._rotation_keys)
