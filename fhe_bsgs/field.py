"""
Prime field (GF(p)) arithmetic on plain Python integers.

Elements are canonical residues in [0, p). Vectors are lists of residues so
that fields far wider than 64 bits (e.g. the BN254 scalar field) stay exact.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional

import numpy as np
from sympy.ntheory import isprime, legendre_symbol

from fhe_bsgs.errors import FieldInvariantError

# --- Modular Arithmetic ---


def modular_inverse(a: int, m: int) -> int:
    """
    Computes the modular inverse of a modulo m using the Extended Euclidean Algorithm.
    Raises FieldInvariantError if no inverse exists.
    """
    a = a % m
    old_r, r = m, a
    old_t, t = 0, 1

    while r != 0:
        quotient = old_r // r
        old_r, r = r, old_r - quotient * r
        old_t, t = t, old_t - quotient * t

    if old_r != 1:
        raise FieldInvariantError(f"{a} has no inverse modulo {m}")
    return old_t % m


@dataclass(frozen=True)
class PrimeField:
    modulus: int

    def __post_init__(self):
        if self.modulus < 2 or not isprime(self.modulus):
            raise FieldInvariantError(f"Modulus {self.modulus} is not prime")

    def __repr__(self) -> str:
        return f"PrimeField(p={self.modulus}, bits={self.modulus.bit_length()})"

    # --- Element operations ---

    def element(self, value: int) -> int:
        return int(value) % self.modulus

    def vector(self, values: Iterable[int]) -> List[int]:
        p = self.modulus
        return [int(v) % p for v in values]

    def add(self, a: int, b: int) -> int:
        return (a + b) % self.modulus

    def sub(self, a: int, b: int) -> int:
        return (a - b) % self.modulus

    def neg(self, a: int) -> int:
        return (-a) % self.modulus

    def mul(self, a: int, b: int) -> int:
        return (a * b) % self.modulus

    def pow(self, a: int, exponent: int) -> int:
        return pow(a, exponent, self.modulus)

    def inv(self, a: int) -> int:
        return modular_inverse(a, self.modulus)

    # --- Structure ---

    @property
    def two_adicity(self) -> int:
        """Largest s with 2^s | p - 1."""
        order = self.modulus - 1
        return (order & -order).bit_length() - 1

    @property
    def trace(self) -> int:
        """Odd part of p - 1."""
        return (self.modulus - 1) >> self.two_adicity

    def is_quadratic_residue(self, a: int) -> bool:
        return legendre_symbol(a % self.modulus, self.modulus) != -1

    def quadratic_non_residue(self) -> int:
        """Smallest quadratic non-residue."""
        if self.modulus == 2:
            raise FieldInvariantError("GF(2) has no quadratic non-residue")
        candidate = 2
        while legendre_symbol(candidate, self.modulus) != -1:
            candidate += 1
        return candidate

    # --- Sampling ---

    def random_vector(
        self, size: int, rng: Optional[np.random.Generator] = None
    ) -> List[int]:
        """
        Uniform field elements drawn from a numpy Generator.

        Args:
            size: Number of elements
            rng: Random number generator (uses default if None)

        Returns:
            list of residues in [0, p)
        """
        if rng is None:
            rng = np.random.default_rng()
        p = self.modulus
        if p < 2**62:
            return [int(v) for v in rng.integers(0, p, size=size, dtype=np.int64)]
        # Oversample by 64 bits so the reduction bias is negligible
        width = (p.bit_length() + 7) // 8 + 8
        return [int.from_bytes(rng.bytes(width), "little") % p for _ in range(size)]

    def random_element(self, rng: Optional[np.random.Generator] = None) -> int:
        return self.random_vector(1, rng)[0]
