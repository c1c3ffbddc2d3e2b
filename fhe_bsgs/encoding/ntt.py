"""
Number Theoretic Transform over a prime field.

NTTProcessor implements the iterative radix-2 Cooley-Tukey transform:
1. bit-reversal permutation of the input
2. log2(n) butterfly layers driven by a precomputed power table
3. (inverse only) scaling by n^-1

The negacyclic variant computes products in GF(p)[X]/(X^n + 1) without
zero-padding by twisting the inputs with powers of a primitive 2n-th root
before the cyclic transform and untwisting after the inverse.
"""

import logging
from typing import List, Optional, Sequence

from fhe_bsgs.encoding.bits import is_power_of_two, reverse_n_bits
from fhe_bsgs.errors import PreconditionError
from fhe_bsgs.field import PrimeField

logger = logging.getLogger(__name__)


def create_pow_table(field: PrimeField, n: int, root: int) -> List[int]:
    """Powers root^0 .. root^(n/2 - 1)."""
    p = field.modulus
    table = []
    tmp = 1
    for _ in range(n >> 1):
        table.append(tmp)
        tmp = (tmp * root) % p
    return table


class NTTProcessor:
    """
    Transform of fixed size n. Tables are built once and only read afterwards,
    so one processor can serve any number of buffers.
    """

    def __init__(
        self, field: PrimeField, n: int, root: int, twist: Optional[int] = None
    ):
        """
        Args:
            field: Field the transform works in
            n: Transform size, a power of two
            root: Primitive n-th root of unity
            twist: Factor used by the negacyclic pre/post-processing
                (defaults to root)
        """
        if not is_power_of_two(n):
            raise PreconditionError(f"NTT size must be a power of two, got {n}")
        if twist is None:
            twist = root
        self.field = field
        self.n = n
        self.levels = n.bit_length() - 1
        self.root = field.element(root)
        self.root_inverse = field.inv(self.root)
        self.twist = field.element(twist)
        self.twist_inverse = field.inv(self.twist)
        self.n_inv = field.inv(n)
        self.pow_table = create_pow_table(field, n, self.root)
        self.inv_pow_table = create_pow_table(field, n, self.root_inverse)
        logger.debug("Built NTT tables: n=%d, %r", n, field)

    @classmethod
    def negacyclic(cls, field: PrimeField, n: int, root: int) -> "NTTProcessor":
        """
        Processor for negacyclic convolution of length n.

        Args:
            root: Primitive 2n-th root of unity. Its square drives the
                cyclic tables, the root itself drives the twist.
        """
        return cls(field, n, (root * root) % field.modulus, twist=root)

    # --- Core transform ---

    def _check_length(self, buffer: Sequence[int]):
        if len(buffer) != self.n:
            raise PreconditionError(
                f"Buffer length {len(buffer)} does not match NTT size {self.n}"
            )

    def _bit_reverse_permute(self, buffer: List[int]):
        for i in range(self.n):
            j = reverse_n_bits(i, self.levels)
            if j > i:
                buffer[i], buffer[j] = buffer[j], buffer[i]

    def _butterflies(self, buffer: List[int], table: List[int]):
        p = self.field.modulus
        n = self.n
        size = 2
        while size <= n:
            halfsize = size >> 1
            tablestep = n // size
            for i in range(0, n, size):
                k = 0
                for j in range(i, i + halfsize):
                    l = j + halfsize
                    left = buffer[j]
                    right = (buffer[l] * table[k]) % p
                    buffer[j] = (left + right) % p
                    buffer[l] = (left - right) % p
                    k += tablestep
            size *= 2

    def ntt_in_place(self, buffer: List[int]):
        self._check_length(buffer)
        self._bit_reverse_permute(buffer)
        self._butterflies(buffer, self.pow_table)

    def intt_in_place(self, buffer: List[int]):
        self._check_length(buffer)
        self._bit_reverse_permute(buffer)
        self._butterflies(buffer, self.inv_pow_table)
        p = self.field.modulus
        for i in range(self.n):
            buffer[i] = (buffer[i] * self.n_inv) % p

    def ntt(self, values: Sequence[int]) -> List[int]:
        out = self.field.vector(values)
        self.ntt_in_place(out)
        return out

    def intt(self, values: Sequence[int]) -> List[int]:
        out = self.field.vector(values)
        self.intt_in_place(out)
        return out

    # --- Negacyclic twist ---

    def _twist_in_place(self, buffer: List[int], factor: int):
        self._check_length(buffer)
        p = self.field.modulus
        tmp = 1
        for i in range(self.n):
            buffer[i] = (buffer[i] * tmp) % p
            tmp = (tmp * factor) % p

    def negacyclic_preprocess(self, buffer: List[int]):
        """buffer[i] *= twist^i"""
        self._twist_in_place(buffer, self.twist)

    def negacyclic_preprocess_two(self, a: List[int], b: List[int]):
        self._check_length(a)
        self._check_length(b)
        p = self.field.modulus
        tmp = 1
        for i in range(self.n):
            a[i] = (a[i] * tmp) % p
            b[i] = (b[i] * tmp) % p
            tmp = (tmp * self.twist) % p

    def negacyclic_postprocess(self, buffer: List[int]):
        """buffer[i] *= twist^-i"""
        self._twist_in_place(buffer, self.twist_inverse)

    def negacyclic_mult(self, a: Sequence[int], b: Sequence[int]) -> List[int]:
        """Product of a and b in GF(p)[X]/(X^n + 1)."""
        a_tw = self.field.vector(a)
        b_tw = self.field.vector(b)
        self.negacyclic_preprocess_two(a_tw, b_tw)
        self.ntt_in_place(a_tw)
        self.ntt_in_place(b_tw)
        result = pointwise_mult(self.field, a_tw, b_tw)
        self.intt_in_place(result)
        self.negacyclic_postprocess(result)
        return result

    def cyclic_mult(self, a: Sequence[int], b: Sequence[int]) -> List[int]:
        """Product of a and b in GF(p)[X]/(X^n - 1)."""
        result = pointwise_mult(self.field, self.ntt(a), self.ntt(b))
        self.intt_in_place(result)
        return result


# --- Reference implementations ---


def pointwise_mult(field: PrimeField, a: Sequence[int], b: Sequence[int]) -> List[int]:
    if len(a) != len(b):
        raise PreconditionError(f"Length mismatch: {len(a)} != {len(b)}")
    p = field.modulus
    return [(x * y) % p for x, y in zip(a, b)]


def naive_ntt(field: PrimeField, values: Sequence[int], root: int) -> List[int]:
    """Direct evaluation: out[k] = sum_j values[j] * root^(j*k)."""
    p = field.modulus
    n = len(values)
    out = []
    for k in range(n):
        step = pow(root, k, p)
        acc = 0
        w = 1
        for v in values:
            acc = (acc + v * w) % p
            w = (w * step) % p
        out.append(acc)
    return out


def cyclic_naive_mult(field: PrimeField, a: Sequence[int], b: Sequence[int]) -> List[int]:
    """Schoolbook product modulo X^n - 1."""
    if len(a) != len(b):
        raise PreconditionError(f"Length mismatch: {len(a)} != {len(b)}")
    p = field.modulus
    n = len(a)
    result = [0] * n
    for i in range(n):
        for j in range(n):
            idx = (i + j) % n
            result[idx] = (result[idx] + a[i] * b[j]) % p
    return result


def negacyclic_naive_mult(
    field: PrimeField, a: Sequence[int], b: Sequence[int]
) -> List[int]:
    """Schoolbook product modulo X^n + 1 (X^n wraps to -1)."""
    if len(a) != len(b):
        raise PreconditionError(f"Length mismatch: {len(a)} != {len(b)}")
    p = field.modulus
    n = len(a)
    result = [0] * n
    for i in range(n):
        for j in range(n):
            val = a[i] * b[j]
            if i + j < n:
                result[i + j] = (result[i + j] + val) % p
            else:
                result[i + j - n] = (result[i + j - n] - val) % p
    return result
