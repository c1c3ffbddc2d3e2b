"""
Primitive roots of unity under two conventions.

minimal  -- the numerically smallest primitive n-th root.
groth16  -- the snarkjs/Groth16 chain: z = q^trace for the smallest quadratic
            non-residue q, and roots[i] = z^(2^(s - i)) has order 2^i.

Downstream verifiers fix which one a transform must use; the matrix layer only
needs root^n == 1 with no smaller positive power equal to 1.
"""

from math import gcd
from typing import List, Tuple

from sympy import primefactors

from fhe_bsgs.encoding.bits import is_power_of_two
from fhe_bsgs.errors import FieldInvariantError, PreconditionError
from fhe_bsgs.field import PrimeField


def is_primitive_root_of_unity(field: PrimeField, root: int, n: int) -> bool:
    """True iff root has multiplicative order exactly n."""
    if n < 1:
        raise PreconditionError(f"Order must be positive, got {n}")
    p = field.modulus
    if pow(root, n, p) != 1:
        return False
    return all(pow(root, n // q, p) != 1 for q in primefactors(n))


def _any_primitive_root(field: PrimeField, n: int) -> int:
    p = field.modulus
    if (p - 1) % n != 0:
        raise FieldInvariantError(f"GF({p}) has no root of unity of order {n}")
    cofactor = (p - 1) // n
    candidate = 2
    while candidate < p:
        root = pow(candidate, cofactor, p)
        if is_primitive_root_of_unity(field, root, n):
            return root
        candidate += 1
    raise FieldInvariantError(f"No primitive {n}-th root found in GF({p})")


def get_minimal_root(field: PrimeField, n: int) -> int:
    """Smallest primitive n-th root of unity."""
    if n == 1:
        return 1
    p = field.modulus
    generator = _any_primitive_root(field, n)
    # every primitive root is generator^k with gcd(k, n) == 1
    best = generator
    current = generator
    for k in range(2, n):
        current = (current * generator) % p
        if gcd(k, n) == 1 and current < best:
            best = current
    return best


def get_groth16_roots(field: PrimeField) -> Tuple[int, List[int]]:
    """
    Returns:
        (q, roots) where q is the smallest quadratic non-residue and
        roots[i] is a primitive 2^i-th root of unity, 0 <= i <= two_adicity.
    """
    p = field.modulus
    q = field.quadratic_non_residue()
    z = pow(q, field.trace, p)
    roots = [z]
    for _ in range(field.two_adicity):
        roots.append((roots[-1] * roots[-1]) % p)
    roots.reverse()
    return q, roots


def get_groth16_root(field: PrimeField, n: int) -> int:
    if not is_power_of_two(n):
        raise PreconditionError(f"Groth16 roots exist for powers of two only, got {n}")
    log_n = n.bit_length() - 1
    if log_n > field.two_adicity:
        raise FieldInvariantError(
            f"GF({field.modulus}) has two-adicity {field.two_adicity} < log2({n})"
        )
    _, roots = get_groth16_roots(field)
    return roots[log_n]
