"""
Vandermonde matrices of a root of unity.

fft_matrix(field, n, root)[i][j] = root^(i*j), so multiplying it by a vector
gives the same result as NTTProcessor(field, n, root).ntt on that vector.
"""

from fhe_bsgs.encoding.roots import is_primitive_root_of_unity
from fhe_bsgs.errors import PreconditionError
from fhe_bsgs.field import PrimeField
from fhe_bsgs.matrix.square import SharedMatrix


def _power_rows(field: PrimeField, n: int, root: int, scale: int):
    if not is_primitive_root_of_unity(field, root, n):
        raise PreconditionError(f"{root} is not a primitive {n}-th root of unity")
    p = field.modulus
    powers = [1] * n
    for k in range(1, n):
        powers[k] = (powers[k - 1] * root) % p
    if scale != 1:
        powers = [(w * scale) % p for w in powers]
    return [[powers[(i * j) % n] for j in range(n)] for i in range(n)]


def fft_matrix(field: PrimeField, n: int, root: int) -> SharedMatrix:
    return SharedMatrix(_power_rows(field, n, root, 1))


def ifft_matrix(field: PrimeField, n: int, root: int) -> SharedMatrix:
    """n^-1 * root^-(i*j): the inverse of fft_matrix(field, n, root)."""
    return SharedMatrix(_power_rows(field, n, field.inv(root), field.inv(n)))
