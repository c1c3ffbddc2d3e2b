import numpy as np
import pytest
import sys
import os

sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from fhe_bsgs.config import FHE_PRIME_Q
from fhe_bsgs.encoding.ntt import NTTProcessor
from fhe_bsgs.encoding.roots import get_minimal_root
from fhe_bsgs.errors import PreconditionError
from fhe_bsgs.field import PrimeField
from fhe_bsgs.matrix.fft_matrix import fft_matrix, ifft_matrix
from fhe_bsgs.matrix.square import DenseMatrix, SharedMatrix, as_shared


def _rows(n: int):
    return [[i * n + j for j in range(n)] for i in range(n)]


def test_dense_matrix():
    m = DenseMatrix(_rows(3))
    assert m.dimension() == 3
    assert m.get(1, 2) == 5
    assert m.rows() == _rows(3)


def test_dense_matrix_rejects_ragged():
    with pytest.raises(PreconditionError):
        DenseMatrix([[1, 2], [3]])
    with pytest.raises(PreconditionError):
        SharedMatrix([[1, 2, 3], [4, 5, 6]])


def test_shared_matrix_offsets():
    m = SharedMatrix(_rows(8))
    assert m.size == 8
    assert m.dimension() == 8
    m.set_row_offset(4)
    assert m.dimension() == 4
    assert m.get(0, 0) == 32
    m.set_col_offset(6)
    assert m.dimension() == 2
    assert m.get(1, 1) == 5 * 8 + 7
    m.set_row_offset(0)
    assert m.dimension() == 2
    assert m.get(0, 0) == 6


def test_shared_matrix_offset_bounds():
    m = SharedMatrix(_rows(4))
    m.set_row_offset(4)
    assert m.dimension() == 0
    with pytest.raises(PreconditionError):
        m.set_col_offset(5)
    with pytest.raises(PreconditionError):
        SharedMatrix(_rows(4), row_offset=-1)


def test_views_share_one_buffer():
    base = SharedMatrix(_rows(8))
    top_right = base.view(0, 4)
    bottom_left = base.view(4, 0)
    assert top_right.shares_buffer_with(base)
    assert bottom_left.shares_buffer_with(top_right)
    assert top_right.get(0, 0) == 4
    assert bottom_left.get(0, 0) == 32
    # offsets are per view
    assert base.row_offset == 0 and base.col_offset == 0
    assert not SharedMatrix(_rows(8)).shares_buffer_with(base)


def test_as_shared():
    shared = SharedMatrix(_rows(2))
    assert as_shared(shared) is shared
    from_dense = as_shared(DenseMatrix(_rows(2)))
    assert from_dense.get(1, 0) == 2
    assert as_shared(_rows(2)).get(1, 1) == 3


@pytest.mark.parametrize("n", [2, 8, 16])
def test_fft_matrix_matches_ntt(n: int):
    field = PrimeField(FHE_PRIME_Q)
    root = get_minimal_root(field, n)
    m = fft_matrix(field, n, root)
    assert m.dimension() == n
    assert m.get(1, 1) == root
    values = field.random_vector(n, np.random.default_rng(n))
    product = [sum(m.get(i, j) * values[j] for j in range(n)) % FHE_PRIME_Q for i in range(n)]
    assert product == NTTProcessor(field, n, root).ntt(values)


@pytest.mark.parametrize("n", [2, 8])
def test_ifft_matrix_is_inverse(n: int):
    field = PrimeField(FHE_PRIME_Q)
    root = get_minimal_root(field, n)
    f = fft_matrix(field, n, root)
    g = ifft_matrix(field, n, root)
    for i in range(n):
        for j in range(n):
            entry = sum(g.get(i, k) * f.get(k, j) for k in range(n)) % FHE_PRIME_Q
            assert entry == (1 if i == j else 0)


def test_fft_matrix_rejects_non_primitive_root():
    with pytest.raises(PreconditionError):
        fft_matrix(PrimeField(17), 8, 4)
