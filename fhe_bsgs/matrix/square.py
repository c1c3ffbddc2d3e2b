"""
Square matrices of field elements as read by the diagonal decomposition.

Two storages share one read interface (dimension + get):

- DenseMatrix holds its rows directly and has no notion of offsets.
- SharedMatrix wraps one read-only numpy buffer; each instance is a
  lightweight view with its own (row_offset, col_offset) pair, so a large
  matrix can be cut into blocks without copying.
"""

from typing import Protocol, Sequence, Union

import numpy as np

from fhe_bsgs.errors import PreconditionError


class SquareMatrix(Protocol):
    def dimension(self) -> int: ...

    def get(self, row: int, col: int) -> int: ...


def _as_square_array(rows) -> np.ndarray:
    arr = np.array(rows, dtype=object)
    if arr.ndim != 2 or arr.shape[0] != arr.shape[1]:
        raise PreconditionError(f"Matrix must be square, got shape {arr.shape}")
    return arr


class DenseMatrix:
    def __init__(self, rows: Sequence[Sequence[int]]):
        n = len(rows)
        for i, row in enumerate(rows):
            if len(row) != n:
                raise PreconditionError(
                    f"Matrix must be square: row {i} has {len(row)} entries, expected {n}"
                )
        self._rows = [[int(v) for v in row] for row in rows]

    def dimension(self) -> int:
        return len(self._rows)

    def get(self, row: int, col: int) -> int:
        return self._rows[row][col]

    def rows(self):
        return [list(row) for row in self._rows]


class SharedMatrix:
    def __init__(self, rows, row_offset: int = 0, col_offset: int = 0):
        buffer = _as_square_array(rows)
        buffer.flags.writeable = False
        self._buffer = buffer
        self.row_offset = 0
        self.col_offset = 0
        self.set_row_offset(row_offset)
        self.set_col_offset(col_offset)

    @classmethod
    def _from_buffer(
        cls, buffer: np.ndarray, row_offset: int, col_offset: int
    ) -> "SharedMatrix":
        view = cls.__new__(cls)
        view._buffer = buffer
        view.row_offset = 0
        view.col_offset = 0
        view.set_row_offset(row_offset)
        view.set_col_offset(col_offset)
        return view

    @property
    def size(self) -> int:
        """Dimension of the underlying buffer."""
        return self._buffer.shape[0]

    def dimension(self) -> int:
        return self.size - max(self.row_offset, self.col_offset)

    def get(self, row: int, col: int) -> int:
        return int(self._buffer[self.row_offset + row, self.col_offset + col])

    def _check_offset(self, offset: int):
        if not 0 <= offset <= self.size:
            raise PreconditionError(
                f"Offset {offset} outside matrix of dimension {self.size}"
            )

    def set_row_offset(self, offset: int):
        self._check_offset(offset)
        self.row_offset = offset

    def set_col_offset(self, offset: int):
        self._check_offset(offset)
        self.col_offset = offset

    def view(self, row_offset: int = 0, col_offset: int = 0) -> "SharedMatrix":
        """New view on the same buffer with its own offsets."""
        return SharedMatrix._from_buffer(self._buffer, row_offset, col_offset)

    def shares_buffer_with(self, other: "SharedMatrix") -> bool:
        return self._buffer is other._buffer


def as_shared(matrix: Union[SharedMatrix, DenseMatrix, Sequence[Sequence[int]]]) -> SharedMatrix:
    """Offset-capable view of `matrix`; dense input is copied into a buffer once."""
    if isinstance(matrix, SharedMatrix):
        return matrix
    if isinstance(matrix, DenseMatrix):
        return SharedMatrix(matrix.rows())
    return SharedMatrix(matrix)
