"""
Baby-step/giant-step matrix-vector product on a packed ciphertext.

For a dim x dim matrix M and a ciphertext packing v in its first dim slots,
the product is assembled from generalized diagonals

    d_i[t] = M[t][(t + i) % dim],     M v = sum_i d_i * rot(v, i)

with i = k*n1 + j split into n1 baby steps (rotations of the input, computed
once) and n2 giant steps (one rotation per partial sum). Diagonal k*n1 + j is
pre-rotated by -k*n1 so that the giant-step rotation puts it back in place.
This costs about n1 + n2 rotations instead of dim.

Packing: the engine lays its slots out as two rows of slots/2. With
slots == 2*dim ("fully packed") a row holds exactly one copy of v and
rotations wrap around it naturally. With slots > 4*dim there is spare room,
so v is first duplicated into slots [dim, 2*dim) and the pre-rotated
diagonals are padded to match the region the giant steps read from.
"""

import logging
from enum import Enum
from typing import Any, FrozenSet, List, Optional, Sequence, Tuple

from fhe_bsgs.encoding.bits import is_power_of_two
from fhe_bsgs.encoding.packing import encode_vector
from fhe_bsgs.engine.interface import PackedEngine
from fhe_bsgs.engine.keys import RotationKeyStore
from fhe_bsgs.errors import PreconditionError
from fhe_bsgs.field import PrimeField
from fhe_bsgs.matrix.fft_matrix import fft_matrix
from fhe_bsgs.matrix.square import SquareMatrix, as_shared

logger = logging.getLogger(__name__)


class BabyStepStrategy(str, Enum):
    # rot[j] = rotate(rot[j-1], 1): one key, n1 - 1 chained rotations
    INCREMENTAL = "incremental"
    # rot[j] = rotate(input, j): n1 - 1 keys, no chaining
    DIRECT = "direct"


# --- Shape helpers ---


def bsgs_split(dim: int) -> Tuple[int, int]:
    """
    Factor dim into (n1, n2) with n2 = 2^floor(log2(sqrt(dim))), n1 = dim / n2.

    Both factors are powers of two and n1 >= n2.
    """
    if not is_power_of_two(dim):
        raise PreconditionError(f"Matrix dimension must be a power of two, got {dim}")
    log_dim = dim.bit_length() - 1
    n2 = 1 << (log_dim // 2)
    n1 = dim // n2
    return n1, n2


def is_fully_packed(dim: int, slots: int) -> bool:
    """
    True for slots == 2*dim, False for slots > 4*dim; any other ratio is
    refused.
    """
    if slots == 2 * dim:
        return True
    if slots > 4 * dim:
        return False
    raise PreconditionError(
        f"Unsupported packing: dim={dim}, slots={slots} "
        "(need slots == 2*dim or slots > 4*dim)"
    )


def required_rotation_steps(
    dim: int,
    slots: int,
    strategy: BabyStepStrategy = BabyStepStrategy.INCREMENTAL,
) -> FrozenSet[int]:
    """Exactly the rotation steps a transform of this shape will request."""
    n1, n2 = bsgs_split(dim)
    strategy = BabyStepStrategy(strategy)
    steps = set()
    if strategy is BabyStepStrategy.INCREMENTAL:
        if n1 > 1:
            steps.add(1)
    else:
        steps.update(range(1, n1))
    steps.update(k * n1 for k in range(1, n2))
    if not is_fully_packed(dim, slots):
        steps.add(-dim)
    return frozenset(steps)


# --- Diagonal encoding ---


def diagonal_vectors(
    matrix: SquareMatrix, dim: int, fully_packed: bool
) -> List[List[int]]:
    """Pre-rotated (and, when not fully packed, padded) generalized diagonals."""
    n1, _ = bsgs_split(dim)
    diagonals = []
    for i in range(dim):
        k = i // n1
        diag = [matrix.get(j, (i + j) % dim) for j in range(dim)]
        if k != 0:
            shift = dim - k * n1
            diag = diag[shift:] + diag[:shift]
        if not fully_packed:
            for index in range(k * n1):
                diag.append(diag[index])
                diag[index] = 0
        diagonals.append(diag)
    return diagonals


class BSGSTransform:
    """
    A matrix prepared for repeated application to packed ciphertexts.

    Construction computes n1/n2, the rotation steps, and the encoded
    diagonals; when a key store is given, the missing keys are generated
    through it. `apply` never generates keys.
    """

    def __init__(
        self,
        engine: PackedEngine,
        matrix: SquareMatrix,
        dim: Optional[int] = None,
        keys: Optional[RotationKeyStore] = None,
        strategy: BabyStepStrategy = BabyStepStrategy.INCREMENTAL,
    ):
        if dim is None:
            dim = matrix.dimension()
        if matrix.dimension() < dim:
            raise PreconditionError(
                f"Matrix of dimension {matrix.dimension()} cannot supply a {dim}x{dim} block"
            )
        self.engine = engine
        self.dim = dim
        self.strategy = BabyStepStrategy(strategy)
        self.n1, self.n2 = bsgs_split(dim)
        self.fully_packed = is_fully_packed(dim, engine.slot_count)
        self.required_steps = required_rotation_steps(dim, engine.slot_count, self.strategy)
        if keys is not None:
            keys.ensure(self.required_steps)

        self.diagonals = [
            encode_vector(engine, diag)
            for diag in diagonal_vectors(matrix, dim, self.fully_packed)
        ]
        logger.debug(
            "Encoded %d diagonals: dim=%d, n1=%d, n2=%d, fully_packed=%s",
            len(self.diagonals),
            dim,
            self.n1,
            self.n2,
            self.fully_packed,
        )

    def missing_keys(self) -> List[int]:
        return [s for s in sorted(self.required_steps) if not self.engine.has_rotation_key(s)]

    def check_keys(self):
        missing = self.missing_keys()
        if missing:
            raise PreconditionError(f"Missing rotation keys for steps {missing}")

    def baby_steps(self, ciphertext: Any) -> List[Any]:
        """Rotations 0 .. n1-1 of the input, duplicated first when not fully packed."""
        engine = self.engine
        if self.fully_packed:
            state = engine.clone(ciphertext)
        else:
            state = engine.rotate(ciphertext, -self.dim)
            engine.add_in_place(state, ciphertext)

        rot = [state]
        for j in range(1, self.n1):
            if self.strategy is BabyStepStrategy.INCREMENTAL:
                rot.append(engine.rotate(rot[j - 1], 1))
            else:
                rot.append(engine.rotate(state, j))
        return rot

    def giant_steps(self, rot: Sequence[Any]) -> Any:
        engine = self.engine
        n1 = self.n1
        outer_sum = None
        for k in range(self.n2):
            inner_sum = engine.multiply_by_packed_plaintext(rot[0], self.diagonals[k * n1])
            for j in range(1, n1):
                tmp = engine.multiply_by_packed_plaintext(rot[j], self.diagonals[k * n1 + j])
                engine.add_in_place(inner_sum, tmp)

            if k == 0:
                outer_sum = inner_sum
            else:
                engine.add_in_place(outer_sum, engine.rotate(inner_sum, k * n1))
        return outer_sum

    def apply(self, ciphertext: Any) -> Any:
        """
        Ciphertext holding matrix * v in its first dim slots. The remaining
        slots carry unrelated values. The input ciphertext is left untouched.

        When not fully packed, slots [dim, slots/2) of the input must be zero.
        """
        self.check_keys()
        result = self.giant_steps(self.baby_steps(ciphertext))
        logger.info(
            "Applied %dx%d transform with %d baby and %d giant steps",
            self.dim,
            self.dim,
            self.n1,
            self.n2,
        )
        return result


# --- Variants ---


def packed_transform(
    engine: PackedEngine,
    ciphertext: Any,
    matrix: SquareMatrix,
    keys: Optional[RotationKeyStore] = None,
    strategy: BabyStepStrategy = BabyStepStrategy.INCREMENTAL,
) -> Any:
    """Single ciphertext with spare room (slots > 4*dim)."""
    dim = matrix.dimension()
    if not engine.slot_count > 4 * dim:
        raise PreconditionError(
            f"Packed transform needs slots > 4*dim, got slots={engine.slot_count}, dim={dim}"
        )
    return BSGSTransform(engine, matrix, keys=keys, strategy=strategy).apply(ciphertext)


def fully_packed_transform(
    engine: PackedEngine,
    ciphertext: Any,
    matrix: SquareMatrix,
    keys: Optional[RotationKeyStore] = None,
    strategy: BabyStepStrategy = BabyStepStrategy.INCREMENTAL,
) -> Any:
    """Single ciphertext with dim == slots / 2."""
    dim = matrix.dimension()
    if engine.slot_count != 2 * dim:
        raise PreconditionError(
            f"Fully packed transform needs slots == 2*dim, got slots={engine.slot_count}, dim={dim}"
        )
    return BSGSTransform(engine, matrix, keys=keys, strategy=strategy).apply(ciphertext)


def multiple_of_packsize_transform(
    engine: PackedEngine,
    ciphertexts: Sequence[Any],
    matrix: SquareMatrix,
    pack_size: Optional[int] = None,
    keys: Optional[RotationKeyStore] = None,
    strategy: BabyStepStrategy = BabyStepStrategy.INCREMENTAL,
) -> List[Any]:
    """
    Block matrix-vector product for vectors spread over several ciphertexts.

    Ciphertext c holds entries [c*pack_size, (c+1)*pack_size) of v. Output
    block r is sum_c M[r, c] * v_c, each term a BSGS product on the
    (r, c) block view of the matrix. Baby steps of v_c are computed once and
    shared by every output block.

    Args:
        pack_size: Entries per ciphertext, a power of two dividing the
            matrix dimension (defaults to slot_count / 2)
    """
    shared = as_shared(matrix)
    dim = shared.dimension()
    if pack_size is None:
        pack_size = engine.slot_count // 2
    if dim % pack_size != 0:
        raise PreconditionError(f"Dimension {dim} is not a multiple of pack size {pack_size}")
    blocks = dim // pack_size
    if len(ciphertexts) != blocks:
        raise PreconditionError(
            f"Expected {blocks} ciphertexts of {pack_size} entries, got {len(ciphertexts)}"
        )

    transforms = [
        [
            BSGSTransform(
                engine,
                shared.view(r * pack_size, c * pack_size),
                dim=pack_size,
                keys=keys,
                strategy=strategy,
            )
            for c in range(blocks)
        ]
        for r in range(blocks)
    ]
    transforms[0][0].check_keys()

    rotations = [transforms[0][c].baby_steps(ct) for c, ct in enumerate(ciphertexts)]

    results = []
    for r in range(blocks):
        acc = None
        for c in range(blocks):
            part = transforms[r][c].giant_steps(rotations[c])
            if acc is None:
                acc = part
            else:
                engine.add_in_place(acc, part)
        results.append(acc)
    logger.info(
        "Applied %dx%d block transform over %d ciphertexts (pack size %d)",
        dim,
        dim,
        blocks,
        pack_size,
    )
    return results


def packed_fft(
    engine: PackedEngine,
    ciphertext: Any,
    field: PrimeField,
    n: int,
    root: int,
    keys: Optional[RotationKeyStore] = None,
    strategy: BabyStepStrategy = BabyStepStrategy.INCREMENTAL,
) -> Any:
    """NTT of the n values packed in `ciphertext` (single ciphertext)."""
    matrix = fft_matrix(field, n, root)
    return BSGSTransform(engine, matrix, keys=keys, strategy=strategy).apply(ciphertext)


def packed_ifft(
    engine: PackedEngine,
    ciphertext: Any,
    field: PrimeField,
    n: int,
    root: int,
    keys: Optional[RotationKeyStore] = None,
    strategy: BabyStepStrategy = BabyStepStrategy.INCREMENTAL,
) -> Any:
    """Inverse NTT: the root^-1 Vandermonde product scaled by n^-1."""
    matrix = fft_matrix(field, n, field.inv(root))
    result = BSGSTransform(engine, matrix, keys=keys, strategy=strategy).apply(ciphertext)
    return engine.multiply_by_scalar(result, field.inv(n))
