#!/usr/bin/env python3
"""
Homomorphic FFT benchmark.

For each transform size: encrypt a random vector, multiply it by the FFT
matrix with the BSGS transform, decrypt, and compare with the plaintext NTT.
The packing mode is chosen from the size and slot count:

    size == slots / 2        fully packed, one ciphertext
    4 * size < slots         packed, one ciphertext
    size a multiple of
    slots / 2                several ciphertexts of slots / 2 entries

Usage:
    python -m fhe_bsgs.fft_bench --sizes 16 64 256 --slots 512
"""

import argparse
import logging
import sys
from typing import Optional

import numpy as np

from fhe_bsgs.config import NAMED_FIELDS, BenchConfig, EngineParams
from fhe_bsgs.encoding.ntt import NTTProcessor
from fhe_bsgs.encoding.packing import (
    decrypt_blocks,
    decrypt_vector,
    encrypt_blocks,
    encrypt_vector,
)
from fhe_bsgs.encoding.roots import get_groth16_root, get_minimal_root
from fhe_bsgs.engine.keys import RotationKeyStore
from fhe_bsgs.engine.simulated import SimulatedEngine
from fhe_bsgs.errors import PreconditionError
from fhe_bsgs.field import PrimeField
from fhe_bsgs.matrix.bsgs import (
    BabyStepStrategy,
    BSGSTransform,
    multiple_of_packsize_transform,
)
from fhe_bsgs.matrix.fft_matrix import fft_matrix
from fhe_bsgs.utils import BenchLogger, setup_logging, timed

logger = logging.getLogger(__name__)

ROOT_CONVENTIONS = {
    "minimal": get_minimal_root,
    "groth16": get_groth16_root,
}


def packing_mode(size: int, slots: int) -> str:
    if size == slots // 2:
        return "fully_packed"
    if 4 * size < slots:
        return "packed"
    if size % (slots // 2) == 0:
        return "multiple"
    raise PreconditionError(
        f"No packing for size {size} with {slots} slots "
        "(need size == slots/2, 4*size < slots, or a multiple of slots/2)"
    )


def run_fft(
    size: int,
    config: BenchConfig,
    rng: Optional[np.random.Generator] = None,
) -> dict:
    """
    Run one homomorphic FFT of the given size.

    Args:
        size: Transform size (power of two)
        config: Benchmark parameters
        rng: Random number generator for the input vector

    Returns:
        dict with the mode, timings, operation counts and a correctness flag
    """
    if rng is None:
        rng = np.random.default_rng(config.seed)
    field = PrimeField(config.modulus)
    mode = packing_mode(size, config.slot_count)
    strategy = BabyStepStrategy(config.baby_step_strategy)

    root = ROOT_CONVENTIONS[config.root_convention](field, size)
    ntt_proc = NTTProcessor(field, size, root)

    engine = SimulatedEngine(
        EngineParams(slot_count=config.slot_count, modulus=config.modulus, seed=config.seed)
    )
    keys = RotationKeyStore(engine)
    values = field.random_vector(size, rng)
    timings = {}

    with timed(timings, "plain_ntt_s"):
        expected = ntt_proc.ntt(values)

    matrix = fft_matrix(field, size, root)
    if mode == "multiple":
        pack_size = config.slot_count // 2
        with timed(timings, "encrypt_s"):
            ciphertexts = encrypt_blocks(engine, values, pack_size)
        with timed(timings, "transform_s"):
            outputs = multiple_of_packsize_transform(
                engine, ciphertexts, matrix, pack_size, keys=keys, strategy=strategy
            )
        with timed(timings, "decrypt_s"):
            result = decrypt_blocks(engine, outputs, size, pack_size)
    else:
        with timed(timings, "encrypt_s"):
            ciphertext = encrypt_vector(engine, values)
        with timed(timings, "setup_s"):
            transform = BSGSTransform(engine, matrix, keys=keys, strategy=strategy)
        with timed(timings, "transform_s"):
            output = transform.apply(ciphertext)
        with timed(timings, "decrypt_s"):
            result = decrypt_vector(engine, output, size)

    ok = result == expected
    if not ok:
        logger.error("Size %d (%s): homomorphic FFT disagrees with the NTT", size, mode)

    row = {
        "size": size,
        "mode": mode,
        "root": root if root < 10**6 else f"{str(root)[:8]}...",
        "rotation_keys": len(keys),
        "rotations": engine.counters["rotate"],
        "plain_mults": engine.counters["multiply_plain"],
        "ok": ok,
    }
    row.update({name: round(seconds, 4) for name, seconds in timings.items()})
    return row


def run_bench(config: BenchConfig) -> BenchLogger:
    bench = BenchLogger()
    rng = np.random.default_rng(config.seed)
    for size in config.sizes:
        if config.verbose:
            print(f"--- FFT size {size} ---")
        bench.record(**run_fft(size, config, rng))
    return bench


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Homomorphic FFT benchmark (BSGS)")
    parser.add_argument(
        "--sizes", type=int, nargs="+", default=[16, 64, 256], help="Transform sizes"
    )
    parser.add_argument("--slots", type=int, default=512, help="Engine slot count")
    parser.add_argument(
        "--field", choices=sorted(NAMED_FIELDS), default="bn254", help="Prime field"
    )
    parser.add_argument(
        "--root", choices=sorted(ROOT_CONVENTIONS), default="minimal", help="Root convention"
    )
    parser.add_argument(
        "--strategy",
        choices=[s.value for s in BabyStepStrategy],
        default=BabyStepStrategy.INCREMENTAL.value,
        help="Baby-step rotation strategy",
    )
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument("--outfile", type=str, default=None, help="Output CSV file")
    parser.add_argument("--quiet", action="store_true", help="Only print the results table")
    args = parser.parse_args(argv)

    config = BenchConfig(
        sizes=tuple(args.sizes),
        slot_count=args.slots,
        field_name=args.field,
        root_convention=args.root,
        baby_step_strategy=args.strategy,
        seed=args.seed,
        verbose=not args.quiet,
    )
    setup_logging(config.verbose)

    bench = run_bench(config)
    print("\n=== Homomorphic FFT Results ===")
    bench.print_summary()
    if args.outfile:
        bench.save_to_csv(args.outfile)

    return 0 if all(row["ok"] for row in bench.data) else 1


if __name__ == "__main__":
    sys.exit(main())
