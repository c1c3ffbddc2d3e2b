"""
Field moduli and parameter sets for the packed linear-algebra layer.
"""

from dataclasses import dataclass
from typing import Tuple

# Scalar field of BN254 (the field the Groth16 tooling works in)
BN254_SCALAR_PRIME = (
    21888242871839275222246405745257275088548364400416034343698204186575808495617
)

FHE_PRIME_Q = 65537

NAMED_FIELDS = {
    "bn254": BN254_SCALAR_PRIME,
    "q65537": FHE_PRIME_Q,
}


@dataclass(frozen=True)
class EngineParams:
    slot_count: int
    modulus: int = FHE_PRIME_Q
    seed: int = 0


@dataclass(frozen=True)
class BenchConfig:
    sizes: Tuple[int, ...] = (16, 64, 256)
    slot_count: int = 512
    field_name: str = "bn254"
    root_convention: str = "minimal"
    baby_step_strategy: str = "incremental"
    seed: int = 42
    verbose: bool = True

    @property
    def modulus(self) -> int:
        return NAMED_FIELDS[self.field_name]
