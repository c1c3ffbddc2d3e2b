"""
Error taxonomy.

PreconditionError   -- the caller broke a contract of this package (sizes,
                       lengths, packing ratios).
EngineError         -- the packed-encryption engine refused an operation.
                       Propagated unchanged.
FieldInvariantError -- the field parameters are corrupt (an inverse or root
                       that must exist does not). Fatal.
"""


class PreconditionError(ValueError):
    pass


class EngineError(RuntimeError):
    pass


class MissingRotationKeyError(EngineError):
    def __init__(self, step: int):
        super().__init__(f"No rotation key for step {step}")
        self.step = step


class SlotCapacityError(EngineError):
    def __init__(self, length: int, slot_count: int):
        super().__init__(
            f"Cannot pack {length} values into {slot_count} slots"
        )
        self.length = length
        self.slot_count = slot_count


class FieldInvariantError(ArithmeticError):
    pass
