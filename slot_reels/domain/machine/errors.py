# slot_reels/domain/machine/errors.py


class MachineError(Exception):
    """Base class for errors raised by the reel machine."""
    pass


class InvalidReelIndexError(MachineError, ValueError):
    """A reel index outside the machine's reels was requested."""
    def __init__(self, index, reel_count: int = 3):
        self.index = index
        self.reel_count = reel_count
        self.message = f"Invalid reel index {index!r}: expected 0..{reel_count - 1}"
        super().__init__(self.message)


class StateAccessFailure(MachineError, RuntimeError):
    """
    A reel's guarded state can no longer be trusted.

    Raised when the state lock cannot be acquired in time, or when an earlier
    critical section failed while holding it and left the reel poisoned.
    """
    def __init__(self, reel_id: int, reason: str):
        self.reel_id = reel_id
        self.reason = reason
        self.message = f"Reel {reel_id} state unavailable: {reason}"
        super().__init__(self.message)
