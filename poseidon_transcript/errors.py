"""
Exception types raised by the Poseidon sponge and transcript.

Configuration problems (bad constant tables, mismatched moduli, oversized
inputs) surface as ConfigurationError before any sponge state is touched.
A realized IO sequence that disagrees with the declared IOPattern surfaces
as IOPatternMismatchError from PoseidonSponge.finish().
"""


class PoseidonError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(PoseidonError, ValueError):
    """Constants, parameters or caller inputs that can never produce a valid digest."""


class IOPatternMismatchError(PoseidonError):
    """
    The realized absorb/squeeze calls do not match the declared IOPattern.

    Attributes:
        expected: Number of operations in the declared pattern
        realized: Number of absorb/squeeze calls actually performed
    """

    def __init__(self, expected: int, realized: int):
        super().__init__(
            f"IO pattern mismatch: declared {expected} operations, realized {realized}"
        )
        self.expected = expected
        self.realized = realized
