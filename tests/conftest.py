"""Shared fixtures for the poseidon_transcript tests."""

import pytest

from poseidon_transcript import (
    Fp,
    SECQ256K1,
    SpongeCurve,
    load_constants,
)


@pytest.fixture(scope="session")
def k256_constants():
    """Poseidon constants for the K256 parameter set over Fp."""
    return load_constants(SpongeCurve.K256, Fp)


@pytest.fixture(scope="session")
def secq_points():
    """A few distinct secq256k1 points with small abscissas."""
    abscissas = [x for x in range(1, 64) if SECQ256K1.is_x_coordinate(x)][:3]
    assert len(abscissas) == 3
    return [SECQ256K1.lift_x(x) for x in abscissas]
