"""Tests for the Poseidon sponge and IO patterns."""

import hashlib

import galois
import numpy as np
import pytest

from poseidon_transcript import (
    CAPACITY,
    RATE,
    ConfigurationError,
    Fp,
    IOPattern,
    IOPatternMismatchError,
    PoseidonSponge,
    SpongeCurve,
    SpongeOp,
    SpongeOpKind,
    derive_tag,
    from_repr,
)

from .test_poseidon import K256_HASH_VECTOR


def _interactive_pattern() -> IOPattern:
    return IOPattern([
        SpongeOp.absorb(2),
        SpongeOp.squeeze(1),
        SpongeOp.absorb(1),
        SpongeOp.squeeze(3),
    ])


def _run(sponge: PoseidonSponge, pattern: IOPattern, io) -> list:
    """Drive sponge through pattern, feeding absorbs from io in order."""
    outputs = []
    position = 0
    for op in pattern:
        if op.kind is SpongeOpKind.ABSORB:
            sponge.absorb(io[position:position + op.count])
            position += op.count
        else:
            outputs.extend(sponge.squeeze(op.count))
    return outputs


class TestIOPattern:
    """Encoding of declared operations."""

    def test_words(self) -> None:
        pattern = IOPattern([SpongeOp.absorb(2), SpongeOp.squeeze(1)])
        assert pattern.words() == [0x8000_0002, 1]

    def test_aggregation_merges_same_direction_runs(self) -> None:
        pattern = IOPattern([
            SpongeOp.absorb(2),
            SpongeOp.absorb(3),
            SpongeOp.squeeze(1),
            SpongeOp.squeeze(1),
            SpongeOp.absorb(1),
        ])
        assert pattern.aggregated_words() == [0x8000_0005, 2, 0x8000_0001]

    def test_aggregation_keeps_alternating_ops(self) -> None:
        assert _interactive_pattern().aggregated_words() == [0x8000_0002, 1, 0x8000_0001, 3]

    def test_length_counts_operations(self) -> None:
        assert len(_interactive_pattern()) == 4

    def test_negative_count_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            SpongeOp.absorb(-1)

    def test_oversized_count_rejected(self) -> None:
        pattern = IOPattern([SpongeOp.squeeze(1 << 31)])
        with pytest.raises(ConfigurationError):
            pattern.words()

    def test_aggregation_overflow_rejected(self) -> None:
        pattern = IOPattern([SpongeOp.absorb((1 << 31) - 1), SpongeOp.absorb(1)])
        with pytest.raises(ConfigurationError):
            pattern.aggregated_words()

    def test_equality(self) -> None:
        assert _interactive_pattern() == _interactive_pattern()
        assert _interactive_pattern() != IOPattern([SpongeOp.absorb(2)])


class TestTag:
    """Domain-separation tag derivation."""

    def test_matches_sha3_construction(self) -> None:
        pattern = IOPattern([SpongeOp.absorb(2), SpongeOp.squeeze(1)])
        digest = hashlib.sha3_256(
            bytes.fromhex("80000002") + bytes.fromhex("00000001") + b"ctx"
        ).digest()
        assert derive_tag(Fp, pattern, b"ctx") == Fp(int.from_bytes(digest[:16], "big"))

    def test_tag_fits_in_128_bits(self) -> None:
        tag = derive_tag(Fp, _interactive_pattern(), b"protocol")
        assert int(tag) < 1 << 128

    def test_no_pattern_binds_domain_separator(self) -> None:
        digest = hashlib.sha3_256(b"transcript").digest()
        assert derive_tag(Fp, None, b"transcript") == Fp(int.from_bytes(digest[:16], "big"))

    def test_aggregation_makes_split_absorbs_equivalent(self) -> None:
        split = IOPattern([SpongeOp.absorb(1), SpongeOp.absorb(1), SpongeOp.squeeze(1)])
        joined = IOPattern([SpongeOp.absorb(2), SpongeOp.squeeze(1)])
        assert derive_tag(Fp, split, b"x") == derive_tag(Fp, joined, b"x")

    def test_pattern_changes_tag(self) -> None:
        a = IOPattern([SpongeOp.absorb(2), SpongeOp.squeeze(1)])
        b = IOPattern([SpongeOp.absorb(2), SpongeOp.squeeze(2)])
        assert derive_tag(Fp, a, b"x") != derive_tag(Fp, b, b"x")


class TestSpongeConstruction:
    """Initial state."""

    def test_initial_state(self) -> None:
        sponge = PoseidonSponge(Fp, b"ctx", io_pattern=_interactive_pattern())
        assert sponge.rate == RATE == 2
        assert sponge.capacity == CAPACITY == 1
        assert RATE + CAPACITY == len(sponge.state)
        assert sponge.absorb_pos == 0
        assert sponge.squeeze_pos == 0
        assert sponge.io_count == 0
        assert sponge.state[0] == derive_tag(Fp, _interactive_pattern(), b"ctx")
        assert sponge.state[1] == Fp(0)
        assert sponge.state[2] == Fp(0)

    def test_rejects_field_smaller_than_tables(self) -> None:
        with pytest.raises(ConfigurationError):
            PoseidonSponge(galois.GF(101))

    def test_tag_sensitivity(self) -> None:
        """Different domain separators give different states and outputs."""
        a = PoseidonSponge(Fp, b"protocol-a", io_pattern=_interactive_pattern())
        b = PoseidonSponge(Fp, b"protocol-b", io_pattern=_interactive_pattern())
        assert not np.array_equal(a.state, b.state)

        io = [Fp(1), Fp(2), Fp(3)]
        assert _run(a, _interactive_pattern(), io) != _run(b, _interactive_pattern(), io)


class TestAbsorbSqueeze:
    """Cursor behaviour."""

    def test_absorb_writes_rate_only(self) -> None:
        sponge = PoseidonSponge(Fp, b"ctx")
        tag = sponge.state[0]
        sponge.absorb([Fp(5), Fp(6)])
        assert sponge.state[0] == tag
        assert sponge.state[1] == Fp(5)
        assert sponge.state[2] == Fp(6)
        assert sponge.absorb_pos == 2
        assert sponge.squeeze_pos == RATE
        assert sponge.io_count == 1

    def test_squeeze_matches_reference_digest(self) -> None:
        """Absorb fills slots 1 and 2; squeeze permutes once and reads slot 1."""
        sponge = PoseidonSponge(Fp)
        sponge.poseidon.state[0] = Fp(3)
        sponge.absorb([Fp(1234567), Fp(109987)])
        assert sponge.squeeze(1) == [from_repr(Fp, K256_HASH_VECTOR)]

    def test_absorb_past_rate_permutes(self) -> None:
        sponge = PoseidonSponge(Fp, b"ctx")
        tag = sponge.state[0]
        sponge.absorb([Fp(5), Fp(6), Fp(7)])
        assert sponge.absorb_pos == 1
        assert sponge.state[1] == Fp(7)
        assert sponge.state[0] != tag
        assert sponge.poseidon.pos == 0
        assert sponge.io_count == 1

    def test_squeeze_after_absorb_permutes(self) -> None:
        sponge = PoseidonSponge(Fp, b"ctx")
        sponge.absorb([Fp(5)])
        out = sponge.squeeze(1)
        assert len(out) == 1
        assert out[0] == sponge.state[1]
        assert out[0] != Fp(5)
        assert sponge.squeeze_pos == 1
        assert sponge.absorb_pos == 0
        assert sponge.poseidon.pos == 0

    def test_squeeze_reads_rate_in_order(self) -> None:
        sponge = PoseidonSponge(Fp, b"ctx")
        sponge.absorb([Fp(5)])
        out = sponge.squeeze(3)
        assert len(out) == 3
        # third output came from a second permutation
        assert sponge.squeeze_pos == 1
        assert sponge.io_count == 2

    def test_fresh_sponge_squeeze_reads_without_permuting(self) -> None:
        sponge = PoseidonSponge(Fp, b"ctx")
        tag = sponge.state[0]
        assert sponge.squeeze(1) == [Fp(0)]
        assert sponge.state[0] == tag

    def test_empty_absorb_is_noop(self) -> None:
        sponge = PoseidonSponge(Fp, b"ctx")
        sponge.absorb([Fp(1)])
        before = sponge.state.copy()
        sponge.absorb([])
        assert sponge.io_count == 1
        assert sponge.absorb_pos == 1
        assert np.array_equal(sponge.state, before)

    def test_zero_squeeze_is_noop(self) -> None:
        sponge = PoseidonSponge(Fp, b"ctx")
        sponge.absorb([Fp(1)])
        before = sponge.state.copy()
        assert sponge.squeeze(0) == []
        assert sponge.io_count == 1
        assert sponge.squeeze_pos == RATE
        assert np.array_equal(sponge.state, before)

    def test_negative_squeeze(self) -> None:
        sponge = PoseidonSponge(Fp, b"ctx")
        with pytest.raises(ValueError):
            sponge.squeeze(-1)

    def test_absorb_after_squeeze_forces_fresh_permutation(self) -> None:
        """A squeeze following an absorb never reuses the stale rate buffer."""
        fresh = PoseidonSponge(Fp, b"ctx")
        fresh.absorb([Fp(1)])
        fresh.squeeze(1)
        fresh.absorb([Fp(2)])
        after_absorb = fresh.squeeze(1)

        stale = PoseidonSponge(Fp, b"ctx")
        stale.absorb([Fp(1)])
        stale.squeeze(1)
        unmodified = stale.squeeze(1)

        assert after_absorb != unmodified

    def test_deterministic(self) -> None:
        io = [Fp(1), Fp(2), Fp(3)]
        a = PoseidonSponge(Fp, b"ctx", io_pattern=_interactive_pattern())
        b = PoseidonSponge(Fp, b"ctx", io_pattern=_interactive_pattern())
        assert _run(a, _interactive_pattern(), io) == _run(b, _interactive_pattern(), io)

    def test_curve_selector(self) -> None:
        sponge = PoseidonSponge(Fp, b"ctx", curve=SpongeCurve.K256)
        assert sponge.poseidon.constants.num_partial_rounds == 56


class TestFinish:
    """IO pattern consistency check."""

    def test_interactive_protocol(self) -> None:
        pattern = _interactive_pattern()
        sponge = PoseidonSponge(Fp, b"ctx", io_pattern=pattern)
        outputs = _run(sponge, pattern, [Fp(1), Fp(2), Fp(3)])
        assert len(outputs) == 4
        sponge.finish()

    def test_one_fewer_operation(self) -> None:
        pattern = _interactive_pattern()
        sponge = PoseidonSponge(Fp, b"ctx", io_pattern=pattern)
        sponge.absorb([Fp(1), Fp(2)])
        sponge.squeeze(1)
        sponge.absorb([Fp(3)])
        with pytest.raises(IOPatternMismatchError) as exc_info:
            sponge.finish()
        assert exc_info.value.expected == 4
        assert exc_info.value.realized == 3

    def test_one_more_operation(self) -> None:
        pattern = _interactive_pattern()
        sponge = PoseidonSponge(Fp, b"ctx", io_pattern=pattern)
        _run(sponge, pattern, [Fp(1), Fp(2), Fp(3)])
        sponge.squeeze(1)
        with pytest.raises(IOPatternMismatchError):
            sponge.finish()

    def test_no_pattern_always_finishes(self) -> None:
        sponge = PoseidonSponge(Fp, b"ctx")
        sponge.finish()
        sponge.absorb([Fp(1)])
        sponge.squeeze(2)
        sponge.finish()

    def test_noops_do_not_count(self) -> None:
        pattern = IOPattern([SpongeOp.absorb(1)])
        sponge = PoseidonSponge(Fp, b"ctx", io_pattern=pattern)
        sponge.absorb([])
        sponge.squeeze(0)
        sponge.absorb([Fp(1)])
        sponge.finish()

    def test_finish_compares_operation_count_only(self) -> None:
        """A call smaller than its declared size still passes."""
        pattern = IOPattern([SpongeOp.absorb(2), SpongeOp.squeeze(1)])
        sponge = PoseidonSponge(Fp, b"ctx", io_pattern=pattern)
        sponge.absorb([Fp(1)])
        sponge.squeeze(1)
        sponge.finish()
