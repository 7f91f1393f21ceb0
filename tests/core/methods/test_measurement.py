# Copyright (c) 2025 - 2026 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Tests for measurement and expectation values.

This module verifies the norm and Z-expectation values computed by the environment sweep, the outcome
probabilities, projective collapse with renormalization and the snapshot semantics of a measurement
session.
"""

from __future__ import annotations

import numpy as np
import pytest

from mqt.mpsvm.core.data_structures.chain import ChainState
from mqt.mpsvm.core.libraries.gate_library import GateLibrary
from mqt.mpsvm.core.methods.gate_application import apply_single_qubit_gate
from mqt.mpsvm.core.methods.measurement import (
    PAULI_Z,
    MeasurementSession,
    average,
    aver_zs,
    collapse,
    expectation_z,
    inner,
    probability_of_zero,
)


class FixedDraw:
    """Stand-in for a random number generator that always draws the same value."""

    def __init__(self, value: float) -> None:
        self.value = value

    def random(self) -> float:
        return self.value


def _bell() -> ChainState:
    return ChainState.from_statevector(np.array([1, 0, 0, 1], dtype=complex) / np.sqrt(2))


def test_inner_initial_state() -> None:
    """The initial state has unit norm."""
    assert inner(ChainState(5)) == pytest.approx(1.0)


def test_inner_unnormalized() -> None:
    """The norm is not assumed to be one."""
    chain = ChainState.from_statevector(np.array([2, 0, 0, 0], dtype=complex))
    assert inner(chain) == pytest.approx(4.0)
    assert expectation_z(chain, 1) == pytest.approx(1.0)


@pytest.mark.parametrize(("gate", "expected"), [(None, 1.0), ("x", -1.0), ("z", 1.0), ("h", 0.0)])
def test_expectation_z(gate: str | None, expected: float) -> None:
    """<Z> of |0>, X|0>, Z|0> and H|0>."""
    chain = ChainState(2)
    if gate is not None:
        apply_single_qubit_gate(chain, getattr(GateLibrary, gate)().set_sites(1))
    assert expectation_z(chain, 1) == pytest.approx(expected, abs=1e-12)
    assert expectation_z(chain, 0) == pytest.approx(1.0)


def test_average_matches_dense() -> None:
    """The sweep agrees with the dense matrix element."""
    rng = np.random.default_rng(5)
    vec = rng.standard_normal(8) + 1j * rng.standard_normal(8)
    chain = ChainState.from_statevector(vec, 1e-14)

    # Z on qubit 2 is the most significant bit
    z_dense = np.kron(PAULI_Z, np.eye(4))
    assert average(chain, {2: PAULI_Z}) == pytest.approx(vec.conj() @ z_dense @ vec)
    assert average(chain) == pytest.approx(np.vdot(vec, vec))


def test_aver_zs_bell() -> None:
    """Both qubits of a Bell pair are random, their parity is not."""
    chain = _bell()
    assert aver_zs(chain, [0]) == pytest.approx(0.0, abs=1e-12)
    assert aver_zs(chain, [0, 1]) == pytest.approx(1.0)


def test_probability_of_zero() -> None:
    """p0 of Ry(theta)|0> is cos^2(theta / 2)."""
    theta = 1.1
    chain = ChainState(1)
    apply_single_qubit_gate(chain, GateLibrary.ry(theta).set_sites(0))
    assert probability_of_zero(chain, 0) == pytest.approx(np.cos(theta / 2) ** 2)


@pytest.mark.parametrize(("draw", "outcome"), [(0.2, 0), (0.7, 1)])
def test_collapse(draw: float, outcome: int) -> None:
    """The sample selects the outcome, the collapsed state is normalized."""
    chain = _bell()
    assert collapse(chain, 0, FixedDraw(draw)) == outcome  # type: ignore[arg-type]

    assert chain.cbits == [outcome, 0]
    assert inner(chain) == pytest.approx(1.0)
    # the partner qubit follows
    assert expectation_z(chain, 1) == pytest.approx(1.0 - 2 * outcome)


def test_collapse_certain_outcome() -> None:
    """A qubit in |1> always yields 1."""
    chain = ChainState(2)
    apply_single_qubit_gate(chain, GateLibrary.x().set_sites(1))
    rng = np.random.default_rng(0)
    assert all(collapse(chain, 1, rng) == 1 for _ in range(20))
    assert inner(chain) == pytest.approx(1.0)


def test_collapse_statistics() -> None:
    """Measuring |+> yields each outcome about half of the time."""
    rng = np.random.default_rng(42)
    outcomes = []
    for _ in range(2000):
        chain = ChainState(1)
        apply_single_qubit_gate(chain, GateLibrary.h().set_sites(0))
        outcomes.append(collapse(chain, 0, rng))
    assert abs(np.mean(outcomes) - 0.5) < 0.05


def test_session_uses_snapshot() -> None:
    """The joint expectation value is evaluated before any collapse of the session."""
    chain = _bell()
    session = MeasurementSession()
    assert not session.is_open

    session.snap(chain)
    assert session.measure(0) == pytest.approx(0.0, abs=1e-12)
    collapse(chain, 0, FixedDraw(0.9))
    session.snap(chain)
    assert session.measure(1) == pytest.approx(1.0)
    assert session.measured == {0, 1}
    # the live chain is a product state by now
    assert aver_zs(chain, [0]) == pytest.approx(-1.0)

    session.close()
    assert not session.is_open
    assert session.measured == set()
