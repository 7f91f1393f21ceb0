# Copyright (c) 2025 - 2026 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Tests for gate application on neighbouring qubits.

The results are compared against dense state vectors in little-endian order (qubit 0 is the least
significant bit).
"""

from __future__ import annotations

import numpy as np
import pytest

from mqt.mpsvm.core.data_structures.chain import ChainState
from mqt.mpsvm.core.libraries.gate_library import GateLibrary
from mqt.mpsvm.core.methods.gate_application import apply_single_qubit_gate, apply_two_qubit_gate


def _basis(num_qubits: int, index: int) -> np.ndarray:
    vec = np.zeros(2**num_qubits, dtype=complex)
    vec[index] = 1
    return vec


def test_single_qubit_gate() -> None:
    """X on qubit 0 of two qubits gives basis index 1."""
    chain = ChainState(2)
    apply_single_qubit_gate(chain, GateLibrary.x().set_sites(0))
    np.testing.assert_allclose(chain.to_vec(), _basis(2, 1))
    assert chain.legs[0].shape == (2, 1, 1)


def test_single_qubit_gate_keeps_bonds() -> None:
    """Single-qubit gates do not change any bond dimension."""
    bell = np.array([1, 0, 0, 1], dtype=complex) / np.sqrt(2)
    chain = ChainState.from_statevector(bell)
    apply_single_qubit_gate(chain, GateLibrary.ry(0.7).set_sites(1))
    assert chain.get_max_bond() == 2
    chain.check_if_valid_chain()


def test_bell_state() -> None:
    """H followed by CNOT creates a Bell pair with bond dimension two."""
    chain = ChainState(2)
    apply_single_qubit_gate(chain, GateLibrary.h().set_sites(0))
    apply_two_qubit_gate(chain, GateLibrary.cx().set_sites(0, 1), 1e-4)

    expected = np.array([1, 0, 0, 1]) / np.sqrt(2)
    np.testing.assert_allclose(chain.to_vec(), expected, atol=1e-12)
    assert chain.get_max_bond() == 2
    chain.check_if_valid_chain()


def test_reversed_control() -> None:
    """A CNOT whose control sits right of its target."""
    chain = ChainState(2)
    apply_single_qubit_gate(chain, GateLibrary.x().set_sites(1))
    apply_two_qubit_gate(chain, GateLibrary.cx().set_sites(1, 0), 1e-4)
    np.testing.assert_allclose(np.abs(chain.to_vec()), _basis(2, 3), atol=1e-12)

    # control 1 is |0> now
    chain = ChainState(2)
    apply_single_qubit_gate(chain, GateLibrary.x().set_sites(0))
    apply_two_qubit_gate(chain, GateLibrary.cx().set_sites(1, 0), 1e-4)
    np.testing.assert_allclose(np.abs(chain.to_vec()), _basis(2, 1), atol=1e-12)


def test_swap() -> None:
    """SWAP moves an excitation to the neighbouring qubit."""
    chain = ChainState(3)
    apply_single_qubit_gate(chain, GateLibrary.x().set_sites(1))
    apply_two_qubit_gate(chain, GateLibrary.swap().set_sites(1, 2), 1e-4)
    np.testing.assert_allclose(np.abs(chain.to_vec()), _basis(3, 4), atol=1e-12)
    assert chain.get_max_bond() == 1


def test_non_adjacent_sites() -> None:
    """Gates on distant qubits must be routed first."""
    chain = ChainState(3)
    with pytest.raises(AssertionError, match="non-adjacent"):
        apply_two_qubit_gate(chain, GateLibrary.cx().set_sites(0, 2), 1e-4)
