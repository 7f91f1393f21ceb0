# Copyright (c) 2025 - 2026 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Gate application.

Single-qubit gates are contracted into the leg of their qubit; the bond dimensions do not change and
no decomposition is needed. Two-qubit gates on neighbouring qubits ``(a, b)`` are applied by
contracting the operator tensor with ``L[a] * B[min] * L[b]`` and splitting the result again with a
truncated SVD (see ``decompositions.two_site_svd``). Gates on distant qubits are routed through
``swap_network`` first.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import opt_einsum as oe

from .decompositions import two_site_svd

if TYPE_CHECKING:
    from ..data_structures.chain import ChainState
    from ..libraries.gate_library import BaseGate

logger = logging.getLogger(__name__)


def apply_single_qubit_gate(chain: ChainState, gate: BaseGate) -> None:
    """Applies a single-qubit gate in place.

    Args:
        chain: The state.
        gate: A gate with ``interaction == 1`` and its site set.
    """
    assert gate.interaction == 1, f"{gate.name} is not a single-qubit gate."
    site = gate.sites[0]
    index = chain.index_for_qubit(site)
    assert index.dim == gate.tensor.shape[1], f"Qubit {site} has physical dimension {index.dim}."
    chain.legs[site] = oe.contract("ab, bcd->acd", gate.tensor, chain.legs[site])


def apply_two_qubit_gate(chain: ChainState, gate: BaseGate, svd_cutoff: float) -> None:
    """Applies a two-qubit gate on neighbouring qubits in place.

    The sites may be given in either order, e.g. a CNOT whose control sits right of its target.

    Args:
        chain: The state.
        gate: A gate with ``interaction == 2`` acting on adjacent sites.
        svd_cutoff: Relative truncation threshold of the re-factoring.
    """
    assert gate.interaction == 2, f"{gate.name} is not a two-qubit gate."
    site0, site1 = gate.sites
    assert abs(site0 - site1) == 1, f"{gate.name} acts on non-adjacent sites {gate.sites}."
    for site in gate.sites:
        assert chain.index_for_qubit(site).dim == 2

    # (out0, out1, in0, in1) -> (out_lo, out_hi, in_lo, in_hi)
    op = gate.tensor if site0 < site1 else gate.tensor.transpose(1, 0, 3, 2)
    lo = min(site0, site1)
    theta = oe.contract("abcd, cxm, mn, dny->axby", op, chain.legs[lo], chain.bonds[lo], chain.legs[lo + 1])

    leg_mat, bond_mat, rest_tensor = two_site_svd(theta, svd_cutoff)
    assert rest_tensor.ndim == 3, f"Re-factored leg has rank {rest_tensor.ndim}, expected 3."

    chain.legs[lo] = leg_mat
    chain.bonds[lo] = bond_mat
    chain.legs[lo + 1] = rest_tensor
    logger.debug("%s on (%d, %d): bond dimension %d", gate.name, site0, site1, bond_mat.shape[0])
