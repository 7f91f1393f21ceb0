# Copyright (c) 2025 - 2026 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Swap network for two-qubit gates on distant qubits.

Two-qubit gates are only applied to neighbouring legs. For a gate on ``(q0, q1)`` with
``|q0 - q1| > 1`` one of the two qubits is moved next to the other by elementary SWAPs, the gate is
applied to the now adjacent pair and the SWAPs are undone in exactly the reverse order, which
restores the original qubit-to-site mapping.
"""

from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING

from ..libraries.gate_library import SWAP
from .gate_application import apply_two_qubit_gate

if TYPE_CHECKING:
    from ..data_structures.chain import ChainState
    from ..libraries.gate_library import BaseGate

logger = logging.getLogger(__name__)


def swap_path(q0: int, q1: int) -> tuple[list[tuple[int, int]], tuple[int, int]]:
    """Computes the elementary swaps bringing ``q0`` and ``q1`` next to each other.

    Moving either qubit takes ``|q0 - q1| - 1`` swaps; the lower qubit is the one moved, up to the
    site just below the higher one.

    Args:
        q0: First qubit of the gate.
        q1: Second qubit of the gate.

    Returns:
        swaps: The swaps to apply before the gate, as pairs of adjacent sites.
        sites: The sites holding ``q0`` and ``q1`` after the swaps, in that order.
    """
    lo, hi = min(q0, q1), max(q0, q1)
    if hi - lo <= 1:
        return [], (q0, q1)
    swaps = [(site, site + 1) for site in range(lo, hi - 1)]
    relocated = {lo: hi - 1, hi: hi}
    return swaps, (relocated[q0], relocated[q1])


def apply_swaps(chain: ChainState, swaps: list[tuple[int, int]], svd_cutoff: float) -> None:
    """Applies elementary SWAPs on adjacent sites in the given order."""
    for site0, site1 in swaps:
        logger.debug("permute %d <-> %d", site0, site1)
        apply_two_qubit_gate(chain, SWAP().set_sites(site0, site1), svd_cutoff)


def apply_routed(chain: ChainState, gate: BaseGate, svd_cutoff: float) -> None:
    """Applies a two-qubit gate on arbitrary qubits.

    Args:
        chain: The state.
        gate: A two-qubit gate with its sites set. Its sites are not modified.
        svd_cutoff: Relative truncation threshold of every re-factoring.
    """
    q0, q1 = gate.sites
    swaps, (site0, site1) = swap_path(q0, q1)
    if not swaps:
        apply_two_qubit_gate(chain, gate, svd_cutoff)
        return

    apply_swaps(chain, swaps, svd_cutoff)
    relocated = copy.copy(gate)
    relocated.sites = [site0, site1]
    apply_two_qubit_gate(chain, relocated, svd_cutoff)
    apply_swaps(chain, list(reversed(swaps)), svd_cutoff)
