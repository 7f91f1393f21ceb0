# Copyright (c) 2025 - 2026 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Measurement and expectation values.

All quantities are computed by a left-to-right sweep that carries a two-index environment
``E[bra, ket]``. At site ``i`` the environment is contracted with ``conj(A_i)``, an optional local
operator and ``A_i``, where ``A_i = L[i] * B[i]``. The largest intermediate tensor is therefore of
size ``chi**2 * 2`` and never grows with the number of qubits.

Projective measurements collapse the live chain. The joint Z-expectation value of all qubits measured
in a session is evaluated on the snapshot taken at the first measurement of that session, so it does
not depend on the sampled outcomes.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np
import opt_einsum as oe

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from numpy.typing import NDArray

    from ..data_structures.chain import ChainState

logger = logging.getLogger(__name__)

IMAG_TOLERANCE = 1e-10

PAULI_Z = np.array([[1, 0], [0, -1]], dtype=np.complex128)
PROJECTORS = (
    np.array([[1, 0], [0, 0]], dtype=np.complex128),
    np.array([[0, 0], [0, 1]], dtype=np.complex128),
)


def _site_tensor(chain: ChainState, site: int) -> NDArray[np.complex128]:
    """Leg ``site`` with the bond to its right absorbed."""
    if site == chain.length - 1:
        return chain.legs[site]
    return oe.contract("pab, bc->pac", chain.legs[site], chain.bonds[site])


def _real(value: complex, what: str) -> float:
    assert abs(value.imag) <= IMAG_TOLERANCE * max(1.0, abs(value.real)), (
        f"{what} should be real, got {value.real:.16f}{value.imag:+.16f}i."
    )
    return float(value.real)


def average(chain: ChainState, operators: Mapping[int, NDArray[np.complex128]] | None = None) -> complex:
    """Computes ``<psi| prod_i O_i |psi>`` for local operators ``O_i``.

    Args:
        chain: The state. It is not modified.
        operators: Map from qubit to a ``(2, 2)`` operator indexed ``[out, in]``. Qubits without an
            operator contribute the identity.

    Returns:
        complex: The unnormalized matrix element.
    """
    operators = operators or {}
    env = np.ones((1, 1), dtype=np.complex128)
    for site in range(chain.length):
        tensor = _site_tensor(chain, site)
        if site in operators:
            env = oe.contract("ab, pac, pq, qbd->cd", env, np.conj(tensor), operators[site], tensor)
        else:
            env = oe.contract("ab, pac, pbd->cd", env, np.conj(tensor), tensor)
    return complex(env[0, 0])


def inner(chain: ChainState) -> float:
    """Computes the squared norm ``<psi|psi>``."""
    return _real(average(chain), "The norm")


def expectation_z(chain: ChainState, qubit: int) -> float:
    """Computes the normalized Z-expectation value of a single qubit.

    Args:
        chain: The state. It is not modified.
        qubit: The qubit.

    Returns:
        float: ``<psi|Z_qubit|psi> / <psi|psi>``.
    """
    chain.index_for_qubit(qubit)
    return _real(average(chain, {qubit: PAULI_Z}), "The Z-expectation value") / inner(chain)


def aver_zs(chain: ChainState, qubits: Iterable[int]) -> float:
    """Computes the normalized expectation value of the product of Z over ``qubits``."""
    operators = {}
    for qubit in qubits:
        chain.index_for_qubit(qubit)
        operators[qubit] = PAULI_Z
    return _real(average(chain, operators), "The Z-expectation value") / inner(chain)


def probability_of_zero(chain: ChainState, qubit: int) -> float:
    """Probability that measuring ``qubit`` yields 0."""
    chain.index_for_qubit(qubit)
    p0 = _real(average(chain, {qubit: PROJECTORS[0]}), "The measurement probability") / inner(chain)
    return min(max(p0, 0.0), 1.0)


def collapse(chain: ChainState, qubit: int, rng: np.random.Generator) -> int:
    """Measures ``qubit`` in the computational basis and collapses the state.

    A uniform sample in ``[0, 1)`` below ``p0`` selects outcome 0, otherwise outcome 1. The leg of
    the qubit is projected onto the outcome and rescaled by ``1 / sqrt(p)``, and the outcome is
    written to the classical register.

    Args:
        chain: The state, modified in place.
        qubit: The measured qubit.
        rng: Source of the uniform sample.

    Returns:
        int: The outcome, 0 or 1.
    """
    p0 = probability_of_zero(chain, qubit)
    sample = rng.random()
    outcome = 0 if sample < p0 else 1
    probability = p0 if outcome == 0 else 1.0 - p0
    logger.debug("measure q%d: p0=%.6f sample=%.6f outcome=%d", qubit, p0, sample, outcome)

    leg = oe.contract("ab, bcd->acd", PROJECTORS[outcome], chain.legs[qubit])
    if probability > 0:
        leg /= np.sqrt(probability)
    chain.legs[qubit] = leg
    chain.cbits[qubit] = outcome
    return outcome


class MeasurementSession:
    """Snapshot and measured-qubit set of one measurement session.

    The session opens with the first measurement: the live chain is copied into ``snapshot``. Every
    further measurement adds its qubit to ``measured``. The session is closed by the expectation-value
    read that ends it.
    """

    def __init__(self) -> None:
        self.snapshot: ChainState | None = None
        self.measured: set[int] = set()

    @property
    def is_open(self) -> bool:
        """Whether a snapshot is held."""
        return self.snapshot is not None

    def snap(self, chain: ChainState) -> None:
        """Copies ``chain`` into the snapshot unless the session is already open."""
        if self.snapshot is None:
            self.snapshot = chain.copy()

    def measure(self, qubit: int) -> float:
        """Adds ``qubit`` to the measured set.

        Returns:
            float: The joint Z-expectation value of all measured qubits on the snapshot.
        """
        assert self.snapshot is not None, "Measurement session is not open."
        self.measured.add(qubit)
        return aver_zs(self.snapshot, self.measured)

    def close(self) -> None:
        """Drops the snapshot and the measured set."""
        self.snapshot = None
        self.measured.clear()
