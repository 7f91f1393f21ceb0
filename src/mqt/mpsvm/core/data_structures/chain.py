# Copyright (c) 2025 - 2026 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Chain State.

This module implements the matrix product state the simulator evolves. The state of ``n`` qubits is
stored as ``n`` leg tensors and ``n - 1`` diagonal bond tensors such that contracting

    L[0] * B[0] * L[1] * B[1] * ... * L[n-1]

reproduces the amplitude tensor. Leg tensors use the index order ``(phys, left, right)``; the first
and the last leg carry a dimension-1 dummy bond on their open side so that every leg has rank 3.
Bond tensors have shape ``(chi, chi)`` and hold the singular values of the last re-factoring on
their diagonal.

Besides the tensors the chain owns the classical register (one bit per qubit) and the accumulated
execution time.

Dense vectors use little-endian ordering: qubit 0 is the least significant bit of the basis index.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from ..methods.decompositions import truncated_svd

if TYPE_CHECKING:
    from numpy.typing import NDArray

DEFAULT_SVD_CUTOFF = 1e-4


@dataclass(frozen=True)
class PhysicalIndex:
    """The physical index of a qubit.

    Attributes:
        qubit: The qubit (site) the index belongs to.
        dim: Dimension of the index, always 2 between gate applications.
    """

    qubit: int
    dim: int


class ChainState:
    """Matrix product state of a qubit register.

    Attributes:
        length: Number of qubits.
        legs: One rank-3 tensor ``(phys, left, right)`` per qubit.
        bonds: One diagonal ``(chi, chi)`` tensor per pair of neighbouring qubits.
        cbits: Classical register, one bit per qubit.
        exec_time: Accumulated gate execution time (bookkeeping only).
    """

    def __init__(self, length: int) -> None:
        """Initializes the product state |0...0>.

        Args:
            length: Number of qubits.

        Raises:
            ValueError: If ``length`` is smaller than one.
        """
        if length < 1:
            msg = f"A chain needs at least one qubit, got {length}."
            raise ValueError(msg)
        self.length = length
        self.legs: list[NDArray[np.complex128]] = []
        self.bonds: list[NDArray[np.complex128]] = []
        self.cbits: list[int] = []
        self.exec_time = 0.0
        self._amplitudes: NDArray[np.complex128] | None = None
        self.initialize()

    def initialize(self) -> None:
        """Resets the tensors to |0...0> with trivial bonds, clears the register and the timer."""
        self.legs = []
        self.bonds = []
        for i in range(self.length):
            leg = np.zeros((2, 1, 1), dtype=np.complex128)
            leg[0, 0, 0] = 1.0
            self.legs.append(leg)
            if i < self.length - 1:
                self.bonds.append(np.ones((1, 1), dtype=np.complex128))
        self.cbits = [0] * self.length
        self.exec_time = 0.0
        self._amplitudes = None

    reset = initialize

    @classmethod
    def from_statevector(cls, vector: NDArray[np.complex128], svd_cutoff: float = DEFAULT_SVD_CUTOFF) -> ChainState:
        """Builds a chain from a dense amplitude vector.

        The amplitude tensor is split qubit by qubit with truncated SVDs. The left factor becomes the
        leg, the singular values the bond and the right factor is split further.

        Args:
            vector: Amplitudes in little-endian order, length ``2**n``.
            svd_cutoff: Relative truncation threshold for every split.

        Returns:
            ChainState: The factorized state. It is not normalized.

        Raises:
            ValueError: If the length of ``vector`` is not a power of two larger than one.
        """
        vector = np.asarray(vector, dtype=np.complex128).reshape(-1)
        length = int(np.log2(vector.size)) if vector.size > 1 else 0
        if length < 1 or 2**length != vector.size:
            msg = f"State vector length {vector.size} is not a power of two larger than one."
            raise ValueError(msg)

        chain = cls(length)
        chain.legs = []
        chain.bonds = []
        # axes ordered qubit 0 ... qubit n-1
        chain._amplitudes = vector.reshape((2,) * length).transpose(tuple(reversed(range(length))))

        rest = chain._amplitudes.reshape(1, -1)
        for site in range(length - 1):
            chi = rest.shape[0]
            phys = chain.index_for_qubit(site).dim
            mat = rest.reshape(chi, phys, -1).transpose(1, 0, 2).reshape(phys * chi, -1)
            u_mat, s_vec, v_mat = truncated_svd(mat, svd_cutoff)
            chain.legs.append(u_mat.reshape(phys, chi, len(s_vec)))
            chain.bonds.append(np.diag(s_vec).astype(np.complex128))
            rest = v_mat
        chain.legs.append(rest.T.reshape(2, rest.shape[0], 1))
        chain._amplitudes = None
        return chain

    def index_for_qubit(self, qubit: int) -> PhysicalIndex:
        """Returns the physical index of a qubit.

        While a chain is being built from an amplitude tensor, qubits without a leg yet are read
        from that tensor.

        Args:
            qubit: The qubit.

        Returns:
            PhysicalIndex: The current physical index of ``qubit``.

        Raises:
            IndexError: If ``qubit`` is not in the register.
        """
        if not 0 <= qubit < self.length:
            msg = f"Qubit {qubit} out of range for a register of {self.length} qubits."
            raise IndexError(msg)
        if qubit >= len(self.legs):
            assert self._amplitudes is not None, "Chain has neither legs nor amplitudes."
            return PhysicalIndex(qubit, self._amplitudes.shape[qubit])
        return PhysicalIndex(qubit, self.legs[qubit].shape[0])

    def copy(self) -> ChainState:
        """Deep copy. No tensor is shared between ``self`` and the copy."""
        return copy.deepcopy(self)

    def restore(self, other: ChainState) -> None:
        """Replaces the tensors of ``self`` by independent copies of the tensors of ``other``.

        The classical register and the timer are left untouched.

        Args:
            other: The chain to copy the tensors from.
        """
        assert other.length == self.length, "Cannot restore from a chain of different length."
        self.legs = [leg.copy() for leg in other.legs]
        self.bonds = [bond.copy() for bond in other.bonds]

    def get_max_bond(self) -> int:
        """Returns the largest bond dimension in the chain."""
        if not self.bonds:
            return 1
        return max(bond.shape[0] for bond in self.bonds)

    def check_if_valid_chain(self) -> None:
        """Chain validity check.

        Verifies that every leg is rank 3 with a physical dimension of 2, that the bond shapes match
        the legs they connect and that the open ends have dimension 1.
        """
        assert len(self.legs) == self.length
        assert len(self.bonds) == self.length - 1
        for i, leg in enumerate(self.legs):
            assert leg.ndim == 3, f"Leg {i} has rank {leg.ndim}."
            assert leg.shape[0] == 2, f"Leg {i} has physical dimension {leg.shape[0]}."
        assert self.legs[0].shape[1] == 1
        assert self.legs[-1].shape[2] == 1
        for i, bond in enumerate(self.bonds):
            assert bond.shape == (self.legs[i].shape[2], self.legs[i + 1].shape[1]), f"Bond {i} does not match."

    def to_vec(self) -> NDArray[np.complex128]:
        """Contracts the whole chain into the amplitude vector.

        The memory needed grows as ``2**n``; this is meant for small registers only.

        Returns:
            NDArray[np.complex128]: The unnormalized amplitudes in little-endian order.
        """
        vec = self.legs[0][:, 0, :]
        for i in range(1, self.length):
            vec = np.tensordot(vec, self.bonds[i - 1], axes=([-1], [0]))
            vec = np.tensordot(vec, self.legs[i], axes=([-1], [1]))
        vec = vec[..., 0]
        # qubit n-1 becomes the most significant bit
        return vec.transpose(tuple(reversed(range(self.length)))).reshape(-1)
