# Copyright (c) 2025 - 2026 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Library of quantum gates.

This module defines the closed set of gates understood by the simulator. Every gate is an instance of
``BaseGate`` carrying its kind, its matrix in the computational basis and the sites it acts on. The
matrices follow the convention that row ``0`` corresponds to ``|0>`` and row ``1`` to ``|1>``. For
two-qubit gates the basis is ``|q0 q1>`` where ``q0`` (the first site, e.g. the control of a CNOT)
is the most significant qubit.

CZ and controlled-phase gates are part of the library so that instructions naming them can be
represented, but the simulator refuses to apply them.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, ClassVar

import numpy as np

from ..exceptions import InvalidParameterError, UnsupportedGateError

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from ..data_structures.circuit import Instruction


class GateKind(Enum):
    """Tag of every gate kind the instruction stream may contain."""

    H = "h"
    X = "x"
    Y = "y"
    Z = "z"
    RX = "rx"
    RY = "ry"
    RZ = "rz"
    U = "u"
    CNOT = "cx"
    SWAP = "swap"
    MEASURE = "measure"
    CZ = "cz"
    CPHASE = "cp"

    @classmethod
    def from_name(cls, name: str) -> GateKind:
        """Resolve a gate name (case-insensitive, aliases allowed) to its kind.

        Args:
            name: The name of the gate, e.g. ``"H"``, ``"CNOT"`` or ``"u3"``.

        Returns:
            GateKind: The matching kind.

        Raises:
            UnsupportedGateError: If the name does not denote a known gate.
        """
        key = name.strip().lower()
        kind = _ALIASES.get(key)
        if kind is None:
            msg = f"Gate '{name}' is not supported."
            raise UnsupportedGateError(msg)
        return kind

    @property
    def is_single_qubit(self) -> bool:
        """Whether the kind acts on exactly one qubit."""
        return self not in _TWO_QUBIT_KINDS


_ALIASES: dict[str, GateKind] = {kind.value: kind for kind in GateKind}
_ALIASES.update({
    "hadamard": GateKind.H,
    "cnot": GateKind.CNOT,
    "u3": GateKind.U,
    "cphase": GateKind.CPHASE,
    "m": GateKind.MEASURE,
    "mz": GateKind.MEASURE,
})

_TWO_QUBIT_KINDS = frozenset({GateKind.CNOT, GateKind.SWAP, GateKind.CZ, GateKind.CPHASE})


class BaseGate:
    """Base class of all gates.

    Attributes:
        name: Name of the gate.
        kind: The ``GateKind`` tag used for dispatching.
        interaction: Number of qubits the gate acts on.
        matrix: The unitary in the computational basis.
        sites: The qubits the gate acts on, in the order given by the instruction.
        params: The numeric parameters of the gate.
    """

    name: ClassVar[str] = "base"
    kind: ClassVar[GateKind]
    num_params: ClassVar[int] = 0

    def __init__(self, matrix: NDArray[np.complex128], params: tuple[float, ...] = ()) -> None:
        """Initializes the gate from its matrix.

        Args:
            matrix: Square matrix of dimension 2 or 4.
            params: The parameters the matrix was built from.
        """
        assert matrix.shape in {(2, 2), (4, 4)}, f"Gate matrix has invalid shape {matrix.shape}."
        self.matrix = np.asarray(matrix, dtype=np.complex128)
        self.interaction = 1 if matrix.shape[0] == 2 else 2
        self.params = params
        self.sites: list[int] = []

    def set_sites(self, *sites: int) -> BaseGate:
        """Sets the qubits the gate acts on.

        Args:
            *sites: One site per qubit of the gate.

        Returns:
            BaseGate: ``self``, to allow chaining.

        Raises:
            ValueError: If the number of sites does not match the gate or sites repeat.
        """
        if len(sites) != self.interaction:
            msg = f"{self.name} acts on {self.interaction} qubit(s), got {len(sites)}."
            raise ValueError(msg)
        if len(set(sites)) != len(sites):
            msg = f"{self.name} cannot act twice on the same qubit: {list(sites)}."
            raise ValueError(msg)
        self.sites = [int(site) for site in sites]
        return self

    @property
    def tensor(self) -> NDArray[np.complex128]:
        """Operator tensor of the gate.

        Returns a ``(2, 2)`` array indexed ``[out, in]`` for one-qubit gates and a ``(2, 2, 2, 2)``
        array indexed ``[out0, out1, in0, in1]`` for two-qubit gates.
        """
        if self.interaction == 1:
            return self.matrix
        return self.matrix.reshape(2, 2, 2, 2)

    def __repr__(self) -> str:
        params = f"({', '.join(f'{p:g}' for p in self.params)})" if self.params else ""
        return f"{self.name}{params} @ {self.sites}"


class H(BaseGate):
    """Hadamard gate."""

    name = "h"
    kind = GateKind.H

    def __init__(self) -> None:
        super().__init__(np.array([[1, 1], [1, -1]], dtype=complex) / np.sqrt(2))


class X(BaseGate):
    """Pauli-X (bit flip) gate."""

    name = "x"
    kind = GateKind.X

    def __init__(self) -> None:
        super().__init__(np.array([[0, 1], [1, 0]], dtype=complex))


class Y(BaseGate):
    """Pauli-Y gate."""

    name = "y"
    kind = GateKind.Y

    def __init__(self) -> None:
        super().__init__(np.array([[0, -1j], [1j, 0]], dtype=complex))


class Z(BaseGate):
    """Pauli-Z gate."""

    name = "z"
    kind = GateKind.Z

    def __init__(self) -> None:
        super().__init__(np.array([[1, 0], [0, -1]], dtype=complex))


class Rx(BaseGate):
    """Rotation about the X axis by ``theta``."""

    name = "rx"
    kind = GateKind.RX
    num_params = 1

    def __init__(self, theta: float) -> None:
        c, s = np.cos(theta / 2), np.sin(theta / 2)
        super().__init__(np.array([[c, -1j * s], [-1j * s, c]], dtype=complex), (theta,))


class Ry(BaseGate):
    """Rotation about the Y axis by ``theta``."""

    name = "ry"
    kind = GateKind.RY
    num_params = 1

    def __init__(self, theta: float) -> None:
        c, s = np.cos(theta / 2), np.sin(theta / 2)
        super().__init__(np.array([[c, -s], [s, c]], dtype=complex), (theta,))


class Rz(BaseGate):
    """Rotation about the Z axis by ``theta``."""

    name = "rz"
    kind = GateKind.RZ
    num_params = 1

    def __init__(self, theta: float) -> None:
        super().__init__(
            np.array([[np.exp(-0.5j * theta), 0], [0, np.exp(0.5j * theta)]], dtype=complex),
            (theta,),
        )


class U(BaseGate):
    """General single-qubit unitary ``U(theta, phi, lambda)``."""

    name = "u"
    kind = GateKind.U
    num_params = 3

    def __init__(self, theta: float, phi: float, lam: float) -> None:
        c, s = np.cos(theta / 2), np.sin(theta / 2)
        super().__init__(
            np.array(
                [
                    [c, -np.exp(1j * lam) * s],
                    [np.exp(1j * phi) * s, np.exp(1j * (phi + lam)) * c],
                ],
                dtype=complex,
            ),
            (theta, phi, lam),
        )


class CX(BaseGate):
    """Controlled-NOT gate. The first site is the control, the second the target."""

    name = "cx"
    kind = GateKind.CNOT

    def __init__(self) -> None:
        mat = np.zeros((4, 4), dtype=complex)
        # |c t> -> |c, t xor c>
        for c in range(2):
            for t in range(2):
                mat[2 * c + (t ^ c), 2 * c + t] = 1
        super().__init__(mat)


class SWAP(BaseGate):
    """Exchanges the states of two qubits."""

    name = "swap"
    kind = GateKind.SWAP

    def __init__(self) -> None:
        mat = np.zeros((4, 4), dtype=complex)
        for a in range(2):
            for b in range(2):
                mat[2 * b + a, 2 * a + b] = 1
        super().__init__(mat)


class CZ(BaseGate):
    """Controlled-Z gate. Known to the library but not applied by the simulator."""

    name = "cz"
    kind = GateKind.CZ

    def __init__(self) -> None:
        super().__init__(np.diag([1, 1, 1, -1]).astype(complex))


class CPhase(BaseGate):
    """Controlled-phase gate. Known to the library but not applied by the simulator."""

    name = "cp"
    kind = GateKind.CPHASE
    num_params = 1

    def __init__(self, theta: float) -> None:
        super().__init__(np.diag([1, 1, 1, np.exp(1j * theta)]).astype(complex), (theta,))


class Measure(BaseGate):
    """Projective measurement in the computational basis.

    The matrix is the measured observable (Pauli-Z).
    """

    name = "measure"
    kind = GateKind.MEASURE

    def __init__(self) -> None:
        super().__init__(np.array([[1, 0], [0, -1]], dtype=complex))


class GateLibrary:
    """Factory for all gates known to the simulator."""

    gates: ClassVar[dict[GateKind, type[BaseGate]]] = {
        GateKind.H: H,
        GateKind.X: X,
        GateKind.Y: Y,
        GateKind.Z: Z,
        GateKind.RX: Rx,
        GateKind.RY: Ry,
        GateKind.RZ: Rz,
        GateKind.U: U,
        GateKind.CNOT: CX,
        GateKind.SWAP: SWAP,
        GateKind.MEASURE: Measure,
        GateKind.CZ: CZ,
        GateKind.CPHASE: CPhase,
    }

    @classmethod
    def h(cls) -> H:
        """Returns the Hadamard gate."""
        return H()

    @classmethod
    def x(cls) -> X:
        """Returns the Pauli-X gate."""
        return X()

    @classmethod
    def y(cls) -> Y:
        """Returns the Pauli-Y gate."""
        return Y()

    @classmethod
    def z(cls) -> Z:
        """Returns the Pauli-Z gate."""
        return Z()

    @classmethod
    def rx(cls, theta: float) -> Rx:
        """Returns the X rotation by ``theta``."""
        return Rx(theta)

    @classmethod
    def ry(cls, theta: float) -> Ry:
        """Returns the Y rotation by ``theta``."""
        return Ry(theta)

    @classmethod
    def rz(cls, theta: float) -> Rz:
        """Returns the Z rotation by ``theta``."""
        return Rz(theta)

    @classmethod
    def u(cls, theta: float, phi: float, lam: float) -> U:
        """Returns the general single-qubit unitary."""
        return U(theta, phi, lam)

    @classmethod
    def cx(cls) -> CX:
        """Returns the CNOT gate."""
        return CX()

    @classmethod
    def swap(cls) -> SWAP:
        """Returns the SWAP gate."""
        return SWAP()

    @classmethod
    def measure(cls) -> Measure:
        """Returns the measurement."""
        return Measure()

    @classmethod
    def from_instruction(cls, instruction: Instruction) -> BaseGate:
        """Builds the gate described by an instruction.

        Args:
            instruction: The instruction holding the gate kind, qubits and parameters.

        Returns:
            BaseGate: The gate with its sites set.

        Raises:
            InvalidParameterError: If the number of parameters does not match the gate.
            ValueError: If the number of qubits does not match the gate.
        """
        gate_cls = cls.gates[instruction.kind]
        if len(instruction.params) != gate_cls.num_params:
            msg = (
                f"Gate '{gate_cls.name}' expects {gate_cls.num_params} parameter(s), "
                f"got {len(instruction.params)}."
            )
            raise InvalidParameterError(msg)
        gate = gate_cls(*instruction.params)
        return gate.set_sites(*instruction.qubits)
