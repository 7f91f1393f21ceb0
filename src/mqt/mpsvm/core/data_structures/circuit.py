# Copyright (c) 2025 - 2026 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Instruction stream consumed by the simulator.

A circuit is a tree: ``CompositeInstruction`` nodes group ``Instruction`` leaves (one gate or
measurement each) and ``ConditionalInstruction`` leaves (a block executed only when a classical bit
is set). Iterating a composite walks the tree depth-first and yields the enabled leaves in program
order. Circuits written with Qiskit can be converted with ``from_qiskit``.
"""

from __future__ import annotations

import numbers
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Union

import numpy as np

from ..exceptions import InvalidParameterError, UnsupportedGateError
from ..libraries.gate_library import GateKind

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from qiskit.circuit import QuantumCircuit


def parse_parameter(value: object) -> float:
    """Converts a gate parameter to a float.

    Only integers and floating point numbers (Python or NumPy) are valid parameter encodings.

    Args:
        value: The raw parameter.

    Returns:
        float: The parameter as a float.

    Raises:
        InvalidParameterError: For any other encoding, including booleans, complex numbers,
            strings and unbound symbolic parameters.
    """
    if isinstance(value, (bool, np.bool_)):
        msg = f"Invalid gate parameter {value!r} of type {type(value).__name__}."
        raise InvalidParameterError(msg)
    if isinstance(value, (numbers.Integral, np.integer)):
        return float(value)
    if isinstance(value, (float, np.floating)):
        return float(value)
    msg = f"Invalid gate parameter {value!r} of type {type(value).__name__}."
    raise InvalidParameterError(msg)


@dataclass
class Instruction:
    """A single gate or measurement.

    Attributes:
        name: The gate name, resolved to a ``GateKind`` on construction.
        qubits: The target qubits, in gate order (control first for CNOT).
        params: Numeric parameters of parametrized gates.
        enabled: Disabled instructions are skipped by the tree walk.
    """

    name: str
    qubits: list[int]
    params: list[float] = field(default_factory=list)
    enabled: bool = True

    def __post_init__(self) -> None:
        self.kind = GateKind.from_name(self.name)
        self.qubits = [int(q) for q in self.qubits]
        self.params = [parse_parameter(p) for p in self.params]

    def __str__(self) -> str:
        params = f"({', '.join(f'{p:g}' for p in self.params)})" if self.params else ""
        return f"{self.kind.value}{params} {', '.join(f'q{q}' for q in self.qubits)}"


@dataclass
class ConditionalInstruction:
    """Executes ``body`` only if the classical bit ``bit`` reads 1 at execution time."""

    bit: int
    body: CompositeInstruction
    enabled: bool = True


Node = Union[Instruction, ConditionalInstruction, "CompositeInstruction"]


@dataclass
class CompositeInstruction:
    """An ordered group of instructions, possibly nested."""

    name: str = "circuit"
    instructions: list[Node] = field(default_factory=list)
    enabled: bool = True

    def add(self, node: Node) -> CompositeInstruction:
        """Appends an instruction or a sub-tree.

        Returns:
            CompositeInstruction: ``self``, to allow chaining.
        """
        self.instructions.append(node)
        return self

    def extend(self, nodes: Iterable[Node]) -> CompositeInstruction:
        """Appends several instructions or sub-trees."""
        self.instructions.extend(nodes)
        return self

    def __iter__(self) -> Iterator[Instruction | ConditionalInstruction]:
        for node in self.instructions:
            if not node.enabled:
                continue
            if isinstance(node, CompositeInstruction):
                yield from node
            else:
                yield node

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def num_qubits(self) -> int:
        """Smallest register size able to hold every qubit addressed by the tree."""
        highest = -1
        for node in self:
            if isinstance(node, ConditionalInstruction):
                highest = max(highest, node.bit, node.body.num_qubits() - 1)
            else:
                highest = max([highest, *node.qubits])
        return highest + 1


_QISKIT_NAMES = {
    "h": "h",
    "x": "x",
    "y": "y",
    "z": "z",
    "rx": "rx",
    "ry": "ry",
    "rz": "rz",
    "u": "u",
    "u3": "u",
    "cx": "cx",
    "swap": "swap",
    "measure": "measure",
    "cz": "cz",
    "cp": "cp",
}


def from_qiskit(circuit: QuantumCircuit) -> CompositeInstruction:
    """Converts a Qiskit circuit into an instruction tree.

    Barriers are dropped. Measurements record their outcome in the classical bit of the measured
    qubit, the classical target of the Qiskit instruction is not used.

    Args:
        circuit: The circuit to convert. All parameters must be bound.

    Returns:
        CompositeInstruction: The converted circuit.

    Raises:
        UnsupportedGateError: If the circuit contains an operation without a counterpart.
        InvalidParameterError: If a parameter is not numeric.
    """
    composite = CompositeInstruction(name=circuit.name)
    for circuit_instruction in circuit.data:
        op = circuit_instruction.operation
        if op.name == "barrier":
            continue
        name = _QISKIT_NAMES.get(op.name)
        if name is None:
            msg = f"Qiskit operation '{op.name}' is not supported."
            raise UnsupportedGateError(msg)
        qubits = [circuit.find_bit(q).index for q in circuit_instruction.qubits]
        composite.add(Instruction(name, qubits, list(op.params)))
    return composite
