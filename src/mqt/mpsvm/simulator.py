# Copyright (c) 2025 - 2026 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""High-level simulator module.

``MPSSimulator`` executes an instruction stream on a ``ChainState``. Every instruction is dispatched
on its ``GateKind``:
  - single-qubit gates are contracted into the leg of their qubit,
  - CNOT and SWAP are applied with a truncated SVD re-factoring, routed through a swap network if
    their qubits are not neighbours,
  - measurements collapse the chain and publish the joint Z-expectation value of the session,
  - CZ and controlled-phase gates are rejected.

``MPSSimulator.get_expectation_value_z`` runs a sub-circuit speculatively: the chain is restored
afterwards and only the published expectation value is kept.

``run`` is the one-call entry point: it simulates a circuit for a number of shots and collects the
measured bitstrings.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np
from tqdm import tqdm
from typing_extensions import assert_never

from .core.data_structures.chain import ChainState
from .core.data_structures.circuit import CompositeInstruction, ConditionalInstruction, from_qiskit
from .core.data_structures.result_buffer import EXP_VAL_Z, ResultBuffer
from .core.data_structures.simulation_parameters import SimParams
from .core.exceptions import SessionError, UnsupportedGateError
from .core.libraries.gate_library import GateKind, GateLibrary
from .core.methods.gate_application import apply_single_qubit_gate
from .core.methods.measurement import MeasurementSession, collapse
from .core.methods.swap_network import apply_routed

if TYPE_CHECKING:
    from collections.abc import Iterable

    from numpy.typing import NDArray
    from qiskit.circuit import QuantumCircuit

    from .core.data_structures.circuit import Instruction

__all__ = ["MPSSimulator", "run"]

logger = logging.getLogger(__name__)

ZERO_TOLERANCE = 1e-12


class MPSSimulator:
    """Executes instructions on a matrix product state.

    Attributes:
        sim_params: The configuration, read once at construction.
        rng: Random number generator for measurement collapse, seeded once at construction.
        chain: The live state, created by ``initialize``.
        buffer: The result store measurements publish into.
        session: The current measurement session.
    """

    def __init__(self, sim_params: SimParams | None = None) -> None:
        """Creates a simulator.

        Args:
            sim_params: Simulation parameters. Defaults are used if omitted.
        """
        self.sim_params = sim_params if sim_params is not None else SimParams()
        self.rng = np.random.default_rng(self.sim_params.seed)
        self.chain: ChainState | None = None
        self.buffer: ResultBuffer | None = None
        self.session = MeasurementSession()
        self._speculating = False

    def initialize(self, buffer: ResultBuffer | int) -> ResultBuffer:
        """Prepares |0...0> on a register.

        Args:
            buffer: The result store to publish into, or the number of qubits for a fresh one.

        Returns:
            ResultBuffer: The buffer in use.
        """
        if isinstance(buffer, int):
            buffer = ResultBuffer(buffer)
        self.buffer = buffer
        self.chain = ChainState(buffer.size)
        self.session.close()
        self._speculating = False
        if self.sim_params.verbose:
            logger.info("MPSSimulator: %d qubits, SVD cutoff %g", buffer.size, self.sim_params.svd_cutoff)
        return buffer

    def _live_chain(self) -> ChainState:
        if self.chain is None:
            msg = "Simulator is not initialized."
            raise RuntimeError(msg)
        return self.chain

    @property
    def cbits(self) -> list[int]:
        """The classical register."""
        return list(self._live_chain().cbits)

    @property
    def exec_time(self) -> float:
        """The accumulated execution time of the applied gates."""
        return self._live_chain().exec_time

    def execute(self, circuit: Iterable[Instruction | ConditionalInstruction]) -> ResultBuffer:
        """Applies every enabled instruction of ``circuit`` in order.

        Args:
            circuit: An instruction tree or any iterable of instructions.

        Returns:
            ResultBuffer: The buffer holding the published results.
        """
        chain = self._live_chain()
        for node in circuit:
            self.apply(node)
        assert self.buffer is not None
        logger.debug("circuit done: max bond %d, exec time %g", chain.get_max_bond(), chain.exec_time)
        return self.buffer

    def apply(self, node: Instruction | ConditionalInstruction) -> None:
        """Applies a single instruction.

        Args:
            node: A gate or measurement, or a conditional block.

        Raises:
            UnsupportedGateError: For CZ and controlled-phase gates.
        """
        chain = self._live_chain()
        if not node.enabled:
            return
        if isinstance(node, ConditionalInstruction):
            if chain.cbits[node.bit] == 1:
                for inner_node in node.body:
                    self.apply(inner_node)
            return

        gate = GateLibrary.from_instruction(node)
        for qubit in gate.sites:
            chain.index_for_qubit(qubit)
        if self.sim_params.verbose:
            logger.info("applying %s", node)

        kind = node.kind
        if kind is GateKind.MEASURE:
            self._measure(gate.sites[0])
            chain.exec_time += self.sim_params.two_qubit_time
        elif kind is GateKind.CNOT or kind is GateKind.SWAP:
            apply_routed(chain, gate, self.sim_params.svd_cutoff)
            chain.exec_time += self.sim_params.two_qubit_time
        elif kind is GateKind.CZ or kind is GateKind.CPHASE:
            msg = f"{gate.name} is not supported by the MPS simulator."
            raise UnsupportedGateError(msg)
        elif (
            kind is GateKind.H
            or kind is GateKind.X
            or kind is GateKind.Y
            or kind is GateKind.Z
            or kind is GateKind.RX
            or kind is GateKind.RY
            or kind is GateKind.RZ
            or kind is GateKind.U
        ):
            apply_single_qubit_gate(chain, gate)
            chain.exec_time += self.sim_params.single_qubit_time
        else:
            assert_never(kind)

    def _measure(self, qubit: int) -> None:
        chain = self._live_chain()
        assert self.buffer is not None
        self.session.snap(chain)
        exp_val = self.session.measure(qubit)
        self.buffer.add_extra_info(EXP_VAL_Z, exp_val)
        outcome = collapse(chain, qubit, self.rng)
        if self.sim_params.verbose:
            logger.info("measured q%d -> %d, <Z...Z> = %g", qubit, outcome, exp_val)

    def read_expectation_value_z(self) -> float:
        """Reads the published expectation value and closes the measurement session.

        Raises:
            KeyError: If nothing was measured.
        """
        assert self.buffer is not None
        exp_val = self.buffer.get_expectation_value_z()
        self.session.close()
        return exp_val

    def get_expectation_value_z(self, subcircuit: Iterable[Instruction | ConditionalInstruction]) -> float:
        """Evaluates the Z-expectation value of a sub-circuit without committing to it.

        The sub-circuit (usually basis changes followed by measurements) is run on the live chain,
        the published expectation value is read and the chain is restored to its state before the
        call. The measurement session and the classical register are cleared.

        Args:
            subcircuit: The instructions to evaluate. It must contain at least one measurement.

        Returns:
            float: The joint Z-expectation value of the measured qubits.

        Raises:
            SessionError: If a speculative evaluation or a measurement session is already active.
            ValueError: If the sub-circuit does not measure anything.
        """
        chain = self._live_chain()
        assert self.buffer is not None
        if self._speculating or self.session.is_open:
            msg = "Nested measurement sessions are not supported."
            raise SessionError(msg)

        self._speculating = True
        outer = chain.copy()
        self.buffer.remove_information(EXP_VAL_Z)
        try:
            for node in subcircuit:
                self.apply(node)
            if not self.buffer.has_information(EXP_VAL_Z):
                msg = "The sub-circuit does not contain a measurement."
                raise ValueError(msg)
            exp_val = self.buffer.get_expectation_value_z()
        finally:
            chain.restore(outer)
            chain.cbits = [0] * chain.length
            self.session.close()
            self._speculating = False
        return exp_val

    def get_state(self) -> NDArray[np.complex128]:
        """Returns the normalized amplitude vector.

        Qubit 0 is the least significant bit of the basis index. Real and imaginary parts with a
        magnitude below 1e-12 are set to zero. The memory needed grows as ``2**n``.

        Raises:
            ValueError: If the state has zero norm.
        """
        vec = self._live_chain().to_vec()
        norm = np.linalg.norm(vec)
        if norm == 0:
            msg = "Cannot normalize a state of zero norm."
            raise ValueError(msg)
        vec = vec / norm
        real, imag = vec.real.copy(), vec.imag.copy()
        real[np.abs(real) < ZERO_TOLERANCE] = 0.0
        imag[np.abs(imag) < ZERO_TOLERANCE] = 0.0
        return real + 1j * imag


def run(
    circuit: CompositeInstruction | QuantumCircuit,
    sim_params: SimParams | None = None,
    num_qubits: int | None = None,
) -> ResultBuffer:
    """Simulates a circuit for ``sim_params.shots`` shots.

    Every shot starts from |0...0>; the random number generator is seeded once for all shots. The
    classical register of every shot that measured something is added to the histogram of the
    returned buffer as a bitstring with qubit 0 as the rightmost character.

    Args:
        circuit: The circuit, as an instruction tree or a Qiskit circuit.
        sim_params: Simulation parameters. Defaults are used if omitted.
        num_qubits: Register size. Defaults to the smallest register the circuit fits on.

    Returns:
        ResultBuffer: Bitstring histogram, the last published ``exp-val-z`` and the execution time
        of one shot under ``exec-time``.
    """
    if not isinstance(circuit, CompositeInstruction):
        circuit = from_qiskit(circuit)
    sim_params = sim_params if sim_params is not None else SimParams()
    if num_qubits is None:
        num_qubits = max(circuit.num_qubits(), 1)

    simulator = MPSSimulator(sim_params)
    buffer = ResultBuffer(num_qubits)
    for _ in tqdm(range(sim_params.shots), desc="Running shots", ncols=80, disable=not sim_params.show_progress):
        simulator.initialize(buffer)
        simulator.execute(circuit)
        if simulator.session.measured:
            buffer.append_measurement("".join(str(bit) for bit in reversed(simulator.cbits)))
        buffer.add_extra_info("exec-time", simulator.exec_time)
        simulator.session.close()
    return buffer
