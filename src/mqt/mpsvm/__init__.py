# Copyright (c) 2025 - 2026 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""MQT MPSVM: a matrix product state backend for gate-model quantum circuits."""

from .core.data_structures.chain import ChainState
from .core.data_structures.circuit import CompositeInstruction, ConditionalInstruction, Instruction, from_qiskit
from .core.data_structures.result_buffer import ResultBuffer
from .core.data_structures.simulation_parameters import SimParams
from .simulator import MPSSimulator, run

__all__ = [
    "ChainState",
    "CompositeInstruction",
    "ConditionalInstruction",
    "Instruction",
    "MPSSimulator",
    "ResultBuffer",
    "SimParams",
    "from_qiskit",
    "run",
]
