# Copyright (c) 2025 - 2026 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Result store.

``ResultBuffer`` is the key-value store the simulator publishes its results into. The joint
Z-expectation value of the measured qubits is stored under ``EXP_VAL_Z``. Measured bitstrings of
complete shots are collected in a histogram.
"""

from __future__ import annotations

from typing import Any

EXP_VAL_Z = "exp-val-z"


class ResultBuffer:
    """Key-value store for simulation results of a register of ``size`` qubits."""

    def __init__(self, size: int) -> None:
        """Initializes an empty buffer.

        Args:
            size: Number of qubits of the register the results belong to.
        """
        assert size >= 1, "A buffer needs at least one qubit."
        self.size = size
        self._info: dict[str, Any] = {}
        self.measurements: dict[str, int] = {}

    def add_extra_info(self, key: str, value: Any) -> None:  # noqa: ANN401
        """Stores ``value`` under ``key``, replacing any earlier value."""
        self._info[key] = value

    def get_information(self, key: str) -> Any:  # noqa: ANN401
        """Returns the value stored under ``key``.

        Raises:
            KeyError: If nothing is stored under ``key``.
        """
        if key not in self._info:
            msg = f"No information stored under '{key}'."
            raise KeyError(msg)
        return self._info[key]

    def has_information(self, key: str) -> bool:
        """Whether a value is stored under ``key``."""
        return key in self._info

    def remove_information(self, key: str) -> None:
        """Removes ``key`` if present."""
        self._info.pop(key, None)

    def append_measurement(self, bitstring: str) -> None:
        """Adds one observation of ``bitstring`` to the histogram."""
        self.measurements[bitstring] = self.measurements.get(bitstring, 0) + 1

    def get_expectation_value_z(self) -> float:
        """Shorthand for the published joint Z-expectation value."""
        return float(self.get_information(EXP_VAL_Z))

    def __repr__(self) -> str:
        return f"ResultBuffer(size={self.size}, info={self._info}, measurements={self.measurements})"
