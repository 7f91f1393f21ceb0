# Copyright (c) 2025 - 2026 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Simulation Parameters.

This module defines ``SimParams``, the configuration read once when a simulator is initialized. It can
be built directly or from the two option surfaces a host may provide:

  - string-keyed options (values are strings, e.g. from a command line):
      ``mps-verbose`` (presence enables verbose logging), ``mps-one-qubit-gatetime``,
      ``mps-two-qubit-gatetime``, ``mps-svd-cutoff``, ``mps-seed``
  - a typed option map: ``svd-cutoff`` (float), ``seed`` (int), ``shots`` (int), ``verbose`` (bool)

If the cutoff is given in both, the typed map takes precedence.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..exceptions import ConfigurationError
from .chain import DEFAULT_SVD_CUTOFF

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_SINGLE_QUBIT_TIME = 1.0
DEFAULT_TWO_QUBIT_TIME = 2.0

VERBOSE_OPTION = "mps-verbose"
SINGLE_QUBIT_TIME_OPTION = "mps-one-qubit-gatetime"
TWO_QUBIT_TIME_OPTION = "mps-two-qubit-gatetime"
SVD_CUTOFF_OPTION = "mps-svd-cutoff"
SEED_OPTION = "mps-seed"


def _parse_float(key: str, value: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        msg = f"Invalid value '{value}' for option '{key}'."
        raise ConfigurationError(msg) from e


def _parse_int(key: str, value: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        msg = f"Invalid value '{value}' for option '{key}'."
        raise ConfigurationError(msg) from e


def _typed(key: str, value: Any, types: tuple[type, ...]) -> Any:  # noqa: ANN401
    if isinstance(value, bool) and bool not in types:
        msg = f"Option '{key}' must be of type {' or '.join(t.__name__ for t in types)}, got bool."
        raise ConfigurationError(msg)
    if not isinstance(value, types):
        msg = f"Option '{key}' must be of type {' or '.join(t.__name__ for t in types)}, got {type(value).__name__}."
        raise ConfigurationError(msg)
    return value


class SimParams:
    """Configuration of a circuit simulation.

    Attributes:
        svd_cutoff: Relative truncation threshold applied after every SVD.
        single_qubit_time: Execution time booked per single-qubit gate.
        two_qubit_time: Execution time booked per two-qubit gate and per measurement.
        verbose: If set, every applied instruction is logged at INFO level.
        seed: Seed of the random number generator used for measurement collapse.
        shots: Number of repetitions performed by ``simulator.run``.
        show_progress: Whether ``simulator.run`` displays a progress bar.
    """

    def __init__(
        self,
        svd_cutoff: float = DEFAULT_SVD_CUTOFF,
        single_qubit_time: float = DEFAULT_SINGLE_QUBIT_TIME,
        two_qubit_time: float = DEFAULT_TWO_QUBIT_TIME,
        *,
        verbose: bool = False,
        seed: int | None = None,
        shots: int = 1,
        show_progress: bool = False,
    ) -> None:
        """Circuit simulation parameters.

        Args:
            svd_cutoff: Singular values are discarded from the smallest up while their summed squares,
                relative to the total, stay below this value. Must be positive.
            single_qubit_time: Execution time per single-qubit gate.
            two_qubit_time: Execution time per two-qubit gate or measurement.
            verbose: Log every applied instruction at INFO level.
            seed: Seed for measurement sampling. ``None`` draws fresh entropy.
            shots: Number of repetitions of the circuit in ``simulator.run``.
            show_progress: Display a tqdm progress bar over the shots.

        Raises:
            ValueError: If a value is out of range.
        """
        if not svd_cutoff > 0:
            msg = f"svd_cutoff must be positive, got {svd_cutoff}."
            raise ValueError(msg)
        if single_qubit_time < 0 or two_qubit_time < 0:
            msg = "Gate times must be non-negative."
            raise ValueError(msg)
        if shots < 1:
            msg = f"shots must be at least 1, got {shots}."
            raise ValueError(msg)

        self.svd_cutoff = float(svd_cutoff)
        self.single_qubit_time = float(single_qubit_time)
        self.two_qubit_time = float(two_qubit_time)
        self.verbose = verbose
        self.seed = seed
        self.shots = shots
        self.show_progress = show_progress

    @classmethod
    def from_options(
        cls,
        options: Mapping[str, str] | None = None,
        typed_options: Mapping[str, Any] | None = None,
    ) -> SimParams:
        """Builds parameters from string-keyed options and a typed option map.

        Args:
            options: String options, see the module docstring for the recognized keys.
            typed_options: Typed options; ``svd-cutoff`` here overrides ``mps-svd-cutoff``.

        Returns:
            SimParams: The parsed parameters, defaults for everything not given.

        Raises:
            ConfigurationError: If a value cannot be parsed or has the wrong type.
        """
        options = options or {}
        typed_options = typed_options or {}
        kwargs: dict[str, Any] = {}

        if VERBOSE_OPTION in options:
            kwargs["verbose"] = True
        if SINGLE_QUBIT_TIME_OPTION in options:
            kwargs["single_qubit_time"] = _parse_float(SINGLE_QUBIT_TIME_OPTION, options[SINGLE_QUBIT_TIME_OPTION])
        if TWO_QUBIT_TIME_OPTION in options:
            kwargs["two_qubit_time"] = _parse_float(TWO_QUBIT_TIME_OPTION, options[TWO_QUBIT_TIME_OPTION])
        if SVD_CUTOFF_OPTION in options:
            kwargs["svd_cutoff"] = _parse_float(SVD_CUTOFF_OPTION, options[SVD_CUTOFF_OPTION])
        if SEED_OPTION in options:
            kwargs["seed"] = _parse_int(SEED_OPTION, options[SEED_OPTION])

        if "svd-cutoff" in typed_options:
            kwargs["svd_cutoff"] = float(_typed("svd-cutoff", typed_options["svd-cutoff"], (float, int)))
        if "seed" in typed_options:
            kwargs["seed"] = _typed("seed", typed_options["seed"], (int,))
        if "shots" in typed_options:
            kwargs["shots"] = _typed("shots", typed_options["shots"], (int,))
        if "verbose" in typed_options:
            kwargs["verbose"] = _typed("verbose", typed_options["verbose"], (bool,))

        try:
            return cls(**kwargs)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

    def __repr__(self) -> str:
        return (
            f"SimParams(svd_cutoff={self.svd_cutoff}, single_qubit_time={self.single_qubit_time}, "
            f"two_qubit_time={self.two_qubit_time}, verbose={self.verbose}, seed={self.seed}, shots={self.shots})"
        )
