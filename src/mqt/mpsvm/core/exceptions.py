# Copyright (c) 2025 - 2026 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Exceptions raised by the MPS simulator.

All of them signal conditions that abort the current circuit execution. They derive from the
built-in exception that best describes the failure so that callers can keep catching the
built-in types.
"""

from __future__ import annotations


class UnsupportedGateError(NotImplementedError):
    """Raised when an instruction requests a gate the simulator does not implement."""


class InvalidParameterError(TypeError):
    """Raised when a gate parameter is neither an integer nor a floating point value."""


class ConfigurationError(ValueError):
    """Raised when a configuration option cannot be parsed."""


class SessionError(RuntimeError):
    """Raised when a measurement session is opened while another one is still active."""
