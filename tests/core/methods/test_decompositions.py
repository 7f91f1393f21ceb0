# Copyright (c) 2025 - 2026 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Tests for the tensor decompositions.

This module verifies the relative truncation rule, the truncated SVD, the kickback step that brings a
right SVD factor into leg layout and the two-site split used after every two-qubit gate.
"""

from __future__ import annotations

import numpy as np
import opt_einsum as oe
import pytest

from mqt.mpsvm.core.methods import decompositions
from mqt.mpsvm.core.methods.decompositions import kickback, truncated_svd, truncation_rank, two_site_svd

rng = np.random.default_rng(seed=3)


def _random_complex(shape: tuple[int, ...]) -> np.ndarray:
    return rng.standard_normal(shape) + 1j * rng.standard_normal(shape)


def test_truncation_rank_discards_small_tail() -> None:
    """The tail whose relative weight stays below the cutoff is discarded."""
    s_vec = np.array([1.0, 0.5, 0.01])
    assert truncation_rank(s_vec, 1e-3) == 2
    assert truncation_rank(s_vec, 1e-6) == 3


def test_truncation_rank_keeps_at_least_one() -> None:
    """Even a cutoff above every relative weight keeps one singular value."""
    assert truncation_rank(np.array([1.0, 1.0]), 1.0) == 1
    assert truncation_rank(np.array([0.0, 0.0]), 1e-4) == 1


def test_truncation_rank_is_relative() -> None:
    """Scaling all singular values does not change the rank."""
    s_vec = np.array([1.0, 0.1, 0.001])
    assert truncation_rank(s_vec, 1e-4) == truncation_rank(1e3 * s_vec, 1e-4)


def test_truncated_svd_reconstructs_low_rank_matrix() -> None:
    """A rank-1 matrix is reproduced exactly by a single singular triple."""
    left = _random_complex((4, 1))
    right = _random_complex((1, 6))
    matrix = left @ right

    u_mat, s_vec, v_mat = truncated_svd(matrix, 1e-12)
    assert len(s_vec) == 1
    assert u_mat.shape == (4, 1)
    assert v_mat.shape == (1, 6)
    np.testing.assert_allclose(u_mat @ np.diag(s_vec) @ v_mat, matrix, atol=1e-12)


def test_svd_falls_back_to_gesvd(monkeypatch: pytest.MonkeyPatch) -> None:
    """A convergence failure of the default driver is recovered by the scipy driver."""

    def failing_svd(*_args: object, **_kwargs: object) -> None:
        msg = "SVD did not converge"
        raise np.linalg.LinAlgError(msg)

    monkeypatch.setattr(np.linalg, "svd", failing_svd)
    matrix = _random_complex((3, 5))
    u_mat, s_vec, v_mat = decompositions.svd(matrix)
    np.testing.assert_allclose(u_mat @ np.diag(s_vec) @ v_mat, matrix, atol=1e-12)


def test_kickback_orders_axes_as_leg() -> None:
    """The right factor (bond, phys, right) becomes a leg (phys, bond, right)."""
    rest = _random_complex((3, 2, 4))
    leg = kickback(rest)
    assert leg.shape == (2, 3, 4)
    np.testing.assert_allclose(leg, rest.transpose(1, 0, 2))


def test_two_site_svd_round_trip() -> None:
    """Leg, bond and leg contract back to the two-site tensor."""
    theta = _random_complex((2, 3, 2, 4))
    leg, bond, rest = two_site_svd(theta, 1e-14)

    keep = bond.shape[0]
    assert leg.shape == (2, 3, keep)
    assert rest.shape == (2, keep, 4)
    assert np.allclose(bond, np.diag(np.diag(bond)))
    rebuilt = oe.contract("pab, bc, qcr->paqr", leg, bond, rest)
    np.testing.assert_allclose(rebuilt, theta, atol=1e-10)


def test_two_site_svd_truncates_product_state() -> None:
    """A product of two legs needs bond dimension one."""
    a = _random_complex((2, 1))
    b = _random_complex((2, 1))
    theta = oe.contract("pa, qb->paqb", a, b).reshape(2, 1, 2, 1)
    _, bond, rest = two_site_svd(theta, 1e-4)
    assert bond.shape == (1, 1)
    assert rest.shape == (2, 1, 1)
