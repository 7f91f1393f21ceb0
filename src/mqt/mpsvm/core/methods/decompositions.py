# Copyright (c) 2025 - 2026 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Tensor Network Decompositions.

This module implements the truncated singular value decomposition used to re-factor the chain after
every two-qubit gate, together with the kickback step that brings the right factor back into the
leg layout ``(phys, left, right)``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import opt_einsum as oe
import scipy.linalg

if TYPE_CHECKING:
    from numpy.typing import NDArray


def svd(matrix: NDArray[np.complex128]) -> tuple[NDArray[np.complex128], NDArray[np.float64], NDArray[np.complex128]]:
    """Thin SVD with a fallback driver.

    NumPy uses the divide-and-conquer driver ``gesdd`` which occasionally fails to converge on
    ill-conditioned input. In that case the decomposition is repeated with ``gesvd``.

    Args:
        matrix: The matrix to be decomposed.

    Returns:
        u_mat: Left singular vectors as columns.
        s_vec: Singular values in descending order.
        v_mat: Right singular vectors as rows.
    """
    try:
        u_mat, s_vec, v_mat = np.linalg.svd(matrix, full_matrices=False)
    except np.linalg.LinAlgError:
        u_mat, s_vec, v_mat = scipy.linalg.svd(matrix, full_matrices=False, lapack_driver="gesvd")
    return u_mat, s_vec, v_mat


def truncation_rank(s_vec: NDArray[np.float64], cutoff: float) -> int:
    """Number of singular values to keep.

    The smallest singular values are discarded as long as their summed squares, relative to the
    summed squares of all singular values, do not exceed ``cutoff``. At least one value is kept.

    Args:
        s_vec: Singular values in descending order.
        cutoff: Relative truncation threshold.

    Returns:
        int: The number of leading singular values to keep.
    """
    weights = np.asarray(s_vec, dtype=np.float64) ** 2
    total = float(np.sum(weights))
    if total == 0.0:
        return 1
    discarded = np.cumsum(weights[::-1]) / total
    num_discarded = int(np.count_nonzero(discarded <= cutoff))
    return max(len(s_vec) - num_discarded, 1)


def truncated_svd(
    matrix: NDArray[np.complex128], cutoff: float
) -> tuple[NDArray[np.complex128], NDArray[np.float64], NDArray[np.complex128]]:
    """Truncated SVD.

    Args:
        matrix: The matrix to be decomposed.
        cutoff: Relative truncation threshold, see ``truncation_rank``.

    Returns:
        u_mat: The kept left singular vectors, shape (m, keep).
        s_vec: The kept singular values, shape (keep,).
        v_mat: The kept right singular vectors, shape (keep, n).
    """
    u_mat, s_vec, v_mat = svd(matrix)
    keep = truncation_rank(s_vec, cutoff)
    return u_mat[:, :keep], s_vec[:keep], v_mat[:keep, :]


def kickback(rest_tensor: NDArray[np.complex128]) -> NDArray[np.complex128]:
    """Kickback.

    The right factor of a two-site SVD comes out as ``(new_bond, phys, right)``. Contracting an
    identity over the new bond relabels it as the left bond of the leg and places the axes in leg
    order ``(phys, left, right)``.

    Args:
        rest_tensor: The right SVD factor reshaped to ``(new_bond, phys, right)``.

    Returns:
        NDArray[np.complex128]: The leg tensor ``(phys, new_bond, right)``.
    """
    identity = np.eye(rest_tensor.shape[0], dtype=rest_tensor.dtype)
    return oe.contract("ab, bpr->par", identity, rest_tensor)


def two_site_svd(
    theta: NDArray[np.complex128], cutoff: float
) -> tuple[NDArray[np.complex128], NDArray[np.complex128], NDArray[np.complex128]]:
    """Two site SVD.

    Splits a two-site tensor back into a leg, a diagonal bond and a leg.

    Args:
        theta: Two-site tensor of shape ``(phys_i, left, phys_j, right)``.
        cutoff: Relative truncation threshold.

    Returns:
        leg_mat: The left leg ``(phys_i, left, keep)``.
        bond_mat: The diagonal bond ``(keep, keep)``.
        rest_tensor: The right leg ``(phys_j, keep, right)``.
    """
    phys_i, left, phys_j, right = theta.shape
    theta_mat = theta.reshape(phys_i * left, phys_j * right)
    u_mat, s_vec, v_mat = truncated_svd(theta_mat, cutoff)
    keep = len(s_vec)

    leg_mat = u_mat.reshape(phys_i, left, keep)
    bond_mat = np.diag(s_vec).astype(np.complex128)
    rest_tensor = kickback(v_mat.reshape(keep, phys_j, right))
    return leg_mat, bond_mat, rest_tensor
