# SPDX-FileCopyrightText: Copyright (c) 2025 The Newton Developers
# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
ARTIDYN: Linear Algebra: Dense linear system solvers

The constraint solvers select one of two dense strategies through
:class:`LinearSolverType`:

- ``PARTIAL_PIV_LU``: LU factorization with partial (row) pivoting. This is
  the fast path and performs no rank detection: singular systems produce
  non-finite values without raising.
- ``COL_PIV_HOUSEHOLDER_QR``: Householder QR with column pivoting and rank
  truncation. This is the robust path, which returns the basic solution of
  rank-deficient systems and reports the deficiency through
  :attr:`LinearSolver.info`.
"""

from abc import ABC, abstractmethod
from enum import IntEnum

import numpy as np
import scipy.linalg

from ..core.types import override
from ..utils import logger as msg
from .matrix import assert_is_square_matrix, assert_is_symmetric_matrix

###
# Module interface
###

__all__ = [
    "DEFAULT_QR_RANK_THRESHOLD",
    "ComputationInfo",
    "LUSciPySolver",
    "LinearSolver",
    "LinearSolverType",
    "QRSciPySolver",
    "linsys_error_inf",
    "make_linear_solver",
]


###
# Constants
###

DEFAULT_QR_RANK_THRESHOLD = 1e-10
"""Pivots of the QR factor smaller than this fraction of the largest pivot are treated as zero."""


###
# Types
###


class ComputationInfo(IntEnum):
    """Outcome of the most recent factorization."""

    Success = 0
    Uninitialized = 1
    NumericalIssue = 2


class LinearSolverType(IntEnum):
    """
    An enumeration of the dense linear solver strategies.
    """

    PARTIAL_PIV_LU = 0
    """LU factorization with partial pivoting, without rank detection."""

    COL_PIV_HOUSEHOLDER_QR = 1
    """Householder QR factorization with column pivoting and rank detection."""

    @override
    def __str__(self):
        """Returns a string representation of the linear solver type."""
        return f"LinearSolverType.{self.name} ({self.value})"

    @override
    def __repr__(self):
        """Returns a string representation of the linear solver type."""
        return self.__str__()


###
# Utilities
###


def linsys_error_inf(A: np.ndarray, b: np.ndarray, x: np.ndarray) -> float:
    """Returns the L∞ norm of the residual ``A @ x - b``."""
    return float(np.max(np.abs(A @ x - b))) if b.size > 0 else 0.0


###
# Interfaces
###


class LinearSolver(ABC):
    """
    Base class of the dense direct solvers.

    A solver is used in two phases: :meth:`compute` factorizes a square
    matrix, after which any number of right-hand sides can be solved against
    the factorization with :meth:`solve` or :meth:`solve_inplace`.
    """

    def __init__(self, A: np.ndarray | None = None, check_symmetry: bool = False):
        self._check_symmetry: bool = check_symmetry
        self._info: ComputationInfo = ComputationInfo.Uninitialized
        self._matrix: np.ndarray | None = None
        self._error_abs: float | None = None
        self._error_rel: float | None = None
        if A is not None:
            self.compute(A)

    @property
    def info(self) -> ComputationInfo:
        return self._info

    @property
    def matrix(self) -> np.ndarray | None:
        """The most recently factorized matrix."""
        return self._matrix

    @property
    def error_abs(self) -> float | None:
        """Absolute L∞ residual of the last solve, if it was requested."""
        return self._error_abs

    @property
    def error_rel(self) -> float | None:
        """Residual of the last solve relative to ``max(|A| |x|, |b|)``, if it was requested."""
        return self._error_rel

    ###
    # Implementation API
    ###

    @abstractmethod
    def _factorize_impl(self, A: np.ndarray) -> None:
        raise NotImplementedError("Factorization is not implemented.")

    @abstractmethod
    def _reconstruct_impl(self) -> np.ndarray:
        raise NotImplementedError("Reconstruction is not implemented.")

    @abstractmethod
    def _solve_inplace_impl(self, x: np.ndarray) -> None:
        raise NotImplementedError("Solve in-place operation is not implemented.")

    ###
    # Public API
    ###

    def compute(self, A: np.ndarray):
        """Factorizes the square matrix ``A``."""
        assert_is_square_matrix(A)
        if self._check_symmetry:
            assert_is_symmetric_matrix(A)
        self._matrix = A
        self._info = ComputationInfo.Success
        self._factorize_impl(A)

    def reconstructed(self) -> np.ndarray:
        """Reconstructs the factorized matrix from its factors."""
        if self._matrix is None:
            raise ValueError("A factorization has not been computed!")
        return self._reconstruct_impl()

    def solve_inplace(self, x: np.ndarray, compute_error: bool = False):
        """Solves ``A @ x = b`` in-place, where ``x`` is initialized with ``b``."""
        if self._matrix is None:
            raise ValueError("A factorization has not been computed!")
        n = self._matrix.shape[0]
        if x.ndim != 1 or x.shape[0] != n:
            raise ValueError(f"Right-hand side must have shape ({n},) but has shape {x.shape}.")

        b = x.copy() if compute_error else None
        self._solve_inplace_impl(x)

        if compute_error:
            A = self._matrix
            norm_x = np.linalg.norm(x, ord=np.inf) if x.size > 0 else 0.0
            norm_b = np.linalg.norm(b, ord=np.inf) if b.size > 0 else 0.0
            norm_A = np.linalg.norm(A, ord=np.inf) if A.size > 0 else 0.0
            self._error_abs = linsys_error_inf(A, b, x)
            self._error_rel = self._error_abs / max(norm_A * norm_x, norm_b, np.finfo(A.dtype).eps)
        else:
            self._error_abs = None
            self._error_rel = None

    def solve(self, b: np.ndarray, compute_error: bool = False) -> np.ndarray:
        """Solves ``A @ x = b`` and returns ``x``."""
        x = np.array(b, dtype=np.float64)
        self.solve_inplace(x, compute_error=compute_error)
        return x


###
# Solvers
###


class LUSciPySolver(LinearSolver):
    """
    LU factorization with partial pivoting using `scipy.linalg.lu_factor`.

    No rank detection is performed. An exactly singular matrix only triggers a
    `scipy.linalg.LinAlgWarning` during factorization and the subsequent solves
    return non-finite values.
    """

    def __init__(self, A: np.ndarray | None = None, check_symmetry: bool = False):
        self._LU: np.ndarray | None = None
        self._piv: np.ndarray | None = None
        super().__init__(A=A, check_symmetry=check_symmetry)

    @override
    def _factorize_impl(self, A: np.ndarray) -> None:
        self._LU, self._piv = scipy.linalg.lu_factor(A, check_finite=False)

    @override
    def _reconstruct_impl(self) -> np.ndarray:
        n = self._LU.shape[0]
        L = np.tril(self._LU, k=-1) + np.eye(n, dtype=self._LU.dtype)
        U = np.triu(self._LU)
        # Row i was interchanged with row piv[i], in order
        perm = np.arange(n)
        for i, p in enumerate(self._piv):
            perm[i], perm[p] = perm[p], perm[i]
        A = np.empty_like(self._LU)
        A[perm] = L @ U
        return A

    @override
    def _solve_inplace_impl(self, x: np.ndarray) -> None:
        x[:] = scipy.linalg.lu_solve((self._LU, self._piv), x, check_finite=False)


class QRSciPySolver(LinearSolver):
    """
    Householder QR factorization with column pivoting using `scipy.linalg.qr`.

    The numerical rank is the number of diagonal entries of ``R`` whose
    magnitude exceeds ``rank_threshold`` times the largest one. For
    rank-deficient matrices the basic solution is returned, i.e. the unknowns
    associated with the trailing pivoted columns are set to zero, and
    :attr:`info` is set to :attr:`ComputationInfo.NumericalIssue`.
    """

    def __init__(
        self,
        A: np.ndarray | None = None,
        rank_threshold: float = DEFAULT_QR_RANK_THRESHOLD,
        check_symmetry: bool = False,
    ):
        if rank_threshold < 0.0:
            raise ValueError(f"Invalid rank_threshold: {rank_threshold}. Must be non-negative.")
        self._rank_threshold: float = rank_threshold
        self._Q: np.ndarray | None = None
        self._R: np.ndarray | None = None
        self._p: np.ndarray | None = None
        self._rank: int = 0
        super().__init__(A=A, check_symmetry=check_symmetry)

    @property
    def rank(self) -> int:
        """The numerical rank of the most recently factorized matrix."""
        return self._rank

    @override
    def _factorize_impl(self, A: np.ndarray) -> None:
        n = A.shape[0]
        if n == 0:
            self._Q = np.zeros((0, 0), dtype=A.dtype)
            self._R = np.zeros((0, 0), dtype=A.dtype)
            self._p = np.zeros(0, dtype=np.int64)
            self._rank = 0
            return

        self._Q, self._R, self._p = scipy.linalg.qr(A, pivoting=True, check_finite=False)

        diag = np.abs(np.diag(self._R))
        self._rank = int(np.count_nonzero(diag > self._rank_threshold * diag[0]))
        if self._rank < n:
            self._info = ComputationInfo.NumericalIssue
            msg.debug("QRSciPySolver: rank deficient matrix, rank %d of %d", self._rank, n)

    @override
    def _reconstruct_impl(self) -> np.ndarray:
        A = np.empty_like(self._R)
        A[:, self._p] = self._Q @ self._R
        return A

    @override
    def _solve_inplace_impl(self, x: np.ndarray) -> None:
        r = self._rank
        y = self._Q.T @ x
        z = np.zeros_like(x)
        if r > 0:
            z[:r] = scipy.linalg.solve_triangular(self._R[:r, :r], y[:r], lower=False, check_finite=False)
        x[self._p] = z


###
# Factory
###


def make_linear_solver(solver_type: LinearSolverType, **kwargs) -> LinearSolver:
    """Creates the dense linear solver implementing the given strategy."""
    solver_type = LinearSolverType(solver_type)
    if solver_type == LinearSolverType.PARTIAL_PIV_LU:
        return LUSciPySolver(**kwargs)
    return QRSciPySolver(**kwargs)
