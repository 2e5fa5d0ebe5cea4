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

"""ARTIDYN: Linear Algebra: Matrix properties"""

import numpy as np

###
# Module interface
###

__all__ = [
    "DEFAULT_MATRIX_SYMMETRY_EPS",
    "assert_is_square_matrix",
    "assert_is_symmetric_matrix",
    "is_square_matrix",
    "is_symmetric_matrix",
    "symmetry_error_norm_l2",
]


###
# Constants
###

DEFAULT_MATRIX_SYMMETRY_EPS = 1e-10
"""A global constant to configure the tolerance on matrix symmetry checks."""


###
# Utilities
###


def _make_tolerance(tol: float | None = None, dtype: np.dtype = np.dtype(np.float64)):
    eps = np.finfo(dtype).eps
    if tol is None:
        tol = dtype.type(eps)
    else:
        if not isinstance(tol, float | np.float32 | np.float64):
            raise ValueError("tolerance 'tol' must be a `float`, `np.float32`, or `np.float64` value.")
    return dtype.type(max(tol, eps))


def is_square_matrix(A: np.ndarray) -> bool:
    return A.ndim == 2 and A.shape[0] == A.shape[1]


def is_symmetric_matrix(A: np.ndarray, tol: float | None = None) -> bool:
    tol = _make_tolerance(tol=tol, dtype=A.dtype)
    return np.allclose(A, A.T, atol=tol, rtol=0.0)


def symmetry_error_norm_l2(A: np.ndarray) -> float:
    return np.linalg.norm(A - A.T, ord=2)


def assert_is_square_matrix(A: np.ndarray):
    if not is_square_matrix(A):
        raise ValueError(f"Matrix is not square, has shape {A.shape}.")


def assert_is_symmetric_matrix(A: np.ndarray):
    eps = max(_make_tolerance(dtype=A.dtype), A.dtype.type(DEFAULT_MATRIX_SYMMETRY_EPS))
    if not is_symmetric_matrix(A, tol=eps):
        error = symmetry_error_norm_l2(A)
        raise ValueError(f"Matrix is not symmetric within tolerance {eps}, with error (L2-norm): {error}")
