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
Spatial vector algebra on the host.

Spatial vectors follow Featherstone's Plücker convention and are stored as
6-element numpy arrays with the angular part first, i.e. motion vectors as
:math:`v = (\\omega, v_O)` and force vectors as :math:`f = (n_O, f)`.

A :class:`SpatialTransform` ``X`` from frame ``A`` to frame ``B`` is stored in
the compact form ``(E, r)``, where ``E`` rotates coordinates from ``A`` to ``B``
and ``r`` is the position of the origin of ``B`` expressed in ``A``. Its dense
6x6 motion-transform matrix is:

.. math::
   X = \\begin{bmatrix} E & 0 \\\\ -E r^\\times & E \\end{bmatrix}

The force transform is :math:`X^* = X^{-T}`, and :math:`X^T` maps forces from
``B`` back to ``A``.
"""

from __future__ import annotations

import numpy as np

from .types import Mat33, Vec3, float64

###
# Module interface
###

__all__ = [
    "SpatialTransform",
    "crossf",
    "crossm",
    "skew",
    "spatial_inertia",
    "xrot",
    "xtrans",
]


###
# Operators
###


def skew(v: Vec3) -> np.ndarray:
    """Returns the 3x3 skew-symmetric matrix :math:`v^\\times` such that ``skew(v) @ u == cross(v, u)``."""
    return np.array(
        [
            [0.0, -v[2], v[1]],
            [v[2], 0.0, -v[0]],
            [-v[1], v[0], 0.0],
        ],
        dtype=float64,
    )


def crossm(v: np.ndarray, m: np.ndarray | None = None) -> np.ndarray:
    """
    Spatial cross product for motion vectors.

    Returns the 6x6 operator :math:`v^\\times` if ``m`` is ``None``, otherwise
    the motion vector :math:`v \\times m`.
    """
    if m is None:
        w = skew(v[:3])
        vo = skew(v[3:])
        out = np.zeros((6, 6), dtype=float64)
        out[:3, :3] = w
        out[3:, :3] = vo
        out[3:, 3:] = w
        return out
    return np.concatenate(
        (
            np.cross(v[:3], m[:3]),
            np.cross(v[:3], m[3:]) + np.cross(v[3:], m[:3]),
        )
    )


def crossf(v: np.ndarray, f: np.ndarray | None = None) -> np.ndarray:
    """
    Spatial cross product for force vectors.

    Returns the 6x6 operator :math:`v^{\\times *} = -(v^\\times)^T` if ``f`` is
    ``None``, otherwise the force vector :math:`v \\times^* f`.
    """
    if f is None:
        return -crossm(v).T
    return np.concatenate(
        (
            np.cross(v[:3], f[:3]) + np.cross(v[3:], f[3:]),
            np.cross(v[:3], f[3:]),
        )
    )


def spatial_inertia(mass: float, com: Vec3, inertia: Mat33) -> np.ndarray:
    """
    Computes the 6x6 spatial inertia of a rigid body about its frame origin.

    Args:
        mass: Mass of the body [kg].
        com: Center of mass in body coordinates [m].
        inertia: 3x3 rotational inertia about the center of mass [kg*m^2].
    """
    c = np.asarray(com, dtype=float64)
    Ic = np.asarray(inertia, dtype=float64)
    cx = skew(c)
    out = np.zeros((6, 6), dtype=float64)
    out[:3, :3] = Ic + mass * cx @ cx.T
    out[:3, 3:] = mass * cx
    out[3:, :3] = mass * cx.T
    out[3:, 3:] = mass * np.eye(3, dtype=float64)
    return out


###
# Transforms
###


class SpatialTransform:
    """A compact Plücker transform ``(E, r)``."""

    __slots__ = ("E", "r")

    def __init__(self, E: Mat33 | None = None, r: Vec3 | None = None):
        self.E: np.ndarray = np.eye(3, dtype=float64) if E is None else np.array(E, dtype=float64)
        self.r: np.ndarray = np.zeros(3, dtype=float64) if r is None else np.array(r, dtype=float64)

    def __repr__(self) -> str:
        return f"SpatialTransform(E={self.E.tolist()}, r={self.r.tolist()})"

    def __mul__(self, other: SpatialTransform) -> SpatialTransform:
        """Composition ``self * other``, i.e. ``other`` is applied first."""
        return SpatialTransform(self.E @ other.E, other.r + other.E.T @ self.r)

    def copy(self) -> SpatialTransform:
        return SpatialTransform(self.E, self.r)

    def inverse(self) -> SpatialTransform:
        return SpatialTransform(self.E.T, -self.E @ self.r)

    def apply(self, v: np.ndarray) -> np.ndarray:
        """Transforms a motion vector, i.e. computes ``X @ v``."""
        w = self.E @ v[:3]
        return np.concatenate((w, self.E @ (v[3:] - np.cross(self.r, v[:3]))))

    def apply_adjoint(self, f: np.ndarray) -> np.ndarray:
        """Transforms a force vector, i.e. computes ``X^* @ f``."""
        return np.concatenate((self.E @ (f[:3] - np.cross(self.r, f[3:])), self.E @ f[3:]))

    def apply_transpose(self, f: np.ndarray) -> np.ndarray:
        """Transforms a force vector back to the source frame, i.e. computes ``X^T @ f``."""
        lin = self.E.T @ f[3:]
        return np.concatenate((self.E.T @ f[:3] + np.cross(self.r, lin), lin))

    def to_matrix(self) -> np.ndarray:
        out = np.zeros((6, 6), dtype=float64)
        out[:3, :3] = self.E
        out[3:, :3] = -self.E @ skew(self.r)
        out[3:, 3:] = self.E
        return out

    def to_matrix_adjoint(self) -> np.ndarray:
        out = np.zeros((6, 6), dtype=float64)
        out[:3, :3] = self.E
        out[:3, 3:] = -self.E @ skew(self.r)
        out[3:, 3:] = self.E
        return out

    def to_matrix_transpose(self) -> np.ndarray:
        return self.to_matrix().T


def xrot(angle: float, axis: Vec3) -> SpatialTransform:
    """
    Rotation of the coordinate frame by ``angle`` [rad] about the unit ``axis``.

    The returned ``E`` is the transpose of the active rotation matrix, so that it maps
    coordinates from the parent frame into the rotated frame.
    """
    a = np.asarray(axis, dtype=float64)
    s = np.sin(angle)
    c = np.cos(angle)
    K = skew(a)
    R = np.eye(3, dtype=float64) + s * K + (1.0 - c) * (K @ K)
    return SpatialTransform(R.T, None)


def xtrans(r: Vec3) -> SpatialTransform:
    """Pure translation of the coordinate frame by ``r``."""
    return SpatialTransform(None, r)
