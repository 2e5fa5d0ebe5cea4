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
Unconstrained rigid-body dynamics of the articulated tree.

Provides the recursive Newton-Euler algorithm (inverse dynamics), the
composite rigid-body algorithm (joint-space mass matrix) and the
articulated-body algorithm (forward dynamics). All recursions iterate over
body indices of the parent-indexed arena: increasing index order visits
parents before children, decreasing order visits children before parents.

External forces are given as an array of shape ``(num_bodies, 6)`` holding
one spatial force per body in base coordinates. Row ``0`` (the root) is
ignored.

Gravity is accounted for by accelerating the root by ``-g``. As a
consequence, the spatial accelerations left in the model by these passes
contain the gravity offset, and callers that need true accelerations must
run a kinematics update first.
"""

import numpy as np

from ..core.model import Model
from ..core.spatial import crossf
from ..kinematics.points import update_kinematics_custom
from ..utils import logger as msg

###
# Module interface
###

__all__ = [
    "composite_rigid_body_algorithm",
    "forward_dynamics",
    "inverse_dynamics",
]


###
# Internals
###


def _check_external_forces(model: Model, f_ext: np.ndarray | None) -> np.ndarray | None:
    if f_ext is None:
        return None
    f_ext = np.asarray(f_ext, dtype=np.float64)
    if f_ext.shape != (model.num_bodies, 6):
        raise ValueError(f"External forces must have shape ({model.num_bodies}, 6) but have shape {f_ext.shape}.")
    return f_ext


###
# Inverse Dynamics
###


def inverse_dynamics(
    model: Model,
    q: np.ndarray,
    qdot: np.ndarray,
    qddot: np.ndarray,
    f_ext: np.ndarray | None = None,
    tau: np.ndarray | None = None,
) -> np.ndarray:
    """
    Computes the generalized forces required to realize the given joint accelerations.

    Evaluated at ``qddot = 0`` this yields the bias force ``C(q, qdot)``
    including gravity and velocity-product terms.
    """
    qddot = model.check_state_vector(qddot, "qddot")
    f_ext = _check_external_forces(model, f_ext)
    update_kinematics_custom(model, q, qdot)

    if tau is None:
        tau = np.zeros(model.dof_count, dtype=np.float64)

    a_root = -model.spatial_gravity
    f = np.zeros((model.num_bodies, 6), dtype=np.float64)

    for i in range(1, model.num_bodies):
        lam = model.parent[i]
        a_lam = a_root if lam == 0 else model.a[lam]
        model.a[i] = model.X_lambda[i].apply(a_lam) + model.c[i] + model.S[i] * qddot[i - 1]

        Iv = model.I[i] @ model.v[i]
        f[i] = model.I[i] @ model.a[i] + crossf(model.v[i], Iv)
        if f_ext is not None:
            f[i] -= model.X_base[i].apply_adjoint(f_ext[i])

    for i in range(model.num_bodies - 1, 0, -1):
        tau[i - 1] = model.S[i] @ f[i]
        lam = model.parent[i]
        if lam != 0:
            f[lam] += model.X_lambda[i].apply_transpose(f[i])

    return tau


###
# Mass Matrix
###


def composite_rigid_body_algorithm(
    model: Model,
    q: np.ndarray,
    H: np.ndarray | None = None,
    update_kinematics: bool = True,
) -> np.ndarray:
    """
    Computes the joint-space mass matrix ``H(q)``.

    If ``update_kinematics`` is ``False`` the transforms already cached in the
    model are used and ``q`` is ignored.
    """
    if update_kinematics:
        update_kinematics_custom(model, q)

    n = model.dof_count
    if H is None:
        H = np.zeros((n, n), dtype=np.float64)
    else:
        if H.shape != (n, n):
            raise ValueError(f"Mass matrix must have shape ({n}, {n}) but has shape {H.shape}.")
        H.fill(0.0)

    Ic = model.I.copy()
    for i in range(model.num_bodies - 1, 0, -1):
        lam = model.parent[i]
        if lam != 0:
            X = model.X_lambda[i].to_matrix()
            Ic[lam] += X.T @ Ic[i] @ X

        F = Ic[i] @ model.S[i]
        H[i - 1, i - 1] = model.S[i] @ F

        j = i
        while model.parent[j] != 0:
            F = model.X_lambda[j].apply_transpose(F)
            j = model.parent[j]
            H[i - 1, j - 1] = F @ model.S[j]
            H[j - 1, i - 1] = H[i - 1, j - 1]

    return H


###
# Forward Dynamics
###


def forward_dynamics(
    model: Model,
    q: np.ndarray,
    qdot: np.ndarray,
    tau: np.ndarray,
    f_ext: np.ndarray | None = None,
    qddot: np.ndarray | None = None,
) -> np.ndarray:
    """
    Computes the joint accelerations using the articulated-body algorithm.

    Besides returning ``qddot``, this leaves the articulated-body quantities
    ``IA``, ``pA``, ``U``, ``d`` and ``u`` of every body in the model, which
    are reused by the range-space constraint solver.
    """
    tau = model.check_state_vector(tau, "tau")
    f_ext = _check_external_forces(model, f_ext)
    update_kinematics_custom(model, q, qdot)

    if qddot is None:
        qddot = np.zeros(model.dof_count, dtype=np.float64)

    # Outward pass: rigid-body inertias and bias forces
    for i in range(1, model.num_bodies):
        model.IA[i] = model.I[i]
        model.pA[i] = crossf(model.v[i], model.I[i] @ model.v[i])
        if f_ext is not None:
            model.pA[i] -= model.X_base[i].apply_adjoint(f_ext[i])

    # Inward pass: articulated-body inertias and bias forces
    for i in range(model.num_bodies - 1, 0, -1):
        S = model.S[i]
        model.U[i] = model.IA[i] @ S
        model.d[i] = S @ model.U[i]
        model.u[i] = tau[i - 1] - S @ model.pA[i]

        lam = model.parent[i]
        if lam != 0:
            Ia = model.IA[i] - np.outer(model.U[i], model.U[i]) / model.d[i]
            pa = model.pA[i] + Ia @ model.c[i] + model.U[i] * model.u[i] / model.d[i]
            X = model.X_lambda[i].to_matrix()
            model.IA[lam] += X.T @ Ia @ X
            model.pA[lam] += model.X_lambda[i].apply_transpose(pa)

    # Outward pass: accelerations
    a_root = -model.spatial_gravity
    for i in range(1, model.num_bodies):
        lam = model.parent[i]
        a_lam = a_root if lam == 0 else model.a[lam]
        a = model.X_lambda[i].apply(a_lam) + model.c[i]
        qddot[i - 1] = (model.u[i] - model.U[i] @ a) / model.d[i]
        model.a[i] = a + model.S[i] * qddot[i - 1]

    msg.debug("forward_dynamics: qddot = %s", qddot)
    return qddot
