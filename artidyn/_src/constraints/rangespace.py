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
Range-space (operational-space) formulation of the contact-constrained dynamics.

Instead of forming the joint-space mass matrix, the contact-space inertia
``K`` is assembled column by column by measuring how a unit test force at
each contact point perturbs the accelerations of all contact points. The
perturbations are propagated with the articulated-body quantities left in
the model by the unconstrained forward dynamics, so every column costs a
single pair of sweeps over the tree.

The test force of a constraint opposes its normal. With this convention
``K = -G H^{-1} G^T`` is symmetric negative semi-definite and the solved
forces coincide with the multipliers of the dense Lagrangian formulation.
"""

import numpy as np

from ..core.model import Model
from ..core.spatial import crossf
from ..dynamics.unconstrained import forward_dynamics
from ..kinematics.points import body_to_base_coordinates, point_acceleration, update_kinematics_custom
from ..utils import logger as msg
from .constraint_set import ConstraintSet

###
# Module interface
###

__all__ = [
    "accumulate_constraint_forces",
    "compute_baseline",
    "compute_test_force",
    "fill_contact_inertia_row",
    "forward_dynamics_acceleration_deltas",
    "forward_dynamics_apply_constraint_forces",
    "forward_dynamics_contacts",
]


###
# Utilities
###


def compute_test_force(model: Model, q: np.ndarray, cs: ConstraintSet, index: int, out: np.ndarray | None = None):
    """
    Computes the unit spatial test force of a constraint in base coordinates.

    The force acts against the normal at the global position of the
    attachment point, i.e. ``[p x (-n); -n]``. The transforms cached in the
    model must be up to date for ``q``.
    """
    if out is None:
        out = np.zeros(6, dtype=np.float64)
    p = body_to_base_coordinates(model, q, cs.body[index], cs.point[index], update_kinematics=False)
    n = cs.normal[index]
    out[:3] = np.cross(p, -n)
    out[3:] = -n
    return out


def compute_baseline(model: Model, q: np.ndarray, qdot: np.ndarray, cs: ConstraintSet):
    """Evaluates the point accelerations for ``cs.QDDot_0`` and the rhs ``cs.a``."""
    update_kinematics_custom(model, qddot=cs.QDDot_0)
    for i in range(cs.size()):
        cs.point_accel_0[i] = point_acceleration(
            model, q, qdot, cs.QDDot_0, cs.body[i], cs.point[i], update_kinematics=False
        )
        cs.a[i] = cs.acceleration[i] - cs.normal[i] @ cs.point_accel_0[i]


def fill_contact_inertia_row(model: Model, q: np.ndarray, qdot: np.ndarray, cs: ConstraintSet, index: int):
    """Fills ``cs.K[index]`` from the accelerations ``cs.QDDot_t`` perturbed by the test force ``index``."""
    update_kinematics_custom(model, qddot=cs.QDDot_t)
    for j in range(cs.size()):
        accel = point_acceleration(model, q, qdot, cs.QDDot_t, cs.body[j], cs.point[j], update_kinematics=False)
        cs.K[index, j] = cs.normal[j] @ (accel - cs.point_accel_0[j])


def accumulate_constraint_forces(cs: ConstraintSet):
    """Sums the solved test forces of all constraints into ``cs.f_ext_constraints``."""
    cs.f_ext_constraints.fill(0.0)
    for i in range(cs.size()):
        cs.f_ext_constraints[cs.body[i]] += cs.f_t[i] * cs.force[i]


###
# Articulated-body sweeps
###


def forward_dynamics_acceleration_deltas(
    model: Model,
    cs: ConstraintSet,
    body_id: int,
    f_t: np.ndarray,
    qddot_delta: np.ndarray | None = None,
) -> np.ndarray:
    """
    Computes the change of the joint accelerations caused by a spatial force.

    The force ``f_t`` is given in base coordinates and applied to ``body_id``.
    Its bias is propagated towards the root along the ancestors of the body
    only, after which the resulting acceleration deltas are propagated over the
    whole tree. The articulated-body quantities ``U`` and ``d`` and the
    transforms must have been left in the model by :func:`forward_dynamics`.

    Args:
        model: The kinematic model.
        cs: A constraint set bound to ``model``, providing the scratch buffers.
        body_id: Index of the body the force is applied to.
        f_t: The spatial force in base coordinates.
        qddot_delta: Optional output array, defaults to ``cs.QDDot_t``.

    Returns:
        The joint acceleration deltas.
    """
    cs.check_bound(model)
    model.check_body_id(body_id)
    f_t = np.asarray(f_t, dtype=np.float64)
    if f_t.shape != (6,):
        raise ValueError(f"Test force must be a spatial 6-vector but has shape {f_t.shape}.")
    if qddot_delta is None:
        qddot_delta = cs.QDDot_t

    cs.d_pA.fill(0.0)
    cs.d_u.fill(0.0)

    # Bias forces of the ancestor chain, leaf to root
    cs.d_pA[body_id] = -model.X_base[body_id].apply_adjoint(f_t)
    for i in model.ancestors(body_id):
        cs.d_u[i] = -model.S[i] @ cs.d_pA[i]
        lam = model.parent[i]
        if lam != 0:
            pa = cs.d_pA[i] + model.U[i] * (cs.d_u[i] / model.d[i])
            cs.d_pA[lam] += model.X_lambda[i].apply_transpose(pa)

    # Acceleration deltas of the whole tree, root to leaves
    cs.d_a[0] = 0.0
    for i in range(1, model.num_bodies):
        Xa = model.X_lambda[i].apply(cs.d_a[model.parent[i]])
        qddot_delta[i - 1] = (cs.d_u[i] - model.U[i] @ Xa) / model.d[i]
        cs.d_a[i] = Xa + model.S[i] * qddot_delta[i - 1]

    return qddot_delta


def forward_dynamics_apply_constraint_forces(
    model: Model,
    cs: ConstraintSet,
    tau: np.ndarray,
    qddot: np.ndarray,
) -> np.ndarray:
    """
    Computes the joint accelerations under the forces in ``cs.f_ext_constraints``.

    Only the bias forces are recomputed: the articulated-body inertias left
    in the model by :func:`forward_dynamics` do not depend on external forces
    and are reused. The velocities and transforms cached in the model must be
    those of the preceding :func:`forward_dynamics` call.
    """
    cs.check_bound(model)
    tau = model.check_state_vector(tau, "tau")
    if qddot.shape != (model.dof_count,):
        raise ValueError(f"Output 'qddot' must have shape ({model.dof_count},) but has shape {qddot.shape}.")

    for i in range(1, model.num_bodies):
        cs.d_IA[i] = model.IA[i]
        cs.d_U[i] = model.U[i]
        cs.d_d[i] = model.d[i]
        cs.d_pA[i] = crossf(model.v[i], model.I[i] @ model.v[i])
        cs.d_pA[i] -= model.X_base[i].apply_adjoint(cs.f_ext_constraints[i])

    for i in range(model.num_bodies - 1, 0, -1):
        cs.d_u[i] = tau[i - 1] - model.S[i] @ cs.d_pA[i]
        lam = model.parent[i]
        if lam != 0:
            Ia = cs.d_IA[i] - np.outer(cs.d_U[i], cs.d_U[i]) / cs.d_d[i]
            pa = cs.d_pA[i] + Ia @ model.c[i] + cs.d_U[i] * (cs.d_u[i] / cs.d_d[i])
            cs.d_pA[lam] += model.X_lambda[i].apply_transpose(pa)

    cs.d_a[0] = -model.spatial_gravity
    for i in range(1, model.num_bodies):
        a = model.X_lambda[i].apply(cs.d_a[model.parent[i]]) + model.c[i]
        qddot[i - 1] = (cs.d_u[i] - cs.d_U[i] @ a) / cs.d_d[i]
        cs.d_a[i] = a + model.S[i] * qddot[i - 1]

    return qddot


###
# Solver
###


def forward_dynamics_contacts(
    model: Model,
    q: np.ndarray,
    qdot: np.ndarray,
    tau: np.ndarray,
    cs: ConstraintSet,
    qddot: np.ndarray | None = None,
) -> np.ndarray:
    """
    Computes the constrained joint accelerations with the range-space method.

    Args:
        model: The kinematic model.
        q: Joint positions.
        qdot: Joint velocities.
        tau: Applied joint forces.
        cs: A constraint set bound to ``model``.
        qddot: Optional output array of the joint accelerations.

    Returns:
        The joint accelerations. The constraint forces are stored in ``cs.force``.
    """
    cs.check_bound(model)
    q = model.check_state_vector(q, "q")
    qdot = model.check_state_vector(qdot, "qdot")
    tau = model.check_state_vector(tau, "tau")
    if qddot is None:
        qddot = np.zeros(model.dof_count, dtype=np.float64)

    # Unconstrained accelerations, leaving the articulated-body quantities in the model
    forward_dynamics(model, q, qdot, tau, qddot=cs.QDDot_0)
    compute_baseline(model, q, qdot, cs)

    for i in range(cs.size()):
        compute_test_force(model, q, cs, i, out=cs.f_t[i])
        forward_dynamics_acceleration_deltas(model, cs, cs.body[i], cs.f_t[i], cs.QDDot_t)
        cs.QDDot_t += cs.QDDot_0
        fill_contact_inertia_row(model, q, qdot, cs, i)

    msg.debug("forward_dynamics_contacts: K =\n%s", cs.K)
    msg.debug("forward_dynamics_contacts: a = %s", cs.a)

    if cs.size() > 0:
        cs.solve_linear_system(cs.K, cs.a, cs.force)
    msg.debug("forward_dynamics_contacts: f = %s", cs.force)

    accumulate_constraint_forces(cs)
    return forward_dynamics_apply_constraint_forces(model, cs, tau, qddot)
