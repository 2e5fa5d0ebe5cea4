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

r"""
Dense Lagrange-multiplier formulations of the contact-constrained dynamics.

Both solvers assemble the symmetric saddle-point (KKT) system

.. math::
    \begin{bmatrix} H & G^T \\ G & 0 \end{bmatrix}
    \begin{bmatrix} x_q \\ \lambda \end{bmatrix} = b

where ``H`` is the joint-space mass matrix and ``G`` stacks one row of the
point Jacobian per constraint, selected by the axis of its normal. The
multipliers ``lambda`` are stored in ``ConstraintSet.force``.
"""

import numpy as np

from ..core.model import Model
from ..dynamics.unconstrained import composite_rigid_body_algorithm, inverse_dynamics
from ..kinematics.points import point_acceleration, point_jacobian, update_kinematics_custom
from ..linalg.linear import LinearSolverType
from ..utils import logger as msg
from .constraint_set import ConstraintSet

###
# Module interface
###

__all__ = [
    "compute_contact_impulses_lagrangian",
    "forward_dynamics_contacts_lagrangian",
]


###
# Internals
###


def _compute_constraint_jacobian(
    model: Model,
    q: np.ndarray,
    qdot: np.ndarray | None,
    cs: ConstraintSet,
):
    """
    Fills ``cs.G`` and, when ``qdot`` is given, the bias ``cs.gamma``.

    The point Jacobian and the zero-acceleration point acceleration are only
    re-evaluated when the body or the point changes between consecutive
    constraints. The model's kinematic caches must be up to date and, for the
    bias, hold spatial accelerations for ``qddot = 0``.
    """
    Gi = np.zeros((3, model.dof_count), dtype=np.float64)
    accel = np.zeros(3, dtype=np.float64)
    zero = np.zeros(model.dof_count, dtype=np.float64)

    prev_body = None
    prev_point = None
    for i in range(cs.size()):
        body_id = cs.body[i]
        point = cs.point[i]
        if body_id != prev_body or not np.array_equal(point, prev_point):
            point_jacobian(model, q, body_id, point, Gi, update_kinematics=False)
            if qdot is not None:
                accel = point_acceleration(model, q, qdot, zero, body_id, point, update_kinematics=False)
            prev_body = body_id
            prev_point = point

        axis = cs.axis_index(i)
        cs.G[i] = Gi[axis]
        if qdot is not None:
            cs.gamma[i] = accel[axis] - cs.acceleration[i]


def _assemble_kkt_matrix(model: Model, cs: ConstraintSet):
    n = model.dof_count
    cs.A.fill(0.0)
    cs.A[:n, :n] = cs.H
    cs.A[:n, n:] = cs.G.T
    cs.A[n:, :n] = cs.G


###
# Solvers
###


def forward_dynamics_contacts_lagrangian(
    model: Model,
    q: np.ndarray,
    qdot: np.ndarray,
    tau: np.ndarray,
    cs: ConstraintSet,
    qddot: np.ndarray | None = None,
) -> np.ndarray:
    """
    Computes the constrained joint accelerations by solving the dense KKT system.

    The right-hand side is ``[tau - C; -gamma]`` with ``C`` the bias force and
    ``gamma`` the normal acceleration of each constraint point at zero joint
    accelerations minus its target.

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

    n = model.dof_count
    zero = np.zeros(n, dtype=np.float64)
    if qddot is None:
        qddot = np.zeros(n, dtype=np.float64)

    # Bias force and mass matrix, both updating the transforms for q
    inverse_dynamics(model, q, qdot, zero, tau=cs.C)
    composite_rigid_body_algorithm(model, q, cs.H, update_kinematics=False)

    # Inverse dynamics leaves gravity-offset accelerations in the model
    update_kinematics_custom(model, qddot=zero)
    _compute_constraint_jacobian(model, q, qdot, cs)

    _assemble_kkt_matrix(model, cs)
    cs.b[:n] = tau - cs.C
    cs.b[n:] = -cs.gamma
    msg.debug("forward_dynamics_contacts_lagrangian: A =\n%s", cs.A)
    msg.debug("forward_dynamics_contacts_lagrangian: b = %s", cs.b)

    cs.solve_linear_system(cs.A, cs.b, cs.x)
    msg.debug("forward_dynamics_contacts_lagrangian: x = %s", cs.x)

    qddot[:] = cs.x[:n]
    cs.force[:] = cs.x[n:]
    return qddot


def compute_contact_impulses_lagrangian(
    model: Model,
    q: np.ndarray,
    qdot_minus: np.ndarray,
    cs: ConstraintSet,
    qdot_plus: np.ndarray | None = None,
) -> np.ndarray:
    """
    Computes the joint velocities after an impact.

    The target accelerations in ``cs.acceleration`` are interpreted as the
    desired post-impact normal velocities of the constraint points. The
    impulses are stored in ``cs.force``.

    The system is always solved with column-pivoted QR regardless of
    ``cs.linear_solver``, so redundant contacts yield finite impulses.
    """
    cs.check_bound(model)
    q = model.check_state_vector(q, "q")
    qdot_minus = model.check_state_vector(qdot_minus, "qdot_minus")

    n = model.dof_count
    if qdot_plus is None:
        qdot_plus = np.zeros(n, dtype=np.float64)

    composite_rigid_body_algorithm(model, q, cs.H)
    _compute_constraint_jacobian(model, q, None, cs)

    _assemble_kkt_matrix(model, cs)
    cs.b[:n] = cs.H @ qdot_minus
    cs.b[n:] = cs.acceleration
    msg.debug("compute_contact_impulses_lagrangian: A =\n%s", cs.A)
    msg.debug("compute_contact_impulses_lagrangian: b = %s", cs.b)

    cs.solve_linear_system(cs.A, cs.b, cs.x, solver_type=LinearSolverType.COL_PIV_HOUSEHOLDER_QR)
    msg.debug("compute_contact_impulses_lagrangian: x = %s", cs.x)

    qdot_plus[:] = cs.x[:n]
    cs.force[:] = cs.x[n:]
    return qdot_plus
