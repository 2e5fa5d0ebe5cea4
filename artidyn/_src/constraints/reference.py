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
Brute-force evaluation of the range-space contact formulation.

Every column of the contact-space inertia is obtained from a complete
forward dynamics evaluation with the test force applied as an external
force. This is considerably slower than :func:`forward_dynamics_contacts`
and is meant to validate it.
"""

import numpy as np

from ..core.model import Model
from ..dynamics.unconstrained import forward_dynamics
from ..utils import logger as msg
from .constraint_set import ConstraintSet
from .rangespace import (
    accumulate_constraint_forces,
    compute_baseline,
    compute_test_force,
    fill_contact_inertia_row,
)

###
# Module interface
###

__all__ = [
    "forward_dynamics_contacts_reference",
]


###
# Solver
###


def forward_dynamics_contacts_reference(
    model: Model,
    q: np.ndarray,
    qdot: np.ndarray,
    tau: np.ndarray,
    cs: ConstraintSet,
    qddot: np.ndarray | None = None,
) -> np.ndarray:
    """
    Computes the constrained joint accelerations with full forward dynamics evaluations.

    Produces the same ``cs.K``, ``cs.a`` and ``cs.force`` as
    :func:`forward_dynamics_contacts`.
    """
    cs.check_bound(model)
    q = model.check_state_vector(q, "q")
    qdot = model.check_state_vector(qdot, "qdot")
    tau = model.check_state_vector(tau, "tau")
    if qddot is None:
        qddot = np.zeros(model.dof_count, dtype=np.float64)

    forward_dynamics(model, q, qdot, tau, qddot=cs.QDDot_0)
    compute_baseline(model, q, qdot, cs)

    f_ext = np.zeros((model.num_bodies, 6), dtype=np.float64)
    for i in range(cs.size()):
        compute_test_force(model, q, cs, i, out=cs.f_t[i])
        f_ext.fill(0.0)
        f_ext[cs.body[i]] = cs.f_t[i]
        forward_dynamics(model, q, qdot, tau, f_ext, qddot=cs.QDDot_t)
        fill_contact_inertia_row(model, q, qdot, cs, i)

    msg.debug("forward_dynamics_contacts_reference: K =\n%s", cs.K)
    msg.debug("forward_dynamics_contacts_reference: a = %s", cs.a)

    if cs.size() > 0:
        cs.solve_linear_system(cs.K, cs.a, cs.force)
    msg.debug("forward_dynamics_contacts_reference: f = %s", cs.force)

    accumulate_constraint_forces(cs)
    return forward_dynamics(model, q, qdot, tau, cs.f_ext_constraints, qddot=qddot)
