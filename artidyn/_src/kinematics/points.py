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
Kinematics of the articulated tree: state updates and point queries.

All point quantities are returned in base (world) coordinates, while points
are given in the local coordinates of the body they are attached to.
"""

import numpy as np

from ..core.model import Model
from ..core.spatial import crossm
from ..core.types import Vec3, float64

###
# Module interface
###

__all__ = [
    "base_to_body_coordinates",
    "body_to_base_coordinates",
    "point_acceleration",
    "point_jacobian",
    "point_velocity",
    "update_kinematics",
    "update_kinematics_custom",
]


###
# State updates
###


def update_kinematics_custom(
    model: Model,
    q: np.ndarray | None = None,
    qdot: np.ndarray | None = None,
    qddot: np.ndarray | None = None,
):
    """
    Selectively updates the kinematic state caches of the model.

    Passing ``q`` updates the transforms, ``qdot`` the spatial velocities and
    velocity-product accelerations and ``qddot`` the spatial accelerations.
    Stages that are skipped keep the values of the most recent update, so e.g.
    updating only the accelerations requires valid transforms and velocities.
    The spatial accelerations written here do not include gravity.
    """
    if q is not None:
        q = model.check_state_vector(q, "q")
        for i in range(1, model.num_bodies):
            lam = model.parent[i]
            model.X_lambda[i] = model.joints[i].transform(q[i - 1]) * model.X_T[i]
            if lam != 0:
                model.X_base[i] = model.X_lambda[i] * model.X_base[lam]
            else:
                model.X_base[i] = model.X_lambda[i].copy()

    if qdot is not None:
        qdot = model.check_state_vector(qdot, "qdot")
        for i in range(1, model.num_bodies):
            lam = model.parent[i]
            vJ = model.S[i] * qdot[i - 1]
            model.v[i] = model.X_lambda[i].apply(model.v[lam]) + vJ
            model.c[i] = crossm(model.v[i], vJ)

    if qddot is not None:
        qddot = model.check_state_vector(qddot, "qddot")
        for i in range(1, model.num_bodies):
            lam = model.parent[i]
            model.a[i] = model.X_lambda[i].apply(model.a[lam]) + model.c[i] + model.S[i] * qddot[i - 1]


def update_kinematics(model: Model, q: np.ndarray, qdot: np.ndarray, qddot: np.ndarray):
    """Updates transforms, velocities and accelerations of all bodies."""
    update_kinematics_custom(model, q, qdot, qddot)


###
# Frames
###


def body_to_base_coordinates(
    model: Model, q: np.ndarray, body_id: int, point: Vec3, update_kinematics: bool = True
) -> np.ndarray:
    """Transforms a point given in body coordinates into base coordinates."""
    model.check_body_id(body_id)
    if update_kinematics:
        update_kinematics_custom(model, q)
    X = model.X_base[body_id]
    return X.r + X.E.T @ np.asarray(point, dtype=float64)


def base_to_body_coordinates(
    model: Model, q: np.ndarray, body_id: int, point: Vec3, update_kinematics: bool = True
) -> np.ndarray:
    """Transforms a point given in base coordinates into body coordinates."""
    model.check_body_id(body_id)
    if update_kinematics:
        update_kinematics_custom(model, q)
    X = model.X_base[body_id]
    return X.E @ (np.asarray(point, dtype=float64) - X.r)


###
# Point queries
###


def point_jacobian(
    model: Model,
    q: np.ndarray,
    body_id: int,
    point: Vec3,
    G: np.ndarray | None = None,
    update_kinematics: bool = True,
) -> np.ndarray:
    """
    Computes the 3 x dof Jacobian of a body-fixed point.

    The Jacobian maps joint velocities to the linear velocity of the point in
    base coordinates. Only the columns of the joints on the path from the body
    to the root are non-zero.
    """
    model.check_body_id(body_id)
    if update_kinematics:
        update_kinematics_custom(model, q)

    if G is None:
        G = np.zeros((3, model.dof_count), dtype=float64)
    else:
        if G.shape != (3, model.dof_count):
            raise ValueError(f"Jacobian must have shape (3, {model.dof_count}) but has shape {G.shape}.")
        G.fill(0.0)

    p = body_to_base_coordinates(model, q, body_id, point, update_kinematics=False)
    for j in model.ancestors(body_id):
        S_base = model.X_base[j].inverse().apply(model.S[j])
        G[:, j - 1] = S_base[3:] + np.cross(S_base[:3], p)
    return G


def point_velocity(
    model: Model,
    q: np.ndarray,
    qdot: np.ndarray,
    body_id: int,
    point: Vec3,
    update_kinematics: bool = True,
) -> np.ndarray:
    """Computes the linear velocity of a body-fixed point in base coordinates."""
    model.check_body_id(body_id)
    if update_kinematics:
        update_kinematics_custom(model, q, qdot)

    r = np.asarray(point, dtype=float64)
    v = model.v[body_id]
    v_point = v[3:] + np.cross(v[:3], r)
    return model.X_base[body_id].E.T @ v_point


def point_acceleration(
    model: Model,
    q: np.ndarray,
    qdot: np.ndarray,
    qddot: np.ndarray,
    body_id: int,
    point: Vec3,
    update_kinematics: bool = True,
) -> np.ndarray:
    """
    Computes the classical linear acceleration of a body-fixed point in base coordinates.

    With ``update_kinematics=False`` the caller is responsible for having
    updated the transforms, velocities and accelerations of the model, which
    allows evaluating many points against a single kinematic update.
    """
    model.check_body_id(body_id)
    if update_kinematics:
        update_kinematics_custom(model, q, qdot, qddot)

    r = np.asarray(point, dtype=float64)
    v = model.v[body_id]
    a = model.a[body_id]
    omega = v[:3]
    v_point = v[3:] + np.cross(omega, r)
    a_point = a[3:] + np.cross(a[:3], r) + np.cross(omega, v_point)
    return model.X_base[body_id].E.T @ a_point
