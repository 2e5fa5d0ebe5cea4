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
Provides the kinematic tree model used by the dynamics and constraint solvers.

The tree is stored as a flat arena of bodies addressed by index. Body ``0`` is
the fixed virtual root and every body ``i >= 1`` has a parent index
``parent[i] < i``, which makes increasing index order a valid root-to-leaf
traversal order and decreasing index order a valid leaf-to-root order. Each
body is connected to its parent by a single-DoF joint, so the joint
coordinate of body ``i`` is stored at ``q[i - 1]``.

Besides the time-invariant description of the tree, the model holds the
per-body state caches (transforms, velocities, accelerations and
articulated-body quantities) that are written as a side effect of every
kinematics or dynamics pass. A model must therefore never be shared between
concurrently running passes.
"""

from __future__ import annotations

import numpy as np

from .bodies import Body
from .joints import Joint
from .spatial import SpatialTransform
from .types import Vec3, float64, int32

###
# Module interface
###

__all__ = [
    "Model",
]


###
# Constants
###

DEFAULT_GRAVITY = (0.0, -9.81, 0.0)
"""The default gravity vector (in world coordinates)."""


###
# Model
###


class Model:
    """
    A kinematic tree of rigid bodies connected by single-DoF joints.

    Attributes:
        gravity (np.ndarray): The gravity vector in world coordinates.
        parent (list[int]): Parent index of each body, ``parent[0] == 0`` for the root.
        bodies (list[Body]): Inertial description of each body.
        joints (list[Joint | None]): Joint connecting each body to its parent.
        names (list[str]): Name of each body.
        X_T (list[SpatialTransform]): Fixed transform from the parent frame to the joint frame.
        S (np.ndarray): Joint motion subspaces, shape ``(num_bodies, 6)``.
        I (np.ndarray): Spatial inertias about the body origins, shape ``(num_bodies, 6, 6)``.
    """

    def __init__(self, gravity: Vec3 = DEFAULT_GRAVITY):
        self.gravity: np.ndarray = np.array(gravity, dtype=float64).reshape(3)

        # Time-invariant description of the tree, slot 0 is the fixed root
        self.parent: list[int] = [0]
        self.bodies: list[Body] = [Body()]
        self.joints: list[Joint | None] = [None]
        self.names: list[str] = ["ROOT"]
        self.X_T: list[SpatialTransform] = [SpatialTransform()]
        self.S: np.ndarray = np.zeros((1, 6), dtype=float64)
        self.I: np.ndarray = np.zeros((1, 6, 6), dtype=float64)

        # Per-body state caches
        self._allocate_state()

    def __repr__(self) -> str:
        return f"Model(num_bodies={self.num_bodies}, dof_count={self.dof_count}, gravity={self.gravity.tolist()})"

    ###
    # Properties
    ###

    @property
    def num_bodies(self) -> int:
        """Number of bodies in the arena, including the fixed root."""
        return len(self.bodies)

    @property
    def dof_count(self) -> int:
        """Number of joint coordinates of the model."""
        return len(self.bodies) - 1

    @property
    def spatial_gravity(self) -> np.ndarray:
        """The gravity vector as a spatial acceleration in world coordinates."""
        return np.concatenate((np.zeros(3, dtype=float64), self.gravity))

    ###
    # Internals
    ###

    def _allocate_state(self):
        n = self.num_bodies

        self.X_lambda: list[SpatialTransform] = [SpatialTransform() for _ in range(n)]
        """Transform from the parent frame to the body frame."""
        self.X_base: list[SpatialTransform] = [SpatialTransform() for _ in range(n)]
        """Transform from the base (world) frame to the body frame."""

        self.v: np.ndarray = np.zeros((n, 6), dtype=float64)
        """Spatial velocity of each body in body coordinates."""
        self.a: np.ndarray = np.zeros((n, 6), dtype=float64)
        """Spatial acceleration of each body in body coordinates."""
        self.c: np.ndarray = np.zeros((n, 6), dtype=float64)
        """Velocity-product acceleration of each body in body coordinates."""

        self.IA: np.ndarray = np.zeros((n, 6, 6), dtype=float64)
        """Articulated-body inertia of each body."""
        self.pA: np.ndarray = np.zeros((n, 6), dtype=float64)
        """Articulated-body bias force of each body."""
        self.U: np.ndarray = np.zeros((n, 6), dtype=float64)
        """Coupling vector ``U = IA @ S`` of each body."""
        self.d: np.ndarray = np.zeros(n, dtype=float64)
        """Joint-space inertia scalar ``d = S . U`` of each body."""
        self.u: np.ndarray = np.zeros(n, dtype=float64)
        """Joint-space bias force ``u = tau - S . pA`` of each body."""

    ###
    # Operations
    ###

    def add_body(
        self,
        parent_id: int,
        joint_frame: SpatialTransform,
        joint: Joint,
        body: Body,
        name: str | None = None,
    ) -> int:
        """
        Appends a body to the tree and returns its index.

        Args:
            parent_id: Index of the parent body, ``0`` for the fixed root.
            joint_frame: Transform from the parent frame to the joint frame.
            joint: The joint connecting the new body to its parent.
            body: The inertial description of the new body.
            name: Optional name of the body.
        """
        if parent_id < 0 or parent_id >= self.num_bodies:
            raise ValueError(f"Invalid parent body index {parent_id} for a model with {self.num_bodies} bodies.")

        body_id = self.num_bodies
        self.parent.append(int(parent_id))
        self.bodies.append(body)
        self.joints.append(joint)
        self.names.append(name if name is not None else f"body_{body_id}")
        self.X_T.append(joint_frame.copy())
        self.S = np.vstack((self.S, joint.motion_subspace[None, :]))
        self.I = np.concatenate((self.I, body.spatial_inertia[None, :, :]), axis=0)

        self._allocate_state()
        return body_id

    def get_body_id(self, name: str) -> int:
        """Returns the index of the body with the given name."""
        try:
            return self.names.index(name)
        except ValueError as err:
            raise ValueError(f"No body named '{name}' in the model.") from err

    def parent_array(self) -> np.ndarray:
        """Returns the parent indices as an integer array."""
        return np.asarray(self.parent, dtype=int32)

    def ancestors(self, body_id: int) -> list[int]:
        """Returns the chain ``[body_id, parent, ..., child-of-root]`` excluding the root."""
        chain = []
        i = body_id
        while i != 0:
            chain.append(i)
            i = self.parent[i]
        return chain

    def check_body_id(self, body_id: int):
        if body_id <= 0 or body_id >= self.num_bodies:
            raise ValueError(f"Invalid body index {body_id}: must be in [1, {self.num_bodies - 1}].")

    def check_state_vector(self, x: np.ndarray, name: str) -> np.ndarray:
        x = np.asarray(x, dtype=float64)
        if x.shape != (self.dof_count,):
            raise ValueError(f"Vector '{name}' must have shape ({self.dof_count},) but has shape {x.shape}.")
        return x
