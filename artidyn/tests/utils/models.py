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

"""Provides utility functions to build small articulated models for testing."""

import numpy as np

from artidyn import Axis, Body, Joint, Model, SpatialTransform
from artidyn.spatial import xtrans

###
# Module interface
###

__all__ = [
    "build_branched_tree",
    "build_planar_chain",
    "build_single_prismatic_body",
    "random_state",
]


###
# Builders
###


def build_single_prismatic_body(mass: float = 1.0, gravity: float = 9.81) -> Model:
    """
    Builds a single body sliding along the world Y axis under gravity.

    The body has one DoF and its frame coincides with the world frame at ``q = 0``.
    """
    model = Model(gravity=(0.0, -gravity, 0.0))
    model.add_body(
        0,
        SpatialTransform(),
        Joint.prismatic(Axis.Y),
        Body(mass=mass, com=(0.0, 0.0, 0.0), inertia=np.eye(3)),
        name="slider",
    )
    return model


def build_planar_chain(num_links: int = 3, length: float = 1.0) -> Model:
    """
    Builds a serial chain of links rotating about the world Z axis.

    Every link has its center of mass in the middle of the link and the next
    joint at its tip, both along the local X axis.
    """
    model = Model()
    parent = 0
    for i in range(num_links):
        joint_frame = SpatialTransform() if i == 0 else xtrans((length, 0.0, 0.0))
        body = Body(
            mass=1.0 + 0.5 * i,
            com=(0.5 * length, 0.0, 0.0),
            inertia=np.diag([0.01, 0.1 + 0.02 * i, 0.1 + 0.02 * i]),
        )
        parent = model.add_body(parent, joint_frame, Joint.revolute(Axis.Z), body, name=f"link_{i}")
    return model


def build_branched_tree() -> Model:
    """
    Builds a planar torso with two legs and a tail.

    The torso moves freely in the XY plane through two massless prismatic
    bodies and a revolute joint. Each leg has a hip and a knee, and the tail
    is a single link attached through a revolute joint about the world X axis.
    """
    model = Model()
    base_x = model.add_body(0, SpatialTransform(), Joint.prismatic(Axis.X), Body(), name="base_x")
    base_y = model.add_body(base_x, SpatialTransform(), Joint.prismatic(Axis.Y), Body(), name="base_y")
    torso = model.add_body(
        base_y,
        SpatialTransform(),
        Joint.revolute(Axis.Z),
        Body(mass=10.0, com=(0.0, 0.1, 0.0), inertia=np.diag([0.4, 0.3, 0.5])),
        name="torso",
    )

    for side, offset in (("left", 0.3), ("right", -0.3)):
        thigh = model.add_body(
            torso,
            xtrans((offset, 0.0, 0.0)),
            Joint.revolute(Axis.Z),
            Body(mass=2.0, com=(0.0, -0.25, 0.0), inertia=np.diag([0.05, 0.01, 0.05])),
            name=f"{side}_thigh",
        )
        model.add_body(
            thigh,
            xtrans((0.0, -0.5, 0.0)),
            Joint.revolute(Axis.Z),
            Body(mass=1.0, com=(0.0, -0.25, 0.0), inertia=np.diag([0.03, 0.005, 0.03])),
            name=f"{side}_shank",
        )

    model.add_body(
        torso,
        xtrans((0.0, 0.2, -0.1)),
        Joint.revolute(Axis.X),
        Body(mass=0.5, com=(0.0, 0.0, -0.2), inertia=np.diag([0.01, 0.01, 0.002])),
        name="tail",
    )
    return model


###
# States
###


def random_state(model: Model, seed: int = 0) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Generates reproducible random joint positions, velocities and forces."""
    rng = np.random.default_rng(seed)
    n = model.dof_count
    q = rng.uniform(-0.5, 0.5, n)
    qdot = rng.uniform(-1.0, 1.0, n)
    tau = rng.uniform(-2.0, 2.0, n)
    return q, qdot, tau
