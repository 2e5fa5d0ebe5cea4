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

"""Provides definitions of the single-DoF joint types supported by the kinematic model"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

import numpy as np

from .spatial import SpatialTransform, xrot, xtrans
from .types import Axis, AxisType, Vec3, float64, override

###
# Module interface
###

__all__ = [
    "Joint",
    "JointType",
]


###
# Enumerations
###


class JointType(IntEnum):
    """
    An enumeration of the joint types.
    """

    REVOLUTE = 0
    """Rotation about a single axis fixed in the joint frame."""

    PRISMATIC = 1
    """Translation along a single axis fixed in the joint frame."""

    @override
    def __str__(self):
        """Returns a string representation of the joint type."""
        return f"JointType.{self.name} ({self.value})"

    @override
    def __repr__(self):
        """Returns a string representation of the joint type."""
        return self.__str__()


###
# Containers
###


@dataclass
class Joint:
    """
    A single degree-of-freedom joint connecting a body to its parent.

    Attributes:
        type (JointType): The joint type.
        axis (np.ndarray): Unit axis of the joint, expressed in the joint frame.
    """

    type: JointType = JointType.REVOLUTE
    """The joint type."""

    axis: np.ndarray = field(default_factory=lambda: Axis.Z.to_array())
    """Unit axis of the joint, expressed in the joint frame."""

    def __post_init__(self):
        self.type = JointType(self.type)
        axis = np.array(self.axis, dtype=float64)
        if axis.shape != (3,):
            raise ValueError(f"Joint axis must be a 3-vector but has shape {axis.shape}.")
        norm = np.linalg.norm(axis)
        if norm == 0.0:
            raise ValueError("Joint axis must be non-zero.")
        self.axis = axis / norm

    @classmethod
    def revolute(cls, axis: AxisType | Vec3) -> Joint:
        if not isinstance(axis, list | tuple | np.ndarray):
            axis = Axis.from_any(axis).to_array()
        return cls(JointType.REVOLUTE, axis)

    @classmethod
    def prismatic(cls, axis: AxisType | Vec3) -> Joint:
        if not isinstance(axis, list | tuple | np.ndarray):
            axis = Axis.from_any(axis).to_array()
        return cls(JointType.PRISMATIC, axis)

    @property
    def motion_subspace(self) -> np.ndarray:
        """The 6-dimensional motion subspace ``S`` of the joint."""
        S = np.zeros(6, dtype=float64)
        if self.type == JointType.REVOLUTE:
            S[:3] = self.axis
        else:
            S[3:] = self.axis
        return S

    def transform(self, q: float) -> SpatialTransform:
        """Computes the joint transform ``X_J(q)`` from the joint frame to the body frame."""
        if self.type == JointType.REVOLUTE:
            return xrot(q, self.axis)
        return xtrans(q * self.axis)
