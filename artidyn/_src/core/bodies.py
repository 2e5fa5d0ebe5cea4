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

"""Provides definitions of rigid bodies"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from .spatial import spatial_inertia
from .types import float64, override

###
# Module interface
###

__all__ = [
    "Body",
]


###
# Containers
###


@dataclass
class Body:
    """
    A container to describe a single rigid body of a kinematic tree.

    Attributes:
        mass (float): Mass of the body (in kg).
        com (np.ndarray): Center of mass (in body coordinates).
        inertia (np.ndarray): Moment of inertia matrix about the center of mass (in body coordinates).
    """

    mass: float = 0.0
    """Mass of the body."""

    com: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=float64))
    """Center of mass of the body in body coordinates."""

    inertia: np.ndarray = field(default_factory=lambda: np.zeros((3, 3), dtype=float64))
    """Moment of inertia matrix of the body about its center of mass."""

    def __post_init__(self):
        if self.mass < 0.0:
            raise ValueError(f"Invalid body mass: {self.mass}. Must be non-negative.")
        self.com = np.array(self.com, dtype=float64).reshape(3)
        self.inertia = np.array(self.inertia, dtype=float64).reshape(3, 3)

    @override
    def __repr__(self) -> str:
        """Returns a human-readable string representation of the Body."""
        return f"Body(\nmass: {self.mass},\ncom: {self.com},\ninertia:\n{self.inertia}\n)"

    @property
    def spatial_inertia(self) -> np.ndarray:
        """The 6x6 spatial inertia of the body about its frame origin."""
        return spatial_inertia(self.mass, self.com, self.inertia)
