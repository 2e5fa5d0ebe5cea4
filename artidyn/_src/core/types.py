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

"""The core data types used throughout artidyn."""

from __future__ import annotations

import sys
from enum import IntEnum
from typing import Literal

import numpy as np

if sys.version_info >= (3, 12):
    from typing import override
else:
    from typing_extensions import override


###
# Module interface
###

__all__ = [
    "Axis",
    "AxisType",
    "Vec3",
    "axis_from_normal",
    "float64",
    "int32",
    "override",
]


###
# Generics
###

Vec3 = list[float] | tuple[float, float, float] | np.ndarray
Vec6 = list[float] | tuple[float, ...] | np.ndarray
Mat33 = list[list[float]] | np.ndarray


###
# Scalars
###

int32 = np.int32
int64 = np.int64
float32 = np.float32
float64 = np.float64


###
# Axis
###


class Axis(IntEnum):
    """Enum for representing the three axes in 3D space."""

    X = 0
    Y = 1
    Z = 2

    @classmethod
    def from_any(cls, value: AxisType) -> Axis:
        if isinstance(value, str):
            try:
                return cls[value.upper()]
            except KeyError as err:
                raise ValueError(f"Invalid axis string: {value}") from err
        return cls(int(value))

    def to_array(self, dtype: np.dtype = float64) -> np.ndarray:
        return np.eye(3, dtype=dtype)[self.value]


AxisType = Axis | Literal["X", "Y", "Z"] | Literal[0, 1, 2] | int | str
"""Type that can be used to represent an axis, including the enum, string, and integer representations."""


def axis_from_normal(normal: Vec3) -> Axis:
    """
    Maps a world-frame unit normal to the coordinate axis it coincides with.

    Only the exact unit vectors ``(1, 0, 0)``, ``(0, 1, 0)`` and ``(0, 0, 1)`` are accepted,
    any other value raises a ``ValueError``.
    """
    try:
        n = np.asarray(normal, dtype=float64)
    except (TypeError, ValueError) as err:
        raise ValueError(f"Constraint normal must be a 3-vector but is {normal!r}.") from err
    if n.shape != (3,):
        raise ValueError(f"Constraint normal must be a 3-vector but has shape {n.shape}.")
    for axis in Axis:
        if np.array_equal(n, axis.to_array()):
            return axis
    raise ValueError(f"Invalid constraint normal {n}: only the world coordinate axes are supported.")
