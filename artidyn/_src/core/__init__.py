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

"""The kinematic model and its building blocks"""

from .bodies import Body
from .joints import Joint, JointType
from .model import Model
from .spatial import SpatialTransform, crossf, crossm, skew, spatial_inertia, xrot, xtrans
from .types import Axis, AxisType, axis_from_normal

###
# Module interface
###

__all__ = [
    "Axis",
    "AxisType",
    "Body",
    "Joint",
    "JointType",
    "Model",
    "SpatialTransform",
    "axis_from_normal",
    "crossf",
    "crossm",
    "skew",
    "spatial_inertia",
    "xrot",
    "xtrans",
]
