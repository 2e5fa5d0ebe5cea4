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

# ==================================================================================
# core
# ==================================================================================
from ._src.core import (
    Axis,
    AxisType,
    Body,
    Joint,
    JointType,
    Model,
    SpatialTransform,
)
from ._version import __version__

__all__ = [
    "Axis",
    "AxisType",
    "Body",
    "Joint",
    "JointType",
    "Model",
    "SpatialTransform",
    "__version__",
]

# ==================================================================================
# kinematics
# ==================================================================================
from ._src.kinematics import (
    base_to_body_coordinates,
    body_to_base_coordinates,
    point_acceleration,
    point_jacobian,
    point_velocity,
    update_kinematics,
    update_kinematics_custom,
)

__all__ += [
    "base_to_body_coordinates",
    "body_to_base_coordinates",
    "point_acceleration",
    "point_jacobian",
    "point_velocity",
    "update_kinematics",
    "update_kinematics_custom",
]

# ==================================================================================
# dynamics
# ==================================================================================
from ._src.dynamics import (  # noqa: E402
    composite_rigid_body_algorithm,
    forward_dynamics,
    inverse_dynamics,
)

__all__ += [
    "composite_rigid_body_algorithm",
    "forward_dynamics",
    "inverse_dynamics",
]

# ==================================================================================
# constraints
# ==================================================================================
from ._src.constraints import (  # noqa: E402
    ConstraintSet,
    ConstraintSetConfig,
    compute_contact_impulses_lagrangian,
    forward_dynamics_acceleration_deltas,
    forward_dynamics_apply_constraint_forces,
    forward_dynamics_contacts,
    forward_dynamics_contacts_lagrangian,
)
from ._src.linalg import LinearSolverType  # noqa: E402

__all__ += [
    "ConstraintSet",
    "ConstraintSetConfig",
    "LinearSolverType",
    "compute_contact_impulses_lagrangian",
    "forward_dynamics_acceleration_deltas",
    "forward_dynamics_apply_constraint_forces",
    "forward_dynamics_contacts",
    "forward_dynamics_contacts_lagrangian",
]

# ==================================================================================
# submodule APIs
# ==================================================================================
from . import linalg, spatial, utils  # noqa: E402

__all__ += [
    "linalg",
    "spatial",
    "utils",
]
