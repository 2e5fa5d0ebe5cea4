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

"""Contact-constrained forward dynamics and impulses"""

from .constraint_set import ConstraintSet, ConstraintSetConfig
from .lagrangian import compute_contact_impulses_lagrangian, forward_dynamics_contacts_lagrangian
from .rangespace import (
    compute_test_force,
    forward_dynamics_acceleration_deltas,
    forward_dynamics_apply_constraint_forces,
    forward_dynamics_contacts,
)

###
# Module interface
###

__all__ = [
    "ConstraintSet",
    "ConstraintSetConfig",
    "compute_contact_impulses_lagrangian",
    "compute_test_force",
    "forward_dynamics_acceleration_deltas",
    "forward_dynamics_apply_constraint_forces",
    "forward_dynamics_contacts",
    "forward_dynamics_contacts_lagrangian",
]
