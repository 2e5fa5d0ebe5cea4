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
Provides the container of point-contact constraints and of the scratch
buffers used by the constrained forward dynamics solvers.

A :class:`ConstraintSet` goes through a strict lifecycle:

1. It is created empty and constraints are appended with :meth:`ConstraintSet.add_constraint`.
2. It is bound to a :class:`Model` with :meth:`ConstraintSet.bind`, which freezes the
   constraint topology and allocates every buffer the solvers need.
3. It is passed to any number of solver calls, optionally :meth:`ConstraintSet.clear`-ed
   in between.

The order in which constraints are appended defines the row/column order of
every derived matrix and vector.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from ..core.model import Model
from ..core.types import Vec3, axis_from_normal, float64
from ..linalg.linear import ComputationInfo, LinearSolver, LinearSolverType, make_linear_solver
from ..utils import logger as msg

###
# Module interface
###

__all__ = [
    "ConstraintSet",
    "ConstraintSetConfig",
]


###
# Types
###


@dataclass
class ConstraintSetConfig:
    """
    A data container to hold the configurations of a constraint set.
    """

    linear_solver: LinearSolverType = LinearSolverType.PARTIAL_PIV_LU
    """
    The dense linear solver strategy used for the constraint systems.\n
    Defaults to `LinearSolverType.PARTIAL_PIV_LU`.
    """

    compute_error: bool = False
    """
    Set to `True` to compute (and log) the residual error of every linear solve.\n
    Defaults to `False`.
    """

    def __post_init__(self) -> None:
        """
        Performs validation checks on the configuration values after initialization.
        """
        self.check_values()

    def check_values(self) -> None:
        """
        Validates configuration values.
        """
        try:
            self.linear_solver = LinearSolverType(self.linear_solver)
        except ValueError as err:
            raise ValueError(f"Invalid linear_solver: {self.linear_solver}.") from err
        if not isinstance(self.compute_error, bool):
            raise ValueError(f"Invalid compute_error: {self.compute_error}. Must be a boolean.")


###
# Constraint Set
###


class ConstraintSet:
    """
    A sequence of unilateral point constraints together with the solver scratch.

    Each constraint restricts the acceleration of a point fixed on a body
    along a world coordinate axis to a prescribed target value.
    """

    def __init__(self, config: ConstraintSetConfig | None = None):
        if config is None:
            config = ConstraintSetConfig()
        config.check_values()

        self.linear_solver: LinearSolverType = config.linear_solver
        """The dense linear solver strategy used for the constraint systems."""
        self.compute_error: bool = config.compute_error
        """Whether the residual error of every linear solve is computed."""

        # Constraint topology
        self.body: list[int] = []
        self.point: list[np.ndarray] = []
        self.normal: list[np.ndarray] = []
        self.name: list[str | None] = []
        self._axes: list[int] = []

        # Targets and results
        self.acceleration: np.ndarray = np.zeros(0, dtype=float64)
        """Target normal acceleration of each constraint (target velocity for impulses)."""
        self.force: np.ndarray = np.zeros(0, dtype=float64)
        """Solved force (or impulse) of each constraint."""

        self._bound: bool = False
        self._num_bodies: int = 0
        self._dof_count: int = 0
        self._solvers: dict[LinearSolverType, LinearSolver] = {}

    def __len__(self) -> int:
        return len(self.body)

    def __repr__(self) -> str:
        return (
            f"ConstraintSet(size={len(self)}, bound={self._bound}, "
            f"linear_solver={LinearSolverType(self.linear_solver).name}, compute_error={self.compute_error})"
        )

    @property
    def bound(self) -> bool:
        """Whether the set has been bound to a model."""
        return self._bound

    def size(self) -> int:
        """Returns the number of constraints."""
        return len(self.body)

    ###
    # Topology
    ###

    def add_constraint(
        self,
        body_id: int,
        body_point: Vec3,
        world_normal: Vec3,
        name: str | None = None,
        acceleration: float = 0.0,
    ) -> int:
        """
        Appends a constraint and returns its index.

        Args:
            body_id: Index of the constrained body, must be non-zero.
            body_point: Attachment point in body coordinates.
            world_normal: Constraint direction, one of the world coordinate axes.
            name: Optional name of the constraint.
            acceleration: Target acceleration along the normal.

        Raises:
            RuntimeError: If the set has already been bound.
            ValueError: If any of the arguments is malformed.
        """
        if self._bound:
            raise RuntimeError("Cannot add constraints to a ConstraintSet that has already been bound.")
        if int(body_id) != body_id or body_id < 1:
            raise ValueError(f"Invalid body index {body_id}: constraints cannot be attached to the root.")
        point = np.array(body_point, dtype=float64)
        if point.shape != (3,):
            raise ValueError(f"Constraint point must be a 3-vector but has shape {point.shape}.")
        axis = axis_from_normal(world_normal)

        self.body.append(int(body_id))
        self.point.append(point)
        self.normal.append(axis.to_array())
        self.name.append(name)
        self._axes.append(int(axis))
        self.acceleration = np.append(self.acceleration, float64(acceleration))
        return len(self.body) - 1

    def axis_index(self, index: int) -> int:
        """Returns the index ``0|1|2`` of the world axis along the normal of the given constraint."""
        if index < 0 or index >= len(self._axes):
            raise ValueError(f"Invalid constraint index {index} for a set of {len(self._axes)} constraints.")
        return self._axes[index]

    ###
    # Lifecycle
    ###

    def bind(self, model: Model) -> bool:
        """
        Allocates all solver buffers for the given model and freezes the topology.

        Raises:
            RuntimeError: If the set has already been bound.
            ValueError: If a constraint refers to a body that does not exist in the model.
        """
        if self._bound:
            raise RuntimeError("ConstraintSet has already been bound to a model.")
        for body_id in self.body:
            model.check_body_id(body_id)

        n_dof = model.dof_count
        n_bodies = model.num_bodies
        n_c = len(self.body)

        self.force = np.zeros(n_c, dtype=float64)

        # Dense Lagrangian system
        self.H = np.zeros((n_dof, n_dof), dtype=float64)
        self.C = np.zeros(n_dof, dtype=float64)
        self.gamma = np.zeros(n_c, dtype=float64)
        self.G = np.zeros((n_c, n_dof), dtype=float64)
        self.A = np.zeros((n_dof + n_c, n_dof + n_c), dtype=float64)
        self.b = np.zeros(n_dof + n_c, dtype=float64)
        self.x = np.zeros(n_dof + n_c, dtype=float64)

        # Range-space system
        self.K = np.zeros((n_c, n_c), dtype=float64)
        self.a = np.zeros(n_c, dtype=float64)
        self.QDDot_t = np.zeros(n_dof, dtype=float64)
        self.QDDot_0 = np.zeros(n_dof, dtype=float64)
        self.f_t = np.zeros((n_c, 6), dtype=float64)
        self.f_ext_constraints = np.zeros((n_bodies, 6), dtype=float64)
        self.point_accel_0 = np.zeros((n_c, 3), dtype=float64)

        # Articulated-body deltas
        self.d_pA = np.zeros((n_bodies, 6), dtype=float64)
        self.d_a = np.zeros((n_bodies, 6), dtype=float64)
        self.d_u = np.zeros(n_bodies, dtype=float64)
        self.d_IA = np.zeros((n_bodies, 6, 6), dtype=float64)
        self.d_U = np.zeros((n_bodies, 6), dtype=float64)
        self.d_d = np.zeros(n_bodies, dtype=float64)

        self._num_bodies = n_bodies
        self._dof_count = n_dof
        self._bound = True
        msg.debug("ConstraintSet bound: %d constraints, %d dofs, %d bodies", n_c, n_dof, n_bodies)
        return True

    def clear(self):
        """Zeroes all numeric buffers in place, including targets and results."""
        self.acceleration.fill(0.0)
        self.force.fill(0.0)
        if not self._bound:
            return
        for buffer in (
            self.H,
            self.C,
            self.gamma,
            self.G,
            self.A,
            self.b,
            self.x,
            self.K,
            self.a,
            self.QDDot_t,
            self.QDDot_0,
            self.f_t,
            self.f_ext_constraints,
            self.point_accel_0,
            self.d_pA,
            self.d_a,
            self.d_u,
            self.d_IA,
            self.d_U,
            self.d_d,
        ):
            buffer.fill(0.0)

    def check_bound(self, model: Model):
        """
        Checks that the set is bound to a model of the same size as ``model``.

        Raises:
            RuntimeError: If the set is unbound or was bound to a differently sized model.
        """
        if not self._bound:
            raise RuntimeError("ConstraintSet must be bound to a model before solving.")
        if model.num_bodies != self._num_bodies or model.dof_count != self._dof_count:
            raise RuntimeError(
                f"ConstraintSet was bound to a model with {self._num_bodies} bodies and {self._dof_count} dofs, "
                f"but is used with a model with {model.num_bodies} bodies and {model.dof_count} dofs."
            )

    ###
    # Linear systems
    ###

    def solve_linear_system(
        self,
        A: np.ndarray,
        b: np.ndarray,
        x: np.ndarray,
        solver_type: LinearSolverType | None = None,
    ) -> np.ndarray:
        """
        Solves ``A @ x = b`` into ``x``.

        The strategy defaults to the configured ``linear_solver``, solvers are
        created once per strategy and reused across calls.
        """
        solver_type = LinearSolverType(self.linear_solver if solver_type is None else solver_type)
        solver = self._solvers.get(solver_type)
        if solver is None:
            solver = make_linear_solver(solver_type)
            self._solvers[solver_type] = solver

        solver.compute(A)
        x[:] = b
        solver.solve_inplace(x, compute_error=self.compute_error)

        if solver.info != ComputationInfo.Success:
            msg.info("%s reported %s while solving a constraint system", solver_type.name, solver.info.name)
        if self.compute_error:
            msg.debug("Linear solve error: abs = %s, rel = %s", solver.error_abs, solver.error_rel)
        return x
