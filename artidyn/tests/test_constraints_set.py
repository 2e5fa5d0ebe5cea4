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
ARTIDYN: UNIT TESTS: CONSTRAINTS: CONSTRAINT SET
"""

import unittest

import numpy as np

from artidyn import ConstraintSet, ConstraintSetConfig, LinearSolverType, forward_dynamics_contacts
from artidyn.tests import setup_tests, test_context
from artidyn.tests.utils.constraints import make_branched_tree_contacts
from artidyn.tests.utils.models import build_branched_tree, build_planar_chain, random_state

###
# Tests
###


class TestConstraintSet(unittest.TestCase):
    def setUp(self):
        if not test_context.setup_done:
            setup_tests()
        self.verbose = test_context.verbose  # Set to True for verbose output
        self.model = build_branched_tree()

    def test_00_config(self):
        config = ConstraintSetConfig()
        self.assertEqual(config.linear_solver, LinearSolverType.PARTIAL_PIV_LU)
        self.assertFalse(config.compute_error)
        config = ConstraintSetConfig(linear_solver=1)
        self.assertEqual(config.linear_solver, LinearSolverType.COL_PIV_HOUSEHOLDER_QR)
        with self.assertRaises(ValueError):
            ConstraintSetConfig(linear_solver=5)
        with self.assertRaises(ValueError):
            ConstraintSetConfig(compute_error="yes")

    def test_01_add_constraints(self):
        cs = ConstraintSet()
        self.assertEqual(cs.size(), 0)
        self.assertFalse(cs.bound)
        i0 = cs.add_constraint(3, (0.0, 0.0, 0.0), (0.0, 1.0, 0.0), name="c0")
        i1 = cs.add_constraint(3, (0.1, 0.0, 0.0), (0.0, 0.0, 1.0), acceleration=2.0)
        self.assertEqual((i0, i1), (0, 1))
        self.assertEqual(len(cs), 2)
        self.assertEqual(cs.name, ["c0", None])
        self.assertEqual(cs.axis_index(0), 1)
        self.assertEqual(cs.axis_index(1), 2)
        np.testing.assert_allclose(cs.acceleration, [0.0, 2.0])
        if self.verbose:
            print(f"\n{cs}")

    def test_02_invalid_constraints(self):
        cs = ConstraintSet()
        with self.assertRaises(ValueError):
            cs.add_constraint(0, (0.0, 0.0, 0.0), (0.0, 1.0, 0.0))
        with self.assertRaises(ValueError):
            cs.add_constraint(1, (0.0, 0.0), (0.0, 1.0, 0.0))
        with self.assertRaises(ValueError):
            cs.add_constraint(1, (0.0, 0.0, 0.0), (0.0, 0.70710678, 0.70710678))
        for normal in (1, 1.0, "y"):
            with self.assertRaises(ValueError):
                cs.add_constraint(1, (0.0, 0.0, 0.0), normal)
        with self.assertRaises(ValueError):
            cs.axis_index(0)
        self.assertEqual(cs.size(), 0)

    def test_03_bind_allocates_buffers(self):
        cs = make_branched_tree_contacts(self.model)
        n_dof = self.model.dof_count
        n_bodies = self.model.num_bodies
        n_c = cs.size()
        self.assertTrue(cs.bound)
        self.assertEqual(cs.force.shape, (n_c,))
        self.assertEqual(cs.H.shape, (n_dof, n_dof))
        self.assertEqual(cs.G.shape, (n_c, n_dof))
        self.assertEqual(cs.A.shape, (n_dof + n_c, n_dof + n_c))
        self.assertEqual(cs.x.shape, (n_dof + n_c,))
        self.assertEqual(cs.K.shape, (n_c, n_c))
        self.assertEqual(cs.f_t.shape, (n_c, 6))
        self.assertEqual(cs.point_accel_0.shape, (n_c, 3))
        self.assertEqual(cs.f_ext_constraints.shape, (n_bodies, 6))
        self.assertEqual(cs.d_IA.shape, (n_bodies, 6, 6))
        self.assertEqual(cs.d_d.shape, (n_bodies,))

    def test_04_lifecycle_violations(self):
        cs = make_branched_tree_contacts(self.model)
        with self.assertRaises(RuntimeError):
            cs.add_constraint(1, (0.0, 0.0, 0.0), (0.0, 1.0, 0.0))
        with self.assertRaises(RuntimeError):
            cs.bind(self.model)
        self.assertEqual(cs.size(), 4)

        # Solving with an unbound set
        unbound = make_branched_tree_contacts(self.model, bind=False)
        q, qdot, tau = random_state(self.model)
        with self.assertRaises(RuntimeError):
            forward_dynamics_contacts(self.model, q, qdot, tau, unbound)

        # Solving with a model of a different size
        chain = build_planar_chain(num_links=3)
        q, qdot, tau = random_state(chain)
        with self.assertRaises(RuntimeError):
            forward_dynamics_contacts(chain, q, qdot, tau, cs)

    def test_05_bind_checks_body_indices(self):
        cs = ConstraintSet()
        cs.add_constraint(self.model.num_bodies, (0.0, 0.0, 0.0), (0.0, 1.0, 0.0))
        with self.assertRaises(ValueError):
            cs.bind(self.model)
        self.assertFalse(cs.bound)

    def test_06_clear_and_reuse(self):
        q, qdot, tau = random_state(self.model, seed=11)

        cs = make_branched_tree_contacts(self.model)
        forward_dynamics_contacts(self.model, q, qdot, tau, cs)
        cs.clear()
        self.assertTrue(cs.bound)
        self.assertEqual(cs.size(), 4)
        np.testing.assert_array_equal(cs.force, 0.0)
        np.testing.assert_array_equal(cs.acceleration, 0.0)
        np.testing.assert_array_equal(cs.K, 0.0)
        np.testing.assert_array_equal(cs.f_ext_constraints, 0.0)

        fresh = make_branched_tree_contacts(self.model)
        fresh.acceleration.fill(0.0)
        qddot_reused = forward_dynamics_contacts(self.model, q, qdot, tau, cs)
        qddot_fresh = forward_dynamics_contacts(self.model, q, qdot, tau, fresh)
        np.testing.assert_allclose(qddot_reused, qddot_fresh, atol=1e-12)
        np.testing.assert_allclose(cs.force, fresh.force, atol=1e-12)


###
# Test execution
###

if __name__ == "__main__":
    # Test setup
    setup_tests()

    # Run all tests
    unittest.main(verbosity=2)
