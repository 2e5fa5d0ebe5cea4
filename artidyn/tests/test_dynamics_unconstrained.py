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
ARTIDYN: UNIT TESTS: DYNAMICS: UNCONSTRAINED
"""

import unittest

import numpy as np

from artidyn import composite_rigid_body_algorithm, forward_dynamics, inverse_dynamics
from artidyn.tests import setup_tests, test_context
from artidyn.tests.utils.models import (
    build_branched_tree,
    build_planar_chain,
    build_single_prismatic_body,
    random_state,
)

###
# Tests
###


class TestDynamicsUnconstrained(unittest.TestCase):
    def setUp(self):
        if not test_context.setup_done:
            setup_tests()
        self.verbose = test_context.verbose  # Set to True for verbose output
        self.models = {
            "slider": build_single_prismatic_body(),
            "chain": build_planar_chain(num_links=4),
            "tree": build_branched_tree(),
        }

    def test_00_free_fall(self):
        model = self.models["slider"]
        qddot = forward_dynamics(model, np.zeros(1), np.zeros(1), np.zeros(1))
        np.testing.assert_allclose(qddot, [-9.81], atol=1e-12)
        tau = inverse_dynamics(model, np.zeros(1), np.zeros(1), np.zeros(1))
        np.testing.assert_allclose(tau, [9.81], atol=1e-12)

    def test_01_mass_matrix_is_symmetric_positive_definite(self):
        for name, model in self.models.items():
            q, _, _ = random_state(model, seed=1)
            H = composite_rigid_body_algorithm(model, q)
            if self.verbose:
                print(f"\n{name}: H:\n{H}")
            np.testing.assert_allclose(H, H.T, atol=1e-12)
            self.assertTrue(np.all(np.linalg.eigvalsh(H) > 0.0), msg=name)

    def test_02_mass_matrix_matches_inverse_dynamics(self):
        for name, model in self.models.items():
            q, qdot, _ = random_state(model, seed=2)
            n = model.dof_count
            H = composite_rigid_body_algorithm(model, q)
            C = inverse_dynamics(model, q, qdot, np.zeros(n))
            for j in range(n):
                e = np.zeros(n)
                e[j] = 1.0
                tau = inverse_dynamics(model, q, qdot, e)
                np.testing.assert_allclose(tau - C, H[:, j], atol=1e-10, err_msg=name)

    def test_03_forward_dynamics_matches_mass_matrix(self):
        for name, model in self.models.items():
            q, qdot, tau = random_state(model, seed=3)
            n = model.dof_count
            H = composite_rigid_body_algorithm(model, q)
            C = inverse_dynamics(model, q, qdot, np.zeros(n))
            qddot = forward_dynamics(model, q, qdot, tau)
            np.testing.assert_allclose(qddot, np.linalg.solve(H, tau - C), atol=1e-9, err_msg=name)

    def test_04_forward_and_inverse_dynamics_with_external_forces(self):
        model = self.models["tree"]
        q, qdot, tau = random_state(model, seed=4)
        f_ext = np.random.default_rng(5).normal(size=(model.num_bodies, 6))
        qddot = forward_dynamics(model, q, qdot, tau, f_ext)
        np.testing.assert_allclose(inverse_dynamics(model, q, qdot, qddot, f_ext), tau, atol=1e-9)
        with self.assertRaises(ValueError):
            forward_dynamics(model, q, qdot, tau, np.zeros((model.num_bodies, 3)))

    def test_05_preallocated_outputs(self):
        model = self.models["chain"]
        q, qdot, tau = random_state(model, seed=6)
        n = model.dof_count
        qddot = np.zeros(n)
        H = np.zeros((n, n))
        out = forward_dynamics(model, q, qdot, tau, qddot=qddot)
        self.assertIs(out, qddot)
        out = composite_rigid_body_algorithm(model, q, H)
        self.assertIs(out, H)
        with self.assertRaises(ValueError):
            composite_rigid_body_algorithm(model, q, np.zeros((n + 1, n)))


###
# Test execution
###

if __name__ == "__main__":
    # Test setup
    setup_tests()

    # Run all tests
    unittest.main(verbosity=2)
