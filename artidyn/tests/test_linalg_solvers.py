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

"""Unit tests for the dense linear solvers"""

import unittest

import numpy as np

import artidyn._src.linalg as linalg
import artidyn._src.utils.logger as msg
from artidyn.tests import setup_tests, test_context

###
# Tests
###


class TestLinAlgLinearSolvers(unittest.TestCase):
    def setUp(self):
        if not test_context.setup_done:
            setup_tests()
        self.verbose = test_context.verbose  # Set to True for verbose output
        if self.verbose:
            msg.set_log_level(msg.LogLevel.DEBUG)

        # Define a non-symmetric, well-conditioned matrix and right-hand side
        rng = np.random.default_rng(42)
        self.A = rng.normal(size=(6, 6)) + 6.0 * np.eye(6)
        self.b = rng.normal(size=6)
        self.x_ref = np.linalg.solve(self.A, self.b)
        msg.debug(f"\nA {self.A.shape}[{self.A.dtype}]:\n{self.A}\n\nb:\n{self.b}\n")

        # Define a rank-deficient, consistent system
        self.A_singular = np.array(
            [
                [2.0, 1.0, 1.0],
                [1.0, 2.0, 2.0],
                [1.0, 2.0, 2.0],
            ]
        )
        self.b_singular = np.array([1.0, 3.0, 3.0])

    def tearDown(self):
        if self.verbose:
            msg.reset_log_level()

    def test_00_solver_types(self):
        self.assertEqual(int(linalg.LinearSolverType.PARTIAL_PIV_LU), 0)
        self.assertEqual(int(linalg.LinearSolverType.COL_PIV_HOUSEHOLDER_QR), 1)
        self.assertIn("PARTIAL_PIV_LU", str(linalg.LinearSolverType.PARTIAL_PIV_LU))
        self.assertIsInstance(
            linalg.make_linear_solver(linalg.LinearSolverType.PARTIAL_PIV_LU), linalg.LUSciPySolver
        )
        self.assertIsInstance(
            linalg.make_linear_solver(linalg.LinearSolverType.COL_PIV_HOUSEHOLDER_QR), linalg.QRSciPySolver
        )
        with self.assertRaises(ValueError):
            linalg.make_linear_solver(7)

    def test_01_lu_solver(self):
        solver = linalg.LUSciPySolver()
        solver.compute(self.A)
        x = solver.solve(self.b, compute_error=True)
        msg.debug(f"LUSciPySolver: x: {x}, error_abs: {solver.error_abs}, error_rel: {solver.error_rel}")
        self.assertEqual(solver.info, linalg.ComputationInfo.Success)
        self.assertTrue(np.allclose(x, self.x_ref, atol=1e-12))
        self.assertAlmostEqual(solver.error_abs, 0.0, places=10)
        self.assertTrue(np.allclose(solver.reconstructed(), self.A, atol=1e-12))

    def test_02_qr_solver(self):
        solver = linalg.QRSciPySolver(A=self.A)
        x = solver.solve(self.b, compute_error=True)
        msg.debug(f"QRSciPySolver: x: {x}, error_abs: {solver.error_abs}, error_rel: {solver.error_rel}")
        self.assertEqual(solver.info, linalg.ComputationInfo.Success)
        self.assertEqual(solver.rank, 6)
        self.assertTrue(np.allclose(x, self.x_ref, atol=1e-12))
        self.assertTrue(np.allclose(solver.reconstructed(), self.A, atol=1e-12))

    def test_03_qr_solver_rank_deficient(self):
        solver = linalg.QRSciPySolver()
        solver.compute(self.A_singular)
        x = solver.solve(self.b_singular)
        msg.debug(f"QRSciPySolver: rank: {solver.rank}, x: {x}")
        self.assertEqual(solver.rank, 2)
        self.assertEqual(solver.info, linalg.ComputationInfo.NumericalIssue)
        self.assertTrue(np.all(np.isfinite(x)))
        self.assertTrue(np.allclose(self.A_singular @ x, self.b_singular, atol=1e-10))
        # The basic solution has one vanishing unknown
        self.assertEqual(int(np.count_nonzero(np.abs(x) < 1e-14)), 1)

    def test_04_solve_inplace(self):
        solver = linalg.LUSciPySolver(A=self.A)
        x = self.b.copy()
        solver.solve_inplace(x)
        self.assertTrue(np.allclose(x, self.x_ref, atol=1e-12))
        self.assertIsNone(solver.error_abs)

    def test_05_invalid_inputs(self):
        solver = linalg.LUSciPySolver()
        with self.assertRaises(ValueError):
            solver.reconstructed()
        with self.assertRaises(ValueError):
            solver.compute(np.zeros((2, 3)))
        solver.compute(self.A)
        with self.assertRaises(ValueError):
            solver.solve(np.zeros(5))
        with self.assertRaises(ValueError):
            linalg.QRSciPySolver(rank_threshold=-1.0)
        with self.assertRaises(ValueError):
            linalg.LUSciPySolver(A=self.A, check_symmetry=True)
        self.assertFalse(linalg.is_symmetric_matrix(self.A))
        self.assertTrue(linalg.is_symmetric_matrix(self.A + self.A.T))


###
# Test execution
###

if __name__ == "__main__":
    # Test setup
    setup_tests()

    # Run all tests
    unittest.main(verbosity=2)
