#!/usr/bin/env python3
import unittest

import numpy as np
from OrbitalTools import shells
from OrbitalTools.orbitals import S_NORM, GaussianSet
from OrbitalTools.shells import P, S
from OrbitalTools.test import TestWithTimer, s_basis, water_like_basis


class TestShells(TestWithTimer):
    coords = np.array([
        [0.0, 0.0, 0.0],
        [0.5, -0.3, 1.2],
        [2.0, 1.0, -1.0],
        [-0.7, 0.4, 0.1],
    ])

    def test_frozen(self):
        basis = water_like_basis()
        frozen = basis.freeze()
        self.assertTrue(basis.initialized)
        self.assertFalse(frozen.mo_coefficients.flags.writeable)
        self.assertFalse(frozen.normalized_coeff.flags.writeable)
        self.assertEqual(frozen.n_shell, basis.n_shell)
        self.assertEqual(frozen.n_orbitals, basis.n_mos)

        # the snapshot doesn't change when the basis set does
        basis.add_shell(0, S)
        basis.add_primitive(1.0, 1.0)
        self.assertEqual(frozen.n_mos, basis.n_mos - 1)
        self.assertEqual(len(frozen.gto_indices), frozen.n_shell + 1)

    def test_atom_deltas(self):
        frozen = water_like_basis().freeze()
        deltas, r2 = shells.atom_deltas(frozen, self.coords)
        self.assertEqual(deltas.shape, (4, 3, 3))
        self.assertEqual(r2.shape, (4, 3))
        self.assertTrue(np.allclose(np.sum(deltas ** 2, axis=-1), r2))

        deltas, r2 = shells.atom_deltas(frozen, self.coords[1])
        self.assertEqual(deltas.shape, (3, 3))
        self.assertEqual(r2.shape, (3,))

    def test_mo_is_sum_of_basis_functions(self):
        frozen = water_like_basis().freeze()
        values = shells.basis_values(frozen, self.coords)
        self.assertEqual(values.shape, (frozen.n_mos, len(self.coords)))
        for mo in range(0, frozen.n_mos):
            self.assertTrue(
                np.allclose(
                    shells.mo_value(frozen, mo, self.coords),
                    np.dot(frozen.mo_coefficients[:, mo], values),
                )
            )

    def test_eval_shell(self):
        frozen = s_basis().freeze()
        delta = np.array([0.5, 0.0, 0.0])
        val = shells.eval_shell(frozen, 0, delta, 0.25, 0)
        self.assertAlmostEqual(val, S_NORM * np.exp(-0.25))

        out = np.zeros(frozen.n_mos)
        shells.eval_shell_components(frozen, 0, delta, 0.25, out)
        self.assertAlmostEqual(out[0], val)

    def test_small_coefficients(self):
        frozen = s_basis(mo_coeff=1e-25).freeze()
        self.assertEqual(shells.mo_value(frozen, 0, np.zeros(3)), 0.0)

        basis = GaussianSet()
        basis.add_atom([0.0, 0.0, 0.0], 1)
        basis.add_shell(0, P)
        basis.add_primitive(1.0, 1.0)
        basis.set_mo_coefficients([1e-21, -1e-21, 0.0])
        frozen = basis.freeze()
        self.assertTrue(
            np.all(shells.mo_value(frozen, 0, self.coords) == 0)
        )
        # basis function values don't depend on the MO coefficients
        values = shells.basis_values(frozen, self.coords)
        self.assertTrue(np.any(values != 0))

    def test_density_is_square_for_one_function(self):
        basis = s_basis()
        basis.set_density_matrix([[1.0]])
        frozen = basis.freeze()
        values = shells.basis_values(frozen, self.coords)[0]
        self.assertTrue(
            np.allclose(shells.density_value(frozen, self.coords), values ** 2)
        )
        self.assertAlmostEqual(
            shells.density_value(frozen, np.zeros(3)), S_NORM ** 2
        )


if __name__ == "__main__":
    unittest.main()
