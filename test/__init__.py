import time
import unittest
from os.path import dirname

import numpy as np
from OrbitalTools.orbitals import GaussianSet
from OrbitalTools.shells import S, P, D5

prefix = dirname(__file__)


def s_basis(mo_coeff=1.0):
    """
    one hydrogen at the origin with a single s primitive (c=1, a=1)
    and one MO
    """
    basis = GaussianSet()
    atom = basis.add_atom([0.0, 0.0, 0.0], 1)
    basis.add_shell(atom, S)
    basis.add_primitive(1.0, 1.0)
    basis.set_mo_coefficients([mo_coeff])
    return basis


def water_like_basis(seed=0):
    """
    three atoms (bohr) with s, p, and 5d shells
    MO coefficients are random but reproducible
    """
    basis = GaussianSet()
    o = basis.add_atom([0.0, 0.0, 0.22], 8)
    h1 = basis.add_atom([0.0, 1.43, -0.89], 1)
    h2 = basis.add_atom([0.0, -1.43, -0.89], 1)

    basis.add_shell(o, S)
    for c, a in [(0.154329, 130.70932), (0.535328, 23.808861), (0.444635, 6.4436083)]:
        basis.add_primitive(c, a)
    basis.add_shell(o, S)
    for c, a in [(-0.099967, 5.0331513), (0.399513, 1.1695961), (0.700115, 0.380389)]:
        basis.add_primitive(c, a)
    basis.add_shell(o, P)
    for c, a in [(0.155916, 5.0331513), (0.607684, 1.1695961), (0.391957, 0.380389)]:
        basis.add_primitive(c, a)
    basis.add_shell(o, D5)
    basis.add_primitive(1.0, 1.2)
    for h in [h1, h2]:
        basis.add_shell(h, S)
        for c, a in [(0.154329, 3.42525091), (0.535328, 0.62391373), (0.444635, 0.16885540)]:
            basis.add_primitive(c, a)

    rng = np.random.default_rng(seed)
    basis.set_mo_coefficients(rng.uniform(-1, 1, basis.n_mos ** 2))
    return basis


class TestWithTimer(unittest.TestCase):
    last_class = None

    @classmethod
    def setUpClass(cls):
        cls.class_time = time.time()

    @classmethod
    def tearDownClass(cls):
        print(
            "\nRan %s in %.4fs" % (cls.__name__, time.time() - cls.class_time)
        )
        print(unittest.TextTestResult.separator2)

    def setUp(self):
        self.start_time = time.time()

    def tearDown(self):
        t = time.time() - self.start_time
        this_class, test_name = self.id().split(".")[-2:]
        if this_class != TestWithTimer.last_class:
            TestWithTimer.last_class = this_class
            print("\n%s" % this_class)
        print("   %-40s %.4fs" % (test_name, t))
