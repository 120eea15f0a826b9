"""For storing the atoms that basis functions are centered on"""
import numpy as np

from OrbitalTools.atoms import Atom
from OrbitalTools.const import UNIT


class Geometry:
    """
    Attributes:
        name
        atoms
    """

    def __init__(self, atoms=None, name=""):
        self.name = name
        self.atoms = []
        if atoms is not None:
            for atom in atoms:
                if not isinstance(atom, Atom):
                    raise TypeError(
                        "cannot build a Geometry from %s" % type(atom).__name__
                    )
                self.atoms.append(atom)

    def __repr__(self):
        s = ""
        for a in self.atoms:
            s += a.__repr__() + "\n"
        return s

    def __len__(self):
        return len(self.atoms)

    @property
    def num_atoms(self):
        return len(self.atoms)

    @property
    def coords(self):
        """array(shape=(n_atoms, 3)) of atom coordinates"""
        return self.coordinates()

    def coordinates(self, atoms=None):
        """returns N x 3 coordinate matrix for requested atoms"""
        if atoms is None:
            atoms = self.atoms
        if not atoms:
            return np.zeros((0, 3))
        return np.array([a.coords for a in atoms])

    @property
    def atomic_numbers(self):
        return np.array([a.atomic_number for a in self.atoms], dtype=int)

    def add_atom(self, atom):
        """adds atom to the end of the atom list, returns its index"""
        self.atoms.append(atom)
        return len(self.atoms) - 1

    def atom_pos(self, index):
        return self.atoms[index].coords

    def copy(self, name=None):
        if name is None:
            name = self.name
        return Geometry([a.copy() for a in self.atoms], name=name)

    def scaled(self, factor):
        """
        returns a copy with every coordinate multiplied by factor
        e.g. geom.scaled(UNIT.A0_TO_BOHR) turns bohr into angstrom
        """
        geom = self.copy()
        for atom in geom.atoms:
            atom.coords *= factor
        return geom

    def to_angstrom(self):
        """copy of a geometry stored in bohr converted to angstrom"""
        return self.scaled(UNIT.BOHR_TO_ANGSTROM)

    def COM(self, targets=None):
        """
        calculates the geometric center of the target atoms
        returns a vector from the origin to the center
        parameters:
            targets (list) - indices of the atoms to use (defaults to all)
        """
        if targets is None:
            targets = self.atoms
        else:
            targets = [self.atoms[i] for i in targets]
        if not targets:
            return np.zeros(3)
        return np.mean(self.coordinates(targets), axis=0)
