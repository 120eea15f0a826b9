"""For storing, manipulating, and measuring atomic structures"""
import numpy as np

from OrbitalTools.const import ELEMENTS


class Atom:
    """
    Attributes:
        element         str
        coords          np.array(float)
        name            str             form of \\d+(\\.\\d+)*
    """

    def __init__(self, element="", coords=None, name=""):
        if coords is None:
            coords = np.zeros(3)
        if isinstance(element, (int, np.integer)):
            if not 0 <= element < len(ELEMENTS):
                raise ValueError("Unknown atomic number detected:", element)
            element = ELEMENTS[element]
        element = str(element).strip().capitalize()
        if element and element not in ELEMENTS:
            raise ValueError("Unknown element detected:", element)
        self.element = element
        self.coords = np.array(coords, dtype=float)
        self.name = str(name).strip()

    def __repr__(self):
        s = ""
        s += "{:>4s} ".format(self.element)
        for c in self.coords:
            s += "{:10.6f} ".format(c)
        s += "  {}".format(self.name)
        return s

    @property
    def atomic_number(self):
        if not self.element:
            return 0
        return ELEMENTS.index(self.element)

    def copy(self):
        return Atom(self.element, self.coords.copy(), self.name)

    def dist(self, other):
        """returns the distance between self and other"""
        if isinstance(other, Atom):
            other = other.coords
        return np.linalg.norm(self.coords - other)
