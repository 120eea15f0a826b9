"""Holds constants"""
import os

ORBITALTOOLS = os.path.dirname(os.path.abspath(__file__))
ORBITALLIB = os.getenv(
    "ORBITALLIB", os.path.join(os.path.expanduser("~"), "OrbitalTools_lib")
)

# index is the atomic number, Bq is a ghost atom
ELEMENTS = [
    "Bq",
    "H", "He",
    "Li", "Be", "B", "C", "N", "O", "F", "Ne",
    "Na", "Mg", "Al", "Si", "P", "S", "Cl", "Ar",
    "K", "Ca", "Sc", "Ti", "V", "Cr", "Mn", "Fe", "Co", "Ni", "Cu", "Zn",
    "Ga", "Ge", "As", "Se", "Br", "Kr",
    "Rb", "Sr", "Y", "Zr", "Nb", "Mo", "Tc", "Ru", "Rh", "Pd", "Ag", "Cd",
    "In", "Sn", "Sb", "Te", "I", "Xe",
    "Cs", "Ba",
    "La", "Ce", "Pr", "Nd", "Pm", "Sm", "Eu", "Gd", "Tb", "Dy", "Ho", "Er",
    "Tm", "Yb", "Lu",
    "Hf", "Ta", "W", "Re", "Os", "Ir", "Pt", "Au", "Hg",
    "Tl", "Pb", "Bi", "Po", "At", "Rn",
    "Fr", "Ra",
    "Ac", "Th", "Pa", "U", "Np", "Pu", "Am", "Cm", "Bk", "Cf", "Es", "Fm",
    "Md", "No", "Lr",
    "Rf", "Db", "Sg", "Bh", "Hs", "Mt", "Ds", "Rg", "Cn",
    "Nh", "Fl", "Mc", "Lv", "Ts", "Og",
]


class UNIT:
    # bohr radius in angstrom
    # divide angstrom by this to get bohr
    A0_TO_BOHR = 0.529177249
    BOHR_TO_ANGSTROM = A0_TO_BOHR
    ANGSTROM_TO_BOHR = 1.0 / A0_TO_BOHR
