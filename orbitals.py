import numpy as np

from scipy.special import factorial2

from OrbitalTools import addlogger, CHUNK_SIZE, N_JOBS
from OrbitalTools import shells
from OrbitalTools.atoms import Atom
from OrbitalTools.calculation import CubeCalculation
from OrbitalTools.cube import Cube
from OrbitalTools.geometry import Geometry
from OrbitalTools.shells import (
    S, P, SP, D, D5, F, F7, G, G9, H, H11, I, I13,
    FUNCS_PER_SHELL,
    is_implemented,
)
from OrbitalTools.utils.utils import range_list, uptri2sym


class PreconditionError(ValueError):
    """requested calculation cannot be done with the data in the basis set"""


class MalformedInputError(RuntimeError):
    """basis set builder methods were called out of order"""


def gau_norm(a, l):
    """
    normalization for gaussian primitives that depends on
    the exponential (a) and the total angular momentum (l)
    """
    t1 = np.sqrt((2 * a) ** (l + 3 / 2)) / (np.pi ** (3.0 / 4))
    # (-1)!! = 1
    if l > 0:
        t2 = np.sqrt(2 ** l / factorial2(2 * l - 1, exact=True))
    else:
        t2 = 1.0
    return t1 * t2


# (8 / pi^3)^0.25, ~0.71270547
S_NORM = gau_norm(1, 0)
# (128 / pi^3)^0.25, ~1.425410941
P_NORM = gau_norm(1, 1)
# xx, yy, zz: (2048 / 9pi^3)^0.25, ~1.645922781
D_NORM_DIAG = gau_norm(1, 2)
# xy, xz, yz: (2048 / pi^3)^0.25, ~2.850821881
D_NORM_CROSS = np.sqrt(3) * D_NORM_DIAG


def _s_coeffs(c, a):
    return [c * a ** 0.75 * S_NORM]


def _p_coeffs(c, a):
    return 3 * [c * a ** 1.25 * P_NORM]


def _d_coeffs(c, a):
    return 3 * [c * a ** 1.75 * D_NORM_DIAG] + 3 * [c * a ** 1.75 * D_NORM_CROSS]


def _d5_coeffs(c, a):
    pi3 = np.pi ** 3
    a7 = a ** 7
    d0 = c * (2048 * a7 / (9.0 * pi3)) ** 0.25
    d1 = c * (2048 * a7 / pi3) ** 0.25
    d2p = c * (128 * a7 / pi3) ** 0.25
    d2n = c * (2048 * a7 / pi3) ** 0.25
    return [d0, d1, d1, d2p, d2n]


# normalized coefficients for each function of a primitive
NORMALIZATION = {
    S: _s_coeffs,
    P: _p_coeffs,
    D: _d_coeffs,
    D5: _d5_coeffs,
}

SHELL_TYPES = [S, P, SP, D, D5, F, F7, G, G9, H, H11, I, I13]


class FrozenGaussianSet:
    """
    read-only copy of a finalized GaussianSet
    this is what worker threads see while a cube is being filled
    attributes:
    shell_types - tuple(str), type of each shell
    atom_indices - array, atom each shell is on
    atom_coords - array(shape=(n_atoms, 3)), atom positions in bohr
    gto_indices - array(len=n_shell + 1), primitives of shell i are
                  gto_indices[i]:gto_indices[i + 1]
    mo_indices - array, first row of each shell in the MO coefficients
    c_indices - array, first normalized coefficient of each shell
    exponents - array, exponent of each primitive
    normalized_coeff - array, one per primitive per basis function
    mo_coefficients - array(shape=(n_mos, n_mos)), MO i is column i
    density_matrix - array(shape=(n_mos, n_mos)) or None
    density_weights - lower triangle of the density matrix with the
                      off-diagonal doubled
    """

    def __init__(self, gaussian_set):
        def frozen(arr, dtype=float):
            arr = np.array(arr, dtype=dtype)
            arr.setflags(write=False)
            return arr

        self.shell_types = tuple(gaussian_set.shell_types)
        self.atom_indices = frozen(gaussian_set.atom_indices, dtype=int)
        self.atom_coords = frozen(gaussian_set.geometry.coords).reshape(-1, 3)
        self.gto_indices = frozen(gaussian_set.gto_indices, dtype=int)
        self.mo_indices = frozen(gaussian_set.mo_indices, dtype=int)
        self.c_indices = frozen(gaussian_set.c_indices, dtype=int)
        self.exponents = frozen(gaussian_set.exponents)
        self.normalized_coeff = frozen(gaussian_set.normalized_coeff)
        self.n_mos = gaussian_set.n_mos
        if gaussian_set.mo_coefficients is None:
            self.mo_coefficients = frozen(np.zeros((0, 0)))
        else:
            self.mo_coefficients = frozen(gaussian_set.mo_coefficients)
        self.density_matrix = None
        self.density_weights = None
        if gaussian_set.density_matrix is not None:
            density = np.array(gaussian_set.density_matrix, dtype=float)
            self.density_matrix = frozen(density)
            self.density_weights = frozen(
                2 * np.tril(density, -1) + np.diag(np.diag(density))
            )

    @property
    def n_shell(self):
        return len(self.shell_types)

    @property
    def n_orbitals(self):
        return self.mo_coefficients.shape[0]


@addlogger
class GaussianSet:
    """
    gaussian basis set and molecular orbital coefficients
    file parsers fill this in with add_atom, add_shell, add_primitive,
    set_mo_coefficients, and set_density_matrix
    after that, MOs and densities can be evaluated on a Cube
    attributes:
    geometry - Geometry(), atoms the shells are on (bohr)
    shell_types - list(str), type of each shell (e.g. s, p, 6d, 5d)
    atom_indices - list(int), atom each shell is centered on
    exponents - list(float), exponent of each primitive
    contraction_coeff - list(float), contraction coefficient of each primitive
    n_mos - number of basis functions
    mo_coefficients - array(shape=(n_mos, n_mos)) or None
    n_orbitals - number of MOs that can be evaluated (rows of mo_coefficients)
    n_mo_columns - number of MOs that were actually given, the
                   coefficients of the rest are 0
    density_matrix - array(shape=(n_mos, n_mos)) or None
    initialized - False if anything changed since init_calculation

    available after init_calculation:
    gto_indices - array(len=n_shell + 1), primitive range of each shell
    mo_indices - array(len=n_shell), first basis function of each shell
    c_indices - array(len=n_shell), first normalized coefficient
                of each shell
    normalized_coeff - array, contraction coefficients with
                       normalization included, one for each
                       basis function of each primitive
    """

    LOG = None

    def __init__(self):
        self.geometry = Geometry()
        self.shell_types = []
        self.atom_indices = []
        self.exponents = []
        self.contraction_coeff = []
        self._shell_starts = []
        self.n_mos = 0
        self.mo_coefficients = None
        self.n_orbitals = 0
        self.n_mo_columns = 0
        self.density_matrix = None
        self.gto_indices = np.zeros(1, dtype=int)
        self.mo_indices = np.zeros(0, dtype=int)
        self.c_indices = np.zeros(0, dtype=int)
        self.normalized_coeff = np.zeros(0)
        self.initialized = False

    def __repr__(self):
        return "GaussianSet(%i atoms, %i shells, %i basis functions)" % (
            self.geometry.num_atoms, self.n_shell, self.n_mos,
        )

    @property
    def n_shell(self):
        return len(self.shell_types)

    @property
    def n_atoms(self):
        return self.geometry.num_atoms

    def add_atom(self, position, atomic_number):
        """
        adds an atom at position (bohr)
        returns the index of the atom
        """
        self.initialized = False
        return self.geometry.add_atom(Atom(int(atomic_number), position))

    def add_shell(self, atom, shell_type):
        """
        adds a shell of the given type on atom
        returns the index of the shell
        """
        if shell_type not in FUNCS_PER_SHELL:
            raise ValueError(
                "unknown shell type %s, expected one of: %s" % (
                    repr(shell_type), ", ".join(SHELL_TYPES)
                )
            )
        self.n_mos += FUNCS_PER_SHELL[shell_type]
        self.initialized = False
        self.shell_types.append(shell_type)
        self.atom_indices.append(atom)
        return len(self.shell_types) - 1

    def add_primitive(self, coefficient, exponent):
        """
        adds a primitive to the most recently added shell
        returns the index of the primitive
        """
        if not self.shell_types:
            raise MalformedInputError(
                "a shell must be added before its primitives"
            )
        # first primitive of this shell (or of any shell with none)
        while len(self._shell_starts) < len(self.shell_types):
            self._shell_starts.append(len(self.exponents))
        self.exponents.append(float(exponent))
        self.contraction_coeff.append(float(coefficient))
        self.initialized = False
        return len(self.exponents) - 1

    def set_mo_coefficients(self, mo_coeffs):
        """
        sets the MO coefficients from a flat list
        the coefficients of MO j are mo_coeffs[j * n_mos:(j + 1) * n_mos]
        some programs don't print every MO, so the number of MOs is
        len(mo_coeffs) // n_mos
        """
        if not self.n_mos:
            raise MalformedInputError(
                "shells must be added before MO coefficients"
            )
        mo_coeffs = np.asarray(mo_coeffs, dtype=float).ravel()
        columns = len(mo_coeffs) // self.n_mos
        if columns > self.n_mos:
            raise MalformedInputError(
                "got %i MOs, but there are only %i basis functions" % (
                    columns, self.n_mos
                )
            )
        if len(mo_coeffs) % self.n_mos:
            self.LOG.warning(
                "%i MO coefficients is not a multiple of %i basis functions, "
                "the last %i will be ignored" % (
                    len(mo_coeffs), self.n_mos, len(mo_coeffs) % self.n_mos
                )
            )
        self.LOG.debug("adding MOs: %i basis functions, %i MOs" % (
            self.n_mos, columns
        ))
        self.initialized = False
        self.mo_coefficients = np.zeros((self.n_mos, self.n_mos))
        self.mo_coefficients[:, :columns] = np.reshape(
            mo_coeffs[: columns * self.n_mos], (columns, self.n_mos)
        ).T
        self.n_orbitals = self.mo_coefficients.shape[0]
        self.n_mo_columns = columns

    def set_density_matrix(self, density):
        """
        density - square matrix or the lower triangle as a flat list
                  (0; 1 2; 3 4 5; ...)
        """
        density = np.asarray(density, dtype=float)
        if density.ndim == 1:
            density = uptri2sym(density, col_based=True)
        if density.ndim != 2 or density.shape[0] != density.shape[1]:
            raise ValueError(
                "density matrix must be square, got shape %s" % repr(density.shape)
            )
        self.density_matrix = density.copy()
        return True

    def is_valid(self):
        """True if there is at least one shell and every shell has primitives"""
        if not self.shell_types:
            return False
        gto_indices = self._get_gto_indices()
        return bool(np.all(np.diff(gto_indices) > 0))

    def _get_gto_indices(self):
        starts = list(self._shell_starts)
        while len(starts) < len(self.shell_types):
            starts.append(len(self.exponents))
        return np.array(starts + [len(self.exponents)], dtype=int)

    def init_calculation(self):
        """
        normalizes the contraction coefficients and sets up
        the index arrays for each shell
        does nothing if nothing has changed since the last call
        """
        if self.initialized:
            return

        self.gto_indices = self._get_gto_indices()
        mo_indices = []
        c_indices = []
        normalized_coeff = []
        skipped = []

        index_mo = 0
        for i, shell_type in enumerate(self.shell_types):
            n_func = FUNCS_PER_SHELL[shell_type]
            start = self.gto_indices[i]
            stop = self.gto_indices[i + 1]
            mo_indices.append(index_mo)
            c_indices.append(len(normalized_coeff))
            if shell_type in NORMALIZATION:
                norm = NORMALIZATION[shell_type]
                for c, a in zip(
                    self.contraction_coeff[start:stop],
                    self.exponents[start:stop],
                ):
                    normalized_coeff.extend(norm(c, a))
            else:
                # keep the layout so later shells are indexed correctly
                normalized_coeff.extend([0.0] * n_func * (stop - start))
                skipped.append(i)
            index_mo += n_func

        if skipped:
            self.LOG.warning(
                "normalization is not implemented for %s shells; "
                "shells %s will not contribute and results may be incorrect" % (
                    ", ".join(sorted(set(self.shell_types[i] for i in skipped))),
                    range_list(skipped),
                )
            )

        self.mo_indices = np.array(mo_indices, dtype=int)
        self.c_indices = np.array(c_indices, dtype=int)
        self.normalized_coeff = np.array(normalized_coeff, dtype=float)
        self.initialized = True

    def freeze(self):
        """finalize and return a read-only copy for calculations"""
        self.init_calculation()
        return FrozenGaussianSet(self)

    def clone(self):
        """deep copy of everything, including whether it was initialized"""
        out = GaussianSet()
        out.geometry = self.geometry.copy()
        out.shell_types = list(self.shell_types)
        out.atom_indices = list(self.atom_indices)
        out.exponents = list(self.exponents)
        out.contraction_coeff = list(self.contraction_coeff)
        out._shell_starts = list(self._shell_starts)
        out.n_mos = self.n_mos
        out.n_orbitals = self.n_orbitals
        out.n_mo_columns = self.n_mo_columns
        if self.mo_coefficients is not None:
            out.mo_coefficients = self.mo_coefficients.copy()
        if self.density_matrix is not None:
            out.density_matrix = self.density_matrix.copy()
        out.gto_indices = self.gto_indices.copy()
        out.mo_indices = self.mo_indices.copy()
        out.c_indices = self.c_indices.copy()
        out.normalized_coeff = self.normalized_coeff.copy()
        out.initialized = self.initialized
        return out

    def check_mo(self, state):
        """
        raises PreconditionError if state (1-based) is not an MO
        that can be calculated
        """
        if state < 1 or state > self.n_orbitals:
            raise PreconditionError(
                "MO %i requested, but only MOs 1-%i are available" % (
                    state, self.n_orbitals
                )
            )
        if self.n_orbitals != self.n_mos:
            raise MalformedInputError(
                "shells were added after the MO coefficients were set"
            )
        if state > self.n_mo_columns:
            self.LOG.warning(
                "coefficients for MO %i were not given, it will be 0" % state
            )

    def check_density(self):
        """raises PreconditionError if the density cannot be calculated"""
        if self.density_matrix is None or not self.density_matrix.size:
            raise PreconditionError(
                "cannot calculate density - density matrix not set"
            )
        if self.density_matrix.shape != (self.n_mos, self.n_mos):
            raise PreconditionError(
                "density matrix is %i x %i, but there are %i basis functions" % (
                    *self.density_matrix.shape, self.n_mos
                )
            )

    def calculate_cube_mo(self, cube, state, n_jobs=None, chunk_size=None):
        """
        fill cube with the values of MO state (1-based)
        the cube is locked for writing until the returned
        CubeCalculation is done
        cube - Cube(), positions in angstrom
        n_jobs - number of threads, defaults to n_jobs in the config
        chunk_size - number of points each thread does at a time
        """
        self.check_mo(state)
        return self._calculate_cube(
            cube, Cube.MO, state - 1, n_jobs, chunk_size
        )

    def calculate_cube_density(self, cube, n_jobs=None, chunk_size=None):
        """
        fill cube with the electron density from the density matrix
        see calculate_cube_mo
        """
        self.check_density()
        return self._calculate_cube(
            cube, Cube.ELECTRON_DENSITY, None, n_jobs, chunk_size
        )

    def _calculate_cube(self, cube, cube_type, mo, n_jobs, chunk_size):
        if n_jobs is None:
            n_jobs = N_JOBS
        if chunk_size is None:
            chunk_size = CHUNK_SIZE
        basis = self.freeze()
        self.LOG.debug(
            "filling %s with %s using %i threads" % (
                repr(cube), cube_type, n_jobs
            )
        )
        calc = CubeCalculation(
            basis, cube, cube_type, mo=mo, n_jobs=n_jobs, chunk_size=chunk_size,
        )
        calc.start()
        return calc

    def mo_value(self, state, coords):
        """
        value of MO state (1-based) at coords
        coords - array of points (N, 3) or (3,) in bohr
        """
        self.check_mo(state)
        return shells.mo_value(self.freeze(), state - 1, coords)

    def density_value(self, coords):
        """electron density at coords (bohr)"""
        self.check_density()
        return shells.density_value(self.freeze(), coords)

    def output_all(self):
        """logs a summary of the basis set at the debug level"""
        self.init_calculation()
        self.LOG.debug(
            "Gaussian basis set\nNumber of atoms: %i" % self.geometry.num_atoms
        )
        if not self.is_valid():
            self.LOG.debug("basis set is not valid")
            return

        for i, shell_type in enumerate(self.shell_types):
            self.LOG.debug(
                "%i\tatom index: %i\tshell type: %s\tMO index: %i\tGTO index: %i" % (
                    i,
                    self.atom_indices[i],
                    shell_type,
                    self.mo_indices[i],
                    self.gto_indices[i],
                )
            )
        self.LOG.debug(
            "shells: %i\tgto indices: %i\tlast gto index: %i\n"
            "primitives: %i %i\tnormalized coefficients: %i" % (
                self.n_shell,
                len(self.gto_indices),
                self.gto_indices[-1],
                len(self.exponents),
                len(self.contraction_coeff),
                len(self.normalized_coeff),
            )
        )
        for i, shell_type in enumerate(self.shell_types):
            n_func = FUNCS_PER_SHELL[shell_type]
            if self.mo_coefficients is not None:
                ndx = self.mo_indices[i]
                self.LOG.debug(
                    "shell %i\t%s%s\n  MO 1\t%s" % (
                        i,
                        shell_type,
                        "" if is_implemented(shell_type) else " (not normalized)",
                        "\t".join(
                            "%.6f" % x for x in self.mo_coefficients[ndx : ndx + n_func, 0]
                        ),
                    )
                )
            for j in range(self.gto_indices[i], self.gto_indices[i + 1]):
                self.LOG.debug(
                    "%i\tc: %.6f\ta: %.6f" % (
                        j, self.contraction_coeff[j], self.exponents[j]
                    )
                )
