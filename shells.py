"""
values of contracted gaussian shells at points in space
everything here reads a FrozenGaussianSet and nothing is modified,
so these can be called from many threads at once
coordinates and distances are in bohr
"""
import numpy as np

from scipy.spatial import distance_matrix

# shell types
S = "s"
P = "p"
SP = "sp"
# cartesian d, xx, yy, zz, xy, xz, yz
D = "6d"
# pure d, d0, d+1, d-1, d+2, d-2
D5 = "5d"
F = "10f"
F7 = "7f"
G = "15g"
G9 = "9g"
H = "21h"
H11 = "11h"
I = "28i"  # noqa: E741
I13 = "13i"

FUNCS_PER_SHELL = {
    S: 1,
    P: 3,
    SP: 4,
    D: 6,
    D5: 5,
    F: 10,
    F7: 7,
    G: 15,
    G9: 9,
    H: 21,
    H11: 11,
    I: 28,
    I13: 13,
}

# MO coefficients smaller than this are treated as zero
SMALL = 1e-20


def is_small(mo_coeffs):
    return np.all(np.abs(mo_coeffs) < SMALL)


def radial_values(basis, shell, r2):
    """
    contracted radial part for each function in the shell
    returns array(shape=(funcs_per_shell, *r2.shape))
    """
    start = basis.gto_indices[shell]
    stop = basis.gto_indices[shell + 1]
    n_func = FUNCS_PER_SHELL[basis.shell_types[shell]]
    c_ndx = basis.c_indices[shell]
    con_coeff = np.reshape(
        basis.normalized_coeff[c_ndx : c_ndx + n_func * (stop - start)],
        (stop - start, n_func),
    )
    e_r2 = np.exp(np.multiply.outer(-basis.exponents[start:stop], r2))
    return np.dot(con_coeff.T, e_r2)


def s_values(x, y, z, r2, radial):
    return [radial[0]]


def p_values(x, y, z, r2, radial):
    return [radial[0] * x, radial[1] * y, radial[2] * z]


def d_values(x, y, z, r2, radial):
    return [
        radial[0] * x * x,
        radial[1] * y * y,
        radial[2] * z * z,
        radial[3] * x * y,
        radial[4] * x * z,
        radial[5] * y * z,
    ]


def d5_values(x, y, z, r2, radial):
    return [
        radial[0] * (z * z - r2),
        radial[1] * x * z,
        radial[2] * y * z,
        radial[3] * (x * x - y * y),
        radial[4] * x * y,
    ]


# angular part of each shell type we can evaluate
SHELL_FUNCTIONS = {
    S: s_values,
    P: p_values,
    D: d_values,
    D5: d5_values,
}


def is_implemented(shell_type):
    return shell_type in SHELL_FUNCTIONS


def shell_values(basis, shell, delta, r2):
    """
    value of each basis function in the shell
    delta - displacement from the shell's atom, shape (3,) or (N, 3)
    r2 - squared length of delta
    """
    shell_type = basis.shell_types[shell]
    radial = radial_values(basis, shell, r2)
    return np.array(
        SHELL_FUNCTIONS[shell_type](
            delta[..., 0], delta[..., 1], delta[..., 2], r2, radial,
        )
    )


def eval_shell(basis, shell, delta, r2, mo):
    """
    contribution of one shell to molecular orbital mo (0-based column)
    shells that are not implemented or have negligible coefficients
    contribute 0
    """
    shell_type = basis.shell_types[shell]
    if not is_implemented(shell_type):
        return np.zeros(np.shape(r2))
    ndx = basis.mo_indices[shell]
    mo_coeffs = basis.mo_coefficients[
        ndx : ndx + FUNCS_PER_SHELL[shell_type], mo
    ]
    if is_small(mo_coeffs):
        return np.zeros(np.shape(r2))
    return np.dot(mo_coeffs, shell_values(basis, shell, delta, r2))


def eval_shell_components(basis, shell, delta, r2, out):
    """
    writes the value of each basis function in the shell to
    out[mo_indices[shell]:mo_indices[shell] + funcs_per_shell]
    out has shape (n_mos,) or (n_mos, N)
    """
    shell_type = basis.shell_types[shell]
    ndx = basis.mo_indices[shell]
    n_func = FUNCS_PER_SHELL[shell_type]
    if not is_implemented(shell_type):
        out[ndx : ndx + n_func] = 0
        return out
    out[ndx : ndx + n_func] = shell_values(basis, shell, delta, r2)
    return out


def atom_deltas(basis, coords):
    """
    displacement of each point from each atom and the squared distances
    returns deltas, r2
    deltas - shape (n_atoms, 3) for one point or (N, n_atoms, 3)
    r2 - shape (n_atoms,) for one point or (N, n_atoms)
    """
    coords = np.asarray(coords, dtype=float)
    points = np.atleast_2d(coords)
    r2 = distance_matrix(points, basis.atom_coords) ** 2
    deltas = points[:, np.newaxis, :] - basis.atom_coords
    if coords.ndim == 1:
        return deltas[0], r2[0]
    return deltas, r2


def _as_output(val):
    if np.ndim(val) == 0:
        return float(val)
    return val


def mo_value(basis, mo, coords):
    """
    value of molecular orbital mo (0-based) at coords (bohr)
    coords - shape (3,) or (N, 3)
    """
    deltas, r2 = atom_deltas(basis, coords)
    val = np.zeros(np.shape(r2)[:-1])
    for shell, atom in enumerate(basis.atom_indices):
        val = val + eval_shell(
            basis, shell, deltas[..., atom, :], r2[..., atom], mo,
        )
    return _as_output(val)


def basis_values(basis, coords):
    """
    value of every basis function at coords (bohr)
    returns array(shape=(n_mos,)) or array(shape=(n_mos, N))
    """
    deltas, r2 = atom_deltas(basis, coords)
    out = np.zeros((basis.n_mos, *np.shape(r2)[:-1]))
    for shell, atom in enumerate(basis.atom_indices):
        eval_shell_components(
            basis, shell, deltas[..., atom, :], r2[..., atom], out,
        )
    return out


def density_value(basis, coords):
    """
    electron density at coords (bohr)
    rho = sum_i D_ii v_i^2 + 2 sum_(i > j) D_ij v_i v_j
    only the lower triangle of the density matrix is used
    """
    values = basis_values(basis, coords)
    rho = np.einsum(
        "i...,ij,j...->...", values, basis.density_weights, values,
    )
    return _as_output(rho)
