"""regularly spaced grids for orbitals and densities"""
import threading
from contextlib import contextmanager

import numpy as np

from OrbitalTools import addlogger


class ReadWriteLock:
    """
    many readers or one writer
    the write lock is not owned by a thread, so it can be released
    by whichever thread finishes the work that needed it
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False

    def acquire_read(self, blocking=True, timeout=-1):
        with self._cond:
            if not blocking and self._writing:
                return False
            if not self._cond.wait_for(
                lambda: not self._writing,
                timeout=None if timeout < 0 else timeout,
            ):
                return False
            self._readers += 1
            return True

    def release_read(self):
        with self._cond:
            if self._readers <= 0:
                raise RuntimeError("release_read called without a read lock")
            self._readers -= 1
            if not self._readers:
                self._cond.notify_all()

    def acquire_write(self, blocking=True, timeout=-1):
        with self._cond:
            def free():
                return not self._writing and not self._readers

            if not blocking and not free():
                return False
            if not self._cond.wait_for(
                free, timeout=None if timeout < 0 else timeout,
            ):
                return False
            self._writing = True
            return True

    def release_write(self):
        with self._cond:
            if not self._writing:
                raise RuntimeError("release_write called without a write lock")
            self._writing = False
            self._cond.notify_all()

    @property
    def locked_for_write(self):
        return self._writing

    @contextmanager
    def read(self):
        self.acquire_read()
        try:
            yield self
        finally:
            self.release_read()

    @contextmanager
    def write(self):
        self.acquire_write()
        try:
            yield self
        finally:
            self.release_write()


@addlogger
class Cube:
    """
    grid of n_pts1 x n_pts2 x n_pts3 points
    point (i, j, k) is at origin + i * v1 + j * v2 + k * v3
    the flat point index runs fastest along the third axis,
    the same order cube files are written in
    attributes:
    n_pts - (n_pts1, n_pts2, n_pts3)
    origin - array(shape=(3,)), position of the first point in angstrom
    axes - array(shape=(3, 3)), v1, v2, and v3 as rows, in angstrom
    data - array(shape=(n_pts1 * n_pts2 * n_pts3,)), value at each point
    cube_type - what the values are (None, Cube.MO, or Cube.ELECTRON_DENSITY)
    lock - ReadWriteLock guarding data
    """

    LOG = None

    MO = "MO"
    ELECTRON_DENSITY = "ElectronDensity"

    def __init__(self, n_pts, origin, axes=None, spacing=0.2, name=""):
        """
        n_pts - number of points along each axis
        origin - coordinates of the first point (angstrom)
        axes - step vectors for each axis (angstrom)
               if not given, x, y, and z with the given spacing are used
        """
        self.n_pts = tuple(int(n) for n in n_pts)
        if len(self.n_pts) != 3 or any(n < 1 for n in self.n_pts):
            raise ValueError("a cube needs at least one point along 3 axes")
        self.origin = np.array(origin, dtype=float)
        if axes is None:
            axes = spacing * np.eye(3)
        self.axes = np.array(axes, dtype=float)
        self.name = name
        self.cube_type = None
        self.data = np.zeros(self.size)
        self.lock = ReadWriteLock()

    def __repr__(self):
        return "Cube(%s, %i x %i x %i)" % (
            self.cube_type, *self.n_pts
        )

    @classmethod
    def from_geometry(
        cls, geom, padding=4, spacing=0.2, standard_axes=False,
    ):
        """
        cube that contains geom with some padding
        geom - Geometry() used to define the cube (angstrom)
        padding - extra space around atoms in angstrom
        spacing - distance between adjacent points in angstrom
        standard_axes - True to use x, y, and z axes
            by default, the cube will be oriented to fit
            the geom and have the smallest volume possible
        """
        n_pts1, n_pts2, n_pts3, v1, v2, v3, com, _ = cls.get_cube_array(
            geom, padding=padding, spacing=spacing, standard_axes=standard_axes,
        )
        return cls(
            (n_pts1, n_pts2, n_pts3), com, axes=[v1, v2, v3], name=geom.name,
        )

    @staticmethod
    def get_cube_array(
        geom,
        padding=4,
        spacing=0.2,
        standard_axes=False,
    ):
        """returns n_pts1, n_pts2, n_pts3, v1, v2, v3, com, u
        n_pts1 is the number of points along the first axis
        n_pts2 ... second axis
        n_pts3 ... third axis
        v1 is the vector for the first axis, norm should be close to spacing
        v2 ... second axis
        v3 ... third axis
        com is the corner of the cube
        u is a rotation matrix for the v1, v2, v3 axes relative to xyz
        """

        def get_standard_axis():
            """returns info to set up a grid along the x, y, and z axes"""
            geom_coords = geom.coords

            ranges = []
            vectors = []
            for i in range(0, 3):
                r = 2 * padding + np.max(geom_coords[:, i]) - np.min(
                    geom_coords[:, i]
                )
                n_pts = int(r // spacing) + 1
                v = np.zeros(3)
                if n_pts > 1:
                    v[i] = r / (n_pts - 1)
                else:
                    v[i] = spacing
                ranges.append(n_pts)
                vectors.append(v)
            com = np.min(geom_coords, axis=0) - padding
            u = np.eye(3)
            return (*ranges, *vectors, com, u)

        if standard_axes or len(geom.atoms) < 2:
            return get_standard_axis()

        test_coords = geom.coords - geom.COM()
        covar = np.dot(test_coords.T, test_coords)
        try:
            # use SVD on the coordinate covariance matrix
            # this decreases the volume of the box we're making
            u, s, vh = np.linalg.svd(covar)
            v1 = u[:, 0]
            v2 = u[:, 1]
            v3 = u[:, 2]
            # change basis of coordinates to the singular vectors
            # this is how we determine the range + padding
            new_coords = np.dot(test_coords, u)
            r_min = np.min(new_coords, axis=0)
            r_max = np.max(new_coords, axis=0)
            com = r_min - padding
            # move the corner back to the xyz space of the original molecule
            com = np.dot(u, com)
            com += geom.COM()
            r1, r2, r3 = 2 * padding + (r_max - r_min)
            n_pts1 = int(r1 // spacing) + 1
            n_pts2 = int(r2 // spacing) + 1
            n_pts3 = int(r3 // spacing) + 1
            v1 = v1 * r1 / max(n_pts1 - 1, 1)
            v2 = v2 * r2 / max(n_pts2 - 1, 1)
            v3 = v3 * r3 / max(n_pts3 - 1, 1)
        except np.linalg.LinAlgError:
            return get_standard_axis()

        return n_pts1, n_pts2, n_pts3, v1, v2, v3, com, u

    @property
    def size(self):
        return int(np.prod(self.n_pts))

    def __len__(self):
        return self.size

    def position(self, index):
        """position of the point with flat index (angstrom)"""
        ndx = np.array(np.unravel_index(index, self.n_pts), dtype=float)
        return self.origin + np.dot(ndx, self.axes)

    def positions(self, start=0, stop=None):
        """array(shape=(stop - start, 3)) of point positions (angstrom)"""
        if stop is None:
            stop = self.size
        ndx = np.array(
            np.unravel_index(np.arange(start, stop), self.n_pts), dtype=float
        ).T
        return self.origin + np.matmul(ndx, self.axes)

    def set_value(self, index, value):
        """
        writers must hold the write lock
        """
        self.data[index] = value

    def set_values(self, start, stop, values):
        self.data[start:stop] = values

    def value(self, index):
        with self.lock.read():
            return self.data[index]

    def values(self, shape=None):
        """
        copy of the data, waits until no one is writing to the cube
        shape - "grid" to get an n_pts1 x n_pts2 x n_pts3 array
        """
        with self.lock.read():
            data = self.data.copy()
        if shape == "grid":
            return data.reshape(self.n_pts)
        return data

    def min_max(self):
        with self.lock.read():
            return np.min(self.data), np.max(self.data)
