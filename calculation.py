"""filling cubes with orbital values using a thread pool"""
import concurrent.futures
import threading

from OrbitalTools import addlogger, CHUNK_SIZE
from OrbitalTools import shells
from OrbitalTools.const import UNIT


@addlogger
class CubeCalculation:
    """
    handle for a cube that is being filled in the background
    the cube is locked for writing from start() until every value
    has been written; future is resolved after the lock is released
    attributes:
    basis - FrozenGaussianSet being evaluated
    cube - Cube() getting the values
    cube_type - Cube.MO or Cube.ELECTRON_DENSITY
    mo - 0-based MO column (None for density)
    n_jobs - number of threads
    chunk_size - number of points in each work item
    future - concurrent.futures.Future, result is the cube
    """

    LOG = None

    def __init__(
        self, basis, cube, cube_type, mo=None, n_jobs=1, chunk_size=CHUNK_SIZE,
    ):
        self.basis = basis
        self.cube = cube
        self.cube_type = cube_type
        self.mo = mo
        self.n_jobs = max(1, int(n_jobs))
        self.chunk_size = max(1, int(chunk_size))
        self.future = concurrent.futures.Future()
        self._stop = threading.Event()
        self._lock = threading.Lock()
        self._futures = []
        self._remaining = 0
        self._n_done = 0
        self._n_items = 0
        self._error = None
        self._started = False

    def __repr__(self):
        if self.future.cancelled():
            status = "cancelled"
        elif self.future.done():
            status = "done"
        elif self._started:
            status = "running"
        else:
            status = "not started"
        return "CubeCalculation(%s, %s)" % (self.cube_type, status)

    def work_items(self):
        """list of (start, stop) point index ranges"""
        size = self.cube.size
        return [
            (start, min(start + self.chunk_size, size))
            for start in range(0, size, self.chunk_size)
        ]

    def evaluate(self, start, stop):
        """values for points start:stop of the cube"""
        coords = self.cube.positions(start, stop) / UNIT.A0_TO_BOHR
        if self.mo is None:
            return shells.density_value(self.basis, coords)
        return shells.mo_value(self.basis, self.mo, coords)

    def _process(self, start, stop):
        if self._stop.is_set():
            return False
        values = self.evaluate(start, stop)
        # nothing is written once we've been told to stop
        if self._stop.is_set():
            return False
        self.cube.set_values(start, stop, values)
        return True

    def start(self):
        """lock the cube and send the work items to the thread pool"""
        if self._started:
            raise RuntimeError("calculation has already been started")
        self._started = True
        items = self.work_items()
        self._n_items = len(items)
        self._remaining = len(items)

        self.cube.lock.acquire_write()
        self.cube.cube_type = self.cube_type

        executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=self.n_jobs
        )
        submitted = 0
        try:
            for start, stop in items:
                fut = executor.submit(self._process, start, stop)
                with self._lock:
                    self._futures.append(fut)
                submitted += 1
                fut.add_done_callback(self._item_done)
        except Exception as err:
            with self._lock:
                if self._error is None:
                    self._error = err
                # items that were never submitted are finished already
                self._remaining -= len(items) - submitted
                last = self._remaining == 0
            self._stop.set()
            self._cancel_pending()
            if last:
                self._finish()
            raise
        finally:
            executor.shutdown(wait=False)
        return self

    def _cancel_pending(self):
        # cancelling runs _item_done in this thread, so don't hold _lock
        with self._lock:
            futures = list(self._futures)
        for fut in futures:
            fut.cancel()

    def _item_done(self, fut):
        if not fut.cancelled():
            err = fut.exception()
            if err is not None:
                with self._lock:
                    if self._error is None:
                        self._error = err
                self._stop.set()
                self._cancel_pending()
            elif fut.result():
                with self._lock:
                    self._n_done += 1
        with self._lock:
            self._remaining -= 1
            last = self._remaining == 0
        if last:
            self._finish()

    def _finish(self):
        self.cube.lock.release_write()
        if self.future.cancelled():
            # future.cancel() was called on the token directly
            self.future.set_running_or_notify_cancel()
            return
        if self.future.done():
            return
        with self._lock:
            complete = self._n_done == self._n_items
        if self._error is not None:
            self.LOG.debug("error while filling %s: %s" % (self.cube, self._error))
            self.future.set_exception(self._error)
        elif self._stop.is_set() and not complete:
            self.LOG.debug(
                "stopped filling %s after %i of %i work items" % (
                    self.cube, self._n_done, self._n_items
                )
            )
            # waiters only wake up once the cancel is notified
            self.future.cancel()
            self.future.set_running_or_notify_cancel()
        else:
            self.LOG.debug("finished filling %s" % self.cube)
            self.future.set_result(self.cube)

    def cancel(self):
        """
        stop the calculation
        work items that haven't started are dropped, ones that are running
        don't write their values
        if every value was already written, the cube is still the result
        returns False if the calculation had already finished
        """
        if self.future.done():
            return False
        self._stop.set()
        self._cancel_pending()
        return True

    def done(self):
        return self.future.done()

    def cancelled(self):
        return self.future.cancelled()

    def result(self, timeout=None):
        """
        wait for the calculation and return the cube
        raises concurrent.futures.CancelledError if it was cancelled
        and re-raises any error from the worker threads
        """
        return self.future.result(timeout=timeout)

    def wait(self, timeout=None):
        """wait for the calculation, returns True if it finished"""
        done, _ = concurrent.futures.wait([self.future], timeout=timeout)
        return bool(done)

    def add_done_callback(self, fn):
        """fn(future) is called once the cube is unlocked"""
        self.future.add_done_callback(fn)

    def progress(self):
        """fraction of work items that have been written"""
        if not self._n_items:
            return 0.0
        with self._lock:
            return self._n_done / self._n_items
