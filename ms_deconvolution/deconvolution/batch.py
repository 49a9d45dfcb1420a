'''Deconvolute many independent spectra, optionally in parallel.

Each spectrum is deconvoluted by an independent call, so spectra may be
distributed over a :class:`multiprocessing.Pool` without any coordination.
Cancellation is checked between spectra, never during one.
'''
import multiprocessing

from ..errors import DeconvolutionError
from ..task.log_utils import LogUtilsMixin
from ..tolerance import as_mz_range

from .api import Deconvoluter, create_algorithm


class DeconvolutionTask(object):
    """A picklable callable which deconvolutes one spectrum and returns
    the envelopes as a list.
    """
    def __init__(self, parameters, mz_range=None):
        self.parameters = parameters
        self.mz_range = mz_range
        self._deconvoluter = None

    def __call__(self, spectrum):
        if self._deconvoluter is None:
            self._deconvoluter = Deconvoluter(self.parameters)
        return list(self._deconvoluter.deconvolute(spectrum, self.mz_range))

    def __reduce__(self):
        return self.__class__, (self.parameters, self.mz_range)


class BatchDeconvoluter(LogUtilsMixin):
    """Run :func:`~.deconvolute` over a sequence of spectra.

    Attributes
    ----------
    parameters : :class:`~.DeconvolutionParameters`
        The configuration shared by every spectrum
    mz_range : :class:`~.MzRange`
        The m/z range applied to every spectrum
    processes : int
        The number of worker processes. With 1, spectra are processed in
        the calling process.
    cancel_event : :class:`threading.Event`
        When set, no further spectra are started
    chunk_size : int
        The number of spectra sent to a worker at a time
    """

    def __init__(self, parameters, mz_range=None, processes=1, cancel_event=None, chunk_size=1):
        # Fail on invalid configurations before any work is scheduled
        create_algorithm(parameters)
        self.parameters = parameters
        self.mz_range = as_mz_range(mz_range)
        self.processes = max(int(processes), 1)
        self.cancel_event = cancel_event
        self.chunk_size = chunk_size

    def is_cancelled(self):
        return self.cancel_event is not None and self.cancel_event.is_set()

    def run(self, spectra):
        """Deconvolute each spectrum in `spectra`.

        Parameters
        ----------
        spectra : Iterable
            :class:`~.MzSpectrum` or scan objects

        Yields
        ------
        index : int
            The position of the spectrum in `spectra`
        envelopes : list of :class:`~.IsotopicEnvelope`
        """
        task = DeconvolutionTask(self.parameters, self.mz_range)
        if self.processes == 1:
            results = self._run_serial(task, spectra)
        else:
            results = self._run_parallel(task, spectra)
        for result in results:
            yield result

    def _run_serial(self, task, spectra):
        for i, spectrum in enumerate(spectra):
            if self.is_cancelled():
                self.log("Cancelled after %d spectra" % (i, ))
                return
            try:
                envelopes = task(spectrum)
            except DeconvolutionError as err:
                self.error("Failed to deconvolute spectrum %d" % (i, ), exception=err)
                raise
            self.debug("Spectrum %d produced %d envelopes" % (i, len(envelopes)))
            yield i, envelopes

    def _run_parallel(self, task, spectra):
        self.log("Deconvoluting with %d processes" % (self.processes, ))
        pool = multiprocessing.Pool(self.processes)
        try:
            for i, envelopes in enumerate(pool.imap(task, spectra, chunksize=self.chunk_size)):
                yield i, envelopes
                if self.is_cancelled():
                    self.log("Cancelled after %d spectra" % (i + 1, ))
                    pool.terminate()
                    return
            pool.close()
        except BaseException:
            pool.terminate()
            raise
        finally:
            pool.join()


def deconvolute_batch(spectra, parameters, mz_range=None, processes=1, cancel_event=None):
    """Deconvolute many spectra, yielding ``(index, envelopes)`` in input order.

    See :class:`BatchDeconvoluter`.
    """
    driver = BatchDeconvoluter(parameters, mz_range, processes=processes, cancel_event=cancel_event)
    return driver.run(spectra)
