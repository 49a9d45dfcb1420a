'''In-memory representations of centroided mass spectra.

A :class:`MzSpectrum` is a pair of parallel :class:`numpy.ndarray` objects
holding the m/z and intensity of each peak, kept sorted by ascending m/z.
Apart from the explicitly named in-place transforms, the backing arrays are
never modified once the spectrum is built, so a spectrum may be shared by
concurrent readers.
'''
import math

from collections import namedtuple

import numpy as np

from ms_peak_picker import PeakSet, simple_peak

from .errors import InputShapeError, ConfigurationError
from .tolerance import MzRange
from .constants import PROTON


MzPeak = namedtuple("MzPeak", ("mz", "intensity"))


def _coerce_array(values, copy=True):
    if copy:
        values = np.array(values, dtype=float)
    else:
        values = np.asarray(values, dtype=float)
    if values.ndim != 1:
        raise InputShapeError(
            "Peak arrays must be one dimensional, got shape %r" % (values.shape, ),
            (values.shape, ))
    return values


def _check_lengths(*arrays):
    sizes = tuple(len(a) for a in arrays)
    if len(set(sizes)) > 1:
        raise InputShapeError(
            "Peak arrays must have the same length, got %r" % (sizes, ), sizes)


def _sort_order(x):
    if len(x) < 2 or np.all(x[1:] >= x[:-1]):
        return None
    return np.argsort(x, kind='mergesort')


class PeakView(object):
    """A lazy, restartable sequence of :class:`MzPeak` drawn from a spectrum's
    arrays at a fixed set of indices.

    The view captures the arrays at the time it was created, so a later in-place
    transform of the owning spectrum does not change what it yields.
    """
    __slots__ = ("mz", "intensity", "indices")

    def __init__(self, mz, intensity, indices):
        self.mz = mz
        self.intensity = intensity
        self.indices = indices

    def __iter__(self):
        mz = self.mz
        intensity = self.intensity
        for i in self.indices:
            yield MzPeak(float(mz[i]), float(intensity[i]))

    def __len__(self):
        return len(self.indices)

    def __getitem__(self, i):
        j = self.indices[i]
        return MzPeak(float(self.mz[j]), float(self.intensity[j]))

    def __repr__(self):
        return "PeakView(%d peaks)" % (len(self), )


class MzSpectrum(object):
    """A centroided mass spectrum.

    Attributes
    ----------
    mz : :class:`numpy.ndarray`
        The m/z of each peak, ascending
    intensity : :class:`numpy.ndarray`
        The intensity of each peak
    """

    def __init__(self, mz, intensity, copy=True):
        mz = _coerce_array(mz, copy)
        intensity = _coerce_array(intensity, copy)
        _check_lengths(mz, intensity)
        order = _sort_order(mz)
        if order is not None:
            mz = mz[order]
            intensity = intensity[order]
        self._set_arrays(mz, intensity)

    def _set_arrays(self, mz, intensity):
        self.mz = mz
        self.intensity = intensity
        self._most_intense_index = None
        self._sum_of_intensity = None

    def __len__(self):
        return len(self.mz)

    @property
    def size(self):
        return len(self.mz)

    def __iter__(self):
        return iter(PeakView(self.mz, self.intensity, range(len(self))))

    def __getitem__(self, i):
        return MzPeak(float(self.mz[i]), float(self.intensity[i]))

    def __eq__(self, other):
        if other is None or not isinstance(other, MzSpectrum):
            return False
        return (np.array_equal(self.mz, other.mz) and
                np.array_equal(self.intensity, other.intensity))

    def __ne__(self, other):
        return not (self == other)

    __hash__ = None

    def __repr__(self):
        if len(self) == 0:
            return "%s(<empty>)" % (self.__class__.__name__, )
        return "%s(%d peaks, %s)" % (self.__class__.__name__, len(self), self.range)

    def copy(self):
        return self.__class__(self.mz, self.intensity, copy=True)

    @property
    def first_mz(self):
        if len(self) == 0:
            return None
        return float(self.mz[0])

    @property
    def last_mz(self):
        if len(self) == 0:
            return None
        return float(self.mz[-1])

    @property
    def range(self):
        """The m/z interval spanned by this spectrum, or :const:`None` if
        it is empty.

        Returns
        -------
        :class:`~.MzRange`
        """
        if len(self) == 0:
            return None
        return MzRange(self.first_mz, self.last_mz)

    @property
    def sum_of_intensity(self):
        if self._sum_of_intensity is None:
            self._sum_of_intensity = float(self.intensity.sum())
        return self._sum_of_intensity

    @property
    def index_of_most_intense(self):
        if len(self) == 0:
            return None
        if self._most_intense_index is None:
            self._most_intense_index = int(np.argmax(self.intensity))
        return self._most_intense_index

    @property
    def max_intensity(self):
        i = self.index_of_most_intense
        if i is None:
            return None
        return float(self.intensity[i])

    @property
    def most_intense_mz(self):
        i = self.index_of_most_intense
        if i is None:
            return None
        return float(self.mz[i])

    def extract_indices(self, min_mz, max_mz):
        """Locate the half-open index interval of peaks whose m/z lie in the
        inclusive interval ``[min_mz, max_mz]``.

        Returns
        -------
        start : int
        end : int
        """
        start = int(np.searchsorted(self.mz, min_mz, side='left'))
        end = int(np.searchsorted(self.mz, max_mz, side='right'))
        if end < start:
            end = start
        return start, end

    def extract(self, min_mz, max_mz):
        """Get the peaks with m/z in the inclusive interval ``[min_mz, max_mz]``.

        Parameters
        ----------
        min_mz : float
            The lower bound
        max_mz : float
            The upper bound

        Returns
        -------
        :class:`PeakView`
        """
        start, end = self.extract_indices(min_mz, max_mz)
        return PeakView(self.mz, self.intensity, range(start, end))

    def num_peaks_within_range(self, min_mz, max_mz):
        start, end = self.extract_indices(min_mz, max_mz)
        return end - start

    def slice(self, min_mz, max_mz):
        """Build a new spectrum containing only the peaks with m/z in the
        inclusive interval ``[min_mz, max_mz]``.

        Returns
        -------
        :class:`MzSpectrum`
        """
        start, end = self.extract_indices(min_mz, max_mz)
        return MzSpectrum(self.mz[start:end], self.intensity[start:end], copy=True)

    def filter_by_intensity(self, min_intensity=0.0, max_intensity=float('inf')):
        mask = (self.intensity >= min_intensity) & (self.intensity <= max_intensity)
        return PeakView(self.mz, self.intensity, np.flatnonzero(mask))

    def filter_by_number_of_most_intense(self, top_n):
        """Select the `top_n` most intense peaks, yielded in ascending m/z order."""
        if top_n >= len(self):
            return PeakView(self.mz, self.intensity, range(len(self)))
        order = np.argsort(-self.intensity, kind='mergesort')[:top_n]
        return PeakView(self.mz, self.intensity, np.sort(order))

    def closest_peak_index(self, target_mz):
        """Find the index of the peak nearest to `target_mz`.

        Targets below the first peak or above the last peak clamp to the
        nearest end. When the target is equidistant from two peaks, the
        lower m/z peak wins.

        Returns
        -------
        int or :const:`None`
            :const:`None` if the spectrum is empty
        """
        n = len(self.mz)
        if n == 0:
            return None
        i = int(np.searchsorted(self.mz, target_mz, side='left'))
        if i >= n:
            return n - 1
        if i == 0 or self.mz[i] == target_mz:
            return i
        if target_mz - self.mz[i - 1] > self.mz[i] - target_mz:
            return i
        return i - 1

    def closest_peak(self, target_mz):
        i = self.closest_peak_index(target_mz)
        if i is None:
            return None
        return self[i]

    def dot_product_similarity(self, other, tolerance):
        """Compute the normalized dot product between this spectrum and `other`,
        pairing peaks whose m/z agree within `tolerance`.

        Parameters
        ----------
        other : :class:`MzSpectrum`
            The spectrum to compare against
        tolerance : :class:`~.Tolerance`
            The peak matching tolerance

        Returns
        -------
        float
            A value between 0 and 1
        """
        i = j = 0
        n, m = len(self), len(other)
        numerator = 0.0
        while i < n and j < m:
            a = self.mz[i]
            b = other.mz[j]
            if tolerance.within(b, a):
                numerator += self.intensity[i] * other.intensity[j]
                i += 1
                j += 1
            elif a < b:
                i += 1
            else:
                j += 1
        denominator = math.sqrt(float(np.dot(self.intensity, self.intensity))) * math.sqrt(
            float(np.dot(other.intensity, other.intensity)))
        if denominator == 0:
            return 0.0
        return float(numerator / denominator)

    def keep_top_n_per_window(self, window_width, top_n):
        """Retain only the `top_n` most intense peaks in each consecutive m/z window
        of width `window_width`, starting from the first peak. This replaces the
        backing arrays in place.

        Parameters
        ----------
        window_width : float
            The width of each window in m/z
        top_n : int
            The number of peaks to keep per window
        """
        if window_width <= 0:
            raise ConfigurationError("window_width must be positive, got %r" % (window_width, ))
        if top_n < 1:
            raise ConfigurationError("top_n must be at least 1, got %r" % (top_n, ))
        if len(self) == 0:
            return self
        bins = np.floor((self.mz - self.mz[0]) / window_width).astype(int)
        keep = np.zeros(len(self), dtype=bool)
        for window in np.unique(bins):
            indices = np.flatnonzero(bins == window)
            if len(indices) > top_n:
                indices = indices[np.argsort(-self.intensity[indices], kind='mergesort')[:top_n]]
            keep[indices] = True
        self._apply_mask(keep)
        return self

    def exclude_precursor(self, precursor_mz, width=1.5):
        """Remove every peak within `width` m/z of `precursor_mz`, replacing the
        backing arrays in place.
        """
        mask = np.abs(self.mz - precursor_mz) > width
        self._apply_mask(mask)
        return self

    def _apply_mask(self, mask):
        self._set_arrays(self.mz[mask], self.intensity[mask])

    def to_peak_set(self, fwhm=0.01):
        """Convert the spectrum into a :class:`ms_peak_picker.PeakSet`, with each
        peak's :attr:`peak_count` matching its position in this spectrum.

        Returns
        -------
        :class:`ms_peak_picker.PeakSet`
        """
        peaks = PeakSet([simple_peak(float(mz), float(intensity), fwhm)
                         for mz, intensity in zip(self.mz, self.intensity)])
        peaks.reindex()
        return peaks


class NeutralMassSpectrum(MzSpectrum):
    """A spectrum whose peaks have already been assigned a charge and reduced
    to neutral masses.

    The :attr:`mz` array holds the m/z equivalent of each peak so that all of the
    range and lookup operations of :class:`MzSpectrum` are expressed in m/z units.

    Attributes
    ----------
    mass : :class:`numpy.ndarray`
        The neutral mass of each peak
    charge : :class:`numpy.ndarray`
        The signed charge of each peak
    """

    def __init__(self, mass, intensity, charge, copy=True, charge_carrier=PROTON):
        mass = _coerce_array(mass, copy)
        intensity = _coerce_array(intensity, copy)
        charge = np.array(charge, dtype=int)
        if charge.ndim != 1:
            raise InputShapeError(
                "Peak arrays must be one dimensional, got shape %r" % (charge.shape, ),
                (charge.shape, ))
        _check_lengths(mass, intensity, charge)
        if np.any(charge == 0):
            raise ConfigurationError("A neutral mass spectrum cannot contain a charge of 0")
        mz = (mass + charge * charge_carrier) / np.abs(charge)
        order = _sort_order(mz)
        if order is not None:
            mz = mz[order]
            mass = mass[order]
            intensity = intensity[order]
            charge = charge[order]
        self.mass = mass
        self.charge = charge
        self.charge_carrier = charge_carrier
        self._set_arrays(mz, intensity)

    def copy(self):
        return self.__class__(self.mass, self.intensity, self.charge, copy=True,
                              charge_carrier=self.charge_carrier)

    def __eq__(self, other):
        if not isinstance(other, NeutralMassSpectrum):
            return False
        return (np.array_equal(self.mass, other.mass) and
                np.array_equal(self.intensity, other.intensity) and
                np.array_equal(self.charge, other.charge))

    __hash__ = None

    def slice(self, min_mz, max_mz):
        start, end = self.extract_indices(min_mz, max_mz)
        return NeutralMassSpectrum(
            self.mass[start:end], self.intensity[start:end], self.charge[start:end],
            copy=True, charge_carrier=self.charge_carrier)

    def _apply_mask(self, mask):
        self.mass = self.mass[mask]
        self.charge = self.charge[mask]
        self._set_arrays(self.mz[mask], self.intensity[mask])
