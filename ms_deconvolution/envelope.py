import math

from collections import namedtuple

from .errors import InvalidEnvelopeError
from .utils import Base, to_neutral_mass, to_mz


EnvelopePair = namedtuple("EnvelopePair", ("mz", "intensity"))


class IsotopicEnvelope(Base):
    """A candidate neutral species recovered from a spectrum.

    Instances are built once by a deconvolution algorithm and are not modified
    afterwards.

    Attributes
    ----------
    peaks : tuple of :class:`EnvelopePair`
        The observed peaks assigned to this species, ascending by m/z
    monoisotopic_mass : float
        The estimated neutral monoisotopic mass
    most_abundant_observed_isotopic_mass : float
        The neutral mass of the most intense assigned peak
    charge : int
        The signed charge state, never zero
    total_intensity : float
        The summed intensity of :attr:`peaks`
    score : float
        A figure of merit, larger is better. Only comparable between envelopes
        produced by the same :attr:`algorithm`
    algorithm : :class:`~.DeconvolutionType`
        The algorithm which produced this envelope
    """
    __slots__ = ("peaks", "monoisotopic_mass", "most_abundant_observed_isotopic_mass",
                 "charge", "total_intensity", "score", "algorithm")

    def __init__(self, peaks, monoisotopic_mass, charge, total_intensity=None, score=0.0,
                 most_abundant_observed_isotopic_mass=None, algorithm=None):
        peaks = tuple(sorted(EnvelopePair(float(mz), float(intensity)) for mz, intensity in peaks))
        if not peaks:
            raise InvalidEnvelopeError("An isotopic envelope must contain at least one peak")
        if charge == 0:
            raise InvalidEnvelopeError("An isotopic envelope cannot have a charge of 0")
        if not math.isfinite(monoisotopic_mass):
            raise InvalidEnvelopeError("Monoisotopic mass must be finite, got %r" % (monoisotopic_mass, ))
        if total_intensity is None:
            total_intensity = sum(p.intensity for p in peaks)
        if most_abundant_observed_isotopic_mass is None:
            most_abundant = max(peaks, key=lambda p: p.intensity)
            most_abundant_observed_isotopic_mass = to_neutral_mass(most_abundant.mz, charge)
        self.peaks = peaks
        self.monoisotopic_mass = float(monoisotopic_mass)
        self.charge = int(charge)
        self.total_intensity = float(total_intensity)
        self.score = float(score)
        self.most_abundant_observed_isotopic_mass = float(most_abundant_observed_isotopic_mass)
        self.algorithm = algorithm

    @property
    def mz(self):
        """The m/z of the monoisotopic peak at :attr:`charge`"""
        return to_mz(self.monoisotopic_mass, self.charge)

    @property
    def most_abundant_mz(self):
        return max(self.peaks, key=lambda p: p.intensity).mz

    def __len__(self):
        return len(self.peaks)

    def __iter__(self):
        return iter(self.peaks)

    def __getitem__(self, i):
        return self.peaks[i]

    def peak_mzs(self):
        return frozenset(p.mz for p in self.peaks)

    def shares_peak_with(self, other):
        return not self.peak_mzs().isdisjoint(other.peak_mzs())

    def is_within(self, min_mz, max_mz):
        """Whether every assigned peak lies in ``[min_mz, max_mz]``"""
        return self.peaks[0].mz >= min_mz and self.peaks[-1].mz <= max_mz

    def has_peak_within(self, min_mz, max_mz):
        """Whether at least one assigned peak lies in ``[min_mz, max_mz]``"""
        return any(min_mz <= p.mz <= max_mz for p in self.peaks)

    def _key(self):
        return (self.peaks, self.monoisotopic_mass, self.most_abundant_observed_isotopic_mass,
                self.charge, self.total_intensity, self.score, self.algorithm)

    def __eq__(self, other):
        if not isinstance(other, IsotopicEnvelope):
            return False
        return self._key() == other._key()

    def __ne__(self, other):
        return not (self == other)

    def __hash__(self):
        return hash((self.monoisotopic_mass, self.charge, self.peaks))

    def __reduce__(self):
        return self.__class__, (self.peaks, self.monoisotopic_mass, self.charge,
                                self.total_intensity, self.score,
                                self.most_abundant_observed_isotopic_mass, self.algorithm)

    def __repr__(self):
        return ("IsotopicEnvelope(monoisotopic_mass=%0.4f, charge=%d, score=%0.4f, "
                "total_intensity=%0.2f, n_peaks=%d)") % (
                    self.monoisotopic_mass, self.charge, self.score, self.total_intensity,
                    len(self.peaks))
