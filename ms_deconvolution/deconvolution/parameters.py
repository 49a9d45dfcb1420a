'''Algorithm configurations.

Each concrete :class:`DeconvolutionParameters` type carries a
:class:`DeconvolutionType` tag naming the single algorithm which consumes it.
There is no separate algorithm name argument: choosing a parameter type chooses
the algorithm.
'''
from enum import Enum

from ..errors import ConfigurationError, UnsupportedDeconvolutionTypeError
from ..utils import Base, charge_range_


class Polarity(Enum):
    positive = 1
    negative = -1

    @property
    def sign(self):
        return self.value

    @classmethod
    def coerce(cls, value):
        """Convert `value` into a :class:`Polarity`, accepting members, their
        names, or the integers 1 and -1."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.lower()]
            except KeyError:
                pass
        else:
            try:
                return cls(value)
            except ValueError:
                pass
        raise ConfigurationError("Unrecognized polarity %r" % (value, ))


class DeconvolutionType(Enum):
    classic = "classic"
    flash_deconv = "flash_deconv"
    isodec = "isodec"
    example_template = "example_template"


def _validate_charge_range(min_charge, max_charge, polarity):
    if int(min_charge) != min_charge or int(max_charge) != max_charge:
        raise ConfigurationError("Charge states must be integers, got %r and %r" % (
            min_charge, max_charge))
    min_charge = int(min_charge)
    max_charge = int(max_charge)
    if min_charge == 0 or max_charge == 0:
        raise ConfigurationError("A charge state of 0 is not valid")
    if (min_charge < 0) != (max_charge < 0):
        raise ConfigurationError("Charge range %d to %d mixes polarities" % (min_charge, max_charge))
    signed_polarity = Polarity.negative if min_charge < 0 else Polarity.positive
    if polarity is None:
        polarity = signed_polarity
    else:
        polarity = Polarity.coerce(polarity)
        if min_charge < 0 and polarity is not Polarity.negative:
            raise ConfigurationError(
                "Negative charge range %d to %d conflicts with %s polarity" % (
                    min_charge, max_charge, polarity.name))
    min_charge, max_charge = abs(min_charge), abs(max_charge)
    if min_charge > max_charge:
        raise ConfigurationError("Minimum charge %d exceeds maximum charge %d" % (
            min_charge, max_charge))
    return min_charge, max_charge, polarity


def _check_non_negative(**kwargs):
    for name, value in kwargs.items():
        if value is None or value < 0:
            raise ConfigurationError("%s must be non-negative, got %r" % (name, value))


class DeconvolutionParameters(Base):
    """The configuration shared by every algorithm.

    Charge limits are stored as magnitudes, with the sign carried by :attr:`polarity`.
    A negative charge range implies negative polarity.

    Attributes
    ----------
    min_charge : int
        The smallest charge magnitude to consider
    max_charge : int
        The largest charge magnitude to consider
    polarity : :class:`Polarity`
        The ion polarity of the spectra to be processed
    """
    deconvolution_type = None

    def __init__(self, min_charge, max_charge, polarity=None):
        self.min_charge, self.max_charge, self.polarity = _validate_charge_range(
            min_charge, max_charge, polarity)

    @property
    def sign(self):
        return self.polarity.sign

    def charge_range(self):
        """The signed charge states to consider, ascending in magnitude

        Returns
        -------
        list of int
        """
        return list(charge_range_(self.min_charge, self.max_charge, self.sign))

    def validate(self):
        """Re-check every invariant, raising :class:`~.ConfigurationError` on failure.
        """
        _validate_charge_range(self.min_charge * self.sign, self.max_charge * self.sign, self.polarity)
        if not isinstance(self.deconvolution_type, DeconvolutionType):
            raise UnsupportedDeconvolutionTypeError(
                "%r is not a recognized deconvolution type" % (self.deconvolution_type, ),
                self.deconvolution_type)
        return self

    def __eq__(self, other):
        if type(self) is not type(other):
            return False
        return self.__dict__ == other.__dict__

    def __ne__(self, other):
        return not (self == other)

    __hash__ = None

    def to_dict(self):
        state = dict(self.__dict__)
        state['polarity'] = self.polarity.name
        return state


class ClassicDeconvolutionParameters(DeconvolutionParameters):
    """Configuration for :class:`~.ClassicDeconvolutionAlgorithm`.

    Attributes
    ----------
    deconvolution_tolerance_ppm : float
        The mass accuracy used to match theoretical isotopic peaks, and peaks
        of other charge states, to the observed spectrum
    intensity_ratio_limit : float
        How far the ratio between two observed isotopic peaks may stray from
        the theoretical ratio, as a multiplicative factor
    min_peaks : int
        The minimum number of peaks an envelope must contain
    seed_intensity_ratio : float
        Only peaks whose intensity times this value reaches the most intense
        peak are used as seeds
    minimum_score : float
        Envelopes scoring at or below this are discarded
    """
    deconvolution_type = DeconvolutionType.classic

    def __init__(self, min_charge=1, max_charge=60, deconvolution_tolerance_ppm=4.0,
                 intensity_ratio_limit=3.0, polarity=None, min_peaks=2,
                 seed_intensity_ratio=100.0, minimum_score=0.0):
        super(ClassicDeconvolutionParameters, self).__init__(min_charge, max_charge, polarity)
        _check_non_negative(
            deconvolution_tolerance_ppm=deconvolution_tolerance_ppm,
            minimum_score=minimum_score)
        if intensity_ratio_limit < 1:
            raise ConfigurationError(
                "intensity_ratio_limit must be at least 1, got %r" % (intensity_ratio_limit, ))
        if min_peaks < 2:
            raise ConfigurationError("min_peaks must be at least 2, got %r" % (min_peaks, ))
        if seed_intensity_ratio < 1:
            raise ConfigurationError(
                "seed_intensity_ratio must be at least 1, got %r" % (seed_intensity_ratio, ))
        self.deconvolution_tolerance_ppm = float(deconvolution_tolerance_ppm)
        self.intensity_ratio_limit = float(intensity_ratio_limit)
        self.min_peaks = int(min_peaks)
        self.seed_intensity_ratio = float(seed_intensity_ratio)
        self.minimum_score = float(minimum_score)


class FlashDeconvParameters(DeconvolutionParameters):
    """Configuration for :class:`~.FlashDeconvAlgorithm`.

    Attributes
    ----------
    intensity_threshold : float
        Peaks with intensity at or below this are discarded before the
        log transform
    ladder_tolerance_ppm : float
        The mass accuracy used when walking a charge ladder in log(m/z) space
    correct_ppm_tolerance : float
        Pairs of neutral masses in a ladder closer than this count as agreeing
    incorrect_ppm_tolerance : float
        Pairs of neutral masses in a ladder further apart than this count
        as disagreeing
    correct_fraction : float
        The fraction of agreeing pairs needed to accept a ladder
    consensus_ppm_tolerance : float
        The tolerance used to find the most common neutral mass of a ladder
    """
    deconvolution_type = DeconvolutionType.flash_deconv

    def __init__(self, min_charge=1, max_charge=60, polarity=None, intensity_threshold=0.01,
                 ladder_tolerance_ppm=250.0, correct_ppm_tolerance=25.0,
                 incorrect_ppm_tolerance=250.0, correct_fraction=0.7,
                 consensus_ppm_tolerance=25.0):
        super(FlashDeconvParameters, self).__init__(min_charge, max_charge, polarity)
        _check_non_negative(
            intensity_threshold=intensity_threshold,
            ladder_tolerance_ppm=ladder_tolerance_ppm,
            correct_ppm_tolerance=correct_ppm_tolerance,
            incorrect_ppm_tolerance=incorrect_ppm_tolerance,
            consensus_ppm_tolerance=consensus_ppm_tolerance)
        if not 0 < correct_fraction <= 1:
            raise ConfigurationError(
                "correct_fraction must be in (0, 1], got %r" % (correct_fraction, ))
        self.intensity_threshold = float(intensity_threshold)
        self.ladder_tolerance_ppm = float(ladder_tolerance_ppm)
        self.correct_ppm_tolerance = float(correct_ppm_tolerance)
        self.incorrect_ppm_tolerance = float(incorrect_ppm_tolerance)
        self.correct_fraction = float(correct_fraction)
        self.consensus_ppm_tolerance = float(consensus_ppm_tolerance)


class IsoDecParameters(DeconvolutionParameters):
    """Configuration for :class:`~.IsoDecAlgorithm`.

    Attributes
    ----------
    css_threshold : float
        The minimum cosine similarity between the observed and template pattern
    match_tolerance : float
        The mass accuracy in ppm used to pair template peaks with observed peaks
    max_shift : int
        How many isotopes either side of the template's most abundant isotope
        the seed peak may be aligned to
    mz_window : tuple of float
        The m/z window around a seed peak, as offsets below and above it, in
        which template peaks are matched
    knockdown_rounds : int
        The number of passes over the seeds, removing matched peaks after each
    min_area_covered : float
        The minimum fraction of the intensity in the envelope's m/z span that
        must be explained by matched peaks
    data_threshold : float
        Seeds must be at least this fraction of the most intense peak
    report_multiple_monoisos : bool
        Whether to report alternative monoisotopic assignments that also pass
        the thresholds
    min_peaks : int
        The minimum number of matched peaks
    """
    deconvolution_type = DeconvolutionType.isodec

    def __init__(self, min_charge=1, max_charge=50, polarity=None, css_threshold=0.7,
                 match_tolerance=5.0, max_shift=3, mz_window=(-1.05, 2.05), knockdown_rounds=5,
                 min_area_covered=0.20, data_threshold=0.05, report_multiple_monoisos=True,
                 min_peaks=3):
        super(IsoDecParameters, self).__init__(min_charge, max_charge, polarity)
        _check_non_negative(
            match_tolerance=match_tolerance, max_shift=max_shift,
            min_area_covered=min_area_covered, data_threshold=data_threshold)
        if not 0 <= css_threshold <= 1:
            raise ConfigurationError("css_threshold must be in [0, 1], got %r" % (css_threshold, ))
        lo, hi = mz_window
        if lo > 0 or hi < 0:
            raise ConfigurationError("mz_window must contain 0, got %r" % (mz_window, ))
        if knockdown_rounds < 1:
            raise ConfigurationError("knockdown_rounds must be at least 1, got %r" % (knockdown_rounds, ))
        if min_peaks < 1:
            raise ConfigurationError("min_peaks must be at least 1, got %r" % (min_peaks, ))
        self.css_threshold = float(css_threshold)
        self.match_tolerance = float(match_tolerance)
        self.max_shift = int(max_shift)
        self.mz_window = (float(lo), float(hi))
        self.knockdown_rounds = int(knockdown_rounds)
        self.min_area_covered = float(min_area_covered)
        self.data_threshold = float(data_threshold)
        self.report_multiple_monoisos = bool(report_multiple_monoisos)
        self.min_peaks = int(min_peaks)

    def to_dict(self):
        state = super(IsoDecParameters, self).to_dict()
        state['mz_window'] = list(self.mz_window)
        return state


class ExampleDeconvolutionParameters(DeconvolutionParameters):
    """The parameters of :class:`~.ExampleDeconvolutionAlgorithm`, a skeleton
    for new algorithms which is recognized but not implemented.
    """
    deconvolution_type = DeconvolutionType.example_template

    def __init__(self, min_charge=1, max_charge=60, polarity=None):
        super(ExampleDeconvolutionParameters, self).__init__(min_charge, max_charge, polarity)


parameter_types = {
    DeconvolutionType.classic: ClassicDeconvolutionParameters,
    DeconvolutionType.flash_deconv: FlashDeconvParameters,
    DeconvolutionType.isodec: IsoDecParameters,
    DeconvolutionType.example_template: ExampleDeconvolutionParameters,
}
