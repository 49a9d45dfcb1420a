import re

from .errors import ConfigurationError
from .utils import ppm_error


class DoubleRange(object):
    """An inclusive interval ``[minimum, maximum]`` over the real numbers.

    Attributes
    ----------
    minimum : float
        The lower bound of the interval
    maximum : float
        The upper bound of the interval
    """
    __slots__ = ("minimum", "maximum")

    def __init__(self, minimum, maximum):
        self.minimum = float(minimum)
        self.maximum = float(maximum)

    @property
    def width(self):
        return self.maximum - self.minimum

    @property
    def mean(self):
        return (self.maximum + self.minimum) / 2.0

    def contains(self, value):
        return self.minimum <= value <= self.maximum

    __contains__ = contains

    def is_subrange(self, other):
        return self.minimum >= other.minimum and self.maximum <= other.maximum

    def overlaps(self, other):
        return self.minimum <= other.maximum and other.minimum <= self.maximum

    def __iter__(self):
        yield self.minimum
        yield self.maximum

    def __getitem__(self, i):
        return (self.minimum, self.maximum)[i]

    def __len__(self):
        return 2

    def __eq__(self, other):
        try:
            return self.minimum == other[0] and self.maximum == other[1]
        except (TypeError, IndexError):
            return False

    def __ne__(self, other):
        return not (self == other)

    def __hash__(self):
        return hash((self.minimum, self.maximum))

    def __reduce__(self):
        return self.__class__, (self.minimum, self.maximum)

    def __str__(self):
        return "[%g;%g]" % (self.minimum, self.maximum)

    def __repr__(self):
        return "%s(%r, %r)" % (self.__class__.__name__, self.minimum, self.maximum)


class MzRange(DoubleRange):
    """An inclusive m/z interval"""

    def __str__(self):
        return "[%0.4f to %0.4f] m/z" % (self.minimum, self.maximum)


def as_mz_range(value):
    """Coerce `value` to an :class:`MzRange`, passing :const:`None` through"""
    if value is None or isinstance(value, MzRange):
        return value
    lo, hi = value
    if lo > hi:
        raise ConfigurationError("Range lower bound %r exceeds upper bound %r" % (lo, hi))
    return MzRange(lo, hi)


class Tolerance(object):
    """A symmetric window around an expected value.

    Attributes
    ----------
    value : float
        The size of the window on either side of the expected value, in
        the tolerance's units. Zero means only exact matches are accepted.
    """
    __slots__ = ("value", )

    unit = None

    def __init__(self, value):
        value = float(value)
        if value < 0:
            raise ConfigurationError("Tolerance value must be non-negative, got %r" % (value, ))
        self.value = value

    def within(self, observed, expected):
        """Test whether `observed` falls inside this tolerance of `expected`

        Parameters
        ----------
        observed : float
            The measured value
        expected : float
            The reference value

        Returns
        -------
        bool
        """
        raise NotImplementedError()

    def get_minimum_value(self, center):
        raise NotImplementedError()

    def get_maximum_value(self, center):
        raise NotImplementedError()

    def get_range(self, center):
        return MzRange(self.get_minimum_value(center), self.get_maximum_value(center))

    @classmethod
    def parse(cls, text):
        """Build a :class:`Tolerance` from a string like ``"10 ppm"`` or ``"0.01 Absolute"``

        Parameters
        ----------
        text : str
            The value followed by the unit name, separated by whitespace

        Returns
        -------
        Tolerance
        """
        match = re.match(r"^\s*(?:±)?\s*([0-9eE\.\+\-]+)\s*([A-Za-z]+)\s*$", text)
        if match is None:
            raise ConfigurationError("Could not parse tolerance %r" % (text, ))
        value, unit = match.groups()
        try:
            value = float(value)
        except ValueError:
            raise ConfigurationError("Could not parse tolerance value %r" % (value, ))
        unit = unit.lower()
        if unit == "ppm":
            return PpmTolerance(value)
        elif unit in ("absolute", "da", "th", "mz"):
            return AbsoluteTolerance(value)
        raise ConfigurationError("Unrecognized tolerance unit %r" % (unit, ))

    def __eq__(self, other):
        return type(self) is type(other) and self.value == other.value

    def __ne__(self, other):
        return not (self == other)

    def __hash__(self):
        return hash((self.unit, self.value))

    def __reduce__(self):
        return self.__class__, (self.value, )

    def __str__(self):
        return "±%0.4f %s" % (self.value, self.unit)

    def __repr__(self):
        return "%s(%r)" % (self.__class__.__name__, self.value)


class PpmTolerance(Tolerance):
    """A tolerance window proportional to the expected value, in parts-per-million"""
    __slots__ = ()

    unit = "PPM"

    def within(self, observed, expected):
        return abs(ppm_error(observed, expected)) <= self.value

    def get_minimum_value(self, center):
        return center * (1 - self.value / 1e6)

    def get_maximum_value(self, center):
        return center * (1 + self.value / 1e6)

    def as_fraction(self):
        """The tolerance expressed as a fraction of the expected value,
        the convention used by :meth:`ms_peak_picker.PeakSet.has_peak`"""
        return self.value / 1e6


class AbsoluteTolerance(Tolerance):
    """A tolerance window of constant width"""
    __slots__ = ()

    unit = "Absolute"

    def within(self, observed, expected):
        return abs(observed - expected) <= self.value

    def get_minimum_value(self, center):
        return center - self.value

    def get_maximum_value(self, center):
        return center + self.value
