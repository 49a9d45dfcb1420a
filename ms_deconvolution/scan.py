'''Minimal scan metadata needed to resolve the charge and mass of an
isolated precursor ion.
'''
from collections import namedtuple

from .constants import ISOLATION_WINDOW_PADDING
from .deconvolution.api import create_algorithm, deconvolute, deduplicate_envelopes, get_spectrum
from .deconvolution.parameters import Polarity
from .spectrum import NeutralMassSpectrum
from .tolerance import MzRange
from .utils import Base


_IsolationWindowBase = namedtuple("IsolationWindow", ["lower", "target", "upper"])


class IsolationWindow(_IsolationWindowBase):
    r"""Describes the m/z interval a precursor ion was isolated from in the precursor scan

    Attributes
    ----------
    lower: float
        The distance from the center of the isolation window towards 0
    target: float
        The center of the isolation window in m/z
    upper: float
        The distance from the center of the isolation window towards :math:`\infty`
    """

    __slots__ = ()

    @classmethod
    def from_width(cls, target, width):
        """A window of total width `width` centered at `target`"""
        half = width / 2.0
        return cls(half, target, half)

    @property
    def lower_bound(self):
        return self.target - self.lower

    @property
    def upper_bound(self):
        return self.target + self.upper

    @property
    def width(self):
        return self.lower + self.upper

    def __contains__(self, x):
        return self.lower_bound <= x <= self.upper_bound

    def to_range(self):
        return MzRange(self.lower_bound, self.upper_bound)


class Scan(Base):
    """A spectrum with the acquisition metadata used to resolve precursor ions.

    Attributes
    ----------
    spectrum : :class:`~.MzSpectrum`
        The peaks of this scan
    polarity : :class:`~.Polarity`
        The ion polarity
    ms_level : int
        The MS level
    isolation_window : :class:`IsolationWindow`
        The interval the precursor was isolated from, if any
    selected_ion_mz : float
        The reported m/z of the selected precursor ion
    selected_ion_intensity : float
        The intensity of the selected precursor ion
    selected_ion_charge : int
        The instrument's guess of the precursor charge, signed by polarity
    scan_id : str
        An identifier for the scan
    """

    def __init__(self, spectrum, polarity=Polarity.positive, ms_level=1, isolation_window=None,
                 selected_ion_mz=None, selected_ion_intensity=None, selected_ion_charge=None,
                 scan_id=None):
        self.spectrum = spectrum
        self.polarity = Polarity.coerce(polarity)
        self.ms_level = ms_level
        self.isolation_window = isolation_window
        self.selected_ion_mz = selected_ion_mz
        self.selected_ion_intensity = selected_ion_intensity
        self.selected_ion_charge = self._sign_charge(selected_ion_charge)
        self.scan_id = scan_id

    def _sign_charge(self, charge):
        if charge is None:
            return None
        return abs(int(charge)) * self.polarity.sign

    @classmethod
    def from_isolation_width(cls, spectrum, isolation_mz, isolation_width, **kwargs):
        """Build a scan whose isolation window is ``isolation_mz ± isolation_width / 2``"""
        return cls(spectrum, isolation_window=IsolationWindow.from_width(isolation_mz, isolation_width),
                   **kwargs)

    @property
    def isolation_range(self):
        """The isolated m/z interval, or :const:`None` if this scan has no
        isolation window

        Returns
        -------
        :class:`~.MzRange`
        """
        if self.isolation_window is None:
            return None
        return self.isolation_window.to_range()

    def refine_selected_mz_and_intensity(self, precursor):
        """Snap :attr:`selected_ion_mz` and :attr:`selected_ion_intensity` to the
        closest peak in the precursor spectrum.

        Parameters
        ----------
        precursor : :class:`~.MzSpectrum` or :class:`Scan`
            The spectrum the precursor was selected from
        """
        if self.selected_ion_mz is None:
            return self
        spectrum = get_spectrum(precursor)
        peak = spectrum.closest_peak(self.selected_ion_mz)
        if peak is None:
            return self
        self.selected_ion_mz = peak.mz
        self.selected_ion_intensity = peak.intensity
        return self

    def get_isolated_masses_and_charges(self, precursor, parameters):
        """Deconvolute the region of `precursor` around this scan's isolation
        window, keeping the envelopes with at least one peak inside the window.

        The algorithm receives the whole precursor spectrum together with the
        isolation range widened by :data:`~.ISOLATION_WINDOW_PADDING` on either
        side as its m/z range. The classic algorithm only draws seeds from that
        range and matches isotopes and other charge states against every peak.

        Parameters
        ----------
        precursor : :class:`~.MzSpectrum` or :class:`Scan`
            The spectrum the precursor was selected from
        parameters : :class:`~.DeconvolutionParameters`
            The algorithm configuration

        Returns
        -------
        list of :class:`~.IsotopicEnvelope`
            Empty if this scan has no isolation window
        """
        isolation_range = self.isolation_range
        if isolation_range is None:
            return []
        search_range = (isolation_range.minimum - ISOLATION_WINDOW_PADDING,
                        isolation_range.maximum + ISOLATION_WINDOW_PADDING)
        spectrum = get_spectrum(precursor)
        if isinstance(spectrum, NeutralMassSpectrum):
            envelopes = deconvolute(spectrum, parameters, search_range)
        else:
            algorithm = create_algorithm(parameters)
            envelopes = deduplicate_envelopes(algorithm.deconvolute(spectrum, search_range))
        return [
            envelope for envelope in envelopes
            if envelope.has_peak_within(isolation_range.minimum, isolation_range.maximum)
        ]

    def __repr__(self):
        return "Scan(%r, ms_level=%d, polarity=%s, isolation_window=%r)" % (
            self.scan_id, self.ms_level, self.polarity.name, self.isolation_window)
