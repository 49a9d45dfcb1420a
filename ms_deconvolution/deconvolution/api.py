# -*- coding: utf-8 -*-
'''The entry point for deconvoluting a spectrum with any of the available algorithms.

The algorithm is chosen by the type of the parameter object::

    >>> from ms_deconvolution import MzSpectrum, ClassicDeconvolutionParameters, deconvolute
    >>> envelopes = list(deconvolute(spectrum, ClassicDeconvolutionParameters(1, 30), (400, 1600)))

Restricting the m/z range removes peaks outside it from the spectrum before the
algorithm runs, so it changes which peaks may be grouped together, rather than
filtering envelopes afterwards.
'''
from ..constants import DUPLICATE_MASS_TOLERANCE
from ..envelope import IsotopicEnvelope
from ..errors import ConfigurationError, UnsupportedDeconvolutionTypeError
from ..spectrum import MzSpectrum, NeutralMassSpectrum
from ..tolerance import as_mz_range

from .base import debug
from .parameters import DeconvolutionParameters, DeconvolutionType
from .classic import ClassicDeconvolutionAlgorithm
from .flash import FlashDeconvAlgorithm
from .isodec import IsoDecAlgorithm
from .example import ExampleDeconvolutionAlgorithm


algorithm_types = {
    DeconvolutionType.classic: ClassicDeconvolutionAlgorithm,
    DeconvolutionType.flash_deconv: FlashDeconvAlgorithm,
    DeconvolutionType.isodec: IsoDecAlgorithm,
    DeconvolutionType.example_template: ExampleDeconvolutionAlgorithm,
}


_unregistered = [t for t in DeconvolutionType if t not in algorithm_types]
if _unregistered:
    raise TypeError("No algorithm registered for %r" % (_unregistered, ))


def create_algorithm(parameters):
    """Instantiate the algorithm paired with `parameters`.

    Parameters
    ----------
    parameters : :class:`~.DeconvolutionParameters`
        The configuration, whose type selects the algorithm

    Returns
    -------
    :class:`~.DeconvolutionAlgorithmBase`

    Raises
    ------
    :class:`~.UnsupportedDeconvolutionTypeError`
        If the parameters carry an algorithm tag with no registered algorithm
    :class:`~.ConfigurationError`
        If `parameters` is not a parameter object or is invalid
    """
    if not isinstance(parameters, DeconvolutionParameters):
        raise ConfigurationError(
            "Expected a DeconvolutionParameters instance, got %s" % (type(parameters).__name__, ))
    parameters.validate()
    try:
        algorithm_type = algorithm_types[parameters.deconvolution_type]
    except KeyError:
        raise UnsupportedDeconvolutionTypeError(
            "DeconvolutionType %r is not supported" % (parameters.deconvolution_type, ),
            parameters.deconvolution_type)
    return algorithm_type(parameters)


def get_spectrum(spectrum_or_scan):
    """Extract the :class:`~.MzSpectrum` from a scan-like object, or return
    a spectrum unchanged.
    """
    if isinstance(spectrum_or_scan, MzSpectrum):
        return spectrum_or_scan
    spectrum = getattr(spectrum_or_scan, "spectrum", None)
    if isinstance(spectrum, MzSpectrum):
        return spectrum
    raise TypeError("Cannot deconvolute an object of type %s" % (type(spectrum_or_scan).__name__, ))


def deduplicate_envelopes(envelopes, mass_tolerance=DUPLICATE_MASS_TOLERANCE):
    """Drop envelopes with the same charge as, and a monoisotopic mass within
    `mass_tolerance` of, an earlier envelope.

    Yields
    ------
    :class:`~.IsotopicEnvelope`
    """
    seen = {}
    for envelope in envelopes:
        masses = seen.setdefault(envelope.charge, [])
        mass = envelope.monoisotopic_mass
        if any(abs(mass - other) < mass_tolerance for other in masses):
            continue
        masses.append(mass)
        yield envelope


class Deconvoluter(object):
    """Dispatch spectra to the algorithm selected by a parameter object.

    The parameters are validated and the algorithm is built when the
    :class:`Deconvoluter` is created, so configuration errors surface
    immediately.

    Attributes
    ----------
    parameters : :class:`~.DeconvolutionParameters`
        The configuration
    algorithm : :class:`~.DeconvolutionAlgorithmBase`
        The algorithm selected by :attr:`parameters`
    """

    def __init__(self, parameters):
        self.algorithm = create_algorithm(parameters)
        self.parameters = parameters

    def deconvolute(self, spectrum_or_scan, mz_range=None):
        """Recover the isotopic envelopes of a spectrum.

        Parameters
        ----------
        spectrum_or_scan : :class:`~.MzSpectrum` or :class:`~.Scan`
            The spectrum, or a scan carrying one
        mz_range : tuple of float or :class:`~.MzRange`, optional
            Only peaks with m/z in this inclusive interval are considered

        Returns
        -------
        iterator of :class:`~.IsotopicEnvelope`
            Lazily produced, in the order the algorithm generates them, with
            duplicate species removed
        """
        spectrum = get_spectrum(spectrum_or_scan)
        mz_range = as_mz_range(mz_range)
        if isinstance(spectrum, NeutralMassSpectrum):
            return self._neutral_mass_envelopes(spectrum, mz_range)
        if mz_range is not None:
            spectrum = spectrum.slice(mz_range.minimum, mz_range.maximum)
        debug("Deconvoluting %d peaks with %s", len(spectrum), self.algorithm.__class__.__name__)
        return deduplicate_envelopes(self.algorithm.deconvolute(spectrum, mz_range))

    def _neutral_mass_envelopes(self, spectrum, mz_range):
        if mz_range is not None:
            spectrum = spectrum.slice(mz_range.minimum, mz_range.maximum)
        deconvolution_type = self.parameters.deconvolution_type
        for mz, intensity, mass, charge in zip(spectrum.mz, spectrum.intensity,
                                               spectrum.mass, spectrum.charge):
            yield IsotopicEnvelope(
                [(mz, intensity)], mass, int(charge), intensity, score=1.0,
                algorithm=deconvolution_type)

    def __repr__(self):
        return "Deconvoluter(%r)" % (self.parameters, )


def deconvolute(spectrum_or_scan, parameters, mz_range=None):
    """Recover the isotopic envelopes of a spectrum with the algorithm chosen
    by `parameters`.

    See :meth:`Deconvoluter.deconvolute`.

    Returns
    -------
    iterator of :class:`~.IsotopicEnvelope`
    """
    return Deconvoluter(parameters).deconvolute(spectrum_or_scan, mz_range)
