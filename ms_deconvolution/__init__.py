'''
ms_deconvolution
----------------
Charge state deconvolution and deisotoping of mass spectra, recovering the
neutral monoisotopic masses and charges of the species which produced them
with a choice of averagine fitting, charge ladder clustering, or isotope
template matching.
'''
from .version import version

from .errors import (
    DeconvolutionError, ConfigurationError, UnsupportedDeconvolutionTypeError,
    InputShapeError, DeconvolutionNotImplementedError, InvalidEnvelopeError)
from .tolerance import Tolerance, PpmTolerance, AbsoluteTolerance, DoubleRange, MzRange
from .spectrum import MzSpectrum, NeutralMassSpectrum, MzPeak
from .averagine import Averagine, peptide, isotopic_shift
from .envelope import IsotopicEnvelope
from .deconvolution import (
    Polarity, DeconvolutionType, DeconvolutionParameters,
    ClassicDeconvolutionParameters, FlashDeconvParameters,
    IsoDecParameters, ExampleDeconvolutionParameters,
    Deconvoluter, deconvolute, BatchDeconvoluter, deconvolute_batch)
from .scan import Scan, IsolationWindow


__all__ = [
    "version",
    "DeconvolutionError", "ConfigurationError", "UnsupportedDeconvolutionTypeError",
    "InputShapeError", "DeconvolutionNotImplementedError", "InvalidEnvelopeError",
    "Tolerance", "PpmTolerance", "AbsoluteTolerance", "DoubleRange", "MzRange",
    "MzSpectrum", "NeutralMassSpectrum", "MzPeak",
    "Averagine", "peptide", "isotopic_shift",
    "IsotopicEnvelope",
    "Polarity", "DeconvolutionType", "DeconvolutionParameters",
    "ClassicDeconvolutionParameters", "FlashDeconvParameters",
    "IsoDecParameters", "ExampleDeconvolutionParameters",
    "Deconvoluter", "deconvolute", "BatchDeconvoluter", "deconvolute_batch",
    "Scan", "IsolationWindow",
]
