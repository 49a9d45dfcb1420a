'''
Deconvolution algorithms and the facade which dispatches to them
based upon the type of the parameter object.
'''
from .parameters import (
    Polarity, DeconvolutionType, DeconvolutionParameters,
    ClassicDeconvolutionParameters, FlashDeconvParameters,
    IsoDecParameters, ExampleDeconvolutionParameters,
    parameter_types)
from .base import DeconvolutionAlgorithmBase
from .classic import ClassicDeconvolutionAlgorithm
from .flash import FlashDeconvAlgorithm
from .isodec import IsoDecAlgorithm
from .example import ExampleDeconvolutionAlgorithm
from .api import (
    algorithm_types, create_algorithm, Deconvoluter,
    deconvolute, deduplicate_envelopes)
from .batch import BatchDeconvoluter, DeconvolutionTask, deconvolute_batch


__all__ = [
    "Polarity", "DeconvolutionType", "DeconvolutionParameters",
    "ClassicDeconvolutionParameters", "FlashDeconvParameters",
    "IsoDecParameters", "ExampleDeconvolutionParameters", "parameter_types",
    "DeconvolutionAlgorithmBase", "ClassicDeconvolutionAlgorithm",
    "FlashDeconvAlgorithm", "IsoDecAlgorithm", "ExampleDeconvolutionAlgorithm",
    "algorithm_types", "create_algorithm", "Deconvoluter", "deconvolute",
    "deduplicate_envelopes", "BatchDeconvoluter", "DeconvolutionTask",
    "deconvolute_batch",
]
