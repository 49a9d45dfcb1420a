'''A skeleton for adding a new deconvolution algorithm.

A new algorithm needs a :class:`~.DeconvolutionType` member, a parameter class
tagged with it, an algorithm class like the one below, and an entry in the
registry in :mod:`ms_deconvolution.deconvolution.api`.
'''
from ..errors import DeconvolutionNotImplementedError

from .base import DeconvolutionAlgorithmBase
from .parameters import ExampleDeconvolutionParameters


class ExampleDeconvolutionAlgorithm(DeconvolutionAlgorithmBase):
    parameter_type = ExampleDeconvolutionParameters

    def deconvolute(self, spectrum, mz_range=None):
        raise DeconvolutionNotImplementedError(
            "%s is a template and does not deconvolute spectra" % (self.__class__.__name__, ))
