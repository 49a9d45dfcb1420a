# -*- coding: utf-8 -*-
'''A base class for deconvolution strategies.
'''
import logging

from ..errors import ConfigurationError
from ..utils import Base

from .parameters import DeconvolutionParameters


logger = logging.getLogger("ms_deconvolution.deconvolution")
logger.addHandler(logging.NullHandler())
info = logger.info
debug = logger.debug


class DeconvolutionAlgorithmBase(Base):
    """Base class for all deconvolution algorithms.

    An algorithm is bound to exactly one parameter type, given by
    :attr:`parameter_type`. Constructing it with any other parameter object
    fails with :class:`~.ConfigurationError`.

    Algorithms hold no state between calls to :meth:`deconvolute` besides their
    parameters, so a single instance may be shared across threads.

    Attributes
    ----------
    parameters : :class:`~.DeconvolutionParameters`
        The configuration to use
    """
    parameter_type = DeconvolutionParameters

    def __init__(self, parameters):
        if not isinstance(parameters, self.parameter_type):
            raise ConfigurationError(
                "%s requires %s, but received %s" % (
                    self.__class__.__name__, self.parameter_type.__name__,
                    type(parameters).__name__))
        self.parameters = parameters

    @property
    def deconvolution_type(self):
        return self.parameter_type.deconvolution_type

    def deconvolute(self, spectrum, mz_range=None):
        """Recover isotopic envelopes from `spectrum`.

        Parameters
        ----------
        spectrum : :class:`~.MzSpectrum`
            The spectrum to deconvolute
        mz_range : :class:`~.MzRange`, optional
            Restrict seed peaks to this m/z interval. If :const:`None`, the whole
            spectrum is used.

        Yields
        ------
        :class:`~.IsotopicEnvelope`
        """
        raise NotImplementedError()

    def __repr__(self):
        return "%s(%r)" % (self.__class__.__name__, self.parameters)
