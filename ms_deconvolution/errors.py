class DeconvolutionError(Exception):
    """The base class for all errors raised by this library."""
    pass


class ConfigurationError(DeconvolutionError, ValueError):
    """Raised when an invalid parameter value or an unsupported parameter type
    reaches an algorithm or :class:`~.Deconvoluter`.
    """
    pass


class UnsupportedDeconvolutionTypeError(ConfigurationError):
    """Raised when a parameter object carries a :class:`~.DeconvolutionType` which
    no algorithm is registered to handle.

    Attributes
    ----------
    deconvolution_type : object
        The offending algorithm tag
    """
    def __init__(self, message, deconvolution_type=None):
        ConfigurationError.__init__(self, message)
        self.deconvolution_type = deconvolution_type


class InputShapeError(DeconvolutionError, ValueError):
    """Raised when the parallel arrays describing a spectrum do not agree
    in shape.

    Attributes
    ----------
    shapes : tuple
        The lengths of the arrays which were passed
    """
    def __init__(self, message, shapes=None):
        DeconvolutionError.__init__(self, message)
        self.shapes = shapes


class DeconvolutionNotImplementedError(DeconvolutionError, NotImplementedError):
    """Raised when a recognized algorithm variant which has not been
    finished is invoked.
    """
    pass


class InvalidEnvelopeError(DeconvolutionError, ValueError):
    """Raised when an :class:`~.IsotopicEnvelope` would have no peaks, a charge
    of 0 or a non-finite mass.
    """
    pass
