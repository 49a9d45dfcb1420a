import operator

from brainpy import neutral_mass, mass_charge_ratio, PROTON


def simple_repr(self):  # pragma: no cover
    '''A convenient function for automatically generating a ``__repr__``-like
    string for arbitrary objects.

    Returns
    -------
    str
    '''
    template = "{self.__class__.__name__}({d})"

    def formatvalue(v):
        if isinstance(v, float):
            return "%0.4f" % v
        else:
            return str(v)

    if not hasattr(self, "__slots__") or len(self.__slots__) == 0 or hasattr(self, '__dict__'):
        d = [
            "%s=%s" % (k, formatvalue(v)) if v is not self else "(...)" for k, v in sorted(
                self.__dict__.items(), key=lambda x: x[0])
            if (not k.startswith("_") and not callable(v)) and not (v is None)]
    else:
        d = [
            "%s=%s" % (k, formatvalue(v)) if v is not self else "(...)" for k, v in sorted(
                [(name, getattr(self, name)) for name in self.__slots__], key=lambda x: x[0])
            if (not k.startswith("_") and not callable(v)) and not (v is None)]

    return template.format(self=self, d=', '.join(d))


class Base(object):
    '''A convenience base class for non-critical code to provide types
    with automatic :meth:`__repr__` methods using :func:`simple_repr`
    '''
    __slots__ = ()
    __repr__ = simple_repr


def dict_proxy(attribute):
    """Return a decorator for a class to give it a `dict`-like API proxied
    from one of its attributes

    Parameters
    ----------
    attribute : str
        The string corresponding to the attribute which will
        be used

    Returns
    -------
    function
    """
    getter = operator.attrgetter(attribute)

    def wrap(cls):

        def __getitem__(self, key):
            return getter(self)[key]

        def keys(self):
            return getter(self).keys()

        def __iter__(self):
            return iter(getter(self))

        def items(self):
            return getter(self).items()

        cls.__getitem__ = __getitem__
        cls.keys = keys
        cls.items = items
        cls.__iter__ = __iter__

        return cls
    return wrap


def ppm_error(observed, expected):
    """The signed error of `observed` relative to `expected` in parts-per-million"""
    return (observed - expected) / expected * 1e6


def to_neutral_mass(mz, charge, charge_carrier=PROTON):
    """Convert an m/z to a neutral mass.

    The sign of `charge` carries the polarity, so for negative charges the
    charge carrier is added back rather than removed, e.g.
    ``(mz - polarity_sign * PROTON) * abs(charge)``.

    Parameters
    ----------
    mz : float
        The mass-to-charge ratio
    charge : int
        The signed charge state
    charge_carrier : float, optional
        The mass of the charge carrier (the default is :data:`PROTON`)

    Returns
    -------
    float
    """
    return neutral_mass(mz, charge, charge_carrier)


def to_mz(mass, charge, charge_carrier=PROTON):
    """Convert a neutral mass to an m/z at the given signed charge"""
    return mass_charge_ratio(mass, charge, charge_carrier)


def charge_range_(lo, hi, sign=1):
    """Generate the successive charge states between `lo` and `hi` in
    ascending magnitude order.

    Parameters
    ----------
    lo : int
        The smallest magnitude charge
    hi : int
        The largest magnitude charge
    sign : int, optional
        The polarity to apply to each charge (the default is 1)

    Yields
    ------
    int
    """
    abs_lo, abs_hi = abs(lo), abs(hi)
    upper = max(abs_lo, abs_hi)
    lower = min(abs_lo, abs_hi)

    for c in range(lower, upper + 1):
        yield c * sign
