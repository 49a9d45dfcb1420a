'''Averaged elemental composition models and the isotope pattern tables derived
from them.

An :class:`Averagine` scales an average building block composition to any
requested mass, from which :mod:`brainpy` computes the expected isotopic
distribution. Two read-only, lazily populated tables are built on top of it:

- :class:`AveragineIsotopeTable`, a mass ladder of whole molecules used by the
  classic algorithm to look up the expected envelope of a most abundant isotope.
- :class:`IsotopeTemplateLibrary`, normalized isotope templates binned by neutral
  mass used by the pattern matching algorithm.

Both tables only ever grow, under a lock, and their entries are never modified
once published, so they can be shared between threads.
'''
import bisect
import threading

from collections import namedtuple

import numpy as np

from brainpy import calculate_mass, isotopic_variants

from .constants import NEUTRON_SHIFT, AVERAGINE_TABLE_SIZE
from .utils import dict_proxy


@dict_proxy("base_composition")
class Averagine(object):
    """An average elemental composition per unit of mass.

    Attributes
    ----------
    base_composition : dict
        The (fractional) count of each element in one building block
    base_mass : float
        The monoisotopic mass of one building block
    """
    def __init__(self, base_composition):
        self.base_composition = dict(base_composition)
        self.base_mass = calculate_mass(self.base_composition)

    def scale_to_mass(self, mass):
        """Build an integral elemental composition whose monoisotopic mass is
        close to `mass`, adjusting the hydrogen count to absorb rounding error.

        Parameters
        ----------
        mass : float
            The neutral mass to approximate

        Returns
        -------
        dict
        """
        scale = mass / self.base_mass
        scaled = {}
        for elem, count in self.base_composition.items():
            scaled[elem] = round(count * scale)

        scaled_mass = calculate_mass(scaled)
        delta_hydrogen = round(scaled_mass - mass)
        H = scaled["H"]
        if H > delta_hydrogen:
            scaled["H"] = H - delta_hydrogen
        else:
            scaled["H"] = 0
        return {k: v for k, v in scaled.items() if v > 0}

    def scale_by_multiplier(self, multiplier):
        """Multiply every element count by `multiplier` and round each to the
        nearest integer, without any mass correction.
        """
        scaled = {}
        for elem, count in self.base_composition.items():
            n = int(round(count * multiplier))
            if n > 0:
                scaled[elem] = n
        return scaled

    def __repr__(self):
        return "Averagine(%r)" % self.base_composition

    def __eq__(self, other):
        return self.base_composition == other.base_composition

    def __ne__(self, other):
        return not (self == other)

    def __hash__(self):
        return hash(frozenset(self.base_composition.items()))

    def __reduce__(self):
        return self.__class__, (self.base_composition, )


peptide = Averagine({"C": 4.9384, "H": 7.7583, "N": 1.3577, "O": 1.4773, "S": 0.0417})


def isotopic_shift(charge=1):
    """The m/z spacing between adjacent isotopic peaks at `charge`"""
    return NEUTRON_SHIFT / float(abs(charge))


AveragineTableEntry = namedtuple("AveragineTableEntry", (
    "composition", "monoisotopic_mass", "masses", "intensities",
    "most_intense_mass", "diff_to_monoisotopic"))


class AveragineIsotopeTable(object):
    """A ladder of increasingly large averagine molecules with their isotopic
    distributions, ordered by mass.

    The ``i``-th entry is the averagine scaled by ``(i + 1) / 2``. For each entry
    the isotope masses and intensities are stored sorted by decreasing intensity,
    so the first element is the most abundant isotope.

    Entries are generated on demand the first time a mass beyond the current end of
    the ladder is requested.

    Attributes
    ----------
    averagine : :class:`Averagine`
        The composition model
    size : int
        The maximum number of entries
    minimum_abundance : float
        Isotopes with a relative abundance below this are omitted
    """
    _growth_step = 32

    def __init__(self, averagine=None, size=AVERAGINE_TABLE_SIZE, minimum_abundance=1e-8):
        if averagine is None:
            averagine = peptide
        self.averagine = averagine
        self.size = size
        self.minimum_abundance = minimum_abundance
        self._entries = []
        self._most_intense_masses = []
        self._lock = threading.RLock()

    def _build_entry(self, i):
        composition = self.averagine.scale_by_multiplier((i + 1) / 2.0)
        monoisotopic_mass = calculate_mass(composition)
        peaks = [p for p in isotopic_variants(composition)
                 if p.intensity >= self.minimum_abundance]
        # Most intense first, lighter isotope first among ties
        peaks.sort(key=lambda p: (-p.intensity, p.mz))
        masses = np.array([p.mz for p in peaks])
        intensities = np.array([p.intensity for p in peaks])
        masses.flags.writeable = False
        intensities.flags.writeable = False
        return AveragineTableEntry(
            composition, monoisotopic_mass, masses, intensities,
            masses[0], masses[0] - monoisotopic_mass)

    def _extend_to(self, n):
        n = min(n, self.size)
        with self._lock:
            while len(self._entries) < n:
                entry = self._build_entry(len(self._entries))
                self._entries.append(entry)
                self._most_intense_masses.append(entry.most_intense_mass)

    def _ensure_mass(self, mass):
        while (len(self._entries) < self.size and
               (not self._most_intense_masses or self._most_intense_masses[-1] <= mass)):
            self._extend_to(len(self._entries) + self._growth_step)

    def __len__(self):
        return len(self._entries)

    def __getitem__(self, i):
        if i < 0 or i >= self.size:
            raise IndexError(i)
        if i >= len(self._entries):
            self._extend_to(i + 1)
        return self._entries[i]

    def closest_index(self, most_intense_mass):
        """Find the entry whose most abundant isotope mass is closest to
        `most_intense_mass`. Ties resolve to the lighter entry.

        Parameters
        ----------
        most_intense_mass : float
            The neutral mass of an observed most abundant isotopic peak

        Returns
        -------
        int
        """
        with self._lock:
            self._ensure_mass(most_intense_mass)
            masses = self._most_intense_masses
            i = bisect.bisect_left(masses, most_intense_mass)
            if i >= len(masses):
                return len(masses) - 1
            if i == 0 or masses[i] == most_intense_mass:
                return i
            if most_intense_mass - masses[i - 1] > masses[i] - most_intense_mass:
                return i
            return i - 1

    def __repr__(self):
        return "AveragineIsotopeTable(%r, %d/%d)" % (self.averagine, len(self), self.size)


class IsotopeTemplate(object):
    """A normalized isotope pattern, expressed as mass offsets from the
    monoisotopic peak.

    Attributes
    ----------
    mass_offsets : :class:`numpy.ndarray`
        The mass of each isotopic peak minus the monoisotopic mass
    abundances : :class:`numpy.ndarray`
        The abundance of each isotopic peak, scaled so the largest is 1
    most_abundant_index : int
        The position of the largest abundance
    """
    __slots__ = ("mass_offsets", "abundances", "most_abundant_index")

    def __init__(self, mass_offsets, abundances):
        self.mass_offsets = np.asarray(mass_offsets, dtype=float)
        abundances = np.asarray(abundances, dtype=float)
        self.abundances = abundances / abundances.max()
        self.most_abundant_index = int(np.argmax(self.abundances))
        self.mass_offsets.flags.writeable = False
        self.abundances.flags.writeable = False

    def __len__(self):
        return len(self.abundances)

    def __repr__(self):
        return "IsotopeTemplate(%s)" % ', '.join("%0.3f" % a for a in self.abundances)


class IsotopeTemplateLibrary(object):
    """Precomputed :class:`IsotopeTemplate` objects binned by neutral mass.

    Templates are independent of charge: the m/z spacing for a given charge is
    obtained by dividing :attr:`IsotopeTemplate.mass_offsets` by its magnitude.

    Attributes
    ----------
    averagine : :class:`Averagine`
        The composition model
    bin_width : float
        The width of each neutral mass bin
    truncate_after : float
        Stop generating isotopes once this fraction of the abundance is covered
    ignore_below : float
        Drop isotopes (after the first two) whose normalized abundance is below this
    """

    def __init__(self, averagine=None, bin_width=10.0, truncate_after=0.999, ignore_below=0.01):
        if averagine is None:
            averagine = peptide
        self.averagine = averagine
        self.bin_width = bin_width
        self.truncate_after = truncate_after
        self.ignore_below = ignore_below
        self._templates = {}
        self._lock = threading.Lock()

    def _bin(self, mass):
        return max(int(round(mass / self.bin_width)), 1)

    def _build(self, key):
        mass = key * self.bin_width
        composition = self.averagine.scale_to_mass(mass)
        offsets = []
        abundances = []
        cumsum = 0.0
        mono = None
        for peak in isotopic_variants(composition):
            if mono is None:
                mono = peak.mz
            cumsum += peak.intensity
            offsets.append(peak.mz - mono)
            abundances.append(peak.intensity)
            if cumsum >= self.truncate_after:
                break
        abundances = np.array(abundances)
        top = abundances.max()
        keep = [i for i in range(len(abundances)) if i < 2 or abundances[i] / top >= self.ignore_below]
        return IsotopeTemplate(np.array(offsets)[keep], abundances[keep])

    def template_for(self, mass):
        """Get the template for the mass bin containing `mass`

        Parameters
        ----------
        mass : float
            A neutral mass

        Returns
        -------
        :class:`IsotopeTemplate`
        """
        key = self._bin(mass)
        try:
            return self._templates[key]
        except KeyError:
            with self._lock:
                template = self._templates.get(key)
                if template is None:
                    template = self._templates[key] = self._build(key)
                return template

    def __len__(self):
        return len(self._templates)

    def __repr__(self):
        return "IsotopeTemplateLibrary(%r, bin_width=%r)" % (self.averagine, self.bin_width)


peptide_isotope_table = AveragineIsotopeTable(peptide)
peptide_isotope_templates = IsotopeTemplateLibrary(peptide)
