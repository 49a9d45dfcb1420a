import numpy as np

from brainpy import isotopic_variants

from ms_deconvolution.averagine import peptide, peptide_isotope_table
from ms_deconvolution.spectrum import MzSpectrum
from ms_deconvolution.utils import to_mz


def averagine_table_pattern(approximate_mass, shift=0.25):
    """Take the averagine table entry closest to `approximate_mass` and move it by
    `shift` Da, returning the monoisotopic mass and the isotope masses and abundances.
    """
    entry = peptide_isotope_table[peptide_isotope_table.closest_index(approximate_mass)]
    masses = np.array(entry.masses) + shift
    return entry.monoisotopic_mass + shift, masses, np.array(entry.intensities)


def brainpy_pattern(approximate_mass, npeaks=8):
    """Generate the isotopic pattern of an averagine composition near `approximate_mass`,
    returning the monoisotopic mass and the isotope masses and abundances.
    """
    composition = peptide.scale_to_mass(approximate_mass)
    peaks = isotopic_variants(composition, npeaks=npeaks)
    masses = np.array([p.mz for p in peaks])
    intensities = np.array([p.intensity for p in peaks])
    return masses[0], masses, intensities


def make_charge_series(masses, abundances, charges, scale=1e4):
    """Place one isotopic pattern at every charge in `charges`, with intensity
    growing with charge magnitude.
    """
    mzs = []
    intensities = []
    for z in charges:
        mzs.extend(to_mz(m, z) for m in masses)
        intensities.extend(abundances * scale * (1.0 + 0.25 * abs(z)))
    return MzSpectrum(mzs, intensities)
