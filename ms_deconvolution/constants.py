from brainpy import PROTON, calculate_mass

#: The mass difference between the 13C and 12C isotopes, the spacing
#: between adjacent isotopic peaks at charge 1.
NEUTRON_SHIFT = calculate_mass({"C[13]": 1}) - calculate_mass({"C[12]": 1})

DEFAULT_PPM_TOLERANCE = 4.0

#: Two envelopes with the same charge whose monoisotopic masses are closer
#: than this are the same species.
DUPLICATE_MASS_TOLERANCE = 1e-3

#: Extra m/z added on either side of an isolation window when deconvoluting
#: the precursor spectrum so that envelopes straddling the window are complete.
ISOLATION_WINDOW_PADDING = 8.5

AVERAGINE_TABLE_SIZE = 1500

__all__ = [
    "PROTON", "NEUTRON_SHIFT", "DEFAULT_PPM_TOLERANCE",
    "DUPLICATE_MASS_TOLERANCE", "ISOLATION_WINDOW_PADDING",
    "AVERAGINE_TABLE_SIZE"
]
