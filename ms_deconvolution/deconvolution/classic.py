# -*- coding: utf-8 -*-
'''Averagine model based deconvolution.

Every sufficiently intense peak is assumed in turn to be the most abundant
isotope of some molecule. For each charge suggested by the spacing of nearby
peaks, the averagine isotopic distribution of the matching mass is looked up
and walked from its most abundant isotope downwards, collecting observed peaks
until one is missing or disagrees in intensity. Other charge states of the same
mass strengthen the fit.
'''
import math

import numpy as np

from ..averagine import peptide_isotope_table
from ..envelope import IsotopicEnvelope
from ..utils import ppm_error, to_neutral_mass, to_mz

from .base import DeconvolutionAlgorithmBase, debug
from .parameters import ClassicDeconvolutionParameters


#: Peaks further than this from a seed peak are not isotopes of it
MAXIMUM_ISOTOPE_SPACING = 1.1

#: Lower bound on the intensity ratio dispersion used when scoring, so that a
#: perfect fit to the model does not divide by zero
MINIMUM_RATIO_STDEV = 1e-12


def satisfies_intensity_ratio(theoretical_1, theoretical_2, observed_1, observed_2, ratio_limit):
    """Check that the ratio between two observed peaks is within `ratio_limit`
    fold of the ratio between their theoretical abundances.

    Returns
    -------
    bool
    """
    expected = observed_1 / theoretical_1 * theoretical_2
    return expected / ratio_limit <= observed_2 <= expected * ratio_limit


def score_envelope(total_intensity, ratio_stdev, n_peaks, charge):
    """Score a matched envelope. Envelopes of fewer than two peaks score zero.

    Returns
    -------
    float
    """
    if n_peaks < 2:
        return 0.0
    ratio_stdev = max(ratio_stdev, MINIMUM_RATIO_STDEV)
    return (total_intensity / ratio_stdev ** 0.13 * n_peaks ** 0.4 /
            abs(charge) ** 0.06)


class ClassicEnvelopeFit(object):
    """The working record of a single charge hypothesis for a seed peak.

    Attributes
    ----------
    peaks : list of tuple
        The (m/z, intensity) pairs matched at :attr:`charge`
    monoisotopic_mass : float
        The monoisotopic mass estimate
    charge : int
        The signed charge
    total_intensity : float
        The summed intensity of :attr:`peaks`
    ratio_stdev : float
        The sample standard deviation of theoretical / observed intensity ratios
    mass_index : int
        The averagine table entry used
    score : float
        The envelope score, plus the scores of supporting charge states
    """
    __slots__ = ("peaks", "monoisotopic_mass", "charge", "total_intensity",
                 "ratio_stdev", "mass_index", "score")

    def __init__(self, peaks, monoisotopic_mass, charge, total_intensity, ratio_stdev, mass_index):
        self.peaks = peaks
        self.monoisotopic_mass = monoisotopic_mass
        self.charge = charge
        self.total_intensity = total_intensity
        self.ratio_stdev = ratio_stdev
        self.mass_index = mass_index
        self.score = score_envelope(total_intensity, ratio_stdev, len(peaks), charge)

    def aggregate_charge_state_score(self, other):
        self.score += other.score

    def set_median_monoisotopic_mass(self, predictions):
        self.monoisotopic_mass = float(np.median(predictions))

    def to_envelope(self):
        return IsotopicEnvelope(
            self.peaks, self.monoisotopic_mass, self.charge, self.total_intensity,
            self.score, algorithm=ClassicDeconvolutionParameters.deconvolution_type)

    def __repr__(self):
        return "ClassicEnvelopeFit(%0.4f, %d, %0.3f, %d peaks)" % (
            self.monoisotopic_mass, self.charge, self.score, len(self.peaks))


class ClassicDeconvolutionAlgorithm(DeconvolutionAlgorithmBase):
    """Deconvolute spectra by matching observed peaks to averagine isotopic
    distributions looked up by the mass of their most abundant isotope.

    Attributes
    ----------
    isotope_table : :class:`~.AveragineIsotopeTable`
        The shared theoretical isotopic distributions
    """
    parameter_type = ClassicDeconvolutionParameters

    def __init__(self, parameters, isotope_table=None):
        super(ClassicDeconvolutionAlgorithm, self).__init__(parameters)
        if isotope_table is None:
            isotope_table = peptide_isotope_table
        self.isotope_table = isotope_table

    def deconvolute(self, spectrum, mz_range=None):
        params = self.parameters
        if len(spectrum) == 0:
            return
        if mz_range is None:
            mz_range = spectrum.range
        start, end = spectrum.extract_indices(mz_range[0], mz_range[1])
        if start >= end:
            return
        intensity = spectrum.intensity
        max_intensity = intensity[start:end].max()

        seeds = [i for i in range(start, end)
                 if intensity[i] * params.seed_intensity_ratio >= max_intensity]
        seeds.sort(key=lambda i: (-intensity[i], i))
        debug("Classic deconvolution of %d peaks from %d seeds", end - start, len(seeds))

        candidates = []
        for index in seeds:
            fit = self._best_fit_for_seed(spectrum, index)
            if fit is not None:
                candidates.append(fit)

        candidates.sort(key=lambda fit: -fit.score)
        seen = set()
        n_accepted = 0
        for fit in candidates:
            if len(fit.peaks) < params.min_peaks or fit.score <= params.minimum_score:
                continue
            mzs = [mz for mz, _ in fit.peaks]
            if not seen.isdisjoint(mzs):
                continue
            seen.update(mzs)
            n_accepted += 1
            yield fit.to_envelope()
        debug("Classic deconvolution accepted %d of %d candidate envelopes", n_accepted, len(candidates))

    def candidate_charges(self, spectrum, index):
        """Guess the charge states of the peak at `index` from the spacing of the
        peaks just above it in m/z.

        Returns
        -------
        list of int
            Signed charges in ascending magnitude
        """
        params = self.parameters
        mz = spectrum.mz
        seed_mz = mz[index]
        charges = set()
        for i in range(index + 1, len(mz)):
            delta = mz[i] - seed_mz
            if delta >= MAXIMUM_ISOTOPE_SPACING:
                break
            if delta <= 0:
                continue
            charge = int(math.floor(1 / delta))
            for z in (charge, charge + 1):
                if params.min_charge <= z <= params.max_charge:
                    charges.add(z)
        return [z * params.sign for z in sorted(charges)]

    def _best_fit_for_seed(self, spectrum, index):
        params = self.parameters
        seed_mz = float(spectrum.mz[index])
        seed_intensity = float(spectrum.intensity[index])
        best = None
        for charge in self.candidate_charges(spectrum, index):
            most_intense_mass = to_neutral_mass(seed_mz, charge)
            if most_intense_mass <= 0:
                continue
            mass_index = self.isotope_table.closest_index(most_intense_mass)
            predictions = []
            fit = self.find_isotopic_envelope(
                spectrum, mass_index, seed_mz, seed_intensity, most_intense_mass,
                charge, predictions)
            if len(fit.peaks) < 2:
                continue
            n_other_charges = self.observe_adjacent_charge_states(
                spectrum, fit, seed_mz, mass_index, predictions)
            # Higher charges must be corroborated by more charge states
            if (best is None or fit.score > best.score) and abs(charge) // 5 <= n_other_charges:
                fit.set_median_monoisotopic_mass(predictions)
                best = fit
        return best

    def find_isotopic_envelope(self, spectrum, mass_index, seed_mz, seed_intensity,
                               most_intense_mass, charge, predictions):
        """Walk the theoretical isotopic distribution of table entry `mass_index`
        from its most abundant isotope downwards, matching each against the
        spectrum at `charge` until a match fails.

        Each matched peak appends a monoisotopic mass estimate to `predictions`.

        Returns
        -------
        :class:`ClassicEnvelopeFit`
        """
        params = self.parameters
        entry = self.isotope_table[mass_index]
        theoretical_masses = entry.masses
        theoretical_intensities = entry.intensities
        tolerance = params.deconvolution_tolerance_ppm
        ratio_limit = params.intensity_ratio_limit

        observed = [(seed_mz, seed_intensity)]
        ratios = [theoretical_intensities[0] / seed_intensity]
        mass_shift = most_intense_mass - theoretical_masses[0]
        total_intensity = seed_intensity
        monoisotopic_mass = most_intense_mass - entry.diff_to_monoisotopic
        predictions.append(monoisotopic_mass)

        for k in range(1, len(theoretical_intensities)):
            expected_mass = theoretical_masses[k] + mass_shift
            closest = spectrum.closest_peak_index(to_mz(expected_mass, charge))
            peak_mz = float(spectrum.mz[closest])
            peak_intensity = float(spectrum.intensity[closest])
            peak_mass = to_neutral_mass(peak_mz, charge)
            if (abs(ppm_error(peak_mass, expected_mass)) <= tolerance and
                    satisfies_intensity_ratio(
                        theoretical_intensities[0], theoretical_intensities[k],
                        seed_intensity, peak_intensity, ratio_limit) and
                    (peak_mz, peak_intensity) not in observed):
                observed.append((peak_mz, peak_intensity))
                total_intensity += peak_intensity
                ratios.append(theoretical_intensities[k] / peak_intensity)
                predictions.append(monoisotopic_mass + peak_mass - expected_mass)
            else:
                break
        ratio_stdev = float(np.std(ratios, ddof=1)) if len(ratios) > 1 else float('nan')
        return ClassicEnvelopeFit(
            observed, monoisotopic_mass, charge, total_intensity, ratio_stdev, mass_index)

    def observe_adjacent_charge_states(self, spectrum, fit, most_intense_mz, mass_index, predictions):
        """Search for the same molecule at successively lower, then higher, charge
        states, stopping in each direction at the first charge which is absent.
        Each charge found adds its score to `fit`.

        Returns
        -------
        int
            The number of other charge states observed
        """
        params = self.parameters
        sign = params.sign
        charge = abs(fit.charge)
        most_abundant_mass = to_neutral_mass(most_intense_mz, fit.charge)
        n_observed = 0
        for z in range(charge - 1, params.min_charge - 1, -1):
            if self.find_charge_state_of_mass(
                    spectrum, fit, z * sign, most_abundant_mass, mass_index, predictions):
                n_observed += 1
            else:
                break
        for z in range(charge + 1, params.max_charge + 1):
            if self.find_charge_state_of_mass(
                    spectrum, fit, z * sign, most_abundant_mass, mass_index, predictions):
                n_observed += 1
            else:
                break
        return n_observed

    def find_charge_state_of_mass(self, spectrum, fit, charge, most_abundant_mass, mass_index, predictions):
        tolerance = self.parameters.deconvolution_tolerance_ppm
        closest = spectrum.closest_peak_index(to_mz(most_abundant_mass, charge))
        observed_mz = float(spectrum.mz[closest])
        observed_mass = to_neutral_mass(observed_mz, charge)
        if abs(ppm_error(observed_mass, most_abundant_mass)) > tolerance:
            return False
        test = self.find_isotopic_envelope(
            spectrum, mass_index, observed_mz, float(spectrum.intensity[closest]),
            observed_mass, charge, predictions)
        if test.score != 0:
            fit.aggregate_charge_state_score(test)
            return True
        # Discard the lone seed estimate of the failed charge state
        predictions.pop()
        return False
