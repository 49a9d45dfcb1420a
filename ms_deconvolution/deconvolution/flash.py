# -*- coding: utf-8 -*-
'''Charge ladder detection in log(m/z) space.

For a molecule of neutral mass ``M``, the charge-reduced m/z at charge ``z`` is
``M / z``, so in log space the peaks of successive charge states are separated
by ``log((z + 1) / z)`` independently of ``M``. Runs of peaks separated by
consecutive such offsets form charge ladders, which are converted back to
neutral masses, screened for internal agreement, and reduced to a consensus
mass.

The steps are exposed as module level functions so they can be used and
tested on their own.
'''
import math

from collections import namedtuple

import numpy as np

from ..constants import PROTON
from ..envelope import IsotopicEnvelope
from ..spectrum import MzSpectrum
from ..utils import ppm_error, to_neutral_mass

from .base import DeconvolutionAlgorithmBase, debug
from .parameters import FlashDeconvParameters


LadderGroup = namedtuple("LadderGroup", ("log_mz", "intensity", "charge", "indices"))
MassIntensityGroup = namedtuple("MassIntensityGroup", ("neutral_mass", "intensity"))


def _log_transform(mz, intensity, intensity_threshold=0.01, charge_carrier=0.0):
    # Intensity filtering must precede the transform
    shifted = np.asarray(mz, dtype=float) - charge_carrier
    intensity = np.asarray(intensity, dtype=float)
    kept = np.flatnonzero((intensity > intensity_threshold) & (shifted > 0))
    return np.log(shifted[kept]), intensity[kept], kept


def log_transform_spectrum(spectrum, intensity_threshold=0.01, charge_carrier=0.0):
    """Discard peaks whose intensity is not above `intensity_threshold`, then take the
    natural logarithm of the m/z of the remaining peaks.

    Parameters
    ----------
    spectrum : :class:`~.MzSpectrum`
        The spectrum to transform
    intensity_threshold : float, optional
        Peaks with intensity at or below this are dropped (the default is 0.01)
    charge_carrier : float, optional
        A mass subtracted from each m/z before taking the logarithm. Passing the
        signed proton mass turns m/z into charge-reduced mass ``M / z``.

    Returns
    -------
    :class:`~.MzSpectrum`
        A spectrum whose :attr:`mz` holds log values
    """
    log_x, y, _ = _log_transform(spectrum.mz, spectrum.intensity, intensity_threshold, charge_carrier)
    return MzSpectrum(log_x, y, copy=False)


def acceptable_log_mz_differences(low=1, count=60):
    """The log(m/z) spacings between charge ``z`` and ``z + 1`` for ``z`` from
    `low` to ``low + count - 1``.

    Returns
    -------
    list of float
    """
    return [math.log(i + 1) - math.log(i) for i in range(low, low + count)]


def log_mz_dependent_tolerance(log_mz, tolerance=250.0):
    """Convert a ppm `tolerance` at ``exp(log_mz)`` into a width in log space.

    Returns
    -------
    float
    """
    m = math.exp(log_mz)
    m_plus = m + m * tolerance / 1e6
    return math.log(m_plus) - log_mz


def neutral_mass_from_log_mz(log_mz, charge, charge_carrier=PROTON):
    return to_neutral_mass(math.exp(log_mz), charge, charge_carrier)


def _walk_ladder(log_x, negated, start, differences, first_rung, tolerance):
    members = [start]
    rungs = [first_rung]
    previous = start
    first_value = log_x[start]
    long_range_tolerance = log_mz_dependent_tolerance(first_value, tolerance)
    expected_total = 0.0
    for p in range(first_rung, len(differences)):
        expected = differences[p]
        previous_value = log_x[previous]
        step_tolerance = log_mz_dependent_tolerance(previous_value, tolerance)
        target = negated[previous] + expected
        lo = max(int(np.searchsorted(negated, target - step_tolerance, side="left")), previous + 1)
        hi = int(np.searchsorted(negated, target + step_tolerance, side="right"))
        found = False
        for candidate in range(lo, hi):
            diff = previous_value - log_x[candidate]
            if abs(diff - expected) > step_tolerance:
                continue
            if abs((first_value - log_x[candidate]) - (expected_total + expected)) <= long_range_tolerance:
                expected_total += expected
                members.append(candidate)
                rungs.append(p + 1)
                previous = candidate
                found = True
                break
        if not found:
            break
    return members, rungs


def find_matching_groups(log_x, intensity, differences, first_charge=1, tolerance=250.0):
    """Find charge ladders among log-transformed peaks.

    Peaks are visited from highest to lowest log(m/z). From each starting peak, every
    rung of `differences` is tried as the starting charge, and the ladder is extended
    one charge at a time while a peak at the next expected offset exists. The longest
    ladder from each start is kept, the lowest starting charge winning ties. Ladders
    of a single peak are discarded.

    Parameters
    ----------
    log_x : Sequence of float
        The log-transformed m/z values
    intensity : Sequence of float
        The intensity of each peak
    differences : list of float
        The expected spacing between charge ``first_charge + i`` and the next
        charge, as produced by :func:`acceptable_log_mz_differences`
    first_charge : int, optional
        The charge magnitude of the first rung of `differences`
    tolerance : float, optional
        The ppm tolerance used when matching spacings

    Returns
    -------
    list of :class:`LadderGroup`
        Each group lists its peaks in descending log(m/z) with their charge
        magnitudes and their positions in the input arrays
    """
    log_x = np.asarray(log_x, dtype=float)
    intensity = np.asarray(intensity, dtype=float)
    order = np.argsort(-log_x, kind='mergesort')
    sorted_x = log_x[order]
    sorted_y = intensity[order]
    # Negated so the descending values can be searched with searchsorted
    negated = -sorted_x
    results = []
    for start in range(len(sorted_x) - 1):
        best_members = None
        best_rungs = None
        for first_rung in range(len(differences)):
            members, rungs = _walk_ladder(sorted_x, negated, start, differences, first_rung, tolerance)
            if len(members) > 1 and (best_members is None or len(members) > len(best_members)):
                best_members = members
                best_rungs = rungs
        if best_members is not None:
            results.append(LadderGroup(
                sorted_x[best_members], sorted_y[best_members],
                np.array(best_rungs, dtype=int) + first_charge, order[best_members]))
    return results


def remove_subset_groups(groups, tolerance=250.0):
    """Remove each group whose values are all matched, within tolerance, by a larger group.

    Groups are any sequences whose first element holds the log-space values, so
    both :class:`LadderGroup` and plain ``(x, y)`` pairs are accepted. The order of
    the surviving groups is preserved.

    Returns
    -------
    list
    """
    by_size = sorted(range(len(groups)), key=lambda i: len(groups[i][0]))
    to_remove = set()
    for position, i in enumerate(by_size):
        values = groups[i][0]
        for j in by_size[position + 1:]:
            other = groups[j][0]
            if len(values) >= len(other):
                continue
            if all(any(abs(o - x) <= log_mz_dependent_tolerance(x, tolerance) for o in other)
                   for x in values):
                to_remove.add(i)
                break
    return [g for i, g in enumerate(groups) if i not in to_remove]


def transform_groups_to_exp_x(groups):
    """Undo the log transform of the first element of each ``(x, y)`` group"""
    return [(np.exp(np.asarray(g[0], dtype=float)), g[1]) for g in groups]


def create_neutral_mass_intensity_groups(groups, charge_carrier=PROTON):
    """Convert each ladder's ``(log_mz, charge)`` pairs into neutral masses.

    Parameters
    ----------
    groups : list
        Sequences of ``(log_mz, intensity, charge, ...)``
    charge_carrier : float, optional
        The charge carrier mass still present in the log values. Pass ``0`` if it was
        removed before the transform.

    Returns
    -------
    list of :class:`MassIntensityGroup`
    """
    result = []
    for group in groups:
        log_mz, intensity, charges = group[0], group[1], group[2]
        masses = np.array([neutral_mass_from_log_mz(x, int(z), charge_carrier)
                           for x, z in zip(log_mz, charges)])
        result.append(MassIntensityGroup(masses, np.asarray(intensity, dtype=float)))
    return result


def _pairwise_ppm(masses):
    masses = np.asarray(masses, dtype=float)
    i, j = np.triu_indices(len(masses), k=1)
    a = masses[i]
    b = masses[j]
    return np.abs(a - b) / ((a + b) / 2.0) * 1e6


def classify_group(masses, correct_ppm_tolerance=25.0, incorrect_ppm_tolerance=250.0,
                   correct_fraction=0.7):
    """Judge whether the masses of one ladder agree.

    Returns
    -------
    bool or :const:`None`
        :const:`True` for likely correct, :const:`False` for likely incorrect,
        :const:`None` when the spread falls between the two tolerances
    """
    if len(masses) < 2:
        return True
    ppm = _pairwise_ppm(masses)
    total = len(ppm)
    close = int(np.count_nonzero(ppm <= correct_ppm_tolerance))
    far = int(np.count_nonzero(ppm > incorrect_ppm_tolerance))
    if close >= correct_fraction * total and far < (1 - correct_fraction) * total:
        return True
    elif far > (1 - correct_fraction) * total:
        return False
    return None


def filter_mass_intensity_groups_by_ppm_tolerance(groups, correct_ppm_tolerance=25.0,
                                                  incorrect_ppm_tolerance=250.0,
                                                  correct_fraction=0.7):
    """Partition groups into likely correct and likely incorrect by the pairwise
    ppm spread of their masses.

    A group is likely correct when at least `correct_fraction` of its pairs are within
    `correct_ppm_tolerance` and few are beyond `incorrect_ppm_tolerance`, and likely
    incorrect when more than ``1 - correct_fraction`` of its pairs are beyond
    `incorrect_ppm_tolerance`. Groups meeting neither condition are ambiguous and
    appear in neither list. Groups with fewer than two masses are likely correct.

    Returns
    -------
    likely_correct : list
    likely_incorrect : list
    """
    likely_correct = []
    likely_incorrect = []
    n_ambiguous = 0
    for group in groups:
        verdict = classify_group(group[0], correct_ppm_tolerance, incorrect_ppm_tolerance,
                                 correct_fraction)
        if verdict is True:
            likely_correct.append(group)
        elif verdict is False:
            likely_incorrect.append(group)
        else:
            n_ambiguous += 1
    if n_ambiguous:
        debug("Dropped %d ambiguous mass groups", n_ambiguous)
    return likely_correct, likely_incorrect


def mode_cluster(masses, ppm_tolerance=25.0):
    """Greedily cluster `masses`, comparing each to the first member of every
    existing cluster, and return the indices of the largest cluster. The earliest
    cluster wins ties.

    Returns
    -------
    list of int
    """
    clusters = []
    for i, mass in enumerate(masses):
        for cluster in clusters:
            reference = masses[cluster[0]]
            if abs(ppm_error(mass, reference)) <= ppm_tolerance:
                cluster.append(i)
                break
        else:
            clusters.append([i])
    best = clusters[0]
    for cluster in clusters[1:]:
        if len(cluster) > len(best):
            best = cluster
    return best


def most_common_neutral_mass_and_summed_intensity(groups, ppm_tolerance=25.0):
    """Reduce each ``(masses, intensities)`` group to the mean mass and summed
    intensity of its largest cluster of mutually consistent masses.

    Returns
    -------
    list of tuple
        ``(most_common_neutral_mass, summed_intensity)`` per group
    """
    results = []
    for group in groups:
        masses = np.asarray(group[0], dtype=float)
        intensities = np.asarray(group[1], dtype=float)
        members = mode_cluster(masses, ppm_tolerance)
        results.append((float(masses[members].mean()), float(intensities[members].sum())))
    return results


class FlashDeconvAlgorithm(DeconvolutionAlgorithmBase):
    """Deconvolute spectra by detecting charge ladders in log(m/z) space.

    Each accepted ladder produces one envelope whose charge is the lowest charge
    among the peaks agreeing on the consensus mass. Envelopes are produced in
    the order their ladders are discovered, from the highest m/z starting peak
    down.
    """
    parameter_type = FlashDeconvParameters

    def deconvolute(self, spectrum, mz_range=None):
        params = self.parameters
        if len(spectrum) == 0:
            return
        if mz_range is None:
            start, end = 0, len(spectrum)
        else:
            start, end = spectrum.extract_indices(mz_range[0], mz_range[1])
        mz = spectrum.mz[start:end]
        intensity = spectrum.intensity[start:end]
        log_x, y, kept = _log_transform(
            mz, intensity, params.intensity_threshold, params.sign * PROTON)
        differences = acceptable_log_mz_differences(
            params.min_charge, params.max_charge - params.min_charge)
        if len(log_x) < 2 or not differences:
            return

        groups = find_matching_groups(
            log_x, y, differences, params.min_charge, params.ladder_tolerance_ppm)
        groups = remove_subset_groups(groups, params.ladder_tolerance_ppm)
        mass_groups = create_neutral_mass_intensity_groups(groups, charge_carrier=0.0)
        debug("Found %d charge ladders among %d peaks", len(groups), len(log_x))

        used = set()
        n_ambiguous = 0
        for group, mass_group in zip(groups, mass_groups):
            verdict = classify_group(
                mass_group.neutral_mass, params.correct_ppm_tolerance,
                params.incorrect_ppm_tolerance, params.correct_fraction)
            if verdict is None:
                n_ambiguous += 1
                continue
            elif not verdict:
                continue
            members = mode_cluster(mass_group.neutral_mass, params.consensus_ppm_tolerance)
            positions = [int(kept[group.indices[j]]) for j in members]
            if used.issuperset(positions):
                continue
            used.update(positions)
            masses = mass_group.neutral_mass[members]
            intensities = mass_group.intensity[members]
            summed_intensity = float(intensities.sum())
            charge = int(group.charge[members].min()) * params.sign
            peaks = [(float(mz[i]), float(intensity[i])) for i in positions]
            yield IsotopicEnvelope(
                peaks, float(masses.mean()), charge, summed_intensity,
                score=summed_intensity * len(members) / len(group.log_mz),
                most_abundant_observed_isotopic_mass=float(masses[int(np.argmax(intensities))]),
                algorithm=FlashDeconvParameters.deconvolution_type)
        if n_ambiguous:
            debug("Dropped %d ambiguous charge ladders", n_ambiguous)
