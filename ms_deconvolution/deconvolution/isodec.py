# -*- coding: utf-8 -*-
'''Isotope template matching.

Each seed peak is aligned against precomputed averagine isotope templates at
every allowed charge and at several isotope offsets. The alignment with the
best agreement, measured as the cosine similarity between template abundances
and matched intensities weighted by the fraction of local signal it explains,
becomes an envelope, and its peaks are removed before later seeds are tried.
Several passes are made, so that seeds rejected because of interfering peaks
can be reconsidered once those peaks are explained.
'''
import math

import numpy as np

from ..averagine import peptide_isotope_templates
from ..envelope import IsotopicEnvelope
from ..utils import to_neutral_mass

from .base import DeconvolutionAlgorithmBase, debug
from .parameters import IsoDecParameters


def cosine_similarity(a, b):
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    denominator = math.sqrt(float(np.dot(a, a))) * math.sqrt(float(np.dot(b, b)))
    if denominator == 0:
        return 0.0
    return float(np.dot(a, b)) / denominator


class TemplateMatch(object):
    """One alignment of a template against the observed peaks.

    Attributes
    ----------
    charge : int
        The signed charge
    shift : int
        The template isotope the seed peak is aligned to
    css : float
        The cosine similarity between template and observed intensities
    coverage : float
        The fraction of the intensity in the envelope's m/z span that was matched
    peaks : list of :class:`ms_peak_picker.FittedPeak`
        The matched peaks
    monoisotopic_mass : float
        The intensity weighted monoisotopic mass estimate
    """
    __slots__ = ("charge", "shift", "css", "coverage", "peaks", "monoisotopic_mass", "shift_distance")

    def __init__(self, charge, shift, css, coverage, peaks, monoisotopic_mass, shift_distance):
        self.charge = charge
        self.shift = shift
        self.css = css
        self.coverage = coverage
        self.peaks = peaks
        self.monoisotopic_mass = monoisotopic_mass
        self.shift_distance = shift_distance

    def rank(self):
        return (-self.css * self.coverage, abs(self.charge), self.shift_distance, self.shift)

    def to_envelope(self):
        return IsotopicEnvelope(
            [(p.mz, p.intensity) for p in self.peaks], self.monoisotopic_mass, self.charge,
            score=self.css, algorithm=IsoDecParameters.deconvolution_type)

    def __repr__(self):
        return "TemplateMatch(%0.4f, %d, css=%0.3f, coverage=%0.3f)" % (
            self.monoisotopic_mass, self.charge, self.css, self.coverage)


class IsoDecAlgorithm(DeconvolutionAlgorithmBase):
    """Deconvolute spectra by matching peak neighborhoods to isotope templates.

    Envelopes are produced in the order they are accepted: by pass, then by
    decreasing seed intensity. When :attr:`~.IsoDecParameters.report_multiple_monoisos`
    is set, alternative monoisotopic assignments of an accepted envelope follow it.

    Attributes
    ----------
    template_library : :class:`~.IsotopeTemplateLibrary`
        The shared isotope templates
    """
    parameter_type = IsoDecParameters

    def __init__(self, parameters, template_library=None):
        super(IsoDecAlgorithm, self).__init__(parameters)
        if template_library is None:
            template_library = peptide_isotope_templates
        self.template_library = template_library

    def deconvolute(self, spectrum, mz_range=None):
        params = self.parameters
        if mz_range is not None:
            spectrum = spectrum.slice(mz_range[0], mz_range[1])
        if len(spectrum) == 0:
            return
        peaks = spectrum.to_peak_set()
        max_intensity = spectrum.max_intensity
        if max_intensity <= 0:
            return
        threshold = params.data_threshold * max_intensity
        seeds = sorted([p for p in peaks if p.intensity >= threshold and p.intensity > 0],
                       key=lambda p: (-p.intensity, p.mz))
        debug("Template matching over %d peaks from %d seeds", len(peaks), len(seeds))

        consumed = set()
        for round_number in range(params.knockdown_rounds):
            n_found = 0
            for seed in seeds:
                if seed.peak_count in consumed:
                    continue
                matches = self.match_seed(peaks, seed, consumed)
                if not matches:
                    continue
                best = matches[0]
                consumed.update(p.peak_count for p in best.peaks)
                n_found += 1
                yield best.to_envelope()
                if params.report_multiple_monoisos:
                    for alternative in matches[1:]:
                        yield alternative.to_envelope()
            debug("Pass %d accepted %d envelopes", round_number + 1, n_found)
            if n_found == 0:
                break

    def match_seed(self, peaks, seed, consumed):
        """Align every charge and isotope offset to `seed`.

        Returns
        -------
        list of :class:`TemplateMatch`
            The best match first, followed by alternative monoisotopic
            assignments at the same charge. Empty if nothing passes the thresholds.
        """
        candidates = []
        for charge in self.parameters.charge_range():
            candidates.extend(self.match_charge(peaks, seed, charge, consumed))
        if not candidates:
            return []
        candidates.sort(key=TemplateMatch.rank)
        best = candidates[0]
        alternatives = [c for c in candidates[1:] if c.charge == best.charge]
        return [best] + alternatives

    def match_charge(self, peaks, seed, charge, consumed):
        params = self.parameters
        tolerance = params.match_tolerance / 1e6
        mass_guess = to_neutral_mass(seed.mz, charge)
        if mass_guess <= 0:
            return []
        template = self.template_library.template_for(mass_guess)
        mz_offsets = template.mass_offsets / abs(charge)
        window_lo = seed.mz + params.mz_window[0]
        window_hi = seed.mz + params.mz_window[1]
        apex = template.most_abundant_index

        matches = []
        for shift in range(max(0, apex - params.max_shift),
                           min(len(template), apex + params.max_shift + 1)):
            monoisotopic_mz = seed.mz - mz_offsets[shift]
            expected = monoisotopic_mz + mz_offsets
            positions = [k for k in range(len(template)) if window_lo <= expected[k] <= window_hi]
            observed = []
            matched = []
            for k in positions:
                if k == shift:
                    peak = seed
                else:
                    peak = peaks.has_peak(expected[k], tolerance)
                    if peak is not None and peak.peak_count in consumed:
                        peak = None
                if peak is None:
                    observed.append(0.0)
                else:
                    observed.append(peak.intensity)
                    matched.append((k, peak))
            if len(matched) < params.min_peaks:
                continue
            css = cosine_similarity(template.abundances[positions], observed)
            if css < params.css_threshold:
                continue
            lo = min(p.mz for _, p in matched)
            hi = max(p.mz for _, p in matched)
            span_intensity = sum(
                p.intensity for p in peaks.between(lo * (1 - tolerance), hi * (1 + tolerance))
                if p.peak_count not in consumed)
            matched_intensity = sum(p.intensity for _, p in matched)
            coverage = matched_intensity / span_intensity if span_intensity > 0 else 0.0
            if coverage < params.min_area_covered:
                continue
            monoisotopic_mass = sum(
                (to_neutral_mass(p.mz, charge) - template.mass_offsets[k]) * p.intensity
                for k, p in matched) / matched_intensity
            matches.append(TemplateMatch(
                charge, shift, css, coverage, [p for _, p in matched],
                monoisotopic_mass, abs(shift - apex)))
        return matches
