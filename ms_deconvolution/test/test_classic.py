import unittest

from ms_deconvolution.deconvolution import (
    ClassicDeconvolutionAlgorithm, ClassicDeconvolutionParameters, DeconvolutionType,
    deconvolute)
from ms_deconvolution.deconvolution.classic import satisfies_intensity_ratio, score_envelope
from ms_deconvolution.spectrum import MzSpectrum
from ms_deconvolution.utils import to_mz

from ms_deconvolution.test.common import averagine_table_pattern, make_charge_series


charges = [3, 4, 5, 6, 7]


class TestClassicDeconvolution(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.monoisotopic_mass, cls.masses, cls.abundances = averagine_table_pattern(5000.0)

    def make_spectrum(self, sign=1):
        return make_charge_series(self.masses, self.abundances, [z * sign for z in charges])

    def test_support_functions(self):
        self.assertTrue(satisfies_intensity_ratio(1.0, 0.5, 100.0, 50.0, 3.0))
        self.assertTrue(satisfies_intensity_ratio(1.0, 0.5, 100.0, 140.0, 3.0))
        self.assertFalse(satisfies_intensity_ratio(1.0, 0.5, 100.0, 160.0, 3.0))
        self.assertFalse(satisfies_intensity_ratio(1.0, 0.5, 100.0, 16.0, 3.0))
        self.assertEqual(score_envelope(100.0, 0.1, 1, 2), 0.0)
        self.assertGreater(score_envelope(100.0, 0.0, 3, 2), score_envelope(100.0, 0.1, 3, 2))
        self.assertGreater(score_envelope(100.0, 0.1, 3, 2), score_envelope(100.0, 0.1, 3, 20))

    def test_candidate_charges(self):
        spectrum = MzSpectrum([1000.0, 1000.25, 1000.5, 1002.0], [10.0, 5.0, 3.0, 1.0])
        algorithm = ClassicDeconvolutionAlgorithm(ClassicDeconvolutionParameters(1, 10))
        self.assertEqual(algorithm.candidate_charges(spectrum, 0), [2, 3, 4, 5])
        algorithm = ClassicDeconvolutionAlgorithm(ClassicDeconvolutionParameters(-1, -3))
        self.assertEqual(algorithm.candidate_charges(spectrum, 0), [-2, -3])

    def test_recovers_mass(self):
        spectrum = self.make_spectrum()
        params = ClassicDeconvolutionParameters(1, 10)
        envelopes = list(deconvolute(spectrum, params))
        self.assertTrue(envelopes)
        top = envelopes[0]
        self.assertEqual(top.score, max(e.score for e in envelopes))
        self.assertAlmostEqual(top.monoisotopic_mass, self.monoisotopic_mass, 3)
        self.assertIn(top.charge, charges)
        self.assertIs(top.algorithm, DeconvolutionType.classic)
        self.assertGreaterEqual(len(top), 2)
        for peak in top:
            self.assertIn(peak.mz, spectrum.mz)
        for i, envelope in enumerate(envelopes):
            for other in envelopes[i + 1:]:
                self.assertFalse(envelope.shares_peak_with(other))
        recovered = {e.charge for e in envelopes
                     if abs(e.monoisotopic_mass - self.monoisotopic_mass) < 1e-3}
        self.assertEqual(recovered, set(charges))

    def test_deterministic(self):
        spectrum = self.make_spectrum()
        params = ClassicDeconvolutionParameters(1, 10)
        first = list(deconvolute(spectrum, params))
        second = list(deconvolute(spectrum.copy(), params))
        self.assertEqual(first, second)

    def test_negative_mode(self):
        spectrum = self.make_spectrum(-1)
        params = ClassicDeconvolutionParameters(-1, -10)
        envelopes = list(deconvolute(spectrum, params))
        top = envelopes[0]
        self.assertAlmostEqual(top.monoisotopic_mass, self.monoisotopic_mass, 3)
        self.assertIn(-top.charge, charges)
        self.assertTrue(all(e.charge < 0 for e in envelopes))

    def test_mz_range(self):
        spectrum = self.make_spectrum()
        params = ClassicDeconvolutionParameters(1, 10)
        lo = to_mz(self.masses.min(), 4) - 1
        hi = to_mz(self.masses.max(), 3) + 1
        envelopes = list(deconvolute(spectrum, params, (lo, hi)))
        self.assertTrue(envelopes)
        for envelope in envelopes:
            self.assertTrue(envelope.is_within(lo, hi))
        self.assertAlmostEqual(envelopes[0].monoisotopic_mass, self.monoisotopic_mass, 3)
        self.assertIn(envelopes[0].charge, (3, 4))

    def test_minimum_peaks(self):
        spectrum = self.make_spectrum()
        params = ClassicDeconvolutionParameters(1, 10, min_peaks=5)
        for envelope in deconvolute(spectrum, params):
            self.assertGreaterEqual(len(envelope), 5)

    def test_empty(self):
        params = ClassicDeconvolutionParameters(1, 10)
        self.assertEqual(list(deconvolute(MzSpectrum([], []), params)), [])
        self.assertEqual(list(deconvolute(MzSpectrum([500.0], [10.0]), params)), [])


if __name__ == '__main__':
    unittest.main()
