import math
import unittest

import numpy as np

from ms_deconvolution.deconvolution import (
    FlashDeconvAlgorithm, FlashDeconvParameters, DeconvolutionType, deconvolute)
from ms_deconvolution.deconvolution.flash import (
    log_transform_spectrum, acceptable_log_mz_differences, find_matching_groups,
    remove_subset_groups, transform_groups_to_exp_x, filter_mass_intensity_groups_by_ppm_tolerance,
    most_common_neutral_mass_and_summed_intensity, create_neutral_mass_intensity_groups,
    log_mz_dependent_tolerance, neutral_mass_from_log_mz, classify_group, mode_cluster)
from ms_deconvolution.spectrum import MzSpectrum
from ms_deconvolution.utils import to_mz


class TestFlashDeconvSteps(unittest.TestCase):
    def test_log_transform(self):
        spectrum = MzSpectrum([100.0, 200.0, 300.0], [0.005, 0.02, 0.5])
        result = log_transform_spectrum(spectrum, 0.01)
        self.assertEqual(len(result), 2)
        self.assertTrue(np.all(result.mz > 0))
        self.assertAlmostEqual(result.mz[0], math.log(200.0))

    def test_differences(self):
        result = acceptable_log_mz_differences(1, 5)
        self.assertEqual(len(result), 5)
        self.assertAlmostEqual(result[0], math.log(2) - math.log(1), 10)
        self.assertAlmostEqual(result[-1], math.log(6) - math.log(5), 10)

    def test_find_matching_groups(self):
        log_x = [math.log(100), math.log(200), math.log(300)]
        y = [10, 20, 30]
        diffs = [math.log(200) - math.log(100), math.log(300) - math.log(200)]
        result = find_matching_groups(log_x, y, diffs)
        self.assertGreaterEqual(len(result), 1)
        self.assertGreater(len(result[0].log_mz), 1)

    def test_ladder_charges(self):
        mass = 10000.0
        log_x = [math.log(mass / z) for z in (2, 3, 4, 5)]
        result = find_matching_groups(log_x, [1, 1, 1, 1], acceptable_log_mz_differences(1, 10))
        self.assertEqual(list(result[0].charge), [2, 3, 4, 5])
        self.assertEqual(list(result[0].indices), [0, 1, 2, 3])
        result = remove_subset_groups(result)
        self.assertEqual(len(result), 1)

    def test_remove_subset_groups(self):
        groups = [
            (np.array([1.0, 2.0]), np.array([10.0, 20.0])),
            (np.array([1.0, 2.0, 3.0]), np.array([10.0, 20.0, 30.0])),
        ]
        result = remove_subset_groups(groups)
        self.assertEqual(len(result), 1)
        self.assertEqual(len(result[0][0]), 3)

    def test_transform_groups_to_exp_x(self):
        groups = [(np.array([math.log(100), math.log(200)]), np.array([10.0, 20.0]))]
        result = transform_groups_to_exp_x(groups)
        self.assertAlmostEqual(result[0][0][0], 100, 10)
        self.assertAlmostEqual(result[0][0][1], 200, 10)

    def test_filter_by_ppm_tolerance(self):
        groups = [
            (np.array([1000.0, 1000.01]), np.array([10.0, 20.0])),
            (np.array([1000.0, 2000.0]), np.array([10.0, 20.0])),
        ]
        correct, incorrect = filter_mass_intensity_groups_by_ppm_tolerance(
            groups, correct_ppm_tolerance=20000, incorrect_ppm_tolerance=10)
        self.assertEqual(len(correct), 1)
        self.assertEqual(len(incorrect), 1)

    def test_ambiguous_groups_dropped(self):
        masses = np.array([1000.0, 1000.1])
        self.assertIsNone(classify_group(masses, 25, 250))
        correct, incorrect = filter_mass_intensity_groups_by_ppm_tolerance(
            [(masses, np.array([1.0, 1.0]))])
        self.assertEqual((len(correct), len(incorrect)), (0, 0))
        self.assertTrue(classify_group(np.array([1000.0])))

    def test_most_common_neutral_mass(self):
        groups = [(np.array([1000.0, 1000.01, 2000.0]), np.array([10.0, 20.0, 30.0]))]
        result = most_common_neutral_mass_and_summed_intensity(groups, ppm_tolerance=20)
        self.assertEqual(len(result), 1)
        self.assertAlmostEqual(result[0][1], 30.0)
        self.assertAlmostEqual(result[0][0], 1000.005)
        self.assertEqual(mode_cluster([5.0, 1000.0, 1000.01]), [1, 2])

    def test_create_neutral_mass_groups(self):
        groups = [(np.array([math.log(100)]), np.array([10.0]), np.array([1]))]
        result = create_neutral_mass_intensity_groups(groups)
        self.assertEqual(len(result), 1)
        self.assertEqual(len(result[0].neutral_mass), 1)

    def test_tolerance_and_mass(self):
        self.assertGreater(log_mz_dependent_tolerance(math.log(1000), 250.0), 0)
        self.assertGreater(neutral_mass_from_log_mz(math.log(1000), 2), 0)


class TestFlashDeconvAlgorithm(unittest.TestCase):
    mass = 10000.0
    charges = [5, 6, 7, 8, 9, 10]

    def make_spectrum(self, sign=1):
        mzs = [to_mz(self.mass, z * sign) for z in self.charges]
        intensities = [100.0 * z for z in self.charges]
        return MzSpectrum(mzs, intensities)

    def test_single_ladder(self):
        envelopes = list(deconvolute(self.make_spectrum(), FlashDeconvParameters(1, 60)))
        self.assertEqual(len(envelopes), 1)
        envelope = envelopes[0]
        self.assertAlmostEqual(envelope.monoisotopic_mass, self.mass, 3)
        self.assertEqual(envelope.charge, 5)
        self.assertEqual(len(envelope), len(self.charges))
        self.assertAlmostEqual(envelope.total_intensity, 100.0 * sum(self.charges))
        self.assertIs(envelope.algorithm, DeconvolutionType.flash_deconv)

    def test_negative_mode(self):
        envelopes = list(deconvolute(
            self.make_spectrum(-1), FlashDeconvParameters(-1, -60)))
        self.assertEqual(len(envelopes), 1)
        self.assertAlmostEqual(envelopes[0].monoisotopic_mass, self.mass, 3)
        self.assertEqual(envelopes[0].charge, -5)

    def test_mz_range(self):
        spectrum = self.make_spectrum()
        lo, hi = to_mz(self.mass, 10) - 1, to_mz(self.mass, 7) + 1
        envelopes = list(deconvolute(spectrum, FlashDeconvParameters(1, 60), (lo, hi)))
        self.assertEqual(len(envelopes), 1)
        self.assertEqual(envelopes[0].charge, 7)
        self.assertTrue(envelopes[0].is_within(lo, hi))

    def test_single_charge_one_species(self):
        spectrum = MzSpectrum([to_mz(1500.0, 2), to_mz(1500.0, 1)], [100.0, 200.0])
        envelopes = list(deconvolute(spectrum, FlashDeconvParameters(1, 60)))
        self.assertEqual([e.charge for e in envelopes], [1])
        self.assertAlmostEqual(envelopes[0].monoisotopic_mass, 1500.0, 3)

    def test_empty(self):
        algorithm = FlashDeconvAlgorithm(FlashDeconvParameters(1, 60))
        self.assertEqual(list(algorithm.deconvolute(MzSpectrum([], []), (0, 1000))), [])
        self.assertEqual(list(algorithm.deconvolute(MzSpectrum([500.0], [10.0]))), [])


if __name__ == '__main__':
    unittest.main()
