import unittest

import numpy as np

from ms_deconvolution.deconvolution import ClassicDeconvolutionParameters, Polarity
from ms_deconvolution.scan import Scan, IsolationWindow
from ms_deconvolution.spectrum import MzSpectrum
from ms_deconvolution.utils import to_mz

from ms_deconvolution.test.common import averagine_table_pattern, brainpy_pattern, make_charge_series


class TestIsolationWindow(unittest.TestCase):
    def test_window(self):
        window = IsolationWindow.from_width(800.0, 2.0)
        self.assertEqual(window.lower_bound, 799.0)
        self.assertEqual(window.upper_bound, 801.0)
        self.assertEqual(window.width, 2.0)
        self.assertIn(800.5, window)
        self.assertNotIn(801.5, window)
        self.assertEqual(window.to_range(), (799.0, 801.0))

    def test_asymmetric(self):
        window = IsolationWindow(0.5, 800.0, 1.5)
        self.assertEqual((window.lower_bound, window.upper_bound), (799.5, 801.5))


class TestScan(unittest.TestCase):
    def test_charge_signed_by_polarity(self):
        spectrum = MzSpectrum([100.0], [1.0])
        self.assertEqual(Scan(spectrum, selected_ion_charge=2).selected_ion_charge, 2)
        scan = Scan(spectrum, polarity="negative", selected_ion_charge=2)
        self.assertIs(scan.polarity, Polarity.negative)
        self.assertEqual(scan.selected_ion_charge, -2)
        self.assertIsNone(Scan(spectrum).selected_ion_charge)
        self.assertIsNone(Scan(spectrum).isolation_range)

    def test_refine_selected_ion(self):
        precursor = MzSpectrum([500.0, 500.5, 501.0], [10.0, 30.0, 5.0])
        scan = Scan(MzSpectrum([], []), ms_level=2, selected_ion_mz=500.6)
        scan.refine_selected_mz_and_intensity(Scan(precursor))
        self.assertEqual(scan.selected_ion_mz, 500.5)
        self.assertEqual(scan.selected_ion_intensity, 30.0)

    def test_isolated_masses(self):
        monoisotopic_mass, masses, abundances = averagine_table_pattern(3000.0)
        precursor = make_charge_series(masses, abundances, [2, 3, 4])
        target = to_mz(masses[0], 3)
        msn = Scan.from_isolation_width(MzSpectrum([], []), target, 1.0, ms_level=2)
        params = ClassicDeconvolutionParameters(1, 10)
        envelopes = msn.get_isolated_masses_and_charges(precursor, params)
        self.assertTrue(envelopes)
        for envelope in envelopes:
            self.assertTrue(envelope.has_peak_within(target - 0.5, target + 0.5))
        self.assertIn(3, [e.charge for e in envelopes])
        self.assertTrue(any(abs(e.monoisotopic_mass - monoisotopic_mass) < 1e-3
                            for e in envelopes if e.charge == 3))
        self.assertEqual(Scan(precursor).get_isolated_masses_and_charges(precursor, params), [])

    def test_isolated_high_charge_precursor(self):
        monoisotopic_mass, masses, abundances = brainpy_pattern(14037.9, 30)
        precursor = make_charge_series(masses, abundances, range(13, 25))
        selected_mz = to_mz(masses[int(np.argmax(abundances))], 24)
        msn = Scan.from_isolation_width(
            MzSpectrum([], []), selected_mz, 4.0, ms_level=2,
            selected_ion_mz=selected_mz, selected_ion_charge=24)
        envelopes = msn.get_isolated_masses_and_charges(
            precursor, ClassicDeconvolutionParameters(1, 60))
        self.assertTrue(envelopes)
        top = envelopes[0]
        self.assertEqual(top.charge, 24)
        self.assertLess(abs(top.monoisotopic_mass - monoisotopic_mass), 5e-4)


if __name__ == '__main__':
    unittest.main()
