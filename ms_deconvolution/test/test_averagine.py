import threading
import unittest

import numpy as np

from ms_deconvolution.averagine import (
    Averagine, peptide, isotopic_shift, AveragineIsotopeTable,
    IsotopeTemplateLibrary, calculate_mass)
from ms_deconvolution.constants import NEUTRON_SHIFT


composition = peptide.base_composition


class TestAveragine(unittest.TestCase):
    def test_scale_by_multiplier(self):
        scaled = peptide.scale_by_multiplier(10.0)
        self.assertEqual(scaled, {"C": 49, "H": 78, "N": 14, "O": 15})
        self.assertEqual(peptide.scale_by_multiplier(0.5), {"C": 2, "H": 4, "N": 1, "O": 1})

    def test_scale_to_mass(self):
        scaled = peptide.scale_to_mass(5000.0)
        self.assertTrue(all(isinstance(v, int) and v > 0 for v in scaled.values()))
        self.assertLess(abs(calculate_mass(scaled) - 5000.0), 1.0)

    def test_dict_api(self):
        self.assertEqual(set(peptide.keys()), set(composition))
        self.assertEqual(peptide["C"], composition["C"])
        self.assertEqual(Averagine(composition), peptide)
        self.assertEqual(hash(Averagine(composition)), hash(peptide))

    def test_isotopic_shift(self):
        self.assertAlmostEqual(isotopic_shift(1), NEUTRON_SHIFT)
        self.assertAlmostEqual(isotopic_shift(-2), NEUTRON_SHIFT / 2)


class TestAveragineIsotopeTable(unittest.TestCase):
    def test_entries_grow_with_mass(self):
        table = AveragineIsotopeTable(peptide, size=64)
        first = table[0]
        second = table[1]
        self.assertLess(first.monoisotopic_mass, second.monoisotopic_mass)
        for entry in (first, second):
            self.assertTrue(np.all(np.diff(entry.intensities) <= 0))
            self.assertAlmostEqual(
                entry.diff_to_monoisotopic, entry.most_intense_mass - entry.monoisotopic_mass)
            self.assertFalse(entry.masses.flags.writeable)

    def test_lazy_growth(self):
        table = AveragineIsotopeTable(peptide, size=200)
        self.assertEqual(len(table), 0)
        i = table.closest_index(2000.0)
        self.assertGreater(len(table), i)
        self.assertLess(len(table), 200)
        entry = table[i]
        self.assertLess(abs(entry.most_intense_mass - 2000.0), 60.0)
        if i > 0:
            self.assertLessEqual(
                abs(entry.most_intense_mass - 2000.0),
                abs(table[i - 1].most_intense_mass - 2000.0))

    def test_clamps_to_size(self):
        table = AveragineIsotopeTable(peptide, size=10)
        self.assertEqual(table.closest_index(1e6), 9)
        self.assertEqual(table.closest_index(0.0), 0)
        with self.assertRaises(IndexError):
            table[10]

    def test_concurrent_lookup(self):
        table = AveragineIsotopeTable(peptide, size=100)
        results = []

        def lookup():
            results.append(table.closest_index(3000.0))

        threads = [threading.Thread(target=lookup) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        self.assertEqual(len(set(results)), 1)
        masses = [table[i].most_intense_mass for i in range(len(table))]
        self.assertEqual(masses, sorted(masses))


class TestIsotopeTemplateLibrary(unittest.TestCase):
    def test_template(self):
        library = IsotopeTemplateLibrary(peptide)
        template = library.template_for(2500.0)
        self.assertEqual(template.abundances.max(), 1.0)
        self.assertEqual(template.mass_offsets[0], 0.0)
        self.assertEqual(template.most_abundant_index, int(np.argmax(template.abundances)))
        self.assertTrue(np.all(np.diff(template.mass_offsets) > 0))
        self.assertGreaterEqual(len(template), 3)
        self.assertIs(library.template_for(2501.0), template)
        self.assertEqual(len(library), 1)

    def test_most_abundant_moves_with_mass(self):
        library = IsotopeTemplateLibrary(peptide)
        self.assertEqual(library.template_for(500.0).most_abundant_index, 0)
        self.assertGreater(library.template_for(10000.0).most_abundant_index, 2)


if __name__ == '__main__':
    unittest.main()
