import io
import os
import gzip
import shutil
import tempfile
import unittest

from ms_deconvolution.errors import InputShapeError
from ms_deconvolution.text import spectrum_from_csv, spectrum_from_table


csv_text = u'''m/z,intensity
500.5,20
500.0,100
501.0,5
'''

table_text = u'''500.0   100
500.5\t20
'''


class TestTextReaders(unittest.TestCase):
    def test_csv_with_header(self):
        spectrum = spectrum_from_csv(io.StringIO(csv_text))
        self.assertEqual(list(spectrum.mz), [500.0, 500.5, 501.0])
        self.assertEqual(list(spectrum.intensity), [100.0, 20.0, 5.0])

    def test_skiprows(self):
        spectrum = spectrum_from_csv(io.StringIO(u"# comment\n" + csv_text), skiprows=1)
        self.assertEqual(len(spectrum), 3)

    def test_table(self):
        spectrum = spectrum_from_table(io.StringIO(table_text))
        self.assertEqual(list(spectrum.mz), [500.0, 500.5])

    def test_missing_intensity(self):
        with self.assertRaises(InputShapeError) as context:
            spectrum_from_csv(io.StringIO(u"500.0,100\n500.5\n"))
        self.assertIn("line 2", str(context.exception))

    def test_paths(self):
        tmpdir = tempfile.mkdtemp()
        try:
            path = os.path.join(tmpdir, "peaks.csv")
            with open(path, 'wt') as fh:
                fh.write(csv_text)
            gz_path = path + '.gz'
            with gzip.open(gz_path, 'wt') as fh:
                fh.write(csv_text)
            self.assertEqual(spectrum_from_csv(path), spectrum_from_csv(gz_path))
            self.assertEqual(len(spectrum_from_csv(path)), 3)
        finally:
            shutil.rmtree(tmpdir)


if __name__ == '__main__':
    unittest.main()
