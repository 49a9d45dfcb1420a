import os
import shutil
import tempfile
import unittest

from click.testing import CliRunner

from ms_deconvolution.tools import cli
from ms_deconvolution.utils import to_mz


class TestDeconvoluteCommand(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.env = {"MS_DECONVOLUTION_CONFIGDIR": os.path.join(self.tmpdir, "config")}
        self.path = os.path.join(self.tmpdir, "ladder.csv")
        with open(self.path, 'wt') as fh:
            fh.write("mz,intensity\n")
            for z in range(5, 11):
                fh.write("%f,%f\n" % (to_mz(10000.0, z), 100.0 * z))

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def get_rows(self, output):
        lines = [line for line in output.splitlines() if line.strip()]
        header_index = lines.index('\t'.join(cli.columns))
        return [line.split('\t') for line in lines[header_index + 1:]]

    def test_flash(self):
        runner = CliRunner()
        result = runner.invoke(
            cli.cli, ["deconvolute", "-a", "flash_deconv", "-p", "1", self.path], env=self.env)
        self.assertEqual(result.exit_code, 0, result.output)
        rows = self.get_rows(result.output)
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0][0], self.path)
        self.assertAlmostEqual(float(rows[0][1]), 10000.0, 2)
        self.assertEqual(int(rows[0][2]), 5)

    def test_negative_flag(self):
        runner = CliRunner()
        result = runner.invoke(
            cli.cli, ["deconvolute", "-a", "flash_deconv", "-n", "-r", "1000-1500", self.path],
            env=self.env)
        self.assertEqual(result.exit_code, 0, result.output)
        for row in self.get_rows(result.output):
            self.assertLess(int(row[2]), 0)

    def test_bad_charge_range(self):
        runner = CliRunner()
        result = runner.invoke(
            cli.cli, ["deconvolute", "-z", "5", "-Z", "2", self.path], env=self.env)
        self.assertNotEqual(result.exit_code, 0)

    def test_bad_mz_range(self):
        runner = CliRunner()
        result = runner.invoke(
            cli.cli, ["deconvolute", "-r", "1500-1000", self.path], env=self.env)
        self.assertNotEqual(result.exit_code, 0)

    def test_malformed_file(self):
        path = os.path.join(self.tmpdir, "short.csv")
        with open(path, 'wt') as fh:
            fh.write("500.0,100\n500.5\n")
        runner = CliRunner()
        result = runner.invoke(cli.cli, ["deconvolute", path], env=self.env)
        self.assertEqual(result.exit_code, 1)
        self.assertIn("line 2", result.output)

    def test_show_config(self):
        runner = CliRunner()
        result = runner.invoke(cli.cli, ["show-config"], env=self.env)
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn('"classic"', result.output)


if __name__ == '__main__':
    unittest.main()
