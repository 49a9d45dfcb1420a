import os
import json
import shutil
import tempfile
import unittest

from unittest import mock

from ms_deconvolution import config
from ms_deconvolution.deconvolution import (
    ClassicDeconvolutionParameters, IsoDecParameters, Polarity)
from ms_deconvolution.errors import ConfigurationError


class TestConfig(unittest.TestCase):
    def setUp(self):
        self.config_dir = tempfile.mkdtemp()
        self.env = mock.patch.dict(os.environ, {config.CONFIG_DIR_ENV_VAR: self.config_dir})
        self.env.start()

    def tearDown(self):
        self.env.stop()
        shutil.rmtree(self.config_dir, ignore_errors=True)

    def test_config_dir_from_environment(self):
        self.assertEqual(config.get_config_dir(), os.path.abspath(self.config_dir))

    def test_default_config_written(self):
        conf = config.get_config()
        path = os.path.join(self.config_dir, config.CONFIG_FILE_NAME)
        self.assertTrue(os.path.exists(path))
        with open(path) as fh:
            self.assertEqual(json.load(fh), conf)
        self.assertIn('classic', conf['deconvolution'])
        self.assertEqual(conf['schema_version'], '1.0.0')

    def test_parameters_from_config(self):
        params = config.parameters_from_config('classic')
        self.assertEqual(params, ClassicDeconvolutionParameters())
        params = config.parameters_from_config('isodec', max_charge=10, min_charge=None)
        self.assertEqual(params, IsoDecParameters(max_charge=10))

    def test_saved_settings_used(self):
        conf = config.get_config()
        conf['deconvolution']['classic']['deconvolution_tolerance_ppm'] = 10.0
        conf['deconvolution']['classic']['polarity'] = 'negative'
        config.save_config(conf)
        params = config.parameters_from_config('classic')
        self.assertEqual(params.deconvolution_tolerance_ppm, 10.0)
        self.assertIs(params.polarity, Polarity.negative)

    def test_invalid(self):
        with self.assertRaises(ConfigurationError):
            config.parameters_from_config('nonsense')
        with self.assertRaises(ConfigurationError):
            config.parameters_from_config('classic', config={}, min_charge=0)
        with self.assertRaises(ConfigurationError):
            config.parameters_from_config('classic', config={}, unknown_setting=1)


if __name__ == '__main__':
    unittest.main()
