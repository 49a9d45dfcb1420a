'''Command line access to the deconvolution algorithms, reading peak lists
from delimited text files and writing one row per isotopic envelope.
'''
import json
import logging

import click

from ms_deconvolution.config import get_config, get_config_dir, parameters_from_config
from ms_deconvolution.deconvolution import BatchDeconvoluter, DeconvolutionType
from ms_deconvolution.errors import ConfigurationError, DeconvolutionError
from ms_deconvolution.text import spectrum_from_csv, spectrum_from_table
from ms_deconvolution.tools.utils import (
    processes_option, is_debug_mode, register_debug_hook, MzRangeParamType)


logger = logging.getLogger("ms_deconvolution.tools")

CONTEXT_SETTINGS = dict(help_option_names=['-h', '--help'])

algorithm_names = [
    t.value for t in DeconvolutionType if t is not DeconvolutionType.example_template]

tolerance_parameter_names = {
    DeconvolutionType.classic.value: 'deconvolution_tolerance_ppm',
    DeconvolutionType.flash_deconv.value: 'consensus_ppm_tolerance',
    DeconvolutionType.isodec.value: 'match_tolerance',
}

columns = ("source", "neutral_mass", "charge", "mz", "intensity", "score", "n_peaks")


@click.group(context_settings=CONTEXT_SETTINGS)
def cli():
    '''Charge state deconvolution of mass spectra.
    '''


@cli.command("deconvolute", short_help="Deconvolute peak lists from text files")
@click.argument("paths", type=click.Path(exists=True, dir_okay=False), nargs=-1, required=True)
@click.option("-a", "--algorithm", type=click.Choice(algorithm_names), default="classic",
              help="The deconvolution algorithm to use")
@click.option("-z", "--min-charge", type=int, help="The smallest charge magnitude to consider")
@click.option("-Z", "--max-charge", type=int, help="The largest charge magnitude to consider")
@click.option("-t", "--tolerance", type=float, help="The mass accuracy in ppm used to match peaks")
@click.option("-n", "--negative", is_flag=True, help="Treat the spectra as negative mode")
@click.option("-r", "--mz-range", type=MzRangeParamType(),
              help="Only consider peaks in this m/z range, written as LOW-HIGH")
@click.option("-w", "--whitespace", is_flag=True,
              help="Columns are separated by whitespace instead of commas")
@processes_option
def deconvolute(paths, algorithm, min_charge=None, max_charge=None, tolerance=None, negative=False,
                mz_range=None, whitespace=False, processes=1):
    '''Deconvolute each m/z-intensity peak list in PATHS, writing the isotopic
    envelopes found as tab-separated rows to STDOUT.
    '''
    overrides = {
        'min_charge': min_charge,
        'max_charge': max_charge,
        'polarity': 'negative' if negative else None,
        tolerance_parameter_names[algorithm]: tolerance,
    }
    try:
        parameters = parameters_from_config(algorithm, **overrides)
    except ConfigurationError as err:
        raise click.BadParameter(str(err))
    reader = spectrum_from_table if whitespace else spectrum_from_csv
    spectra = []
    for path in paths:
        try:
            spectra.append(reader(path))
        except DeconvolutionError as err:
            raise click.ClickException("%s: %s" % (path, err))
    BatchDeconvoluter.log_with_logger(logger)
    driver = BatchDeconvoluter(parameters, mz_range, processes=processes)
    click.echo('\t'.join(columns))
    try:
        for i, envelopes in driver.run(spectra):
            for envelope in envelopes:
                click.echo("%s\t%0.6f\t%d\t%0.6f\t%0.4f\t%0.4f\t%d" % (
                    paths[i], envelope.monoisotopic_mass, envelope.charge, envelope.mz,
                    envelope.total_intensity, envelope.score, len(envelope)))
    except DeconvolutionError as err:
        raise click.ClickException(str(err))


@cli.command('show-config', short_help="Display the config file's contents")
def show_config():
    '''Load the config file and write it to STDOUT
    '''
    click.echo(get_config_dir())
    config = get_config()
    click.echo(json.dumps(config, sort_keys=True, indent=2))


main = cli.main

if is_debug_mode():
    register_debug_hook()
else:
    logging.basicConfig(level="INFO", format="%(asctime)s %(name)s:%(levelname)s - %(message)s")


if __name__ == '__main__':
    click.secho("Running Debug Mode", fg='yellow')
    register_debug_hook()
    main()
