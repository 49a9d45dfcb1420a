import multiprocessing
import os
import sys
import warnings
import logging

import click


def processes_option(f):
    opt = click.option(
        "-p", "--processes", 'processes', type=click.IntRange(1, multiprocessing.cpu_count()),
        default=1, help=('Number of worker processes to use. Defaults to 1, deconvoluting '
                         'spectra in the main process'))
    return opt(f)


class MzRangeParamType(click.ParamType):
    name = "LOW-HIGH"

    def convert(self, value, param, ctx):
        if isinstance(value, tuple):
            return value
        try:
            lo, hi = (float(v) for v in value.split('-', 1))
        except ValueError:
            self.fail("%r is not an m/z range like 400-1600" % (value, ), param, ctx)
        if lo > hi:
            self.fail("The lower bound of %r exceeds the upper bound" % (value, ), param, ctx)
        return (lo, hi)


def register_debug_hook():
    import traceback

    def info(type, value, tb):
        if hasattr(sys, 'ps1') or not sys.stderr.isatty():
            sys.__excepthook__(type, value, tb)
        else:
            import pdb as pdb_api
            traceback.print_exception(type, value, tb)
            pdb_api.post_mortem(tb)

    sys.excepthook = info
    logging.basicConfig(level="DEBUG")


def is_debug_mode():
    env_val = os.environ.get('MS_DECONVOLUTION_DEBUG', '').lower()
    if not env_val:
        return False
    if env_val in ('0', 'no', 'false', 'off'):
        return False
    elif env_val in ('1', 'yes', 'true', 'on'):
        return True
    else:
        warnings.warn("MS_DECONVOLUTION_DEBUG value %r was not recognized. Enabling debug mode" % (env_val, ))
        return True
