'''Read peak lists from delimited text files.
'''
import io
import re
import gzip
import functools

import numpy as np

from .errors import InputShapeError
from .spectrum import MzSpectrum


def _open_text(file_handle_or_path):
    if hasattr(file_handle_or_path, 'read'):
        return file_handle_or_path, False
    path = str(file_handle_or_path)
    with open(path, 'rb') as fh:
        magic = fh.read(2)
    if magic == b'\037\213':
        return io.TextIOWrapper(gzip.GzipFile(path, 'rb')), True
    return io.open(path, 'rt'), True


def spectrum_from_csv(file_handle, delimiter=',', skiprows=None):
    """Read an m/z-intensity point list from a text file stream.

    The first row read is treated as a header and skipped if its first
    field is not a number.

    Parameters
    ----------
    file_handle : file or str
        The file to read from, or its path. Gzip-compressed paths are detected.
    delimiter : str, optional
        The field separator between m/z and intensity. (the default is ','). The
        delimiter can be a regular expression or escape sequence.
    skiprows : int, optional
        The number of rows to skip before starting to parse data, if there is a more elaborate
        header.

    Returns
    -------
    :class:`~.MzSpectrum`

    Raises
    ------
    :class:`~.InputShapeError`
        If a data row has fewer than two fields
    """
    if skiprows is None:
        skiprows = 0
    file_handle, should_close = _open_text(file_handle)
    mzs = []
    intensities = []
    tokenizer = re.compile(delimiter)
    try:
        for i, line in enumerate(file_handle):
            if i < skiprows:
                continue
            line = line.strip()
            if not line:
                continue
            fields = tokenizer.split(line)
            if i == skiprows:
                try:
                    float(fields[0])
                except ValueError:
                    continue
            if len(fields) < 2:
                raise InputShapeError(
                    "Expected an m/z and an intensity on line %d, got %r" % (i + 1, line),
                    (len(fields), ))
            mzs.append(fields[0])
            intensities.append(fields[1])
    finally:
        if should_close:
            file_handle.close()
    mzs = np.array(mzs, dtype=float)
    intensities = np.array(intensities, dtype=float)
    return MzSpectrum(mzs, intensities, copy=False)


spectrum_from_table = functools.partial(spectrum_from_csv, delimiter=r'\s+')
