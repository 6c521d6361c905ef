# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0

from copy import copy
import logging
import sys


class Bcolors:
    RESET_ALL = '\033[0m'
    BOLD = '\033[1m'
    RED = '\033[31m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    BLUE = '\033[34m'


def _coloured(*codes):
    prefix = ''.join(codes)
    return lambda level_name: f'{prefix}{level_name}{Bcolors.RESET_ALL}'


class LevelColourFormatter(logging.Formatter):
    '''
    formatter exposing the record's level name as `%(levelprefix)s`, coloured if writing
    to a terminal
    '''
    level_colours = {
        logging.DEBUG: _coloured(Bcolors.BOLD, Bcolors.BLUE),
        logging.INFO: _coloured(Bcolors.BOLD, Bcolors.GREEN),
        logging.WARNING: _coloured(Bcolors.BOLD, Bcolors.YELLOW),
        logging.ERROR: _coloured(Bcolors.BOLD, Bcolors.RED),
    }

    def __init__(self, *args, stream=None, **kwargs):
        super().__init__(*args, **kwargs)
        self._stream = stream or sys.stderr

    def colour_level_name(self, level_name, level_number):
        colour = self.level_colours.get(level_number, str)
        return colour(level_name)

    def formatMessage(self, record):
        record_copy = copy(record)
        levelname = record_copy.levelname
        if self._stream.isatty():
            levelname = self.colour_level_name(levelname, record_copy.levelno)
        record_copy.__dict__['levelprefix'] = levelname
        return super().formatMessage(record_copy)


def default_fmt_string(print_thread_id: bool=False):
    ptid = print_thread_id
    return f'%(asctime)s [%(levelprefix)s] {"TID:%(thread)d " if ptid else ""}%(name)s: %(message)s'


def configure_default_logging(
    stdout_level=None,
    force=True,
    print_thread_id=False,
    custom_format_string: str = '',
    stream=None,
):
    if not stdout_level:
        stdout_level = logging.INFO

    # make sure to have a clean root logger (in case setup is called multiple times)
    if force:
        for h in list(logging.root.handlers):
            logging.root.removeHandler(h)
            h.close()

    sh = logging.StreamHandler(stream)
    sh.setLevel(stdout_level)

    fmt = custom_format_string or default_fmt_string(print_thread_id=print_thread_id)
    sh.setFormatter(LevelColourFormatter(fmt=fmt, stream=sh.stream))

    logging.root.addHandler(hdlr=sh)
    logging.root.setLevel(level=stdout_level)

    return sh
