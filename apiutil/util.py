# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0

import functools
import os
import sys

import termcolor
import yaml


class Failure(RuntimeError, ValueError):
    pass


def not_empty(value):
    if not value or len(value) == 0:
        raise Failure('passed value must not be empty')
    return value


def not_none(value):
    if value is None:
        raise Failure('passed value must not be None')
    return value


def existing_file(path: str):
    if not os.path.isfile(path):
        raise Failure(f'not an existing file: {path}')
    return path


def _print(msg, colour, outfh=None):
    if not msg:
        return
    outfh = outfh or sys.stdout
    if not outfh.isatty():
        outfh.write(msg + '\n')
    else:
        outfh.write(termcolor.colored(msg, colour) + '\n')

    outfh.flush()


def success(msg: str, outfh=None):
    _print(msg, colour='green', outfh=outfh)


def parse_yaml_file(path: str):
    with open(path) as f:
        return yaml.load(f, Loader=yaml.SafeLoader)


def snake_to_camel_case(name: str) -> str:
    '''
    converts `snake_case` identifiers to the `lowerCamelCase` used on the wire by the management
    API, e.g. `next_link` -> `nextLink`
    '''
    head, *tail = name.split('_')
    return head + ''.join(part[:1].upper() + part[1:] for part in tail)


def merge_dicts(base: dict, *other: dict, list_semantics='merge'):
    '''
    merges copies of the given dict instances and returns the merge result.
    The arguments remain unmodified. However, it must be possible to copy them
    using `copy.deepcopy`.

    Merging is done using the `deepmerge` module. In case of merge conflicts, values from
    `other` overwrite values from `base`.

    By default, lists are merged (deduplicated, retaining element order), with elements from
    `other` appended to those from `base`. Tuples are always overwritten.
    '''

    not_none(base)
    not_empty(other)

    from deepmerge import Merger

    if list_semantics == 'merge':
        def merge_lists(config, path, base, other):
            return list(base) + [e for e in other if e not in base]

        strategy_cfg = [(list, [merge_lists]), (dict, ['merge'])]
        merger = Merger(strategy_cfg, ['override'], ['override'])
    elif list_semantics is None:
        strategy_cfg = [(dict, ['merge'])]
        merger = Merger(strategy_cfg, ['override'], ['override'])
    else:
        raise NotImplementedError(list_semantics)

    from copy import deepcopy

    return functools.reduce(
        lambda b, o: merger.merge(b, deepcopy(o)),
        [base, *other],
        {},
    )

