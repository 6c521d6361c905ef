# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0

import argparse
import json
import logging
import sys

import yaml

import apiutil.log
import apiutil.util
import ctx
import model.base
import model.endpoints
import model.metrics # noqa: F401 (registers element codec)
import model.paging

logger = logging.getLogger(__name__)


def endpoints(parsed, outfh=None):
    outfh = outfh or sys.stdout
    registry = model.endpoints.EndpointRegistry.from_config(ctx.cfg)

    if name := (parsed.name or ctx.cfg.default_environment):
        profiles = {name: registry.get(name).as_dict()}
    else:
        profiles = {
            name: profile.as_dict()
            for name, profile in registry.items()
        }

    if parsed.output == 'json':
        outfh.write(json.dumps(profiles, indent=2) + '\n')
    else:
        yaml.dump(profiles, outfh, sort_keys=False)


def decode(parsed, outfh=None):
    outfh = outfh or sys.stdout
    infile, = parsed.infile
    if infile == '-':
        content = sys.stdin.buffer.read()
    else:
        with open(apiutil.util.existing_file(infile), 'rb') as f:
            content = f.read()

    codec = model.paging.PagedCollectionCodec(
        element_codec=model.paging.codec_for(parsed.element_type),
        strict=ctx.cfg.strict_paging,
    )
    collection = codec.decode_json(content)

    apiutil.util.success(
        f'decoded {len(collection)} element(s) of type {parsed.element_type}; '
        f'more pages available: {collection.has_next_page}',
        outfh=sys.stderr,
    )

    mode = model.paging.SerialisationMode(parsed.mode)
    outfh.write(json.dumps(codec.to_dict(collection, mode=mode), indent=2) + '\n')


def _parser():
    parser = argparse.ArgumentParser(prog='cloud-api')
    subcmd_parsers = parser.add_subparsers(
        title='commands',
        required=True,
    )

    parser.add_argument(
        '--cfg-file',
        default=None,
        help='read configuration from the given file (in addition to ~/.cloud-api.cfg)',
    )
    parser.add_argument(
        '--environment',
        default=None,
        help='name of the cloud environment to use (e.g. Public, ChinaCloud)',
    )
    parser.add_argument('--verbose', '-v', action='store_true', default=False)

    endpoints_parser = subcmd_parsers.add_parser(
        'endpoints',
        help='show authentication settings of known cloud environments',
    )
    endpoints_parser.set_defaults(callable=endpoints)
    endpoints_parser.add_argument(
        '--name',
        default=None,
        help='only show the environment with the given name (or alias)',
    )
    endpoints_parser.add_argument(
        '--output', '-o',
        default='yaml',
        choices=('yaml', 'json'),
    )

    decode_parser = subcmd_parsers.add_parser(
        'decode',
        help='decode (and re-encode) a list-response read from a file',
    )
    decode_parser.set_defaults(callable=decode)
    decode_parser.add_argument(
        'infile',
        nargs=1,
        help='JSON file containing the list-response (`-` to read from stdin)',
    )
    decode_parser.add_argument(
        '--element-type',
        default='object',
        choices=model.paging.element_type_tags(),
    )
    decode_parser.add_argument(
        '--mode',
        default=model.paging.SerialisationMode.INCLUDE_ALL.value,
        choices=[m.value for m in model.paging.SerialisationMode],
    )
    decode_parser.add_argument(
        '--strict',
        action='store_true',
        default=False,
        help='reject list-responses without `value`',
    )

    return parser


def main(argv=None):
    parsed = _parser().parse_args(argv)

    apiutil.log.configure_default_logging(
        stdout_level=logging.DEBUG if parsed.verbose else logging.INFO,
    )

    try:
        ctx.args = parsed
        ctx.load_config()

        parsed.callable(parsed=parsed)
    except (model.base.ModelError, apiutil.util.Failure) as e:
        logger.error(e)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
