# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0

import dataclasses
import logging
import os
import typing

import dacite
import yaml

import apiutil.util

'''
Execution context. Filled upon invocation of cloudcli, read by submodules
'''

logger = logging.getLogger(__name__)

args = None # the parsed command line arguments
cfg = None # initialised upon importing this module

CFG_FILE_NAME = '.cloud-api.cfg'


@dataclasses.dataclass
class CustomEnvironment:
    '''
    an additional (e.g. private or on-premises) cloud environment, declared in the config file
    '''
    name: str
    authentication_endpoint: str
    token_audience: str
    validate_authority: bool = True
    aliases: tuple[str, ...] = ()

    def as_profile(self):
        import model.endpoints
        return model.endpoints.EndpointProfile(
            authentication_endpoint=self.authentication_endpoint,
            token_audience=self.token_audience,
            validate_authority=self.validate_authority,
        )


@dataclasses.dataclass
class PagingCfg:
    strict: typing.Optional[bool] = None


@dataclasses.dataclass
class GlobalConfig:
    default_environment: typing.Optional[str] = None
    environments: tuple[CustomEnvironment, ...] = ()
    paging: typing.Optional[PagingCfg] = None

    @property
    def strict_paging(self) -> bool:
        return bool(self.paging and self.paging.strict)


def _from_dict(raw: dict) -> GlobalConfig:
    return dacite.from_dict(
        data_class=GlobalConfig,
        data=raw,
        config=dacite.Config(cast=[tuple]),
    )


def merge_global_cfg(left: GlobalConfig, right: GlobalConfig) -> GlobalConfig:
    if not left or not right:
        return left or right # nothing to merge

    # do not overwrite existing values w/ None
    def none_or_empty(v):
        if v is None or v == () or v == []:
            return True
        return False

    def without_empty(raw: dict):
        return {
            k: without_empty(v) if isinstance(v, dict) else v
            for k, v in raw.items()
            if not none_or_empty(v)
        }

    merged = apiutil.util.merge_dicts(
        dataclasses.asdict(left),
        without_empty(dataclasses.asdict(right)),
    )

    return _from_dict(merged)


def _config_from_env():
    env = os.environ

    strict = env.get('CLOUD_API_STRICT_PAGING')
    if strict is not None:
        paging_cfg = PagingCfg(strict=strict.lower() in ('1', 'true', 'yes'))
    else:
        paging_cfg = None

    return GlobalConfig(
        default_environment=env.get('CLOUD_API_ENVIRONMENT'),
        paging=paging_cfg,
    )


def _cfg_file_path():
    if cfg_file_path := os.environ.get('CLOUD_API_CFG_FILE'):
        return apiutil.util.existing_file(cfg_file_path)

    cfg_file_path = os.path.join(os.path.expanduser('~'), CFG_FILE_NAME)
    if not os.path.isfile(cfg_file_path):
        return None
    return cfg_file_path


def _config_from_file(cfg_file_path: str=None):
    if not cfg_file_path and not (cfg_file_path := _cfg_file_path()):
        return None

    logger.debug(f'reading configuration from {cfg_file_path=}')
    try:
        raw = apiutil.util.parse_yaml_file(cfg_file_path) or {}
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        raise apiutil.util.Failure(
            f'failed to read configuration from {cfg_file_path}: {e}'
        ) from e

    if not isinstance(raw, dict):
        raise apiutil.util.Failure(
            f'expected a mapping in {cfg_file_path}, got {type(raw).__name__}'
        )

    try:
        return _from_dict(raw)
    except (dacite.DaciteError, TypeError) as e:
        raise apiutil.util.Failure(f'invalid configuration in {cfg_file_path}: {e}') from e


def _config_from_parsed_argv():
    if not args:
        return None

    cfg_file = getattr(args, 'cfg_file', None)
    file_cfg = _config_from_file(cfg_file) if cfg_file else None

    argv_cfg = GlobalConfig(
        default_environment=getattr(args, 'environment', None),
    )
    if getattr(args, 'strict', False):
        argv_cfg.paging = PagingCfg(strict=True)

    return merge_global_cfg(file_cfg, argv_cfg)


def load_config():
    global cfg
    cfg = GlobalConfig()

    additional_cfgs = (
        _config_from_file(),
        _config_from_env(),
        _config_from_parsed_argv(),
    )

    for additional_cfg in additional_cfgs:
        if not additional_cfg:
            continue

        cfg = merge_global_cfg(cfg, additional_cfg)

    return cfg


load_config()
