# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0

'''
authentication settings for the public cloud and its sovereign variants

Each `EndpointProfile` names the Active-Directory-style authentication endpoint (the
"authority root") and the token audience to request tokens for. Authentication endpoints are
normalised upon construction to always end with a slash, so relative paths (e.g. a tenant id)
may be appended by plain string concatenation.
'''

import dataclasses
import logging
import typing
import urllib.parse

import dacite

import apiutil.util

from model.base import (
    InvalidArgument,
    UnknownProfileError,
)

logger = logging.getLogger(__name__)


def ensure_trailing_slash(authentication_endpoint: str) -> str:
    '''
    returns the given URL with its path normalised to end with a slash. An empty path becomes
    `/`. Scheme, host and port are left untouched.

    @raises InvalidArgument if the URL is empty, not absolute, or contains a query string
    '''
    if authentication_endpoint is None:
        raise InvalidArgument('authentication endpoint must not be None')
    if not isinstance(authentication_endpoint, str):
        raise InvalidArgument(
            f'authentication endpoint must be a str, got {type(authentication_endpoint).__name__}'
        )
    if not authentication_endpoint.strip():
        raise InvalidArgument('authentication endpoint must not be empty')

    parsed = urllib.parse.urlsplit(authentication_endpoint)

    # a trailing `?` yields an empty query, but still is one
    if parsed.query or '?' in authentication_endpoint.split('#', 1)[0]:
        raise InvalidArgument(
            f'authentication endpoint must not contain a query string: {authentication_endpoint}'
        )
    if not parsed.scheme or not parsed.netloc:
        raise InvalidArgument(
            f'authentication endpoint must be an absolute URL: {authentication_endpoint}'
        )

    try:
        parsed.port
    except ValueError as ve:
        raise InvalidArgument(
            f'authentication endpoint has an invalid port: {authentication_endpoint}'
        ) from ve

    path = parsed.path
    if not path or path.isspace():
        path = '/'
    elif not path.endswith('/'):
        path += '/'

    return urllib.parse.urlunsplit((
        parsed.scheme,
        parsed.netloc,
        path,
        '',
        parsed.fragment,
    ))


@dataclasses.dataclass(frozen=True)
class EndpointProfile:
    authentication_endpoint: str
    token_audience: str
    validate_authority: bool = True

    def __post_init__(self):
        # frozen; normalise in place once, upon construction (this includes `replace`)
        object.__setattr__(
            self,
            'authentication_endpoint',
            ensure_trailing_slash(self.authentication_endpoint),
        )

    def with_authentication_endpoint(self, authentication_endpoint: str) -> 'EndpointProfile':
        return dataclasses.replace(self, authentication_endpoint=authentication_endpoint)

    def authority(self, tenant: str) -> str:
        '''
        returns the authority URL for the given tenant (e.g. a tenant-id or domain-name)
        '''
        if not tenant or not tenant.strip('/'):
            raise InvalidArgument('tenant must not be empty')
        return self.authentication_endpoint + tenant.strip('/')

    def as_dict(self) -> dict:
        return {
            'authenticationEndpoint': self.authentication_endpoint,
            'tokenAudience': self.token_audience,
            'validateAuthority': self.validate_authority,
        }

    @staticmethod
    def from_dict(raw: dict) -> 'EndpointProfile':
        try:
            return dacite.from_dict(
                data_class=EndpointProfile,
                data=raw,
                config=dacite.Config(
                    convert_key=apiutil.util.snake_to_camel_case,
                ),
            )
        except dacite.DaciteError as de:
            raise InvalidArgument(f'invalid endpoint profile {raw=}: {de}') from de


PUBLIC = EndpointProfile(
    authentication_endpoint='https://login.microsoftonline.com/',
    token_audience='https://management.core.windows.net/',
    validate_authority=True,
)

CHINA = EndpointProfile(
    authentication_endpoint='https://login.chinacloudapi.cn/',
    token_audience='https://management.core.chinacloudapi.cn/',
    validate_authority=True,
)

US_GOVERNMENT = EndpointProfile(
    authentication_endpoint='https://login.microsoftonline.us/',
    token_audience='https://management.core.usgovcloudapi.net/',
    validate_authority=True,
)

GERMANY = EndpointProfile(
    authentication_endpoint='https://login.microsoftonline.de/',
    token_audience='https://management.core.cloudapi.de/',
    validate_authority=True,
)


class ProfileName:
    PUBLIC = 'Public'
    CHINA = 'ChinaCloud'
    US_GOVERNMENT = 'USGovernment'
    GERMANY = 'GermanCloud'


_builtin_profiles = (
    (ProfileName.PUBLIC, PUBLIC, ('Azure', 'AzureCloud')),
    (ProfileName.CHINA, CHINA, ('China', 'AzureChina', 'AzureChinaCloud')),
    (ProfileName.US_GOVERNMENT, US_GOVERNMENT, ('AzureUSGovernment',)),
    (ProfileName.GERMANY, GERMANY, ('Germany', 'AzureGermany', 'AzureGermanCloud')),
)


class EndpointRegistry:
    '''
    lookup of endpoint profiles by name. Names and aliases are matched case-insensitively.

    The built-in profiles are always present and may not be replaced. Additional profiles
    (e.g. for private cloud installations) may be added using `register`.
    '''
    def __init__(self):
        self._profiles: dict[str, EndpointProfile] = {}
        self._names: dict[str, str] = {} # casefolded name or alias -> canonical name
        self._builtin_names: set[str] = set()

        for name, profile, aliases in _builtin_profiles:
            self._add(name=name, profile=profile, aliases=aliases)
            self._builtin_names.add(name.casefold())
            self._builtin_names.update(a.casefold() for a in aliases)

    def _add(self, name: str, profile: EndpointProfile, aliases: typing.Iterable[str]=()):
        self._profiles[name] = profile
        for n in (name, *aliases):
            self._names[n.casefold()] = name

    def register(
        self,
        name: str,
        profile: EndpointProfile,
        aliases: typing.Iterable[str]=(),
    ) -> EndpointProfile:
        if not name or not name.strip():
            raise InvalidArgument('profile name must not be empty')
        if not isinstance(profile, EndpointProfile):
            raise InvalidArgument(f'not an EndpointProfile: {profile=}')

        aliases = tuple(aliases)
        for n in (name, *aliases):
            if n.casefold() in self._builtin_names:
                raise InvalidArgument(f'must not replace built-in endpoint profile {n}')

        logger.debug(f'registering endpoint profile {name=}: {profile.authentication_endpoint}')
        self._add(name=name, profile=profile, aliases=aliases)
        return profile

    def get(self, name: str) -> EndpointProfile:
        if not name:
            raise InvalidArgument('profile name must not be empty')

        if not (canonical_name := self._names.get(name.casefold())):
            raise UnknownProfileError(
                f'unknown endpoint profile {name=}; known profiles: {", ".join(self.names())}'
            )
        return self._profiles[canonical_name]

    def names(self) -> tuple[str, ...]:
        return tuple(self._profiles.keys())

    def items(self) -> typing.Iterator[tuple[str, EndpointProfile]]:
        yield from self._profiles.items()

    def __contains__(self, name) -> bool:
        return isinstance(name, str) and name.casefold() in self._names

    def __len__(self) -> int:
        return len(self._profiles)

    @staticmethod
    def from_config(global_cfg) -> 'EndpointRegistry':
        '''
        returns a registry containing the built-in profiles, plus the custom environments
        declared in the given configuration (see `ctx.GlobalConfig`)
        '''
        registry = EndpointRegistry()
        if not global_cfg:
            return registry

        for environment in global_cfg.environments:
            registry.register(
                name=environment.name,
                profile=environment.as_profile(),
                aliases=environment.aliases,
            )

        return registry


_default_registry = EndpointRegistry()


def default_registry() -> EndpointRegistry:
    return _default_registry


def get(name: str) -> EndpointProfile:
    return _default_registry.get(name)
