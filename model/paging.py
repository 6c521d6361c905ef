# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0

'''
(de)serialisation of paged list-responses, as returned by the management API's list
operations:

    {
        "nextLink": "<continuation-url or absent>",
        "value": [ <element>, ... ]
    }

Elements are converted by an explicitly passed `ElementCodec`. Codecs for well-known element
types may be registered (and looked up) by type-tag, see `register_element_codec`.
'''

import collections.abc
import copy
import dataclasses
import enum
import functools
import json
import logging
import typing

import dacite

import apiutil.util
from model.base import (
    ConfigElementNotFoundError,
    ElementDecodeError,
    InvalidArgument,
    ParseError,
    TypeMismatch,
    check_structured,
    get_value_for_property,
    to_str,
)

logger = logging.getLogger(__name__)

T = typing.TypeVar('T')

NEXT_LINK = 'nextLink'
VALUE = 'value'


class SerialisationMode(enum.Enum):
    INCLUDE_ALL = 'include-all' # emit absent (None) fields as null
    DEFAULT = 'default' # omit absent fields


@dataclasses.dataclass(frozen=True)
class PagedCollection(typing.Generic[T]):
    items: tuple[T, ...] = ()
    next_link: str | None = None

    def __post_init__(self):
        if not isinstance(self.items, tuple):
            object.__setattr__(self, 'items', tuple(self.items))

    @property
    def has_next_page(self) -> bool:
        return bool(self.next_link)

    def __iter__(self) -> typing.Iterator[T]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


class ElementCodec(typing.Protocol[T]):
    def decode(self, raw) -> T:
        ...

    def encode(self, element: T, mode: SerialisationMode):
        ...


class PassthroughCodec:
    '''
    codec for untyped elements (JSON objects are kept as dicts)
    '''
    def decode(self, raw):
        return copy.deepcopy(raw)

    def encode(self, element, mode: SerialisationMode):
        if mode is SerialisationMode.DEFAULT and isinstance(element, dict):
            return {k: v for k, v in element.items() if v is not None}
        return copy.deepcopy(element)


def _to_wire(value, mode: SerialisationMode):
    '''
    converts dataclass instances into JSON-compatible values. Only field names are mapped to
    `lowerCamelCase`; keys of dict-typed field values are retained as they are.
    '''
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        raw = {}
        for field in dataclasses.fields(value):
            field_value = getattr(value, field.name)
            if field_value is None and mode is SerialisationMode.DEFAULT:
                continue
            raw[apiutil.util.snake_to_camel_case(field.name)] = _to_wire(field_value, mode)
        return raw
    if isinstance(value, dict):
        return {k: _to_wire(v, mode) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_wire(e, mode) for e in value]
    if isinstance(value, enum.Enum):
        return value.value
    return value


def _nested_data_class(type_):
    if dataclasses.is_dataclass(type_):
        return type_
    if typing.get_origin(type_) in (dict, collections.abc.Mapping):
        return None
    for arg in typing.get_args(type_):
        if arg is not Ellipsis and (nested := _nested_data_class(arg)):
            return nested
    return None


@functools.cache
def _wire_keys(data_class) -> dict[str, tuple[str, type | None]]:
    # casefolded wire-key -> (wire-key, dataclass of nested value)
    type_hints = typing.get_type_hints(data_class)
    return {
        apiutil.util.snake_to_camel_case(f.name).casefold(): (
            apiutil.util.snake_to_camel_case(f.name),
            _nested_data_class(type_hints[f.name]),
        )
        for f in dataclasses.fields(data_class)
    }


def _canonical_value(value, data_class):
    if isinstance(value, collections.abc.Mapping):
        return _canonical_keys(value, data_class)
    if isinstance(value, (list, tuple)):
        return [_canonical_value(e, data_class) for e in value]
    return value


def _canonical_keys(raw: collections.abc.Mapping, data_class) -> dict:
    wire_keys = _wire_keys(data_class)
    canonical = {}
    for key, value in raw.items():
        if isinstance(key, str) and (wire_key := wire_keys.get(key.casefold())):
            key, nested_data_class = wire_key
            if nested_data_class:
                value = _canonical_value(value, nested_data_class)
        canonical[key] = value
    return canonical


class DataclassCodec(typing.Generic[T]):
    '''
    codec for elements modelled as dataclasses. Field names are expected in `snake_case`, and
    are mapped to `lowerCamelCase` keys on the wire. Keys of (nested) dataclass values are
    matched case-insensitively; keys of dict-typed fields are passed through unchanged.
    '''
    def __init__(
        self,
        data_class: type[T],
        type_hooks: dict=None,
    ):
        if not dataclasses.is_dataclass(data_class):
            raise InvalidArgument(f'not a dataclass: {data_class=}')

        self.data_class = data_class
        self._dacite_cfg = dacite.Config(
            convert_key=apiutil.util.snake_to_camel_case,
            cast=[tuple, enum.Enum],
            type_hooks=type_hooks or {},
        )

    def decode(self, raw) -> T:
        if not isinstance(raw, collections.abc.Mapping):
            raise TypeMismatch(f'expected a JSON object, got {type(raw).__name__}')

        return dacite.from_dict(
            data_class=self.data_class,
            data=_canonical_keys(raw, self.data_class),
            config=self._dacite_cfg,
        )

    def encode(self, element: T, mode: SerialisationMode):
        return _to_wire(element, mode)


_element_codecs: dict[str, ElementCodec] = {}


def register_element_codec(type_tag: str, codec: ElementCodec) -> ElementCodec:
    if not type_tag:
        raise InvalidArgument('type_tag must not be empty')
    _element_codecs[type_tag] = codec
    return codec


def codec_for(type_tag: str) -> ElementCodec:
    if not (codec := _element_codecs.get(type_tag)):
        raise ConfigElementNotFoundError(
            f'no element codec registered for {type_tag=}; known: {", ".join(_element_codecs)}'
        )
    return codec


def element_type_tags() -> tuple[str, ...]:
    return tuple(_element_codecs)


register_element_codec('object', PassthroughCodec())


class PagedCollectionCodec(typing.Generic[T]):
    '''
    converts list-responses into `PagedCollection`s (and back).

    @param element_codec: used to convert each element of `value`
    @param before_decode: optional callable, invoked w/ the raw content before decoding. If it
        returns a truthy value, decoding is skipped, and an empty collection is returned.
    @param after_decode: optional callable, invoked w/ the raw content and the decoded
        collection. If it returns a collection, it replaces the decoded one.
    @param strict: if set, absent `value` is rejected rather than treated as empty
    '''
    def __init__(
        self,
        element_codec: ElementCodec[T],
        before_decode: typing.Callable[[typing.Any], bool]=None,
        after_decode: typing.Callable[
            [typing.Any, PagedCollection[T]],
            PagedCollection[T] | None,
        ]=None,
        strict: bool=False,
    ):
        self.element_codec = apiutil.util.not_none(element_codec)
        self.before_decode = before_decode
        self.after_decode = after_decode
        self.strict = strict

    def _decode_items(self, raw_items) -> tuple[T, ...]:
        if raw_items is None:
            if self.strict:
                raise TypeMismatch(f'required field {VALUE!r} is absent')
            return ()

        if isinstance(raw_items, (str, bytes)) \
            or not isinstance(raw_items, collections.abc.Sequence):
            raise TypeMismatch(
                f'expected {VALUE!r} to be an array, got {type(raw_items).__name__}'
            )

        def decode_element(index, raw):
            try:
                return self.element_codec.decode(raw)
            except Exception as e:
                raise ElementDecodeError(index=index, cause=e) from e

        return tuple(
            decode_element(index, raw)
            for index, raw in enumerate(raw_items)
        )

    def decode(self, content) -> PagedCollection[T]:
        check_structured(content)

        if self.before_decode and self.before_decode(content):
            logger.debug('decoding of paged collection was skipped by before-decode hook')
            return PagedCollection()

        collection = PagedCollection(
            items=self._decode_items(get_value_for_property(content, VALUE)),
            next_link=get_value_for_property(content, NEXT_LINK, converter=to_str),
        )
        logger.debug(
            f'decoded paged collection with {len(collection)} element(s), '
            f'{collection.has_next_page=}'
        )

        if self.after_decode:
            replacement = self.after_decode(content, collection)
            if replacement is not None:
                return replacement

        return collection

    def decode_json(self, text: str | bytes) -> PagedCollection[T]:
        try:
            parsed = json.loads(text)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ParseError(f'malformed JSON: {e}') from e
        except TypeError as te:
            raise ParseError(f'cannot parse JSON from {type(text).__name__}') from te

        if not isinstance(parsed, dict):
            raise ParseError(f'expected a JSON object, got {type(parsed).__name__}')

        return self.decode(parsed)

    def to_dict(
        self,
        collection: PagedCollection[T],
        mode: SerialisationMode=SerialisationMode.INCLUDE_ALL,
    ) -> dict:
        raw = {}
        if collection.next_link is not None or mode is SerialisationMode.INCLUDE_ALL:
            raw[NEXT_LINK] = collection.next_link

        raw[VALUE] = [
            self.element_codec.encode(element, mode)
            for element in collection.items
        ]

        return raw

    def encode(
        self,
        collection: PagedCollection[T],
        mode: SerialisationMode=SerialisationMode.INCLUDE_ALL,
    ) -> str:
        return json.dumps(self.to_dict(collection=collection, mode=mode))
