# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0

import collections.abc
import numbers
import typing


class ModelError(ValueError):
    '''
    base class for errors raised by model classes; reported to the caller of the single
    operation that failed
    '''
    pass


class InvalidArgument(ModelError):
    pass


class ParseError(ModelError):
    pass


class TypeMismatch(ModelError, TypeError):
    '''
    raised if a field is present, but has an unexpected shape (e.g. a string where an array
    was expected)
    '''
    pass


class ElementDecodeError(ModelError):
    '''
    raised if an element of a collection could not be decoded. The original exception is
    available as `cause` (and as `__cause__`).
    '''
    def __init__(self, index: int, cause: Exception):
        self.index = index
        self.cause = cause
        super().__init__(f'failed to decode element at {index=}: {cause}')


class ConfigElementNotFoundError(ModelError):
    pass


class UnknownProfileError(ConfigElementNotFoundError):
    pass


_absent = object()


def _is_structured(content) -> bool:
    if content is None:
        return False
    if isinstance(content, (str, bytes, bytearray, numbers.Number)):
        return False
    if isinstance(content, collections.abc.Sequence):
        return False
    return True


def check_structured(content):
    if not _is_structured(content):
        raise TypeMismatch(
            f'expected a mapping or an object exposing attributes, got {type(content).__name__}'
        )
    return content


def _lookup(content, name: str):
    if isinstance(content, collections.abc.Mapping):
        if name in content:
            return content[name]
        folded = name.casefold()
        for key, value in content.items():
            if isinstance(key, str) and key.casefold() == folded:
                return value
        return _absent

    value = getattr(content, name, _absent)
    if value is not _absent:
        return value

    folded = name.casefold()
    for attr in dir(content):
        if attr.startswith('_'):
            continue
        if attr.casefold() == folded:
            return getattr(content, attr)
    return _absent


def get_value_for_property(
    content,
    name: str,
    default=None,
    converter: typing.Callable[[typing.Any], typing.Any]=None,
):
    '''
    reads the property `name` from the given content, which may either be a mapping (e.g. a
    parsed JSON object) or an object exposing the property as attribute. Property names are
    matched case-insensitively if there is no exact match.

    Absent properties and properties with a value of `None` yield `default`. Otherwise, the
    value is passed through `converter` (if given).
    '''
    check_structured(content)

    value = _lookup(content, name)
    if value is _absent or value is None:
        return default

    if converter:
        return converter(value)
    return value


def to_str(value) -> str:
    if isinstance(value, (collections.abc.Mapping, collections.abc.Sequence)) \
        and not isinstance(value, str):
        raise TypeMismatch(f'expected a scalar value, got {type(value).__name__}')
    return str(value)
