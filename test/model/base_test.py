# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0


import pytest

import model.base as examinee


def test_get_value_for_property_from_mapping():
    content = {'nextLink': 'tok', 'Value': [1]}

    assert examinee.get_value_for_property(content, 'nextLink') == 'tok'
    assert examinee.get_value_for_property(content, 'NEXTLINK') == 'tok'
    assert examinee.get_value_for_property(content, 'value') == [1]


def test_get_value_for_property_prefers_exact_match():
    content = {'value': 'lower', 'Value': 'upper'}

    assert examinee.get_value_for_property(content, 'Value') == 'upper'
    assert examinee.get_value_for_property(content, 'value') == 'lower'


def test_get_value_for_property_default():
    content = {'present': None}

    assert examinee.get_value_for_property(content, 'absent') is None
    assert examinee.get_value_for_property(content, 'absent', default=42) == 42
    # None is treated like absent
    assert examinee.get_value_for_property(content, 'present', default='d') == 'd'


def test_get_value_for_property_converter():
    content = {'count': 42}

    assert examinee.get_value_for_property(content, 'count', converter=str) == '42'
    # converter is not applied to defaults
    assert examinee.get_value_for_property(
        content,
        'absent',
        default=None,
        converter=str,
    ) is None


def test_get_value_for_property_from_object():
    class Content:
        NextLink = 'tok'

        def __init__(self):
            self.value = [1, 2]

    content = Content()

    assert examinee.get_value_for_property(content, 'value') == [1, 2]
    assert examinee.get_value_for_property(content, 'nextLink') == 'tok'
    assert examinee.get_value_for_property(content, 'absent', default=()) == ()


@pytest.mark.parametrize('content', [None, 'abc', b'abc', 1, 1.5, [1], ('a',)])
def test_get_value_for_property_rejects_unstructured(content):
    with pytest.raises(examinee.TypeMismatch):
        examinee.get_value_for_property(content, 'value')


def test_to_str():
    assert examinee.to_str('abc') == 'abc'
    assert examinee.to_str(12) == '12'

    for value in ([], {}, ('a',)):
        with pytest.raises(examinee.TypeMismatch):
            examinee.to_str(value)


def test_error_taxonomy():
    assert issubclass(examinee.InvalidArgument, ValueError)
    assert issubclass(examinee.ParseError, ValueError)
    assert issubclass(examinee.TypeMismatch, ValueError)
    assert issubclass(examinee.TypeMismatch, TypeError)
    assert issubclass(examinee.UnknownProfileError, examinee.ConfigElementNotFoundError)

    cause = KeyError('name')
    error = examinee.ElementDecodeError(index=3, cause=cause)

    assert error.index == 3
    assert error.cause is cause
    assert 'index=3' in str(error)
