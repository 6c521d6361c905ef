# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0

import dataclasses
import enum
import json

import dacite
import pytest

import model.paging as examinee
from model.base import (
    ConfigElementNotFoundError,
    ElementDecodeError,
    InvalidArgument,
    ParseError,
    TypeMismatch,
)


class Colour(enum.Enum):
    RED = 'red'
    BLUE = 'blue'


@dataclasses.dataclass(frozen=True)
class Size:
    width_px: int
    height_px: int


@dataclasses.dataclass(frozen=True)
class Widget:
    name: str
    colour: Colour = Colour.RED
    display_name: str | None = None
    sizes: tuple[Size, ...] = ()


@pytest.fixture
def codec():
    return examinee.PagedCollectionCodec(element_codec=examinee.PassthroughCodec())


@pytest.fixture
def widget_codec():
    return examinee.PagedCollectionCodec(element_codec=examinee.DataclassCodec(Widget))


def test_decode_empty_page(codec):
    collection = codec.decode({'value': [], 'nextLink': None})

    assert collection.items == ()
    assert collection.next_link is None
    assert not collection.has_next_page
    assert len(collection) == 0


def test_decode_retains_order(codec):
    collection = codec.decode({
        'value': [{'name': 'first'}, {'name': 'second'}],
        'nextLink': 'tok123',
    })

    assert len(collection) == 2
    assert [e['name'] for e in collection] == ['first', 'second']
    assert collection.next_link == 'tok123'
    assert collection.has_next_page


def test_decode_value_of_wrong_type(codec):
    with pytest.raises(TypeMismatch):
        codec.decode({'value': 'not-an-array'})

    with pytest.raises(TypeMismatch):
        codec.decode({'value': {'name': 'an-object'}})


def test_decode_absent_value(codec):
    collection = codec.decode({'nextLink': 'https://example.org/next'})

    assert collection.items == ()
    assert collection.next_link == 'https://example.org/next'


def test_decode_absent_value_strict():
    codec = examinee.PagedCollectionCodec(
        element_codec=examinee.PassthroughCodec(),
        strict=True,
    )

    with pytest.raises(TypeMismatch):
        codec.decode({'nextLink': 'https://example.org/next'})

    # empty arrays are fine, though
    assert codec.decode({'value': []}) == examinee.PagedCollection()


def test_decode_case_insensitive_field_names(codec):
    collection = codec.decode({'Value': [1, 2], 'NextLink': 'next'})

    assert collection.items == (1, 2)
    assert collection.next_link == 'next'


def test_decode_next_link_is_coerced_to_str(codec):
    assert codec.decode({'value': [], 'nextLink': 42}).next_link == '42'

    with pytest.raises(TypeMismatch):
        codec.decode({'value': [], 'nextLink': ['a', 'b']})


def test_decode_from_object(codec):
    class Response:
        def __init__(self):
            self.Value = [{'a': 1}]
            self.NextLink = None

    collection = codec.decode(Response())

    assert collection.items == ({'a': 1},)
    assert collection.next_link is None


@pytest.mark.parametrize('content', [None, 'text', 42, [1, 2]])
def test_decode_rejects_unstructured_content(codec, content):
    with pytest.raises(TypeMismatch):
        codec.decode(content)


def test_decode_json(codec):
    collection = codec.decode_json('{"value": [{"id": "a"}], "nextLink": "tok"}')

    assert collection == examinee.PagedCollection(items=({'id': 'a'},), next_link='tok')


@pytest.mark.parametrize('text', ['{"value": [', '', 'not json'])
def test_decode_json_malformed(codec, text):
    with pytest.raises(ParseError):
        codec.decode_json(text)


@pytest.mark.parametrize('text', ['[]', '"value"', '42', 'null'])
def test_decode_json_requires_object(codec, text):
    with pytest.raises(ParseError):
        codec.decode_json(text)


def test_element_decode_error(widget_codec):
    with pytest.raises(ElementDecodeError) as ei:
        widget_codec.decode({'value': [{'name': 'ok'}, {'colour': 'red'}]})

    assert ei.value.index == 1
    assert isinstance(ei.value.cause, dacite.DaciteError)
    assert ei.value.__cause__ is ei.value.cause


def test_element_decode_error_for_non_objects(widget_codec):
    with pytest.raises(ElementDecodeError) as ei:
        widget_codec.decode({'value': ['not-an-object']})

    assert ei.value.index == 0
    assert isinstance(ei.value.cause, TypeMismatch)


def test_dataclass_elements(widget_codec):
    collection = widget_codec.decode({
        'value': [
            {
                'name': 'w1',
                'colour': 'blue',
                'displayName': 'Widget One',
                'sizes': [{'widthPx': 1, 'heightPx': 2}],
            },
            {'NAME': 'w2'},
        ],
    })

    first, second = collection.items
    assert first == Widget(
        name='w1',
        colour=Colour.BLUE,
        display_name='Widget One',
        sizes=(Size(width_px=1, height_px=2),),
    )
    assert second == Widget(name='w2')


def test_encode_include_all(widget_codec):
    collection = examinee.PagedCollection(items=[Widget(name='w1')])

    encoded = json.loads(widget_codec.encode(collection))

    assert encoded == {
        'nextLink': None,
        'value': [
            {'name': 'w1', 'colour': 'red', 'displayName': None, 'sizes': []},
        ],
    }


def test_encode_default_mode_omits_absent_fields(widget_codec):
    collection = examinee.PagedCollection(items=[Widget(name='w1')])

    encoded = json.loads(
        widget_codec.encode(collection, mode=examinee.SerialisationMode.DEFAULT)
    )

    assert encoded == {
        'value': [
            {'name': 'w1', 'colour': 'red', 'sizes': []},
        ],
    }


def test_encode_field_order(codec):
    encoded = codec.encode(examinee.PagedCollection(items=(), next_link='tok'))

    assert encoded == '{"nextLink": "tok", "value": []}'


@pytest.mark.parametrize(
    'collection',
    [
        examinee.PagedCollection(),
        examinee.PagedCollection(
            items=(
                Widget(name='w1', sizes=(Size(1, 2), Size(3, 4))),
                Widget(name='w2', colour=Colour.BLUE, display_name='two'),
            ),
            next_link='https://management.example.org/widgets?page=2',
        ),
    ],
)
def test_roundtrip(widget_codec, collection):
    for mode in examinee.SerialisationMode:
        encoded = widget_codec.encode(collection, mode=mode)
        assert widget_codec.decode_json(encoded) == collection


@dataclasses.dataclass(frozen=True)
class Tagged:
    name: str
    tags: dict[str, str] = dataclasses.field(default_factory=dict)
    sizes: tuple[Size, ...] = ()


def test_encode_retains_keys_of_dict_fields():
    codec = examinee.PagedCollectionCodec(element_codec=examinee.DataclassCodec(Tagged))
    collection = examinee.PagedCollection(
        items=(Tagged(name='t1', tags={'cost_center': 'a', 'Owner': 'b'}),),
    )

    for mode in examinee.SerialisationMode:
        encoded = codec.encode(collection, mode=mode)

        element, = json.loads(encoded)['value']
        assert element['tags'] == {'cost_center': 'a', 'Owner': 'b'}
        assert codec.decode_json(encoded) == collection


def test_decode_nested_keys_case_insensitively():
    codec = examinee.PagedCollectionCodec(element_codec=examinee.DataclassCodec(Tagged))

    element, = codec.decode({
        'value': [
            {
                'Name': 't1',
                'Tags': {'Cost_Center': 'a'},
                'Sizes': [{'WidthPx': 1, 'HEIGHTPX': 2}],
            },
        ],
    })

    assert element == Tagged(
        name='t1',
        tags={'Cost_Center': 'a'},
        sizes=(Size(width_px=1, height_px=2),),
    )


def test_before_decode_short_circuits():
    seen = []

    def before_decode(content):
        seen.append(content)
        return True

    codec = examinee.PagedCollectionCodec(
        element_codec=examinee.PassthroughCodec(),
        before_decode=before_decode,
    )

    # `value` is malformed, but must not be read
    content = {'value': 'not-an-array', 'nextLink': 'tok'}
    assert codec.decode(content) == examinee.PagedCollection()
    assert seen == [content]


def test_before_decode_may_continue():
    codec = examinee.PagedCollectionCodec(
        element_codec=examinee.PassthroughCodec(),
        before_decode=lambda content: False,
    )

    assert codec.decode({'value': [1]}).items == (1,)


def test_after_decode():
    def after_decode(content, collection):
        assert content['nextLink'] == 'tok'
        return dataclasses.replace(collection, next_link=None)

    codec = examinee.PagedCollectionCodec(
        element_codec=examinee.PassthroughCodec(),
        after_decode=after_decode,
    )

    collection = codec.decode({'value': [1, 2], 'nextLink': 'tok'})

    assert collection.items == (1, 2)
    assert collection.next_link is None


def test_after_decode_may_return_empty_replacement():
    codec = examinee.PagedCollectionCodec(
        element_codec=examinee.PassthroughCodec(),
        after_decode=lambda content, collection: examinee.PagedCollection(),
    )

    assert codec.decode({'value': [1, 2]}) == examinee.PagedCollection()


def test_after_decode_observing_only():
    observed = []
    codec = examinee.PagedCollectionCodec(
        element_codec=examinee.PassthroughCodec(),
        after_decode=lambda content, collection: observed.append(collection),
    )

    collection = codec.decode({'value': [1]})

    assert observed == [collection]
    assert collection.items == (1,)


def test_paged_collection_converts_items_to_tuple():
    collection = examinee.PagedCollection(items=[1, 2, 3])

    assert collection.items == (1, 2, 3)
    assert list(collection) == [1, 2, 3]


def test_element_codec_registry():
    codec = examinee.DataclassCodec(Widget)
    examinee.register_element_codec('widget', codec)

    assert examinee.codec_for('widget') is codec
    assert 'widget' in examinee.element_type_tags()
    assert isinstance(examinee.codec_for('object'), examinee.PassthroughCodec)

    with pytest.raises(ConfigElementNotFoundError):
        examinee.codec_for('no-such-type')

    with pytest.raises(InvalidArgument):
        examinee.register_element_codec('', codec)


def test_dataclass_codec_requires_dataclass():
    with pytest.raises(InvalidArgument):
        examinee.DataclassCodec(dict)
