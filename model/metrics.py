# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0

'''
metric definitions of a (web-)site resource, as returned by the `metricdefinitions` list
operation (api-version 2019-08-01)
'''

import collections.abc
import dataclasses

import apiutil.util
import model.paging
from model.base import (
    TypeMismatch,
    get_value_for_property,
)


@dataclasses.dataclass(frozen=True)
class ResourceMetricAvailability:
    time_grain: str | None = None
    retention: str | None = None


@dataclasses.dataclass(frozen=True)
class ResourceMetricDefinition:
    id: str | None = None
    name: str | None = None
    kind: str | None = None
    type: str | None = None
    # the following are nested below `properties` on the wire
    unit: str | None = None
    primary_aggregation_type: str | None = None
    metric_availabilities: tuple[ResourceMetricAvailability, ...] = ()
    resource_uri: str | None = None


PROPERTIES = 'properties'

_nested_attributes = frozenset(
    apiutil.util.snake_to_camel_case(name) for name in (
        'unit',
        'primary_aggregation_type',
        'metric_availabilities',
        'resource_uri',
    )
)


class ResourceMetricDefinitionCodec:
    def __init__(self):
        self._codec = model.paging.DataclassCodec(ResourceMetricDefinition)

    def decode(self, raw) -> ResourceMetricDefinition:
        if not isinstance(raw, collections.abc.Mapping):
            raise TypeMismatch(f'expected a JSON object, got {type(raw).__name__}')

        properties = get_value_for_property(raw, PROPERTIES, default={})
        if not isinstance(properties, collections.abc.Mapping):
            raise TypeMismatch(
                f'expected {PROPERTIES!r} to be an object, got {type(properties).__name__}'
            )

        flattened = {
            k: v for k, v in raw.items()
            if not (isinstance(k, str) and k.casefold() == PROPERTIES)
        }
        flattened.update(properties)

        return self._codec.decode(flattened)

    def encode(
        self,
        element: ResourceMetricDefinition,
        mode: model.paging.SerialisationMode,
    ) -> dict:
        flattened = self._codec.encode(element, mode)

        raw = {k: v for k, v in flattened.items() if k not in _nested_attributes}
        raw[PROPERTIES] = {k: v for k, v in flattened.items() if k in _nested_attributes}

        return raw


TYPE_TAG = 'resource-metric-definition'

model.paging.register_element_codec(TYPE_TAG, ResourceMetricDefinitionCodec())


def collection_codec(
    **kwargs,
) -> model.paging.PagedCollectionCodec[ResourceMetricDefinition]:
    '''
    returns a codec for `ResourceMetricDefinitionCollection` responses. kwargs are passed to
    `PagedCollectionCodec` (e.g. hooks or `strict`)
    '''
    return model.paging.PagedCollectionCodec(
        element_codec=model.paging.codec_for(TYPE_TAG),
        **kwargs,
    )


def from_json_string(
    text: str,
) -> model.paging.PagedCollection[ResourceMetricDefinition]:
    return collection_codec().decode_json(text)


def to_json_string(
    collection: model.paging.PagedCollection[ResourceMetricDefinition],
) -> str:
    return collection_codec().encode(
        collection,
        mode=model.paging.SerialisationMode.INCLUDE_ALL,
    )
