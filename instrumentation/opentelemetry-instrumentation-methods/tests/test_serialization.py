# Copyright The OpenTelemetry Authors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import json
import os
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from unittest.mock import patch
from uuid import UUID

from opentelemetry.instrumentation.methods import JsonSerializer, Serializer
from opentelemetry.instrumentation.methods.environment_variables import (
    OTEL_INSTRUMENTATION_METHODS_MAX_VALUE_LENGTH,
)


class Color(Enum):
    RED = "red"


@dataclass
class Point:
    x: int
    y: int


class Opaque:
    def __repr__(self):
        return "<Opaque>"


class LazyRecord:
    def __repr__(self):
        raise RuntimeError("lazy load failed")


def test_json_serializer_is_a_serializer():
    assert isinstance(JsonSerializer(), Serializer)


def test_plain_values():
    serializer = JsonSerializer(max_length=0)

    assert serializer.serialize({"a": [1, 2.5, None, True]}) == (
        '{"a":[1,2.5,null,true]}'
    )
    assert serializer.serialize("héllo") == '"héllo"'
    assert serializer.serialize(None) == "null"


def test_values_json_cannot_encode():
    serializer = JsonSerializer(max_length=0)

    payload = json.loads(
        serializer.serialize(
            {
                "bytes": b"\x00\x01",
                "when": datetime(2024, 1, 2, 3, 4, 5),
                "id": UUID("12345678-1234-5678-1234-567812345678"),
                "color": Color.RED,
                "tags": {"b", "a"},
                "point": Point(1, 2),
                "opaque": Opaque(),
            }
        )
    )

    assert payload == {
        "bytes": "AAE=",
        "when": "2024-01-02T03:04:05",
        "id": "12345678-1234-5678-1234-567812345678",
        "color": "red",
        "tags": ["a", "b"],
        "point": {"x": 1, "y": 2},
        "opaque": "<Opaque>",
    }


def test_circular_reference_falls_back_to_repr():
    serializer = JsonSerializer(max_length=0)
    loop = []
    loop.append(loop)

    assert serializer.serialize(loop) == "[[...]]"


def test_failing_repr_becomes_placeholder():
    serializer = JsonSerializer(max_length=0)

    assert serializer.serialize({"record": LazyRecord()}) == (
        '{"record":"<unrepresentable LazyRecord>"}'
    )
    assert serializer.serialize(LazyRecord()) == (
        '"<unrepresentable LazyRecord>"'
    )
    assert serializer.serialize({LazyRecord()}) == (
        '["<unrepresentable LazyRecord>"]'
    )


def test_deep_nesting_does_not_raise():
    serializer = JsonSerializer(max_length=0)
    nested = []
    for _ in range(100000):
        nested = [nested]

    assert isinstance(serializer.serialize(nested), str)


def test_truncation():
    serializer = JsonSerializer(max_length=5)

    assert serializer.serialize("abcdefgh") == '"abcd...'
    assert serializer.serialize(1) == "1"


@patch.dict(os.environ, {OTEL_INSTRUMENTATION_METHODS_MAX_VALUE_LENGTH: "3"})
def test_max_length_from_environment():
    assert JsonSerializer().serialize([1, 2, 3]) == "[1,..."
