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

"""Rendering of parameters and return values as span attribute strings."""

from __future__ import annotations

import json
import logging
from base64 import b64encode
from dataclasses import asdict, is_dataclass
from datetime import date, datetime, time
from enum import Enum
from functools import partial
from typing import Any, Optional
from uuid import UUID

from typing_extensions import Protocol, runtime_checkable

from opentelemetry.instrumentation.methods.config import (
    get_max_value_length,
)

_logger = logging.getLogger(__name__)


@runtime_checkable
class Serializer(Protocol):
    def serialize(self, value: Any) -> Optional[str]: ...


def _safe_repr(value: Any) -> str:
    try:
        return repr(value)
    except Exception:  # pylint: disable=broad-exception-caught
        return f"<unrepresentable {type(value).__qualname__}>"


class _MethodJsonEncoder(json.JSONEncoder):
    def default(self, o: Any) -> Any:
        if isinstance(o, bytes):
            return b64encode(o).decode()
        if isinstance(o, (datetime, date, time)):
            return o.isoformat()
        if isinstance(o, UUID):
            return str(o)
        if isinstance(o, Enum):
            return o.value
        if isinstance(o, (set, frozenset)):
            return sorted(o, key=_safe_repr)
        if is_dataclass(o) and not isinstance(o, type):
            return asdict(o)
        return _safe_repr(o)


method_json_dumps = partial(
    json.dumps,
    separators=(",", ":"),
    ensure_ascii=False,
    cls=_MethodJsonEncoder,
)


class JsonSerializer:
    """Serialize values as compact JSON.

    Objects JSON cannot represent are rendered with ``repr``; a value that
    cannot be rendered at all becomes ``<unrepresentable Type>`` rather than
    raising into the traced call. When ``max_length`` is positive, longer
    results are truncated and end with ``...``. Without an explicit
    ``max_length`` the limit comes from
    ``OTEL_INSTRUMENTATION_METHODS_MAX_VALUE_LENGTH``.
    """

    def __init__(self, max_length: Optional[int] = None):
        if max_length is None:
            max_length = get_max_value_length()
        self._max_length = max_length

    def serialize(self, value: Any) -> Optional[str]:
        try:
            text = method_json_dumps(value)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            # circular references, unsupported mapping keys, deep nesting,
            # failing asdict or __repr__
            _logger.debug(
                "Falling back to repr for %s: %s", type(value).__name__, exc
            )
            text = _safe_repr(value)
        if 0 < self._max_length < len(text):
            text = text[: self._max_length] + "..."
        return text
