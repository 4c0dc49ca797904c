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

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional, Tuple

from typing_extensions import Annotated, get_origin, get_type_hints

from opentelemetry.instrumentation.methods.markers import (
    ApmIgnore,
    ApmRecord,
    get_mute_exception,
)
from opentelemetry.instrumentation.methods.serialization import (
    Serializer,
)
from opentelemetry.instrumentation.methods.types import (
    InvocationContext,
)

_logger = logging.getLogger(__name__)


def _resolve_hints(method: Callable[..., Any]) -> Dict[str, Any]:
    try:
        return get_type_hints(method, include_extras=True)
    except (NameError, TypeError, AttributeError) as exc:
        # unresolvable forward references, no markers can be read from strings
        _logger.debug(
            "Cannot resolve annotations of %s: %s",
            getattr(method, "__qualname__", method),
            exc,
        )
        return {}


def _markers(annotation: Any) -> Tuple[Any, ...]:
    if annotation is None or get_origin(annotation) is not Annotated:
        return ()
    return annotation.__metadata__


def _should_record(markers: Tuple[Any, ...], record_arguments: bool) -> bool:
    if record_arguments:
        return ApmIgnore not in markers
    return ApmRecord in markers


def get_method_parameters(
    context: InvocationContext,
    serializer: Serializer,
    record_arguments: bool,
) -> Optional[str]:
    """Serialize the parameters of the call selected for recording.

    With ``record_arguments`` every parameter except those marked
    :data:`ApmIgnore` is kept and the result is always a string, ``{}`` for a
    method without parameters. Without it only :data:`ApmRecord` parameters
    are kept and ``None`` is returned when there are none.
    """
    hints = _resolve_hints(context.method)
    selected = {
        name: value
        for name, value in context.arguments().items()
        if _should_record(_markers(hints.get(name)), record_arguments)
    }
    if not selected and not record_arguments:
        return None
    return serializer.serialize(selected)


def get_method_return_value(
    context: InvocationContext,
    serializer: Serializer,
    record_arguments: bool,
) -> Optional[str]:
    hints = _resolve_hints(context.method)
    if not _should_record(_markers(hints.get("return")), record_arguments):
        return None
    return serializer.serialize(context.return_value)


def is_mute_exception(context: InvocationContext) -> bool:
    """Whether an already recorded exception should be skipped on this span.

    Methods marked with :func:`unmute_exception` always record; every other
    method only records exceptions that no inner span has recorded yet.
    """
    override = get_mute_exception(context.method)
    if override is None:
        return True
    return override
