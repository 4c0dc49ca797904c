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
import os
from typing import Mapping, Optional

from opentelemetry.instrumentation.methods.environment_variables import (
    OTEL_INSTRUMENTATION_METHODS_ARGUMENTS_STORE_TYPE,
    OTEL_INSTRUMENTATION_METHODS_ENABLED,
    OTEL_INSTRUMENTATION_METHODS_EVENT_ARGUMENTS_KEY,
    OTEL_INSTRUMENTATION_METHODS_MAX_VALUE_LENGTH,
    OTEL_INSTRUMENTATION_METHODS_SET_OK_STATUS_WHEN_SUCCESS,
    OTEL_INSTRUMENTATION_METHODS_SHORT_NAME,
    OTEL_INSTRUMENTATION_METHODS_TAG_PARAMETER_KEY,
    OTEL_INSTRUMENTATION_METHODS_TAG_RETURN_KEY,
)
from opentelemetry.instrumentation.methods.types import (
    ArgumentsStoreType,
    KeyNames,
    TracingOptions,
)

_logger = logging.getLogger(__name__)

_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off"}


def _get_bool(environ: Mapping[str, str], name: str, default: bool) -> bool:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    _logger.warning(
        "%s is not a valid option for `%s` environment variable. Must be one of true, false. Defaulting to `%s`.",
        raw,
        name,
        str(default).lower(),
    )
    return default


def _get_store_type(environ: Mapping[str, str]) -> ArgumentsStoreType:
    raw = environ.get(OTEL_INSTRUMENTATION_METHODS_ARGUMENTS_STORE_TYPE)
    if not raw:
        return ArgumentsStoreType.TAG
    try:
        return ArgumentsStoreType[raw.strip().upper()]
    except KeyError:
        _logger.warning(
            "%s is not a valid option for `%s` environment variable. Must be one of %s. Defaulting to `tag`.",
            raw,
            OTEL_INSTRUMENTATION_METHODS_ARGUMENTS_STORE_TYPE,
            ", ".join(e.value for e in ArgumentsStoreType),
        )
        return ArgumentsStoreType.TAG


def _get_key(environ: Mapping[str, str], name: str, default: str) -> str:
    value = (environ.get(name) or "").strip()
    return value or default


def load_tracing_options(
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[TracingOptions]:
    """Build :class:`TracingOptions` from environment variables.

    Returns ``None`` when ``OTEL_INSTRUMENTATION_METHODS_ENABLED`` is false,
    which every :class:`MethodInstrumentor` treats as tracing disabled.
    """
    if environ is None:
        environ = os.environ

    if not _get_bool(environ, OTEL_INSTRUMENTATION_METHODS_ENABLED, True):
        _logger.debug("Method spans disabled by environment")
        return None

    defaults = KeyNames()
    key_names = KeyNames(
        tag_parameter=_get_key(
            environ,
            OTEL_INSTRUMENTATION_METHODS_TAG_PARAMETER_KEY,
            defaults.tag_parameter,
        ),
        tag_return=_get_key(
            environ,
            OTEL_INSTRUMENTATION_METHODS_TAG_RETURN_KEY,
            defaults.tag_return,
        ),
        event_arguments=_get_key(
            environ,
            OTEL_INSTRUMENTATION_METHODS_EVENT_ARGUMENTS_KEY,
            defaults.event_arguments,
        ),
    )
    return TracingOptions(
        short_name=_get_bool(
            environ, OTEL_INSTRUMENTATION_METHODS_SHORT_NAME, False
        ),
        arguments_store_type=_get_store_type(environ),
        set_ok_status_when_success=_get_bool(
            environ,
            OTEL_INSTRUMENTATION_METHODS_SET_OK_STATUS_WHEN_SUCCESS,
            True,
        ),
        key_names=key_names,
    )


def get_max_value_length(environ: Optional[Mapping[str, str]] = None) -> int:
    if environ is None:
        environ = os.environ
    raw = environ.get(OTEL_INSTRUMENTATION_METHODS_MAX_VALUE_LENGTH)
    if not raw:
        return 0
    try:
        value = int(raw)
    except ValueError:
        value = -1
    if value < 0:
        _logger.warning(
            "%s is not a valid option for `%s` environment variable. Must be a non-negative integer. Defaulting to `0`.",
            raw,
            OTEL_INSTRUMENTATION_METHODS_MAX_VALUE_LENGTH,
        )
        return 0
    return value
