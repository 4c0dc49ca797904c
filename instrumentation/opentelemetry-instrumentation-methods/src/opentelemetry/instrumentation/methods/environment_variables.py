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

OTEL_INSTRUMENTATION_METHODS_ENABLED = "OTEL_INSTRUMENTATION_METHODS_ENABLED"
"""
.. envvar:: OTEL_INSTRUMENTATION_METHODS_ENABLED

Set to ``false`` to disable method spans entirely. Defaults to ``true``.
"""

OTEL_INSTRUMENTATION_METHODS_SHORT_NAME = (
    "OTEL_INSTRUMENTATION_METHODS_SHORT_NAME"
)
"""
.. envvar:: OTEL_INSTRUMENTATION_METHODS_SHORT_NAME

When ``true``, span names use the unqualified class name
(``Cache.get``) instead of the fully qualified one (``app.cache.Cache.get``).
Defaults to ``false``.
"""

OTEL_INSTRUMENTATION_METHODS_ARGUMENTS_STORE_TYPE = (
    "OTEL_INSTRUMENTATION_METHODS_ARGUMENTS_STORE_TYPE"
)
"""
.. envvar:: OTEL_INSTRUMENTATION_METHODS_ARGUMENTS_STORE_TYPE

Where recorded parameters and return values go. Must be one of ``tag``
(two span attributes) or ``event`` (a single span event). Defaults to ``tag``.
"""

OTEL_INSTRUMENTATION_METHODS_SET_OK_STATUS_WHEN_SUCCESS = (
    "OTEL_INSTRUMENTATION_METHODS_SET_OK_STATUS_WHEN_SUCCESS"
)
"""
.. envvar:: OTEL_INSTRUMENTATION_METHODS_SET_OK_STATUS_WHEN_SUCCESS

When ``true``, successful calls get an ``OK`` status, otherwise the status is
left ``UNSET``. Defaults to ``true``.
"""

OTEL_INSTRUMENTATION_METHODS_TAG_PARAMETER_KEY = (
    "OTEL_INSTRUMENTATION_METHODS_TAG_PARAMETER_KEY"
)

OTEL_INSTRUMENTATION_METHODS_TAG_RETURN_KEY = (
    "OTEL_INSTRUMENTATION_METHODS_TAG_RETURN_KEY"
)

OTEL_INSTRUMENTATION_METHODS_EVENT_ARGUMENTS_KEY = (
    "OTEL_INSTRUMENTATION_METHODS_EVENT_ARGUMENTS_KEY"
)

OTEL_INSTRUMENTATION_METHODS_MAX_VALUE_LENGTH = (
    "OTEL_INSTRUMENTATION_METHODS_MAX_VALUE_LENGTH"
)
"""
.. envvar:: OTEL_INSTRUMENTATION_METHODS_MAX_VALUE_LENGTH

Maximum length of a serialized parameter or return value string. Longer
values are truncated. ``0`` (the default) means no limit.
"""
