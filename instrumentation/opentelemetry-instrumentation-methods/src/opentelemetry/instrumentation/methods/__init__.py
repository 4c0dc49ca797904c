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
"""
Spans for individual method calls.

A :class:`MethodInstrumentor` turns one intercepted call into one span. It
does not intercept anything itself: a host interception engine (a decorator,
a proxy, an aspect framework...) builds an :class:`InvocationContext` for each
call and drives the hooks in order.

Usage
-----

.. code-block:: python

    from opentelemetry.instrumentation.methods import (
        InvocationContext,
        MethodInstrumentor,
        get_method_config,
        load_tracing_options,
        traced_method,
    )

    options = load_tracing_options()

    class Cache:
        @traced_method(name="cache.get")
        def get(self, key):
            ...

    def call(instance, func, *args, **kwargs):
        instrumentor = MethodInstrumentor.from_config(
            get_method_config(func), options=options
        )
        context = InvocationContext.from_call(func, instance, args, kwargs)
        instrumentor.on_entry(context)
        try:
            context.return_value = func(instance, *args, **kwargs)
        except Exception as exc:
            context.exception = exc
            instrumentor.on_exception(context)
            raise
        else:
            instrumentor.on_success(context)
        finally:
            instrumentor.on_exit(context)
            instrumentor.reset()
        return context.return_value

Configuration
-------------

:func:`load_tracing_options` reads the ``OTEL_INSTRUMENTATION_METHODS_*``
environment variables documented in
:mod:`opentelemetry.instrumentation.methods.environment_variables`. Passing
``options=None`` to :class:`MethodInstrumentor` disables spans.
"""

from opentelemetry.instrumentation.methods.capture import (
    get_method_parameters,
    get_method_return_value,
    is_mute_exception,
)
from opentelemetry.instrumentation.methods.config import load_tracing_options
from opentelemetry.instrumentation.methods.instrumentor import (
    EXCEPTION_MARK,
    MethodInstrumentor,
)
from opentelemetry.instrumentation.methods.markers import (
    ApmIgnore,
    ApmRecord,
    get_method_config,
    mute_exception,
    traced_method,
    unmute_exception,
)
from opentelemetry.instrumentation.methods.serialization import (
    JsonSerializer,
    Serializer,
)
from opentelemetry.instrumentation.methods.types import (
    ArgumentsStoreType,
    InvocationContext,
    KeyNames,
    MethodTraceConfig,
    TracingOptions,
)
from opentelemetry.instrumentation.methods.version import __version__

__all__ = [
    "ApmIgnore",
    "ApmRecord",
    "ArgumentsStoreType",
    "EXCEPTION_MARK",
    "InvocationContext",
    "JsonSerializer",
    "KeyNames",
    "MethodInstrumentor",
    "MethodTraceConfig",
    "Serializer",
    "TracingOptions",
    "__version__",
    "get_method_config",
    "get_method_parameters",
    "get_method_return_value",
    "is_mute_exception",
    "load_tracing_options",
    "mute_exception",
    "traced_method",
    "unmute_exception",
]
