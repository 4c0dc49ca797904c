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
from typing import Any, Optional

from opentelemetry.instrumentation.methods.capture import (
    get_method_parameters,
    get_method_return_value,
    is_mute_exception,
)
from opentelemetry.instrumentation.methods.serialization import (
    JsonSerializer,
    Serializer,
)
from opentelemetry.instrumentation.methods.types import (
    ArgumentsStoreType,
    InvocationContext,
    MethodTraceConfig,
    SpanScope,
    TracingOptions,
)
from opentelemetry.instrumentation.methods.version import __version__
from opentelemetry.instrumentation.utils import is_instrumentation_enabled
from opentelemetry.semconv.attributes import (
    error_attributes as ErrorAttributes,
)
from opentelemetry.semconv.schemas import Schemas
from opentelemetry.trace import (
    Span,
    SpanKind,
    Tracer,
    TracerProvider,
    get_tracer,
    use_span,
)
from opentelemetry.trace.status import Status, StatusCode

_logger = logging.getLogger(__name__)

EXCEPTION_MARK = "__otel_methods_exception_recorded__"
"""Attribute set on an exception once a span has recorded it."""


def _is_recorded(exception: BaseException) -> bool:
    return getattr(exception, EXCEPTION_MARK, False)


def _mark_recorded(exception: BaseException) -> None:
    try:
        setattr(exception, EXCEPTION_MARK, True)
    except (AttributeError, TypeError):
        _logger.debug(
            "Cannot mark %s as recorded", type(exception).__qualname__
        )


class MethodInstrumentor:
    """Manage the span of a single intercepted method call.

    This is a per-call hook object, not a
    :class:`~opentelemetry.instrumentation.instrumentor.BaseInstrumentor`:
    it patches nothing and has no ``instrument()``.

    The host interception engine drives one instance per in-flight call::

        on_entry -> (on_success | on_exception) -> on_exit

    and calls :meth:`reset` before handing the instance to the next call. An
    instance is never shared by two concurrent calls.

    Nothing happens when ``options`` is ``None`` (tracing disabled) or when
    instrumentation is suppressed in the current context. The span is made
    current while the call runs, so spans of nested instrumented calls become
    its children.

    Args:
        options: process wide settings, ``None`` disables tracing.
        tracer_provider: provider used to create the tracer when ``tracer``
            is not given.
        serializer: renders parameters and return values, defaults to
            :class:`JsonSerializer`.
        name: span name override for this method.
        record_arguments: record parameters and return value.
        tracer: tracer shared between instances.
    """

    def __init__(
        self,
        options: Optional[TracingOptions] = None,
        tracer_provider: Optional[TracerProvider] = None,
        serializer: Optional[Serializer] = None,
        name: Optional[str] = None,
        record_arguments: bool = True,
        tracer: Optional[Tracer] = None,
    ):
        if tracer is None:
            tracer = get_tracer(
                __name__,
                __version__,
                tracer_provider,
                schema_url=Schemas.V1_36_0.value,
            )
        self._tracer = tracer
        self._options = options
        self._serializer = (
            serializer if serializer is not None else JsonSerializer()
        )
        self.name = name
        self.record_arguments = record_arguments
        self._span: Optional[Span] = None
        self._span_scope: Optional[SpanScope] = None
        self._parameters: Optional[str] = None

    @classmethod
    def from_config(
        cls, config: MethodTraceConfig, **kwargs: Any
    ) -> "MethodInstrumentor":
        return cls(
            name=config.name,
            record_arguments=config.record_arguments,
            **kwargs,
        )

    @property
    def span(self) -> Optional[Span]:
        return self._span

    @property
    def parameters(self) -> Optional[str]:
        return self._parameters

    def _span_name(self, context: InvocationContext) -> str:
        if self.name:
            return self.name
        if self._options.short_name:
            type_name = context.type_name
        else:
            type_name = context.type_full_name
        return f"{type_name}.{context.method_name}"

    def on_entry(self, context: InvocationContext) -> None:
        if self._options is None:
            return
        if not is_instrumentation_enabled():
            _logger.debug(
                "Instrumentation suppressed, no span for %s",
                context.method_name,
            )
            return

        name = self._span_name(context)
        self._parameters = get_method_parameters(
            context, self._serializer, self.record_arguments
        )
        span = self._tracer.start_span(name, kind=SpanKind.INTERNAL)
        scope = use_span(
            span,
            end_on_exit=False,
            record_exception=False,
            set_status_on_exception=False,
        )
        scope.__enter__()
        self._span = span
        self._span_scope = scope

    def on_success(self, context: InvocationContext) -> None:
        if self._span is None:
            return

        return_value = get_method_return_value(
            context, self._serializer, self.record_arguments
        )
        self._attach_arguments(self._parameters, return_value)
        if self._options.set_ok_status_when_success:
            self._span.set_status(Status(StatusCode.OK))

    def on_exception(self, context: InvocationContext) -> None:
        if self._span is None:
            return

        exception = context.exception
        if exception is None:
            self._span.set_status(Status(StatusCode.ERROR))
            return

        self._span.set_status(
            Status(
                StatusCode.ERROR,
                f"{type(exception).__name__}: {exception}",
            )
        )
        self._span.set_attribute(
            ErrorAttributes.ERROR_TYPE, type(exception).__qualname__
        )
        if is_mute_exception(context) and _is_recorded(exception):
            return
        self._span.record_exception(exception)
        _mark_recorded(exception)

    def on_exit(  # pylint: disable=unused-argument
        self, context: InvocationContext
    ) -> None:
        if self._span is None:
            return

        span = self._span
        scope = self._span_scope
        try:
            if scope is not None:
                scope.__exit__(None, None, None)
        finally:
            span.end()
            self._span = None
            self._span_scope = None
            self._parameters = None

    def reset(self) -> bool:
        """Clear per-call state so the instance can serve another call.

        A span still open at this point belongs to a call whose host never
        reached :meth:`on_exit`; it is ended here. Returns ``False`` when that
        fails, in which case the instance must not be reused.
        """
        span = self._span
        scope = self._span_scope
        self._span = None
        self._span_scope = None
        self._parameters = None
        self.name = None
        self.record_arguments = True
        if span is None:
            return True

        _logger.warning(
            "Span %s was never closed by on_exit, ending it on reset",
            getattr(span, "name", span),
        )
        try:
            if scope is not None:
                scope.__exit__(None, None, None)
            span.end()
        except Exception:  # pylint: disable=broad-exception-caught
            _logger.exception("Failed to end orphaned span")
            return False
        return True

    def _attach_arguments(
        self, parameters: Optional[str], return_value: Optional[str]
    ) -> None:
        key_names = self._options.key_names
        attributes = {
            key: value
            for key, value in (
                (key_names.tag_parameter, parameters),
                (key_names.tag_return, return_value),
            )
            if value is not None
        }
        if not attributes:
            return

        store_type = self._options.arguments_store_type
        if store_type is ArgumentsStoreType.TAG:
            self._span.set_attributes(attributes)
        elif store_type is ArgumentsStoreType.EVENT:
            self._span.add_event(
                key_names.event_arguments, attributes=attributes
            )
