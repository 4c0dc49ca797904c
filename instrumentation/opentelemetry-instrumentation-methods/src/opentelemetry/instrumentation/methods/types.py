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

import inspect
import logging
from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

from typing_extensions import TypeAlias

from opentelemetry.trace import Span

_logger = logging.getLogger(__name__)

SpanScope: TypeAlias = AbstractContextManager[Span]


class ArgumentsStoreType(Enum):
    # Parameters and return value as two span attributes.
    TAG = "tag"
    # Parameters and return value as attributes of a single span event.
    EVENT = "event"


@dataclass(frozen=True)
class KeyNames:
    tag_parameter: str = "method.parameters"
    tag_return: str = "method.return"
    event_arguments: str = "method.arguments"


@dataclass(frozen=True)
class TracingOptions:
    """Process wide settings shared by every :class:`MethodInstrumentor`.

    Loaded once at startup (see :func:`load_tracing_options`) and never
    mutated afterwards. Passing ``None`` instead of an instance disables
    method spans.
    """

    short_name: bool = False
    arguments_store_type: ArgumentsStoreType = ArgumentsStoreType.TAG
    set_ok_status_when_success: bool = True
    key_names: KeyNames = field(default_factory=KeyNames)


@dataclass(frozen=True)
class MethodTraceConfig:
    """Per method settings declared with :func:`traced_method`."""

    name: Optional[str] = None
    record_arguments: bool = True


@dataclass()
class InvocationContext:
    """Facts about a single intercepted call.

    ``method`` is the plain function (not a bound method). ``instance`` is the
    receiver passed as its first positional argument (``self`` or ``cls``) and
    is ``None`` for static methods and module level functions; it is not part
    of ``args``.
    """

    method: Callable[..., Any]
    target_type: Optional[type] = None
    instance: Any = None
    args: Tuple[Any, ...] = ()
    kwargs: Dict[str, Any] = field(default_factory=dict)
    return_value: Any = None
    exception: Optional[BaseException] = None

    @classmethod
    def from_call(
        cls,
        method: Callable[..., Any],
        instance: Any = None,
        args: Tuple[Any, ...] = (),
        kwargs: Optional[Dict[str, Any]] = None,
        target_type: Optional[type] = None,
    ) -> "InvocationContext":
        if hasattr(method, "__func__"):
            # bound method or static/class method object
            if instance is None:
                instance = getattr(method, "__self__", None)
            method = method.__func__
        if target_type is None and instance is not None:
            target_type = (
                instance if isinstance(instance, type) else type(instance)
            )
        return cls(
            method=method,
            target_type=target_type,
            instance=instance,
            args=tuple(args),
            kwargs=dict(kwargs or {}),
        )

    @property
    def method_name(self) -> str:
        return self.method.__name__

    @property
    def type_name(self) -> str:
        if self.target_type is None:
            return self.method.__module__.rpartition(".")[2]
        return self.target_type.__name__

    @property
    def type_full_name(self) -> str:
        if self.target_type is None:
            return self.method.__module__
        return f"{self.target_type.__module__}.{self.target_type.__qualname__}"

    def arguments(self) -> Dict[str, Any]:
        """Map parameter names to the values of this call.

        The receiver (``self``/``cls``) is left out. Calls that do not match
        the signature fall back to positional names (``arg0``, ``arg1``...)
        followed by the keyword arguments.
        """
        call_args = self.args
        if self.instance is not None:
            call_args = (self.instance, *self.args)
        try:
            signature = inspect.signature(self.method)
            bound = signature.bind_partial(*call_args, **self.kwargs)
        except (TypeError, ValueError) as exc:
            _logger.debug(
                "Cannot bind arguments of %s: %s", self.method_name, exc
            )
            arguments = {
                f"arg{index}": value for index, value in enumerate(self.args)
            }
            arguments.update(self.kwargs)
            return arguments

        arguments = dict(bound.arguments)
        if self.instance is not None:
            receiver = next(iter(signature.parameters), None)
            arguments.pop(receiver, None)
        return arguments
