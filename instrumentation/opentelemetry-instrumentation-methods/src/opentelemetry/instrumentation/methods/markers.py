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

"""Declarative markers read by :class:`MethodInstrumentor`.

Parameters and return values opt out of (or into) recording with
``typing.Annotated`` metadata:

.. code-block:: python

    from typing import Annotated

    from opentelemetry.instrumentation.methods import (
        ApmIgnore,
        ApmRecord,
        traced_method,
    )

    class Accounts:
        @traced_method(name="accounts.login")
        def login(self, user: str, password: Annotated[str, ApmIgnore]):
            ...

        @traced_method(record_arguments=False)
        def lookup(self, key: Annotated[str, ApmRecord]) -> Annotated[dict, ApmRecord]:
            ...

The host interception engine reads the declared settings back with
:func:`get_method_config`. None of these decorators wrap the function.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, TypeVar, overload

from opentelemetry.instrumentation.methods.types import (
    MethodTraceConfig,
)

F = TypeVar("F", bound=Callable[..., Any])

_CONFIG_ATTRIBUTE = "__otel_method_config__"
_MUTE_EXCEPTION_ATTRIBUTE = "__otel_mute_exception__"


class _Marker:
    __slots__ = ("_name",)

    def __init__(self, name: str):
        self._name = name

    def __repr__(self) -> str:
        return self._name


ApmIgnore = _Marker("ApmIgnore")
"""Skip this value while ``record_arguments`` is true."""

ApmRecord = _Marker("ApmRecord")
"""Record this value even though ``record_arguments`` is false."""


def _unbound(func: Callable[..., Any]) -> Callable[..., Any]:
    return getattr(func, "__func__", func)


@overload
def traced_method(func: F) -> F: ...


@overload
def traced_method(
    func: None = None,
    *,
    name: Optional[str] = None,
    record_arguments: bool = True,
) -> Callable[[F], F]: ...


def traced_method(
    func=None,
    *,
    name: Optional[str] = None,
    record_arguments: bool = True,
):
    """Declare that calls to the decorated function should produce spans.

    Usable bare (``@traced_method``) or with settings
    (``@traced_method(name="cache.get", record_arguments=False)``).
    """

    def decorator(fn):
        setattr(
            _unbound(fn),
            _CONFIG_ATTRIBUTE,
            MethodTraceConfig(name=name, record_arguments=record_arguments),
        )
        return fn

    if func is not None:
        return decorator(func)
    return decorator


def get_method_config(func: Callable[..., Any]) -> Optional[MethodTraceConfig]:
    """Return the settings declared with :func:`traced_method`, if any."""
    return getattr(_unbound(func), _CONFIG_ATTRIBUTE, None)


def mute_exception(func: F) -> F:
    """Record a propagating exception only on the innermost span seeing it."""
    setattr(_unbound(func), _MUTE_EXCEPTION_ATTRIBUTE, True)
    return func


def unmute_exception(func: F) -> F:
    """Record every exception on this span, even if already recorded."""
    setattr(_unbound(func), _MUTE_EXCEPTION_ATTRIBUTE, False)
    return func


def get_mute_exception(func: Callable[..., Any]) -> Optional[bool]:
    return getattr(_unbound(func), _MUTE_EXCEPTION_ATTRIBUTE, None)
