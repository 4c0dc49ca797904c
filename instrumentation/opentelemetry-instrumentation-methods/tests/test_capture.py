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
from typing import Annotated

import pytest

from opentelemetry.instrumentation.methods import (
    ApmIgnore,
    ApmRecord,
    InvocationContext,
    JsonSerializer,
    MethodTraceConfig,
    get_method_config,
    get_method_parameters,
    get_method_return_value,
    is_mute_exception,
    mute_exception,
    traced_method,
    unmute_exception,
)

# pylint: disable=redefined-outer-name


class Accounts:
    def login(
        self, user: str, password: Annotated[str, ApmIgnore]
    ) -> Annotated[str, ApmIgnore]:
        return "token"

    def lookup(
        self, key: Annotated[str, ApmRecord], region: str
    ) -> Annotated[dict, ApmRecord]:
        return {"key": key}

    def count(self, *keys, **filters) -> int:
        return len(keys)

    @classmethod
    def build(cls, name):
        return cls()

    @staticmethod
    def normalize(name):
        return name.lower()


@pytest.fixture
def serializer():
    return JsonSerializer(max_length=0)


def _context(method, instance, *args, **kwargs):
    return InvocationContext.from_call(method, instance, args, kwargs)


def test_arguments_skip_receiver():
    accounts = Accounts()
    context = _context(Accounts.login, accounts, "bob", password="secret")

    assert context.arguments() == {"user": "bob", "password": "secret"}
    assert context.target_type is Accounts
    assert context.type_name == "Accounts"
    assert context.type_full_name == f"{__name__}.Accounts"
    assert context.method_name == "login"


def test_bound_method_supplies_receiver():
    accounts = Accounts()
    context = _context(accounts.login, None, "bob", "secret")

    assert context.instance is accounts
    assert context.target_type is Accounts
    assert context.type_name == "Accounts"
    assert context.arguments() == {"user": "bob", "password": "secret"}

    context = _context(Accounts.build, None, "main")
    assert context.instance is Accounts
    assert context.arguments() == {"name": "main"}


def test_arguments_of_classmethod_and_staticmethod():
    context = _context(Accounts.build, Accounts, "main")
    assert context.method is Accounts.__dict__["build"].__func__
    assert context.arguments() == {"name": "main"}
    assert context.type_name == "Accounts"

    context = _context(Accounts.normalize, None, "Main")
    assert context.arguments() == {"name": "Main"}
    assert context.target_type is None


def test_arguments_collect_varargs():
    context = _context(Accounts.count, Accounts(), "a", "b", region="eu")

    assert context.arguments() == {
        "keys": ("a", "b"),
        "filters": {"region": "eu"},
    }


def test_arguments_fall_back_when_binding_fails():
    context = _context(Accounts.normalize, None, "a", "b", extra=1)

    assert context.arguments() == {"arg0": "a", "arg1": "b", "extra": 1}


def test_parameters_respect_ignore_marker(serializer):
    context = _context(Accounts.login, Accounts(), "bob", "secret")

    parameters = get_method_parameters(context, serializer, True)

    assert json.loads(parameters) == {"user": "bob"}


def test_parameters_of_method_without_arguments(serializer):
    context = _context(Accounts.normalize, None)

    assert get_method_parameters(context, serializer, True) == "{}"
    assert get_method_parameters(context, serializer, False) is None


def test_parameters_respect_record_marker(serializer):
    context = _context(Accounts.lookup, Accounts(), "k1", "eu")

    assert json.loads(get_method_parameters(context, serializer, False)) == {
        "key": "k1"
    }
    assert json.loads(get_method_parameters(context, serializer, True)) == {
        "key": "k1",
        "region": "eu",
    }


def test_parameters_not_recorded_without_marker(serializer):
    context = _context(Accounts.login, Accounts(), "bob", "secret")

    assert get_method_parameters(context, serializer, False) is None


def test_return_value_markers(serializer):
    accounts = Accounts()

    login = _context(Accounts.login, accounts, "bob", "secret")
    login.return_value = "token"
    assert get_method_return_value(login, serializer, True) is None
    assert get_method_return_value(login, serializer, False) is None

    lookup = _context(Accounts.lookup, accounts, "k1", "eu")
    lookup.return_value = {"key": "k1"}
    assert get_method_return_value(lookup, serializer, False) == '{"key":"k1"}'

    count = _context(Accounts.count, accounts)
    count.return_value = 0
    assert get_method_return_value(count, serializer, True) == "0"
    assert get_method_return_value(count, serializer, False) is None


def test_unresolvable_annotations_are_ignored(serializer):
    def handler(request: "MissingType") -> "MissingType":  # noqa: F821
        return request

    context = _context(handler, None, "payload")
    context.return_value = "payload"

    assert json.loads(get_method_parameters(context, serializer, True)) == {
        "request": "payload"
    }
    assert get_method_return_value(context, serializer, False) is None


def test_mute_exception_markers():
    def plain():
        pass

    @mute_exception
    def muted():
        pass

    @unmute_exception
    def unmuted():
        pass

    assert is_mute_exception(_context(plain, None)) is True
    assert is_mute_exception(_context(muted, None)) is True
    assert is_mute_exception(_context(unmuted, None)) is False


def test_traced_method_records_config():
    @traced_method
    def bare():
        pass

    @traced_method(name="configured", record_arguments=False)
    def configured():
        pass

    def undeclared():
        pass

    assert get_method_config(bare) == MethodTraceConfig()
    assert get_method_config(configured) == MethodTraceConfig(
        name="configured", record_arguments=False
    )
    assert get_method_config(undeclared) is None
    # the function itself is returned unwrapped
    assert configured.__name__ == "configured"


def test_traced_method_on_bound_method():
    class Service:
        @traced_method(name="service.run")
        def run(self):
            pass

    assert get_method_config(Service().run).name == "service.run"
