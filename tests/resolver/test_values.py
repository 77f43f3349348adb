"""Tests for machine value conversion."""

import math
from datetime import datetime
from decimal import Decimal

import pytest

from scriptfsm.errors import ValueConversionError
from scriptfsm.resolver.protocol import Outcome, OutcomeKind
from scriptfsm.resolver.values import (
    ErrorValue,
    FrozenDict,
    error,
    freeze,
    is_truthy,
    thaw,
)


class TestFreeze:
    @pytest.mark.parametrize(
        "value",
        [None, True, 3, 2.5, "s", b"b", Decimal("1.5"), datetime(2024, 1, 1)],
    )
    def test_scalars_pass_through(self, value):
        assert freeze(value) is value

    def test_containers(self):
        frozen = freeze({"a": [1, {"b": {2}}], "c": bytearray(b"x")})

        assert isinstance(frozen, FrozenDict)
        assert frozen["a"] == (1, FrozenDict({"b": frozenset({2})}))
        assert frozen["c"] == b"x"

    def test_frozen_dict_is_hashable(self):
        assert hash(freeze({"a": [1]})) == hash(freeze({"a": (1,)}))

    def test_unsupported_type(self):
        with pytest.raises(ValueConversionError) as exc:
            freeze([1, object()])
        assert exc.value.reason == "unsupported type"

    def test_self_reference(self):
        data = {}
        data["self"] = data

        with pytest.raises(ValueConversionError, match="self-referential"):
            freeze(data)

    def test_shared_reference_is_not_a_cycle(self):
        shared = [1]

        assert freeze([shared, shared]) == ((1,), (1,))


class TestThaw:
    def test_round_trip_to_host_types(self):
        frozen = freeze({"a": [1, 2], "s": {3}})

        assert thaw(frozen) == {"a": [1, 2], "s": {3}}
        assert frozen.thaw() == {"a": [1, 2], "s": {3}}


class TestTruthiness:
    @pytest.mark.parametrize(
        "value,expected",
        [(1, True), ("x", True), ((1,), True), (0, False), ("", False), ((), False)],
    )
    def test_is_truthy(self, value, expected):
        assert is_truthy(value) is expected

    def test_nan_is_falsy(self):
        assert is_truthy(math.nan) is False


class TestErrorValue:
    def test_equality(self):
        assert error("x") == ErrorValue("x")
        assert error("x") != error("y")
        assert repr(error("x")) == "error('x')"

    def test_message_coerced_to_str(self):
        assert error(42).message == "42"


class TestOutcome:
    def test_from_result(self):
        assert Outcome.from_result(None).kind == OutcomeKind.NO_CHANGE
        assert Outcome.from_result(error("e")) == Outcome.domain_error("e")
        assert Outcome.from_result([1]) == Outcome.replace((1,))

    def test_condition_results_reduced_to_bool(self):
        assert Outcome.from_result(object(), condition=True).value is True
        assert Outcome.from_result(math.nan, condition=True).value is False
