"""API conformance test: verifies the package exposes everything in tests/data/api.json."""

from __future__ import annotations

import json
import typing
from datetime import date
from pathlib import Path

import pytest

import chronoshift
from chronoshift import ChronoshiftError, DateRule, ErrorKind, RelativeDuration

_api_path = Path(__file__).parent / "data" / "api.json"
with open(_api_path) as _f:
    _api = json.load(_f)


# ===========================================================================
# Exports
# ===========================================================================


class TestExports:
    @pytest.mark.parametrize("name", _api["exports"])
    def test_exported(self, name: str) -> None:
        assert name in chronoshift.__all__
        assert hasattr(chronoshift, name)

    def test_nothing_extra(self) -> None:
        assert sorted(chronoshift.__all__) == sorted(_api["exports"])


# ===========================================================================
# RelativeDuration
# ===========================================================================


class TestRelativeDuration:
    @pytest.mark.parametrize("name", _api["relative_duration"]["constructors"])
    def test_constructor(self, name: str) -> None:
        assert callable(getattr(RelativeDuration, name))

    @pytest.mark.parametrize("name", _api["relative_duration"]["methods"])
    def test_method(self, name: str) -> None:
        assert callable(getattr(RelativeDuration.zero(), name))

    def test_immutable(self) -> None:
        delta = RelativeDuration.months(1)
        with pytest.raises(AttributeError):
            delta.calendar_months = 2  # type: ignore[misc]


# ===========================================================================
# DateRule
# ===========================================================================


class TestDateRule:
    _rule = DateRule.daily(date(2020, 1, 1))

    @pytest.mark.parametrize("name", _api["date_rule"]["constructors"])
    def test_constructor(self, name: str) -> None:
        rule = getattr(DateRule, name)(date(2020, 1, 1))
        assert isinstance(rule, DateRule)

    @pytest.mark.parametrize("name", _api["date_rule"]["methods"])
    def test_method(self, name: str) -> None:
        assert callable(getattr(self._rule, name))

    @pytest.mark.parametrize("name", _api["date_rule"]["properties"])
    def test_property(self, name: str) -> None:
        assert isinstance(getattr(DateRule, name), property)


# ===========================================================================
# Errors
# ===========================================================================


class TestErrors:
    def test_kinds(self) -> None:
        assert sorted(typing.get_args(ErrorKind)) == sorted(_api["error"]["kinds"])

    @pytest.mark.parametrize("name", _api["error"]["constructors"])
    def test_constructor(self, name: str) -> None:
        assert callable(getattr(ChronoshiftError, name))

    def test_is_exception(self) -> None:
        assert issubclass(ChronoshiftError, Exception)

    @pytest.mark.parametrize("name", _api["error"]["methods"])
    def test_method(self, name: str) -> None:
        assert callable(getattr(ChronoshiftError.rule("x"), name))
