"""
Parse directives for GIAS columns.

A directive turns the text of one non-empty cell into a typed value and
names the pandas dtype of the resulting column. Empty cells never reach a
directive: they are missing (pd.NA) before parsing starts. A directive that
cannot parse its input raises ValueError; the loader turns that into a
ParseError carrying column, row and raw text.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Mapping

# Every date-valued GIAS column uses dd-mm-yyyy, no time, no timezone.
DATE_FORMAT: str = "%d-%m-%Y"

# Exact cell shapes. strptime and int() alone accept "1-9-1894", " 12" and "1_000".
_DATE_SHAPE = re.compile(r"[0-9]{2}-[0-9]{2}-[0-9]{4}")
_INTEGER_SHAPE = re.compile(r"-?[0-9]+")
_DECIMAL_SHAPE = re.compile(r"-?([0-9]+(\.[0-9]*)?|\.[0-9]+)")


class ParseRule:
    dtype: str = "object"

    def parse(self, text: str) -> Any:
        raise NotImplementedError


@dataclass(frozen=True)
class StringRule(ParseRule):
    """Text kept verbatim. Used for identifiers that look numeric."""

    dtype: str = "string"

    def parse(self, text: str) -> str:
        return text


@dataclass(frozen=True)
class IntegerRule(ParseRule):
    dtype: str = "Int64"

    def parse(self, text: str) -> int:
        if not _INTEGER_SHAPE.fullmatch(text):
            raise ValueError(f"not a plain integer: {text!r}")
        return int(text)


@dataclass(frozen=True)
class FloatRule(ParseRule):
    dtype: str = "Float64"

    def parse(self, text: str) -> float:
        if not _DECIMAL_SHAPE.fullmatch(text):
            raise ValueError(f"not a plain decimal: {text!r}")
        value = float(text)
        if not math.isfinite(value):
            raise ValueError(f"not a finite decimal: {text!r}")
        return value


@dataclass(frozen=True)
class DateRule(ParseRule):
    fmt: str = DATE_FORMAT
    dtype: str = "object"

    def parse(self, text: str) -> date:
        if self.fmt == DATE_FORMAT and not _DATE_SHAPE.fullmatch(text):
            raise ValueError(f"not a dd-mm-yyyy date: {text!r}")
        # strptime rejects out-of-range fields ("31-31-2023"); no clamping.
        return datetime.strptime(text, self.fmt).date()


@dataclass(frozen=True)
class CategoryRule(ParseRule):
    """
    Rewrite known category strings; anything else passes through unchanged.
    A mapping value may be pd.NA to turn a sentinel string into missing.
    """

    mapping: Mapping[str, Any] = field(default_factory=dict, hash=False)
    dtype: str = "string"

    def parse(self, text: str) -> Any:
        return lookup_or_input(self.mapping, text)


STRING = StringRule()
INTEGER = IntegerRule()
FLOAT = FloatRule()
DATE = DateRule()


def lookup_or_input(mapping: Mapping[str, Any], key: str) -> Any:
    """Return mapping[key] when present, else key itself."""
    return mapping[key] if key in mapping else key
