"""
GIAS Column Schema Registry

Ordered, validated registry of the columns in the GIAS "all establishments"
extract (edubasealldata<YYYYMMDD>.csv).

RULES:
- One descriptor per raw CSV column. Raw names are unique. Column ids are unique.
- Registry order is the physical column order of the source file, carried
  explicitly on each descriptor as `position`. Never dict or sort order.
- Built once at import time, never mutated. A bad table fails the import.
- Columns without a parse directive are read as plain strings.

Public API:
  build_registry(entries) -> SchemaRegistry
  registry_for(release_date=None) -> SchemaRegistry
  release_for(release_date=None) -> Release
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterator, Optional, Sequence

from edubaseall_columns import EDUBASEALL_COLUMNS, RELEASE_FILES
from parse_rules import STRING, ParseRule

logger = logging.getLogger(__name__)


class ConfigurationError(ValueError):
    """Column table or release table is inconsistent. Fatal at build time."""


# ---------------------------------------------------------------------------
# Descriptors and registry
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ColumnDescriptor:
    raw_name: str
    col_id: str
    label: str
    parse_rule: Optional[ParseRule] = None
    position: int = 0


class SchemaRegistry:
    """
    Immutable, ordered set of ColumnDescriptors plus the three lookups
    derived from it (raw -> descriptor, id -> descriptor, id -> directive).
    """

    def __init__(self, descriptors: Sequence[ColumnDescriptor]):
        ordered = tuple(sorted(descriptors, key=lambda d: d.position))
        self._descriptors: tuple[ColumnDescriptor, ...] = ordered
        self._by_raw: dict[str, ColumnDescriptor] = {d.raw_name: d for d in ordered}
        self._by_id: dict[str, ColumnDescriptor] = {d.col_id: d for d in ordered}
        self._rules: dict[str, ParseRule] = {
            d.col_id: d.parse_rule for d in ordered if d.parse_rule is not None
        }

    def __iter__(self) -> Iterator[ColumnDescriptor]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)

    def __contains__(self, col_id: object) -> bool:
        return col_id in self._by_id

    def __repr__(self) -> str:
        return f"SchemaRegistry({len(self)} columns)"

    def by_raw(self, raw_name: str) -> Optional[ColumnDescriptor]:
        return self._by_raw.get(raw_name)

    def by_id(self, col_id: str) -> Optional[ColumnDescriptor]:
        return self._by_id.get(col_id)

    def ids(self) -> list[str]:
        """Column ids in source-file order."""
        return [d.col_id for d in self._descriptors]

    def raw_names(self) -> list[str]:
        return [d.raw_name for d in self._descriptors]

    def label_for(self, col_id: str) -> Optional[str]:
        descriptor = self._by_id.get(col_id)
        return descriptor.label if descriptor else None

    def rename(self, raw_name: str) -> str:
        """Raw header -> column id. Unknown headers keep their raw name."""
        descriptor = self._by_raw.get(raw_name)
        return descriptor.col_id if descriptor else raw_name

    def parse_rule_for(self, col_id: str) -> ParseRule:
        return self._rules.get(col_id, STRING)

    def parse_rules(self, keyed_by: str = "id") -> dict[str, ParseRule]:
        """
        Non-default directives in registry order, keyed by column id or by
        raw name. Use keyed_by="raw" when loading without renaming.
        """
        if keyed_by == "id":
            return dict(self._rules)
        if keyed_by == "raw":
            return {
                d.raw_name: d.parse_rule
                for d in self._descriptors
                if d.parse_rule is not None
            }
        raise ValueError(f"keyed_by must be 'id' or 'raw', got {keyed_by!r}")


def build_registry(entries: Sequence[tuple]) -> SchemaRegistry:
    """
    Validate the literal column table and build a SchemaRegistry.

    Each entry is (raw_name, col_id, label) or (raw_name, col_id, label,
    parse_rule), in source-file column order.

    Raises ConfigurationError on a duplicate raw name or column id, or on a
    malformed entry. Nothing is silently dropped.
    """
    descriptors: list[ColumnDescriptor] = []
    seen_raw: dict[str, int] = {}
    seen_id: dict[str, int] = {}

    for position, entry in enumerate(entries, 1):
        if len(entry) not in (3, 4):
            raise ConfigurationError(
                f"Column entry {position} must have 3 or 4 fields, got {len(entry)}: {entry!r}"
            )
        raw_name, col_id, label = entry[:3]
        parse_rule = entry[3] if len(entry) == 4 else None

        if not raw_name or not col_id:
            raise ConfigurationError(
                f"Column entry {position} has an empty raw name or column id: {entry!r}"
            )
        if parse_rule is not None and not isinstance(parse_rule, ParseRule):
            raise ConfigurationError(
                f"Column '{raw_name}' has parse directive {parse_rule!r}, "
                f"which is not a ParseRule"
            )
        if raw_name in seen_raw:
            raise ConfigurationError(
                f"Duplicate raw column name '{raw_name}' at positions "
                f"{seen_raw[raw_name]} and {position}"
            )
        if col_id in seen_id:
            raise ConfigurationError(
                f"Duplicate column id '{col_id}' at positions "
                f"{seen_id[col_id]} and {position}"
            )
        seen_raw[raw_name] = position
        seen_id[col_id] = position
        descriptors.append(
            ColumnDescriptor(
                raw_name=raw_name,
                col_id=col_id,
                label=label,
                parse_rule=parse_rule,
                position=position,
            )
        )

    logger.debug("[column_registry] built registry of %d columns", len(descriptors))
    return SchemaRegistry(descriptors)


# ---------------------------------------------------------------------------
# Releases
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Release:
    published: date
    resource_name: str
    registry: SchemaRegistry = field(compare=False)


def _build_releases() -> tuple[Release, ...]:
    """
    One Release per known extract file. All current releases share one
    column table; a release whose columns change gets its own table.
    """
    registry = build_registry(EDUBASEALL_COLUMNS)
    releases: list[Release] = []
    for published, resource_name in RELEASE_FILES:
        if releases and published <= releases[-1].published:
            raise ConfigurationError(
                f"Release table out of order: {published} follows {releases[-1].published}"
            )
        releases.append(Release(published, resource_name, registry))
    if not releases:
        raise ConfigurationError("Release table is empty")
    return tuple(releases)


def release_for(release_date: Optional[date] = None) -> Release:
    """Newest known release published on or before `release_date` (default: latest)."""
    if release_date is None:
        return RELEASES[-1]
    if isinstance(release_date, datetime):
        release_date = release_date.date()
    candidates = [r for r in RELEASES if r.published <= release_date]
    if not candidates:
        raise ConfigurationError(
            f"No GIAS release known on or before {release_date}; "
            f"earliest is {RELEASES[0].published}"
        )
    return candidates[-1]


def registry_for(release_date: Optional[date] = None) -> SchemaRegistry:
    return release_for(release_date).registry


# Module-level release table. Built once, never mutated.
RELEASES: tuple[Release, ...] = _build_releases()
EDUBASEALL_REGISTRY: SchemaRegistry = RELEASES[-1].registry
