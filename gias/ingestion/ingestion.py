"""
GIAS Ingestion Loader

Reads one GIAS "all establishments" CSV extract into a typed, in-memory
Table, driven by a SchemaRegistry.

CONTRACT ANCHORS
----------------
- Source: explicit path > caller-owned stream > named resource file.
- Processing order: header -> allow/deny list (raw names) -> rename ->
  parse (by final name) -> assemble. Order is fixed.
- Every cell is read as text; only an empty cell is missing. "NA", "null"
  and friends stay literal strings.
- A cell that fails its parse directive halts the load with a ParseError
  naming column, row and raw text. No silent coercion to missing.
- Unknown raw columns pass through under their raw name. Never fatal.
- A load yields a complete Table or raises. No partial results.
"""

from __future__ import annotations

import dataclasses
import io
import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, BinaryIO, Callable, Iterator, Mapping, Optional, Sequence, Union

import pandas as pd

from column_registry import SchemaRegistry, release_for
from parse_rules import ParseRule

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# GIAS downloads are Windows-1252 encoded.
DEFAULT_ENCODING: str = "cp1252"
RESOURCE_DIR_ENV: str = "GIAS_RESOURCE_DIR"
# Relative to the working directory at load time, not to the installed module.
DEFAULT_RESOURCE_DIR: Path = Path("resources")

_UTF8_BOM = b"\xef\xbb\xbf"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


@dataclass
class IngestionError(Exception):
    """Structured halt error. Raised, never recovered, by the loader."""
    reason: str
    affected_file: str
    operator_fix_steps: list[str] = field(default_factory=list)

    def _detail_lines(self) -> list[str]:
        return []

    def __str__(self) -> str:
        lines = [
            "═" * 60,
            "GIAS INGESTION HALT",
            "═" * 60,
            f"Reason          : {self.reason}",
            f"Affected File   : {self.affected_file}",
        ]
        lines.extend(self._detail_lines())
        if self.operator_fix_steps:
            lines.append("Fix Steps:")
            for i, step in enumerate(self.operator_fix_steps, 1):
                lines.append(f"  {i}. {step}")
        lines.append("═" * 60)
        return "\n".join(lines)


@dataclass
class SourceNotFound(IngestionError):
    searched: list[str] = field(default_factory=list)

    def _detail_lines(self) -> list[str]:
        return [f"Searched        : {', '.join(self.searched)}"] if self.searched else []


@dataclass
class ParseError(IngestionError):
    column: str = ""
    row_index: int = -1
    raw_text: str = ""
    directive: str = ""

    def _detail_lines(self) -> list[str]:
        return [
            f"Column          : {self.column}",
            f"Row (0-based)   : {self.row_index}",
            f"Raw text        : {self.raw_text!r}",
            f"Directive       : {self.directive}",
        ]


# ---------------------------------------------------------------------------
# Options and result
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LoadOptions:
    """
    Caller overrides for a load. Unset fields fall back to registry-derived
    defaults; set fields always win.

    path / stream / resource_name / resource_dir
        The source. An explicit path wins over a stream, a stream over a
        named resource. resource_dir defaults to $GIAS_RESOURCE_DIR, then
        ./resources under the current working directory. resource_name
        defaults to the latest release file.
    column_allow_list / column_deny_list
        Raw CSV header names. The allow list is exhaustive; the deny list is
        applied after it. Survivors keep source-file order.
    rename_fn
        Raw header -> final column name. Defaults to the registry's rename
        (column id, or the raw name for unknown headers).
    parse_rules
        Final column name -> ParseRule, merged over the registry's
        directives. With rename_fn=lambda s: s, key by raw name
        (see SchemaRegistry.parse_rules(keyed_by="raw")).
    dataset_name
        Defaults to the source file's stem.
    """
    path: Optional[Union[str, Path]] = None
    stream: Optional[BinaryIO] = None
    resource_name: Optional[str] = None
    resource_dir: Optional[Union[str, Path]] = None
    column_allow_list: Optional[Sequence[str]] = None
    column_deny_list: Optional[Sequence[str]] = None
    rename_fn: Optional[Callable[[str], str]] = None
    parse_rules: Mapping[str, ParseRule] = field(default_factory=dict, hash=False)
    dataset_name: Optional[str] = None
    encoding: str = DEFAULT_ENCODING

    def merged(self, **overrides: Any) -> "LoadOptions":
        """New options with `overrides` applied on top of these."""
        return dataclasses.replace(self, **overrides)


@dataclass(frozen=True)
class Table:
    """
    A loaded dataset: name plus a DataFrame of typed columns, missing
    values as pd.NA. Treat `data` as read-only; transforms build new Tables.
    """
    name: str
    data: pd.DataFrame

    @property
    def columns(self) -> list[str]:
        return list(self.data.columns)

    def __len__(self) -> int:
        return len(self.data)

    def column(self, name: str) -> pd.Series:
        return self.data[name]

    def records(self) -> list[dict[str, Any]]:
        return self.data.to_dict(orient="records")


# ---------------------------------------------------------------------------
# Internal utilities
# ---------------------------------------------------------------------------


def _resource_dir(options: LoadOptions) -> Path:
    if options.resource_dir is not None:
        return Path(options.resource_dir)
    env_dir = os.getenv(RESOURCE_DIR_ENV)
    return Path(env_dir) if env_dir else Path.cwd() / DEFAULT_RESOURCE_DIR


@contextmanager
def _open_source(options: LoadOptions) -> Iterator[tuple[BinaryIO, str]]:
    """
    Yield (byte stream, source name). Streams opened here are closed on
    every exit path; a caller-owned stream is left open.
    """
    if options.path is not None:
        path = Path(options.path)
        if not path.is_file():
            raise SourceNotFound(
                reason="GIAS file not found",
                affected_file=str(path),
                operator_fix_steps=[
                    f"Verify the path is correct: {path}",
                    "Download the extract from get-information-schools.service.gov.uk/Downloads.",
                ],
                searched=[str(path)],
            )
        logger.info("[ingestion] opening %s", path)
        with open(path, "rb") as handle:
            yield handle, path.stem
        return

    if options.stream is not None:
        name = getattr(options.stream, "name", None)
        yield options.stream, Path(name).stem if isinstance(name, str) else "<stream>"
        return

    resource_name = options.resource_name or release_for().resource_name
    path = _resource_dir(options) / resource_name
    if not path.is_file():
        raise SourceNotFound(
            reason="GIAS resource file not found",
            affected_file=resource_name,
            operator_fix_steps=[
                f"Place {resource_name} in {path.parent}, "
                f"or set {RESOURCE_DIR_ENV} to the directory holding it.",
                "Or pass an explicit path.",
            ],
            searched=[str(path)],
        )
    logger.info("[ingestion] opening resource %s", path)
    with open(path, "rb") as handle:
        yield handle, path.stem


def _read_raw(handle: BinaryIO, encoding: str, source_name: str) -> pd.DataFrame:
    """
    All cells as text; only empty cells become missing. A UTF-8 byte order
    mark is dropped before decoding, whatever the encoding. Rows are always
    indexed 0..n-1: a trailing delimiter never turns the first field into
    the row index.
    """
    content = handle.read()
    if content.startswith(_UTF8_BOM):
        content = content[len(_UTF8_BOM):]
    try:
        frame = pd.read_csv(
            io.BytesIO(content),
            sep=",",
            header=0,
            index_col=False,
            dtype=str,
            keep_default_na=False,
            na_values=[""],
            encoding=encoding,
        )
    except (UnicodeDecodeError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise IngestionError(
            reason="GIAS file is not parseable",
            affected_file=source_name,
            operator_fix_steps=[
                "Verify the file is a valid CSV.",
                f"Check the file encoding matches '{encoding}'.",
                f"Parse error: {e}",
            ],
        ) from e
    return frame.reset_index(drop=True)


def _select_columns(
    header: list[str],
    allow: Optional[Sequence[str]],
    deny: Optional[Sequence[str]],
    source_name: str,
) -> list[str]:
    """Allow list first (exhaustive), then deny list. Source order kept."""
    selected = list(header)
    if allow is not None:
        absent = [c for c in allow if c not in header]
        if absent:
            logger.warning(
                "[ingestion] %s: allow-listed columns not in file: %s",
                source_name, ", ".join(absent),
            )
        allowed = set(allow)
        selected = [c for c in selected if c in allowed]
    if deny:
        denied = set(deny)
        selected = [c for c in selected if c not in denied]
    return selected


def _rename_columns(
    raw_names: list[str],
    rename_fn: Callable[[str], str],
    registry: SchemaRegistry,
    source_name: str,
) -> list[str]:
    final_names: list[str] = []
    seen: dict[str, str] = {}
    for raw in raw_names:
        final = rename_fn(raw)
        if final in seen:
            raise IngestionError(
                reason="Two columns renamed to the same name",
                affected_file=source_name,
                operator_fix_steps=[
                    f"'{seen[final]}' and '{raw}' both map to '{final}'.",
                    "Fix rename_fn, or deny-list one of the columns.",
                ],
            )
        seen[final] = raw
        if registry.by_raw(raw) is None:
            logger.info(
                "[ingestion] %s: unknown column '%s' kept as '%s'",
                source_name, raw, final,
            )
        final_names.append(final)
    return final_names


def _parse_column(
    values: pd.Series,
    rule: ParseRule,
    column: str,
    source_name: str,
) -> pd.Series:
    parsed: list[Any] = []
    for row_index, text in enumerate(values.tolist()):
        if not isinstance(text, str):
            parsed.append(pd.NA)
            continue
        try:
            parsed.append(rule.parse(text))
        except (ValueError, TypeError) as e:
            raise ParseError(
                reason="Cell does not match its column's parse directive",
                affected_file=source_name,
                operator_fix_steps=[
                    f"Inspect row {row_index} of column '{column}'.",
                    "If the file format changed, update the column table's directive.",
                ],
                column=column,
                row_index=row_index,
                raw_text=text,
                directive=repr(rule),
            ) from e
    return pd.Series(parsed, index=pd.RangeIndex(len(parsed)), dtype=rule.dtype, name=column)


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def load(registry: SchemaRegistry, options: Optional[LoadOptions] = None) -> Table:
    """
    Load one GIAS extract into a Table.

    Parameters
    ----------
    registry : SchemaRegistry
        Column table driving renaming and default parse directives.
    options : LoadOptions, optional
        Caller overrides; see LoadOptions.

    Returns
    -------
    Table
        Columns in source-file order, renamed and typed.

    Raises
    ------
    SourceNotFound
        No readable source could be resolved.
    ParseError
        A cell failed its column's parse directive.
    IngestionError
        Two surviving columns were renamed to the same name.
    """
    options = options or LoadOptions()

    # ------------------------------------------------------------------
    # STEP 1: Open source, read header row (and body) as literal text
    # ------------------------------------------------------------------
    with _open_source(options) as (handle, source_name):
        raw = _read_raw(handle, options.encoding, source_name)

    # ------------------------------------------------------------------
    # STEP 2: Allow / deny list on raw header names
    # ------------------------------------------------------------------
    selected = _select_columns(
        list(raw.columns), options.column_allow_list, options.column_deny_list, source_name,
    )

    # ------------------------------------------------------------------
    # STEP 3: Rename raw headers to final column names
    # ------------------------------------------------------------------
    rename_fn = options.rename_fn or registry.rename
    final_names = _rename_columns(selected, rename_fn, registry, source_name)

    # ------------------------------------------------------------------
    # STEP 4: Parse each column by its final name (caller rules win)
    # ------------------------------------------------------------------
    columns: dict[str, pd.Series] = {}
    for raw_name, final in zip(selected, final_names):
        rule = options.parse_rules.get(final) or registry.parse_rule_for(final)
        columns[final] = _parse_column(raw[raw_name], rule, final, source_name)

    # ------------------------------------------------------------------
    # STEP 5: Assemble
    # ------------------------------------------------------------------
    data = pd.DataFrame(columns, index=pd.RangeIndex(len(raw)), columns=final_names)
    table = Table(name=options.dataset_name or source_name, data=data)
    logger.info(
        "[ingestion] %s: loaded %d rows x %d columns",
        table.name, len(table), len(final_names),
    )
    return table


def load_edubaseall(
    options: Optional[LoadOptions] = None,
    release_date: Optional[date] = None,
) -> Table:
    """
    Load a GIAS extract with the column table of the release published on
    or before `release_date` (default: latest). Without an explicit source,
    that release's file is read from the resource directory.
    """
    release = release_for(release_date)
    options = options or LoadOptions()
    if options.path is None and options.stream is None and options.resource_name is None:
        options = options.merged(resource_name=release.resource_name)
    return load(release.registry, options)


def load_bytes(registry: SchemaRegistry, content: bytes, options: Optional[LoadOptions] = None) -> Table:
    """Load from in-memory CSV bytes (e.g. an uploaded file)."""
    options = options or LoadOptions()
    return load(registry, options.merged(path=None, stream=io.BytesIO(content)))


def column_info(table: Table, registry: SchemaRegistry) -> pd.DataFrame:
    """
    Per-column summary in table order: id, raw name, label, dtype, valid and
    missing counts, min and max (numeric and date columns only).
    """
    rows = []
    for col_id in table.columns:
        series = table.column(col_id)
        descriptor = registry.by_id(col_id)
        present = series.dropna()
        lo = hi = None
        if len(present) and (
            pd.api.types.is_numeric_dtype(series)
            or all(isinstance(v, date) for v in present)
        ):
            lo, hi = present.min(), present.max()
        rows.append({
            "col_id": col_id,
            "raw_name": descriptor.raw_name if descriptor else None,
            "label": descriptor.label if descriptor else None,
            "dtype": str(series.dtype),
            "n_valid": int(len(present)),
            "n_missing": int(len(series) - len(present)),
            "min": lo,
            "max": hi,
        })
    return pd.DataFrame(
        rows,
        columns=["col_id", "raw_name", "label", "dtype", "n_valid", "n_missing", "min", "max"],
    )
