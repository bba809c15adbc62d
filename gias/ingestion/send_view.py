"""
GIAS SEND View

Key GIAS columns for special educational needs and disabilities (SEND)
analysis, with three derived columns:

- sen_provision_types      SEN1..SEN13 slot names normalized to codes,
                           missing slots dropped, slot order kept.
- has_resourced_provision  from "TypeOfResourcedProvision (name)"
- has_sen_unit             from "TypeOfResourcedProvision (name)"

plus further_education_type_name_applicable ("Not applicable" -> missing).

IMPORTANT: load_send_view reads a fixed column set and relies on the
registry's column ids. Any column_allow_list, column_deny_list or rename_fn
in the caller's options is IGNORED (a warning is logged). Source,
encoding, dataset name and extra parse rules are honoured.

Flag lookups are closed 4-entry tables. Text outside them is NOT coerced
to True/False: it comes back as UnrecognizedCategory(text) so callers can
detect it. An empty cell gives pd.NA.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import pandas as pd

from column_registry import EDUBASEALL_REGISTRY, ConfigurationError, SchemaRegistry
from ingestion import IngestionError, LoadOptions, Table, load
from sen_needs import SEN_NEED_RULE

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Column sets
# ---------------------------------------------------------------------------

SEN_SLOT_IDS: list[str] = [f"sen{n}_name" for n in range(1, 14)]
RESOURCED_PROVISION_TYPE_ID: str = "type_of_resourced_provision_name"
FURTHER_EDUCATION_TYPE_ID: str = "further_education_type_name"
FE_NOT_APPLICABLE: str = "Not applicable"

RESOURCED_PROVISION_FLAGS: dict[str, bool] = {
    "Resourced provision":              True,
    "SEN unit":                         False,
    "Resourced provision and SEN unit": True,
    "Not applicable":                   False,
}

SEN_UNIT_FLAGS: dict[str, bool] = {
    "Resourced provision":              False,
    "SEN unit":                         True,
    "Resourced provision and SEN unit": True,
    "Not applicable":                   False,
}

# (column id, label for derived columns; None = taken from the registry)
_SEND_COLUMN_TABLE: list[tuple[str, Optional[str]]] = [
    ("urn",                                    None),
    ("la_code",                                None),
    ("la_name",                                None),
    ("establishment_number",                   None),
    ("establishment_name",                     None),
    ("type_of_establishment_code",             None),
    ("type_of_establishment_name",             None),
    ("establishment_type_group_code",          None),
    ("establishment_type_group_name",          None),
    ("establishment_status_code",              None),
    ("establishment_status_name",              None),
    ("open_date",                              None),
    ("close_date",                             None),
    ("phase_of_education_code",                None),
    ("phase_of_education_name",                None),
    ("statutory_low_age",                      None),
    ("statutory_high_age",                     None),
    ("nursery_provision_name",                 None),
    ("official_sixth_form_code",               None),
    ("official_sixth_form_name",               None),
    ("school_capacity",                        None),
    ("special_classes_code",                   None),
    ("special_classes_name",                   None),
    ("number_of_pupils",                       None),
    ("ukprn",                                  None),
    ("further_education_type_name",            None),
    ("further_education_type_name_applicable", "Further education type (if applicable)"),
    ("school_website",                         None),
    ("senpru_name",                            None),
    ("ebd_name",                               None),
    ("places_pru",                             None),
    ("ft_prov_name",                           None),
    ("ed_by_other_name",                       None),
    ("section41_approved_name",                None),
    ("sen_provision_types",                    "SEN provision types"),
    ("has_resourced_provision",                "Has resourced provision"),
    ("has_sen_unit",                           "Has SEN unit"),
    ("resourced_provision_on_roll",            None),
    ("resourced_provision_capacity",           None),
    ("sen_unit_on_roll",                       None),
    ("sen_unit_capacity",                      None),
    ("sen_stat",                               None),
    ("sen_no_stat",                            None),
    ("uprn",                                   None),
]


@dataclass(frozen=True)
class SendColumn:
    col_id: str
    label: str
    derived: bool = False


@dataclass(frozen=True)
class UnrecognizedCategory:
    """A flag input outside the known categories, passed through as-is."""
    value: str


@dataclass
class DuplicateKeyError(IngestionError):
    duplicate_keys: list[str] = field(default_factory=list)
    missing_key_rows: list[int] = field(default_factory=list)

    def _detail_lines(self) -> list[str]:
        lines = []
        if self.duplicate_keys:
            lines.append(f"Duplicate URNs  : {', '.join(self.duplicate_keys[:20])}")
        if self.missing_key_rows:
            lines.append(f"Rows w/o URN    : {self.missing_key_rows[:20]}")
        return lines


def build_send_columns(registry: SchemaRegistry) -> tuple[SendColumn, ...]:
    """Resolve labels against `registry`; every non-derived id must exist in it."""
    columns: list[SendColumn] = []
    for col_id, derived_label in _SEND_COLUMN_TABLE:
        if derived_label is not None:
            columns.append(SendColumn(col_id, derived_label, derived=True))
            continue
        label = registry.label_for(col_id)
        if label is None:
            raise ConfigurationError(f"SEND column '{col_id}' is not in the column registry")
        columns.append(SendColumn(col_id, label))
    return tuple(columns)


SEND_COLUMNS: tuple[SendColumn, ...] = build_send_columns(EDUBASEALL_REGISTRY)


def _source_ids(send_columns: tuple[SendColumn, ...]) -> list[str]:
    """Column ids the loader must supply: published raw columns + scratch inputs."""
    ids = [c.col_id for c in send_columns if not c.derived]
    return ids + SEN_SLOT_IDS + [RESOURCED_PROVISION_TYPE_ID]


# ---------------------------------------------------------------------------
# Derived columns
# ---------------------------------------------------------------------------


def resourced_provision_flag(raw: Any) -> Any:
    if pd.isna(raw):
        return pd.NA
    return RESOURCED_PROVISION_FLAGS.get(raw, UnrecognizedCategory(raw))


def sen_unit_flag(raw: Any) -> Any:
    if pd.isna(raw):
        return pd.NA
    return SEN_UNIT_FLAGS.get(raw, UnrecognizedCategory(raw))


def _flag_series(values: pd.Series, flag_fn, name: str) -> pd.Series:
    flags = [flag_fn(v) for v in values.tolist()]
    unrecognized = sorted({f.value for f in flags if isinstance(f, UnrecognizedCategory)})
    if unrecognized:
        logger.warning(
            "[send_view] %s: unrecognized resourced provision types passed through: %s",
            name, ", ".join(unrecognized),
        )
        return pd.Series(flags, index=values.index, dtype=object, name=name)
    return pd.Series(flags, index=values.index, dtype="boolean", name=name)


def pack_sen_provision_types(slots: pd.DataFrame) -> pd.Series:
    """Row-wise list of non-missing slot values, in slot order."""
    packed = [
        [v for v in row if not pd.isna(v)]
        for row in slots.itertuples(index=False, name=None)
    ]
    return pd.Series(packed, index=slots.index, dtype=object, name="sen_provision_types")


def _applicable(values: pd.Series) -> pd.Series:
    cleaned = [
        pd.NA if isinstance(v, str) and v == FE_NOT_APPLICABLE else v
        for v in values.tolist()
    ]
    return pd.Series(
        cleaned, index=values.index, dtype="string",
        name="further_education_type_name_applicable",
    )


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def load_send_view(
    options: Optional[LoadOptions] = None,
    registry: Optional[SchemaRegistry] = None,
) -> Table:
    """
    Load the SEND view of a GIAS extract.

    Caller column_allow_list, column_deny_list and rename_fn are ignored.

    Raises
    ------
    IngestionError
        A column needed for the view is absent from the file (and every
        error `ingestion.load` can raise).
    """
    registry = registry or EDUBASEALL_REGISTRY
    options = options or LoadOptions()
    send_columns = SEND_COLUMNS if registry is EDUBASEALL_REGISTRY else build_send_columns(registry)

    ignored = [
        name for name in ("column_allow_list", "column_deny_list", "rename_fn")
        if getattr(options, name) is not None
    ]
    if ignored:
        logger.warning("[send_view] ignoring caller options: %s", ", ".join(ignored))

    source_ids = _source_ids(send_columns)
    unknown = [c for c in source_ids if registry.by_id(c) is None]
    if unknown:
        raise ConfigurationError(f"SEND source columns not in the column registry: {unknown}")
    allow_list = [registry.by_id(col_id).raw_name for col_id in source_ids]
    parse_rules = dict(options.parse_rules)
    parse_rules.update({slot: SEN_NEED_RULE for slot in SEN_SLOT_IDS})

    # ------------------------------------------------------------------
    # STEP 1: Load widened column set
    # ------------------------------------------------------------------
    table = load(
        registry,
        options.merged(
            column_allow_list=allow_list,
            column_deny_list=None,
            rename_fn=None,
            parse_rules=parse_rules,
        ),
    )
    missing = [c for c in source_ids if c not in table.columns]
    if missing:
        raise IngestionError(
            reason="Required columns missing",
            affected_file=table.name,
            operator_fix_steps=[
                f"Add or rename missing column(s): "
                f"{', '.join(registry.by_id(c).raw_name for c in missing)}",
                "Check the file is a GIAS all-establishments extract.",
            ],
        )
    data = table.data

    # ------------------------------------------------------------------
    # STEP 2: Derived columns
    # ------------------------------------------------------------------
    provision_types = data[RESOURCED_PROVISION_TYPE_ID]
    derived = {
        "further_education_type_name_applicable": _applicable(data[FURTHER_EDUCATION_TYPE_ID]),
        "sen_provision_types": pack_sen_provision_types(data[SEN_SLOT_IDS]),
        "has_resourced_provision": _flag_series(
            provision_types, resourced_provision_flag, "has_resourced_provision",
        ),
        "has_sen_unit": _flag_series(provision_types, sen_unit_flag, "has_sen_unit"),
    }

    # ------------------------------------------------------------------
    # STEP 3: Project to the published column set
    # ------------------------------------------------------------------
    projected = pd.DataFrame(
        {c.col_id: derived[c.col_id] if c.derived else data[c.col_id] for c in send_columns},
        index=data.index,
        columns=[c.col_id for c in send_columns],
    )
    return Table(name=f"{table.name} (SEND columns)", data=projected)


def load_send_view_by_key(
    options: Optional[LoadOptions] = None,
    registry: Optional[SchemaRegistry] = None,
) -> dict[str, dict[str, Any]]:
    """
    SEND view as {urn: record}. One row per establishment is a hard
    invariant: a duplicate or missing URN raises DuplicateKeyError.
    """
    table = load_send_view(options, registry)
    urns = table.column("urn")
    missing_rows = [int(i) for i in urns.index[urns.isna()]]
    present = urns.dropna()
    duplicates = sorted(present[present.duplicated(keep=False)].unique().tolist())
    if missing_rows or duplicates:
        raise DuplicateKeyError(
            reason="URN is not a unique row key",
            affected_file=table.name,
            operator_fix_steps=[
                "Each establishment must appear exactly once with a URN.",
                "Check the file was not concatenated or hand-edited.",
            ],
            duplicate_keys=duplicates,
            missing_key_rows=missing_rows,
        )
    return {record["urn"]: record for record in table.records()}
