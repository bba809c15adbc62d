"""
SEN provision type normalizer.

Maps the GIAS "SEN<n> (name)" category names to their short upper-case
codes. The table is closed and exact-match. "Not Applicable" means the slot
is empty and becomes missing (pd.NA). Any other text is returned unchanged:
an unknown category is surfaced to the caller, never dropped or guessed.
"""

from __future__ import annotations

from typing import Any

import pandas as pd

from parse_rules import CategoryRule, lookup_or_input

NOT_APPLICABLE: str = "Not Applicable"

SEN_NEED_CODES: dict[str, Any] = {
    "ASD - Autistic Spectrum Disorder":                "ASD",
    "HI - Hearing Impairment":                         "HI",
    "MLD - Moderate Learning Difficulty":              "MLD",
    "MSI - Multi-Sensory Impairment":                  "MSI",
    "OTH - Other Difficulty/Disability":               "OTH",
    "PD - Physical Disability":                        "PD",
    "PMLD - Profound and Multiple Learning Difficulty": "PMLD",
    "SEMH - Social, Emotional and Mental Health":      "SEMH",
    "SLCN - Speech, language and Communication":       "SLCN",
    "SLD - Severe Learning Difficulty":                "SLD",
    "SpLD - Specific Learning Difficulty":             "SPLD",
    "VI - Visual Impairment":                          "VI",
    NOT_APPLICABLE:                                    pd.NA,
}

# Parse directive form, for the loader's per-column parse rules.
SEN_NEED_RULE = CategoryRule(mapping=SEN_NEED_CODES)


def normalize_sen_need(raw: str) -> Any:
    """Category name -> code; "Not Applicable" -> pd.NA; anything else unchanged."""
    return lookup_or_input(SEN_NEED_CODES, raw)
