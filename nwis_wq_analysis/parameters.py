"""USGS parameter code table and code/name lookups."""

from __future__ import annotations

import pandas as pd

# code: (name, unit)
PARAMETER_TABLE: dict[str, tuple[str, str]] = {
    "00010": ("temperature", "°C"),
    "00095": ("specific conductance", "µS/cm"),
    "00400": ("pH", "-"),
    "00300": ("dissolved oxygen", "mg/L"),
    "00608": ("ammonium/ammonia-N", "mg/L"),
    "00613": ("nitrite-N", "mg/L"),
    "00618": ("nitrate-N", "mg/L"),
    "00631": ("nitrite+nitrate-N", "mg/L"),
    "62854": ("total nitrogen", "mg/L"),
    "00671": ("orthophosphate-P", "mg/L"),
    "82082": ("δ²H", "‰"),
    "82085": ("δ¹⁸O", "‰"),
}

CODE_TO_NAME: dict[str, str] = {code: name for code, (name, _) in PARAMETER_TABLE.items()}
NAME_TO_CODE: dict[str, str] = {name: code for code, name in CODE_TO_NAME.items()}
CODE_TO_UNIT: dict[str, str] = {code: unit for code, (_, unit) in PARAMETER_TABLE.items()}

# Nitrogen species used by the composition table
AMMONIA_N = CODE_TO_NAME["00608"]
NITRITE_NITRATE_N = CODE_TO_NAME["00631"]
TOTAL_NITROGEN = CODE_TO_NAME["62854"]


def normalize_code(code) -> str:
    """Zero-pad a parameter code the way NWIS prints it ('10' -> '00010')."""
    if pd.isna(code):
        return code
    text = str(code).strip()
    if text.endswith(".0"):
        text = text[:-2]
    return text.zfill(5) if text.isdigit() else text


def code_to_name(code) -> str | None:
    """Semantic name for a code, or None if the code is not in the table."""
    return CODE_TO_NAME.get(normalize_code(code))


def name_to_code(name: str) -> str | None:
    return NAME_TO_CODE.get(name)


def unit_for(parameter: str) -> str:
    """Unit for a parameter given either its name or its code."""
    code = name_to_code(parameter) or normalize_code(parameter)
    return CODE_TO_UNIT.get(code, "")


def parameter_table() -> pd.DataFrame:
    """The code table as a frame, for reports."""
    return pd.DataFrame(
        [(code, name, unit) for code, (name, unit) in PARAMETER_TABLE.items()],
        columns=["parm_cd", "parameter", "unit"],
    )
