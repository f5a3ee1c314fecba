import os
from typing import Optional

import pandas as pd

from quote.utils import normalize_columns, find_col

# AusPost domestic parcel prices (AUD) by weight bracket in kg.
# Lower bound exclusive, upper bound inclusive.
DEFAULT_BRACKETS = {
    "MIN KG": [0.0, 0.25, 0.5, 1.0, 3.0],
    "MAX KG": [0.25, 0.5, 1.0, 3.0, 5.0],
    "STANDARD": [9.70, 11.15, 15.25, 19.30, 23.30],
    "EXPRESS": [12.70, 14.65, 19.25, 23.80, 31.80],
}

# Cache for the rate table to avoid reloading on every quote
_table_cache = None
_table_key = None


def _read_table(path: str) -> pd.DataFrame:
    if path.lower().endswith((".xlsx", ".xls")):
        return pd.read_excel(path, sheet_name=0)
    return pd.read_csv(path)


def _standardize(df: pd.DataFrame) -> pd.DataFrame:
    """Map whatever headers the sheet uses onto MIN KG / MAX KG / STANDARD / EXPRESS."""
    df = normalize_columns(df)
    col_map = {
        "MIN KG": find_col(df, "MIN KG", "MIN"),
        "MAX KG": find_col(df, "MAX KG", "MAX"),
        "STANDARD": find_col(df, "STANDARD", "PARCEL"),
        "EXPRESS": find_col(df, "EXPRESS"),
    }
    for key, col in col_map.items():
        if col is None:
            raise KeyError(f"Could not find a column containing '{key}' in the rate table.")
    out = pd.DataFrame({key: pd.to_numeric(df[col], errors="coerce") for key, col in col_map.items()})
    return out.dropna().sort_values("MIN KG").reset_index(drop=True)


def load_rate_table(path: Optional[str] = None) -> pd.DataFrame:
    """Return the weight-bracket table, reloading if the file changed."""
    global _table_cache, _table_key
    if not path:
        return pd.DataFrame(DEFAULT_BRACKETS)

    try:
        mtime = os.path.getmtime(path)
    except OSError:
        mtime = None

    if _table_cache is None or _table_key != (path, mtime):
        try:
            table = _standardize(_read_table(path))
        except (OSError, ValueError, KeyError) as e:
            raise RuntimeError(f"Failed to load rate table {path}: {e}") from e
        _table_cache = table
        _table_key = (path, mtime)

    return _table_cache


def match_bracket(table: pd.DataFrame, weight_kg: float) -> Optional[dict]:
    """Return the first bracket with ``min < weight_kg <= max``."""
    hits = table[(table["MIN KG"] < weight_kg) & (weight_kg <= table["MAX KG"])]
    if hits.empty:
        return None
    return hits.iloc[0].to_dict()
