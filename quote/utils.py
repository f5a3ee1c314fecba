import pandas as pd


def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    df.columns = [str(c).strip().upper() for c in df.columns]
    return df


def find_col(df: pd.DataFrame, *targets) -> str | None:
    """Exact header match first, then the first header containing a target."""
    targets = [t.upper() for t in targets]
    for c in df.columns:
        if str(c).strip().upper() in targets:
            return c
    for t in targets:
        for c in df.columns:
            if t in str(c).strip().upper():
                return c
    return None
