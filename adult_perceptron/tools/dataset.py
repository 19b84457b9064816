from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Optional, Sequence, Tuple

import pandas as pd
import requests
from sklearn.model_selection import train_test_split as _sk_train_test_split

from ..config import (
    ADULT_DATASET_FILENAME,
    ADULT_DATASET_URL,
    DATA_DIR,
    HTTP_TIMEOUT_SECONDS,
    RANDOM_SEED,
    TEST_FRACTION,
)
from ..schema import ADULT_SCHEMA, Column, ColumnKind, validate_schema

logger = logging.getLogger(__name__)

_TRUE_TOKENS = {"1", "true", "t", "yes", "y", ">50k"}
_FALSE_TOKENS = {"0", "false", "f", "no", "n", "<=50k"}


def download_adult_dataset(
    dest_dir: Optional[str | Path] = None,
    url: str = ADULT_DATASET_URL,
    force: bool = False,
    timeout: float = HTTP_TIMEOUT_SECONDS,
) -> Path:
    """Fetch the Adult census file into ``dest_dir`` and return its path.

    An existing file is reused unless ``force`` is set. The body is streamed
    to a ``.part`` file first so an interrupted download never leaves a
    truncated dataset behind.
    """
    target = Path(dest_dir or DATA_DIR) / ADULT_DATASET_FILENAME
    if target.exists() and not force:
        logger.info("Using cached dataset at %s", target)
        return target

    target.parent.mkdir(parents=True, exist_ok=True)
    part = target.with_name(target.name + ".part")
    logger.info("Downloading %s -> %s", url, target)
    try:
        with requests.get(url, stream=True, timeout=timeout) as resp:
            resp.raise_for_status()
            with part.open("wb") as f:
                for chunk in resp.iter_content(chunk_size=64 * 1024):
                    if chunk:
                        f.write(chunk)
        part.replace(target)
    finally:
        if part.exists():
            part.unlink()
    logger.info("Downloaded %d bytes", target.stat().st_size)
    return target


def _parse_bool(series: pd.Series, name: str) -> pd.Series:
    tokens = series.str.strip().str.lower().str.rstrip(".")
    is_true = tokens.isin(_TRUE_TOKENS)
    is_false = tokens.isin(_FALSE_TOKENS)
    bad = ~(is_true | is_false)
    if bad.any():
        examples = sorted(str(v) for v in series[bad].unique())[:5]
        raise ValueError(f"column '{name}' has {int(bad.sum())} non-boolean values, e.g. {examples}")
    return is_true.astype(bool)


def _parse_numeric(series: pd.Series, name: str) -> pd.Series:
    stripped = series.str.strip()
    values = pd.to_numeric(stripped, errors="coerce")
    bad = values.isna() & (stripped != "")
    if bad.any():
        logger.warning("Column '%s': %d unparsable values read as NaN", name, int(bad.sum()))
    return values.astype("float32")


def read_dataset(
    path: str | Path,
    schema: Sequence[Column] = ADULT_SCHEMA,
    separator: str = ",",
    has_header: bool = True,
) -> pd.DataFrame:
    """Read a delimited file into a frame typed and named by ``schema``.

    Columns are picked by position. Empty text cells load as "" and empty
    numeric cells as NaN. A row that is short of trailing fields gets NaN
    for every missing cell, text included; such rows are rejected by the
    label check since the label is the last column.
    """
    validate_schema(schema)
    raw = pd.read_csv(
        path,
        sep=separator,
        header=0 if has_header else None,
        dtype=str,
        keep_default_na=False,
        skipinitialspace=True,
    )
    missing = sorted(c.index for c in schema if c.index >= raw.shape[1])
    if missing:
        raise ValueError(
            f"{path}: file has {raw.shape[1]} columns but schema references indices {missing}"
        )

    out = {}
    for col in schema:
        series = raw.iloc[:, col.index]
        if col.kind == ColumnKind.NUMERIC:
            out[col.name] = _parse_numeric(series, col.name)
        elif col.kind == ColumnKind.BOOL:
            out[col.name] = _parse_bool(series, col.name)
        else:
            out[col.name] = series.str.strip()
    df = pd.DataFrame(out, columns=[c.name for c in schema])
    logger.info("Read %d rows x %d columns from %s", len(df), df.shape[1], path)
    return df


def train_test_split(
    df: pd.DataFrame,
    test_fraction: float = TEST_FRACTION,
    seed: Optional[int] = RANDOM_SEED,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Random, unstratified row split holding out ``test_fraction`` of the rows."""
    if not 0.0 < test_fraction < 1.0:
        raise ValueError(f"test_fraction must be in (0, 1), got {test_fraction}")
    n_test = math.ceil(round(test_fraction * len(df), 9))
    if n_test == 0 or n_test >= len(df):
        raise ValueError(
            f"cannot split {len(df)} rows with test_fraction={test_fraction}: one side would be empty"
        )
    train, test = _sk_train_test_split(df, test_size=n_test, random_state=seed, shuffle=True)
    logger.info("Split %d rows into %d train / %d test", len(df), len(train), len(test))
    return train.reset_index(drop=True), test.reset_index(drop=True)
