"""Column layout of the Adult census file.

Columns are addressed by position; the header row in the source file is
skipped rather than trusted, so the order below has to match the file.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence


class ColumnKind(str, Enum):
    NUMERIC = "numeric"
    TEXT = "text"
    BOOL = "bool"


@dataclass(frozen=True)
class Column:
    name: str
    index: int
    kind: ColumnKind


LABEL_COLUMN = "IsOver50K"

ADULT_SCHEMA: tuple[Column, ...] = (
    Column("Age", 0, ColumnKind.NUMERIC),
    Column("Workclass", 1, ColumnKind.TEXT),
    Column("Fnlwgt", 2, ColumnKind.NUMERIC),
    Column("Education", 3, ColumnKind.TEXT),
    Column("EducationNum", 4, ColumnKind.NUMERIC),
    Column("MaritalStatus", 5, ColumnKind.TEXT),
    Column("Occupation", 6, ColumnKind.TEXT),
    Column("Relationship", 7, ColumnKind.TEXT),
    Column("Ethnicity", 8, ColumnKind.TEXT),
    Column("Sex", 9, ColumnKind.TEXT),
    Column("CapitalGain", 10, ColumnKind.NUMERIC),
    Column("CapitalLoss", 11, ColumnKind.NUMERIC),
    Column("HoursPerWeek", 12, ColumnKind.NUMERIC),
    Column("NativeCountry", 13, ColumnKind.TEXT),
    Column(LABEL_COLUMN, 14, ColumnKind.BOOL),
)

# Concatenation order of the feature vector. Workclass, Fnlwgt, Education,
# CapitalGain and CapitalLoss are read but not used.
FEATURE_COLUMNS: tuple[str, ...] = (
    "Age",
    "EducationNum",
    "MaritalStatus",
    "Occupation",
    "Relationship",
    "Ethnicity",
    "Sex",
    "HoursPerWeek",
    "NativeCountry",
)
# one-hot slots of this column are filtered by occurrence count
COUNT_SELECTED_COLUMN = "NativeCountry"


def validate_schema(columns: Sequence[Column]) -> Column:
    """Check names/indices are unique and there is exactly one label. Returns the label column."""
    names = [c.name for c in columns]
    dup_names = sorted({n for n in names if names.count(n) > 1})
    if dup_names:
        raise ValueError(f"duplicate column names in schema: {dup_names}")
    indices = [c.index for c in columns]
    dup_idx = sorted({i for i in indices if indices.count(i) > 1})
    if dup_idx:
        raise ValueError(f"duplicate column indices in schema: {dup_idx}")
    if any(i < 0 for i in indices):
        raise ValueError("column indices must be non-negative")
    labels = [c for c in columns if c.kind == ColumnKind.BOOL]
    if len(labels) != 1:
        raise ValueError(f"schema must declare exactly one boolean label column, found {len(labels)}")
    return labels[0]


def columns_of_kind(columns: Sequence[Column], kind: ColumnKind) -> List[str]:
    return [c.name for c in columns if c.kind == kind]
