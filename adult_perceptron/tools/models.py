from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import List, Optional, Sequence

import joblib
import numpy as np
import scipy.sparse as sp
from sklearn.base import BaseEstimator
from sklearn.compose import ColumnTransformer
from sklearn.feature_selection import SelectorMixin
from sklearn.impute import SimpleImputer
from sklearn.linear_model import SGDClassifier
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import MaxAbsScaler, OneHotEncoder
from sklearn.utils.validation import check_array, check_is_fitted

from ..config import LEARNING_RATE, NATIVE_COUNTRY_MIN_COUNT, NUM_ITERATIONS, RANDOM_SEED
from ..schema import ADULT_SCHEMA, COUNT_SELECTED_COLUMN, FEATURE_COLUMNS, Column, ColumnKind, columns_of_kind

logger = logging.getLogger(__name__)


class CountFeatureSelector(SelectorMixin, BaseEstimator):
    """Keep feature slots with at least ``count`` non-zero values in the training data."""

    def __init__(self, count: int = 10):
        self.count = count

    def fit(self, X, y=None):
        X = check_array(X, accept_sparse=("csr", "csc"), dtype=None, ensure_all_finite=False)
        if sp.issparse(X):
            counts = np.asarray((X != 0).sum(axis=0)).ravel()
        else:
            counts = np.count_nonzero(X, axis=0)
        self.counts_ = counts
        self.n_features_in_ = X.shape[1]
        kept = int((counts >= self.count).sum())
        logger.debug("CountFeatureSelector kept %d of %d slots (count>=%d)", kept, X.shape[1], self.count)
        return self

    def _get_support_mask(self):
        check_is_fitted(self, "counts_")
        return self.counts_ >= self.count


def _numeric() -> Pipeline:
    return Pipeline(steps=[("imputer", SimpleImputer(strategy="median"))])


def _onehot() -> OneHotEncoder:
    # unseen keys encode as all-zero slots
    return OneHotEncoder(handle_unknown="ignore")


def _transformer_name(column: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", column).lower()


def build_feature_encoder(
    native_country_min_count: int = NATIVE_COUNTRY_MIN_COUNT,
    schema: Sequence[Column] = ADULT_SCHEMA,
    features: Sequence[str] = FEATURE_COLUMNS,
) -> ColumnTransformer:
    """Concatenate ``features`` into a single dense vector, in order.

    Numeric columns are median-imputed and passed through, text columns are
    one-hot encoded, and NativeCountry additionally keeps only slots seen at
    least ``native_country_min_count`` times. Output is always dense; SGD
    damps intercept updates on sparse input.
    """
    numeric = set(columns_of_kind(schema, ColumnKind.NUMERIC))
    text = set(columns_of_kind(schema, ColumnKind.TEXT))
    transformers = []
    for name in features:
        if name in numeric:
            tf = _numeric()
        elif name == COUNT_SELECTED_COLUMN:
            tf = Pipeline(
                steps=[
                    ("onehot", _onehot()),
                    ("select", CountFeatureSelector(count=native_country_min_count)),
                ]
            )
        elif name in text:
            tf = _onehot()
        else:
            raise ValueError(f"feature column '{name}' is not a numeric or text column of the schema")
        transformers.append((_transformer_name(name), tf, [name]))
    return ColumnTransformer(transformers=transformers, remainder="drop", sparse_threshold=0)


def build_averaged_perceptron(
    learning_rate: float = LEARNING_RATE,
    num_iterations: int = NUM_ITERATIONS,
    seed: Optional[int] = RANDOM_SEED,
) -> SGDClassifier:
    # Hinge-loss SGD with a constant step and weight averaging is the averaged perceptron.
    return SGDClassifier(
        loss="hinge",
        penalty=None,
        learning_rate="constant",
        eta0=learning_rate,
        max_iter=num_iterations,
        tol=None,
        average=True,
        shuffle=True,
        random_state=seed,
    )


def build_pipeline(
    learning_rate: float = LEARNING_RATE,
    num_iterations: int = NUM_ITERATIONS,
    native_country_min_count: int = NATIVE_COUNTRY_MIN_COUNT,
    seed: Optional[int] = RANDOM_SEED,
) -> Pipeline:
    """encode -> normalize -> averaged perceptron."""
    return Pipeline(
        steps=[
            ("pre", build_feature_encoder(native_country_min_count)),
            ("norm", MaxAbsScaler()),
            ("est", build_averaged_perceptron(learning_rate, num_iterations, seed)),
        ]
    )


def feature_names(pipeline: Pipeline) -> List[str]:
    return [str(n) for n in pipeline.named_steps["pre"].get_feature_names_out()]


def save_model(pipeline: Pipeline, path: str | Path) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    joblib.dump(pipeline, p)
    logger.info("Saved model to %s", p)
    return p


def load_model(path: str | Path) -> Pipeline:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"model not found: {p}")
    return joblib.load(p)
