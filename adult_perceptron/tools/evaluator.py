from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field
from sklearn.pipeline import Pipeline

from ..config import LEARNING_RATE, NATIVE_COUNTRY_MIN_COUNT, NUM_ITERATIONS, RANDOM_SEED, TEST_FRACTION
from ..schema import ADULT_SCHEMA, LABEL_COLUMN
from .dataset import download_adult_dataset, read_dataset, train_test_split
from .metrics import BinaryClassificationMetrics, evaluate_binary
from .models import build_pipeline, feature_names, save_model

logger = logging.getLogger(__name__)


class RunSettings(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    data_path: Optional[Path] = None  # None -> download
    test_fraction: float = Field(default=TEST_FRACTION, gt=0.0, lt=1.0)
    learning_rate: float = Field(default=LEARNING_RATE, gt=0.0)
    num_iterations: int = Field(default=NUM_ITERATIONS, ge=1)
    native_country_min_count: int = Field(default=NATIVE_COUNTRY_MIN_COUNT, ge=0)
    seed: Optional[int] = RANDOM_SEED
    model_out: Optional[Path] = None


@dataclass
class ExperimentResult:
    model: Pipeline
    metrics: BinaryClassificationMetrics
    fit_time_s: float
    n_train: int
    n_test: int
    n_features: int


def fit_and_evaluate(train: pd.DataFrame, test: pd.DataFrame, settings: RunSettings) -> ExperimentResult:
    model = build_pipeline(
        learning_rate=settings.learning_rate,
        num_iterations=settings.num_iterations,
        native_country_min_count=settings.native_country_min_count,
        seed=settings.seed,
    )
    X_train = train.drop(columns=[LABEL_COLUMN])
    y_train = train[LABEL_COLUMN].values
    start = time.time()
    model.fit(X_train, y_train)
    fit_time = time.time() - start
    n_features = len(feature_names(model))
    logger.info("Fitted averaged perceptron on %d rows, %d features in %.2fs", len(train), n_features, fit_time)

    scores = model.decision_function(test.drop(columns=[LABEL_COLUMN]))
    metrics = evaluate_binary(test[LABEL_COLUMN].values, scores)
    return ExperimentResult(
        model=model,
        metrics=metrics,
        fit_time_s=float(fit_time),
        n_train=len(train),
        n_test=len(test),
        n_features=n_features,
    )


def run_experiment(settings: Optional[RunSettings] = None) -> ExperimentResult:
    """acquire -> read -> split -> fit -> transform -> evaluate (-> save)."""
    settings = settings or RunSettings()
    path = settings.data_path or download_adult_dataset()
    df = read_dataset(path, ADULT_SCHEMA, separator=",", has_header=True)
    train, test = train_test_split(df, test_fraction=settings.test_fraction, seed=settings.seed)
    result = fit_and_evaluate(train, test, settings)
    if settings.model_out is not None:
        save_model(result.model, settings.model_out)
    return result
