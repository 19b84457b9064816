from __future__ import annotations

import logging
from typing import List

import numpy as np
from pydantic import BaseModel
from sklearn.metrics import (
    accuracy_score,
    average_precision_score,
    confusion_matrix,
    f1_score,
    precision_score,
    recall_score,
    roc_auc_score,
)

logger = logging.getLogger(__name__)


class BinaryClassificationMetrics(BaseModel):
    accuracy: float
    auc: float
    f1_score: float
    negative_precision: float
    negative_recall: float
    positive_precision: float
    positive_recall: float
    auprc: float
    confusion_matrix: List[List[int]]  # [[tn, fp], [fn, tp]]


def evaluate_binary(y_true, scores, threshold: float = 0.0) -> BinaryClassificationMetrics:
    """Score a binary classifier from its raw (uncalibrated) scores.

    The predicted label is ``score > threshold``. Ranking metrics (AUC, AUPRC)
    are undefined with a single class in ``y_true`` and come back as NaN.
    """
    y = np.asarray(y_true).astype(bool).astype(int)
    s = np.asarray(scores, dtype=float).ravel()
    if y.shape[0] != s.shape[0]:
        raise ValueError(f"got {y.shape[0]} labels but {s.shape[0]} scores")
    if y.shape[0] == 0:
        raise ValueError("cannot evaluate an empty set")
    pred = (s > threshold).astype(int)

    if np.unique(y).size < 2:
        logger.warning("Only one class present in labels; AUC and AUPRC are undefined")
        auc = float("nan")
        auprc = float("nan")
    else:
        auc = float(roc_auc_score(y, s))
        auprc = float(average_precision_score(y, s))

    cm = confusion_matrix(y, pred, labels=[0, 1])
    return BinaryClassificationMetrics(
        accuracy=float(accuracy_score(y, pred)),
        auc=auc,
        f1_score=float(f1_score(y, pred, zero_division=0)),
        negative_precision=float(precision_score(y, pred, pos_label=0, zero_division=0)),
        negative_recall=float(recall_score(y, pred, pos_label=0, zero_division=0)),
        positive_precision=float(precision_score(y, pred, pos_label=1, zero_division=0)),
        positive_recall=float(recall_score(y, pred, pos_label=1, zero_division=0)),
        auprc=auprc,
        confusion_matrix=cm.astype(int).tolist(),
    )


def format_report(metrics: BinaryClassificationMetrics) -> List[str]:
    return [
        f"Accuracy: {metrics.accuracy}",
        f"AUC: {metrics.auc}",
        f"F1 Score: {metrics.f1_score}",
        f"Negative Precision: {metrics.negative_precision}",
        f"Negative Recall: {metrics.negative_recall}",
        f"Positive Precision: {metrics.positive_precision}",
        f"Positive Recall: {metrics.positive_recall}",
    ]
