from __future__ import annotations

import argparse
import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from adult_perceptron.config import (
    LEARNING_RATE,
    LOGS_DIR,
    MODELS_DIR,
    NATIVE_COUNTRY_MIN_COUNT,
    NUM_ITERATIONS,
    RANDOM_SEED,
    TEST_FRACTION,
)
from adult_perceptron.tools.evaluator import RunSettings, run_experiment
from adult_perceptron.tools.metrics import format_report
from adult_perceptron.utils import append_jsonl

DEFAULT_MODEL_NAME = "adult_perceptron.joblib"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Train an averaged perceptron on the Adult census data and report test metrics"
    )
    parser.add_argument("--data", dest="data", default=None, help="Path to a local copy of the dataset (skips download)")
    parser.add_argument("--test-fraction", dest="test_fraction", type=float, default=TEST_FRACTION, help="Fraction of rows held out for testing")
    parser.add_argument("--learning-rate", dest="learning_rate", type=float, default=LEARNING_RATE, help="Perceptron learning rate")
    parser.add_argument("--iterations", dest="iterations", type=int, default=NUM_ITERATIONS, help="Passes over the training data")
    parser.add_argument("--min-country-count", dest="min_country_count", type=int, default=NATIVE_COUNTRY_MIN_COUNT, help="Minimum rows for a native-country slot to be kept")
    parser.add_argument("--seed", dest="seed", type=int, default=RANDOM_SEED, help="Seed for the split and the trainer")
    parser.add_argument("--model-out", dest="model_out", default=None, help="Save the fitted pipeline here (joblib)")
    parser.add_argument("--save-model", dest="save_model", action="store_true", help=f"Save the fitted pipeline to {DEFAULT_MODEL_NAME} under the models directory")
    parser.add_argument("--log-level", dest="log_level", default="WARNING", help="Python logging level")
    return parser


def _model_out(args: argparse.Namespace) -> Optional[Path]:
    if args.model_out:
        return Path(args.model_out)
    if args.save_model:
        return MODELS_DIR / DEFAULT_MODEL_NAME
    return None


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings = RunSettings(
        data_path=Path(args.data).resolve() if args.data else None,
        test_fraction=args.test_fraction,
        learning_rate=args.learning_rate,
        num_iterations=args.iterations,
        native_country_min_count=args.min_country_count,
        seed=args.seed,
        model_out=_model_out(args),
    )
    result = run_experiment(settings)

    for line in format_report(result.metrics):
        print(line)

    run_id = f"run_{uuid.uuid4().hex[:12]}"
    append_jsonl(LOGS_DIR / "runs.jsonl", {
        "timestamp": datetime.now().isoformat(),
        "run_id": run_id,
        "settings": settings.model_dump(mode="json"),
        "metrics": result.metrics.model_dump(),
        "fit_time_s": result.fit_time_s,
        "n_train": result.n_train,
        "n_test": result.n_test,
        "n_features": result.n_features,
    })
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
