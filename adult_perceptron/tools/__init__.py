# Core implementation modules
from . import dataset
from . import models
from . import metrics
from . import evaluator

__all__ = ["dataset", "models", "metrics", "evaluator"]
