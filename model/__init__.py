from model.registry import REGISTRY, get_model_spec

from .evaluation import evaluate_model, evaluate_on_test, fold_assignment, summarize_cv
from .train import CVResult, build_pipeline, compare_models, fit_final, leaderboard

__all__ = [
    "compare_models",
    "fit_final",
    "leaderboard",
    "build_pipeline",
    "CVResult",
    "evaluate_model",
    "evaluate_on_test",
    "fold_assignment",
    "summarize_cv",
    "get_model_spec",
    "REGISTRY",
]
