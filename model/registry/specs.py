from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from sklearn.base import BaseEstimator
from sklearn.linear_model import ElasticNet, LinearRegression
from xgboost import XGBRegressor

from core.settings import settings


@dataclass(frozen=True)
class ModelSpec:
    """
    one class to bind a regressor factory to its fixed configuration.
    - name: short string name for registry lookup
    - estimator_cls: sklearn-compatible regressor class (or factory returning one)
    - base_kwargs: the configured hyperparameters
    - family: human readable model family
    """

    name: str
    estimator_cls: Callable[..., BaseEstimator]
    base_kwargs: dict[str, Any]
    family: str = ""

    def build(self, params: dict[str, Any] | None = None) -> BaseEstimator:
        """Instantiate estimator with base kwargs merged with override params."""
        # override params win if keys collide
        params = params or {}
        merged = {**self.base_kwargs, **params}
        return self.estimator_cls(**merged)


def regularized_linear(penalty: float = 0.0, mixture: float = 1.0) -> BaseEstimator:
    """
    Elastic-net style linear regression.
    penalty == 0 is plain least squares (mixture is then irrelevant).
    """
    if penalty < 0 or not 0 <= mixture <= 1:
        raise ValueError(f"Invalid penalty={penalty} / mixture={mixture}")
    if penalty == 0:
        return LinearRegression()
    return ElasticNet(alpha=penalty, l1_ratio=mixture)


# -------- registry entries (add more models by adding more entries) --------

LINEAR_REG = ModelSpec(
    name="linear_reg",
    estimator_cls=regularized_linear,
    base_kwargs={
        "penalty": 0.0,
        "mixture": 1.0,
    },
    family="regularized linear regression",
)

# xgboost engine defaults (15 trees, depth 6, eta 0.3); no tuning
BOOST_TREE = ModelSpec(
    name="boost_tree",
    estimator_cls=XGBRegressor,
    base_kwargs={
        "n_estimators": 15,
        "max_depth": 6,
        "learning_rate": 0.3,
        "min_child_weight": 1,
        "gamma": 0.0,
        "subsample": 1.0,
        "colsample_bytree": 1.0,
        "tree_method": "hist",
        "objective": "reg:squarederror",
        **({"random_state": settings.BOOST_SEED} if settings.BOOST_SEED is not None else {}),
    },
    family="boosted tree ensemble",
)

REGISTRY: dict[str, ModelSpec] = {
    LINEAR_REG.name: LINEAR_REG,
    BOOST_TREE.name: BOOST_TREE,
}


def get_model_spec(name: str) -> ModelSpec:
    """Fetch a ModelSpec from the registry by name, or raise ValueError if not found."""
    try:
        return REGISTRY[name]
    except KeyError as exc:
        raise ValueError(f"Unknown model '{name}'. Options: {list(REGISTRY)}") from exc
