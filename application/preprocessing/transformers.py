from __future__ import annotations

from typing import Any

import numpy as np
import pandas as pd
from loguru import logger
from sklearn.base import BaseEstimator, TransformerMixin
from sklearn.utils.validation import check_is_fitted

from .recipe import OUTCOME, PREDICTOR, Recipe, build_recipe


class RecipeTransformer(TransformerMixin, BaseEstimator):
    """
    sklearn adapter around a ``Recipe``.

    ``fit`` walks the steps over the fitting data only, storing each step's learned
    parameters in ``params_``. ``transform`` replays those parameters unchanged, so
    validation/test rows can never influence preprocessing. The output is a DataFrame
    holding only predictor columns.
    """

    def __init__(self, recipe: Recipe | None = None):
        self.recipe = recipe

    @staticmethod
    def _as_frame(X) -> pd.DataFrame:
        if not isinstance(X, pd.DataFrame):
            raise TypeError(f"RecipeTransformer expects a pandas DataFrame, got {type(X).__name__}")
        return X.copy()

    def fit(self, X: pd.DataFrame, y=None) -> RecipeTransformer:
        recipe = self.recipe if self.recipe is not None else build_recipe()
        df = self._as_frame(X)

        roles = {c: PREDICTOR for c in df.columns}
        if recipe.outcome in roles:
            roles[recipe.outcome] = OUTCOME

        params: list[dict[str, Any]] = []
        for step in recipe.steps:
            roles = step.update_roles(roles)
            predictors = [c for c in df.columns if roles.get(c, PREDICTOR) == PREDICTOR]
            step_params = step.fit(df, predictors)
            params.append(step_params)
            df = step.bake(df, step_params)

        self.recipe_ = recipe
        self.roles_ = roles
        self.params_ = params
        self.feature_names_in_ = np.asarray(X.columns, dtype=object)
        self.n_features_in_ = len(self.feature_names_in_)
        self.feature_names_out_ = [c for c in df.columns if roles.get(c, PREDICTOR) == PREDICTOR]
        logger.debug(f"Recipe fitted on {len(X)} rows -> predictors {self.feature_names_out_}")
        return self

    def transform(self, X: pd.DataFrame) -> pd.DataFrame:
        check_is_fitted(self, "params_")
        df = self._as_frame(X)
        missing = [c for c in self.feature_names_out_ if c not in df.columns]
        if missing:
            raise ValueError(f"Missing columns: {sorted(missing)}")

        for step, step_params in zip(self.recipe_.steps, self.params_, strict=True):
            df = step.bake(df, step_params)
        return df[self.feature_names_out_]

    def get_feature_names_out(self, input_features=None) -> np.ndarray:
        check_is_fitted(self, "params_")
        return np.asarray(self.feature_names_out_, dtype=object)

    def fitted_params(self) -> dict[str, Any]:
        """JSON-friendly snapshot of everything learned during ``fit``."""
        check_is_fitted(self, "params_")
        return {
            "roles": dict(self.roles_),
            "steps": [{"kind": s.kind, "params": p} for s, p in zip(self.recipe_.steps, self.params_, strict=True)],
            "predictors": list(self.feature_names_out_),
        }


def build_preprocessor(recipe: Recipe | None = None) -> RecipeTransformer:
    return RecipeTransformer(recipe if recipe is not None else build_recipe())
