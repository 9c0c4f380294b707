"""
Declarative preprocessing recipe.

A ``Recipe`` is an ordered tuple of typed steps plus the name of the outcome column.
Steps only *describe* a transformation; every statistic a step needs is estimated by
``Step.fit`` on the fitting subset and replayed unchanged by ``Step.bake`` on any other
subset. ``RecipeTransformer`` (see ``transformers.py``) drives the fit/bake cycle.

Column roles:
  - ``predictor``: model input (default for every column)
  - ``outcome``: the modeled target, never a predictor
  - anything else (e.g. ``reference``): carried through, excluded from model input
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import Any, ClassVar

import numpy as np
import pandas as pd

from core.settings import settings

from .schema import ModelSchema, schema

PREDICTOR = "predictor"
OUTCOME = "outcome"
REFERENCE = "reference"


@dataclass(frozen=True)
class Step:
    """Base class for recipe steps."""

    kind: ClassVar[str] = "step"

    def update_roles(self, roles: dict[str, str]) -> dict[str, str]:
        return roles

    def fit(self, df: pd.DataFrame, predictors: list[str]) -> dict[str, Any]:
        return {}

    def bake(self, df: pd.DataFrame, params: dict[str, Any]) -> pd.DataFrame:
        return df

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, **asdict(self)}


def _require_columns(df: pd.DataFrame, columns, step: str) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ValueError(f"{step}: column(s) {missing} not found in data")


@dataclass(frozen=True)
class UpdateRole(Step):
    """Re-tag columns so they are kept in the data but not used as predictors."""

    kind: ClassVar[str] = "update_role"

    columns: tuple[str, ...] = ()
    role: str = REFERENCE

    def update_roles(self, roles: dict[str, str]) -> dict[str, str]:
        return {**roles, **{c: self.role for c in self.columns}}


@dataclass(frozen=True)
class OrdinalScore(Step):
    """Replace ordered categoricals by their rank (1..k)."""

    kind: ClassVar[str] = "ordinal_score"

    columns: tuple[str, ...] = ()
    # explicit vocabularies; columns without one take it from their ordered categorical dtype
    levels: dict[str, tuple[str, ...]] | None = None

    def fit(self, df: pd.DataFrame, predictors: list[str]) -> dict[str, Any]:
        _require_columns(df, self.columns, "ordinal_score")
        learned = {}
        for col in self.columns:
            if self.levels and col in self.levels:
                learned[col] = list(self.levels[col])
            elif isinstance(df[col].dtype, pd.CategoricalDtype) and df[col].cat.ordered:
                learned[col] = [str(c) for c in df[col].cat.categories]
            else:
                raise ValueError(f"ordinal_score: no ordered vocabulary for column '{col}'")
        return {"levels": learned}

    def bake(self, df: pd.DataFrame, params: dict[str, Any]) -> pd.DataFrame:
        out = df.copy()
        # columns a later step removed need not be supplied at transform time
        for col, levels in params["levels"].items():
            if col not in out.columns:
                continue
            values = out[col].astype(object)
            unknown = set(values.dropna()) - set(levels)
            if unknown:
                raise ValueError(f"ordinal_score: unknown level(s) {sorted(map(str, unknown))} in column '{col}'")
            ranks = {lvl: rank for rank, lvl in enumerate(levels, start=1)}
            out[col] = values.map(ranks).astype("float64")
        return out


@dataclass(frozen=True)
class RemoveColumns(Step):
    """Drop columns from the data."""

    kind: ClassVar[str] = "remove_columns"

    columns: tuple[str, ...] = ()

    def fit(self, df: pd.DataFrame, predictors: list[str]) -> dict[str, Any]:
        _require_columns(df, self.columns, "remove_columns")
        return {"removed": list(self.columns)}

    def bake(self, df: pd.DataFrame, params: dict[str, Any]) -> pd.DataFrame:
        return df.drop(columns=[c for c in params["removed"] if c in df.columns])


@dataclass(frozen=True)
class SqrtTransform(Step):
    """Square-root transform of non-negative numeric columns."""

    kind: ClassVar[str] = "sqrt"

    columns: tuple[str, ...] = ()

    def fit(self, df: pd.DataFrame, predictors: list[str]) -> dict[str, Any]:
        _require_columns(df, self.columns, "sqrt")
        return {"columns": list(self.columns)}

    def bake(self, df: pd.DataFrame, params: dict[str, Any]) -> pd.DataFrame:
        out = df.copy()
        for col in (c for c in params["columns"] if c in out.columns):
            n_negative = int((out[col] < 0).sum())
            if n_negative:
                raise ValueError(f"sqrt: column '{col}' has {n_negative} negative value(s)")
            out[col] = np.sqrt(out[col].astype("float64"))
        return out


@dataclass(frozen=True)
class NearZeroVariance(Step):
    """Drop numeric predictors whose (population) variance on the fitting data is below ``threshold``."""

    kind: ClassVar[str] = "nzv"

    threshold: float = 1e-4

    def fit(self, df: pd.DataFrame, predictors: list[str]) -> dict[str, Any]:
        numeric = [c for c in predictors if pd.api.types.is_numeric_dtype(df[c])]
        variances = {c: float(df[c].var(ddof=0)) for c in numeric}
        removed = [c for c, v in variances.items() if v < self.threshold]
        return {"variances": variances, "removed": removed}

    def bake(self, df: pd.DataFrame, params: dict[str, Any]) -> pd.DataFrame:
        return df.drop(columns=[c for c in params["removed"] if c in df.columns])


STEP_TYPES: dict[str, type[Step]] = {
    cls.kind: cls for cls in (UpdateRole, OrdinalScore, RemoveColumns, SqrtTransform, NearZeroVariance)
}


def _step_from_dict(payload: dict[str, Any]) -> Step:
    payload = dict(payload)
    kind = payload.pop("kind")
    try:
        cls = STEP_TYPES[kind]
    except KeyError as exc:
        raise ValueError(f"Unknown recipe step '{kind}'. Options: {list(STEP_TYPES)}") from exc
    # JSON turns tuples into lists
    if "columns" in payload:
        payload["columns"] = tuple(payload["columns"])
    if payload.get("levels") is not None:
        payload["levels"] = {k: tuple(v) for k, v in payload["levels"].items()}
    return cls(**payload)


@dataclass(frozen=True)
class Recipe:
    """Ordered, immutable sequence of preprocessing steps."""

    outcome: str
    steps: tuple[Step, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"outcome": self.outcome, "steps": [s.to_dict() for s in self.steps]}

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> Recipe:
        return cls(outcome=payload["outcome"], steps=tuple(_step_from_dict(s) for s in payload["steps"]))

    def to_json(self, **kwargs) -> str:
        return json.dumps(self.to_dict(), **kwargs)

    @classmethod
    def from_json(cls, text: str) -> Recipe:
        return cls.from_dict(json.loads(text))


def build_recipe(model_schema: ModelSchema = schema, nzv_threshold: float | None = None) -> Recipe:
    """
    The diamonds recipe:
      a. keep raw price as a reference column (not a predictor)
      b. grades -> ordinal scores
      c. drop x/y/z (collinear with carat, contain invalid zeros)
      d. sqrt(carat)
      e. near-zero-variance filter
    """
    threshold = settings.NZV_THRESHOLD if nzv_threshold is None else nzv_threshold
    return Recipe(
        outcome=model_schema.target,
        steps=(
            UpdateRole(columns=(model_schema.price,), role=REFERENCE),
            OrdinalScore(columns=tuple(model_schema.ordinal), levels=dict(model_schema.ordinal)),
            RemoveColumns(columns=model_schema.dimensions),
            SqrtTransform(columns=(model_schema.weight,)),
            NearZeroVariance(threshold=threshold),
        ),
    )
