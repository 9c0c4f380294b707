from .recipe import (
    OUTCOME,
    PREDICTOR,
    REFERENCE,
    NearZeroVariance,
    OrdinalScore,
    Recipe,
    RemoveColumns,
    SqrtTransform,
    UpdateRole,
    build_recipe,
)
from .schema import ModelSchema, schema
from .transformers import RecipeTransformer, build_preprocessor

# convenient module-level constants (pulled from schema)
NUMERIC_COLS = list(schema.numeric)
ORDINAL_COLS = list(schema.ordinal)
TARGET_COL = schema.target
PRICE_COL = schema.price

__all__ = [
    "build_preprocessor",
    "build_recipe",
    "Recipe",
    "RecipeTransformer",
    "UpdateRole",
    "OrdinalScore",
    "RemoveColumns",
    "SqrtTransform",
    "NearZeroVariance",
    "PREDICTOR",
    "OUTCOME",
    "REFERENCE",
    "ModelSchema",
    "schema",
    "NUMERIC_COLS",
    "ORDINAL_COLS",
    "TARGET_COL",
    "PRICE_COL",
]
