from dataclasses import dataclass, field

import pandas as pd

from core import settings

CUT_LEVELS = ("Fair", "Good", "Very Good", "Premium", "Ideal")
COLOR_LEVELS = ("J", "I", "H", "G", "F", "E", "D")
CLARITY_LEVELS = ("I1", "SI2", "SI1", "VS2", "VS1", "VVS2", "VVS1", "IF")


@dataclass(frozen=True)
class ModelSchema:
    """
    Central definition of the diamonds schema used for loading, preprocessing and evaluation.

    Each attribute groups columns of a specific semantic type.
    Keeping them here ensures a single source of truth across
    data loading, preprocessing, and model training code.
    """

    numeric: tuple[str, ...] = ("carat", "depth", "table", "x", "y", "z")
    # ordered vocabularies, worst -> best
    ordinal: dict[str, tuple[str, ...]] = field(
        default_factory=lambda: {"cut": CUT_LEVELS, "color": COLOR_LEVELS, "clarity": CLARITY_LEVELS}
    )
    weight: str = "carat"
    dimensions: tuple[str, ...] = ("x", "y", "z")
    price: str = "price"  # raw target, kept for back-transformed scoring
    target: str = getattr(settings, "TARGET", "log_price")  # modeled outcome

    # -------------------------------------------------------------------------
    # Derived helpers
    # -------------------------------------------------------------------------

    def feature_cols(self) -> tuple[str, ...]:
        """Return all input feature columns (in deterministic order)."""
        return *self.numeric, *self.ordinal

    def expected_cols(self) -> tuple[str, ...]:
        """Return the columns a raw dataset must carry (features + price)."""
        return *self.feature_cols(), self.price

    # -------------------------------------------------------------------------
    # Validation utilities
    # -------------------------------------------------------------------------

    def validate(self, df: pd.DataFrame) -> None:
        """
        Validate that the DataFrame contains all expected columns.
        Raises a ValueError if any are missing.
        """
        missing = set(self.expected_cols()) - set(df.columns)
        if missing:
            raise ValueError(f"Missing columns: {sorted(missing)}")

    def as_ordered_categoricals(self, df: pd.DataFrame) -> pd.DataFrame:
        """Cast the grade columns to ordered categoricals with the schema vocabularies."""
        out = df.copy()
        for col, levels in self.ordinal.items():
            unknown = set(out[col].dropna().astype(str)) - set(levels)
            if unknown:
                raise ValueError(f"Unknown {col} level(s): {sorted(unknown)}. Expected one of {list(levels)}")
            out[col] = pd.Categorical(out[col].astype(str), categories=list(levels), ordered=True)
        return out


# -------------------------------------------------------------------------
# Instantiate a default, reusable schema object
# -------------------------------------------------------------------------
schema = ModelSchema()
