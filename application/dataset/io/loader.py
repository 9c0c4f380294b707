import pandas as pd
from kagglehub import KaggleDatasetAdapter, dataset_load
from loguru import logger

from application.preprocessing.schema import ModelSchema, schema
from core.settings import settings


def _drop_index_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Drop the unnamed row-index column the Kaggle CSV carries."""
    drop_cols = [c for c in df.columns if str(c).lower().startswith("unnamed")]
    return df.drop(columns=drop_cols) if drop_cols else df


def load_kaggle_dataset(dataset_handle: str, dataset_path: str, pandas_kwargs: dict | None = None) -> pd.DataFrame:
    """Load a dataset from Kaggle using kagglehub with specified adapter and pandas options.
    Args:
        dataset_handle (str): The Kaggle dataset handle in the format "owner/dataset-name".
        dataset_path (str): The specific file path within the dataset to load (e.g., "data.csv").
        pandas_kwargs (dict, optional): Additional keyword arguments to pass to pandas read_csv.
    Returns:
        pd.DataFrame: The loaded dataset as a pandas DataFrame.
    """
    if pandas_kwargs is None:
        pandas_kwargs = {}
    logger.info(f"Loading dataset from {dataset_handle}...")

    return dataset_load(
        adapter=KaggleDatasetAdapter.PANDAS, handle=dataset_handle, path=dataset_path, pandas_kwargs=pandas_kwargs
    )


def prepare_frame(df: pd.DataFrame, model_schema: ModelSchema = schema) -> pd.DataFrame:
    """Validate columns and cast the grade columns to ordered categoricals."""
    df = _drop_index_columns(df)
    model_schema.validate(df)
    df = model_schema.as_ordered_categoricals(df)
    return df.reset_index(drop=True)


# -------------------- Data --------------------
def load_model_data(path: str) -> pd.DataFrame:
    """
    Load the diamonds CSV.
    - drops a leading unnamed index column if present
    - validates the schema and casts cut/color/clarity to ordered categoricals
    Args:
        path (str): Path to the CSV file.
    Returns:
        pd.DataFrame: Loaded DataFrame.
    """
    df = prepare_frame(pd.read_csv(path))
    logger.info(f"Loaded {len(df)} diamonds from {path}")
    return df


def load_diamonds(path: str | None = None) -> pd.DataFrame:
    """Load from ``path`` (or DATA_PATH) when given, otherwise fetch the public Kaggle dataset."""
    path = path or settings.DATA_PATH
    if path:
        return load_model_data(path)

    df = prepare_frame(load_kaggle_dataset(settings.DIAMONDS_DS, settings.DIAMONDS_FILE))
    logger.info(f"Loaded {len(df)} diamonds from {settings.DIAMONDS_DS}/{settings.DIAMONDS_FILE}")
    return df
