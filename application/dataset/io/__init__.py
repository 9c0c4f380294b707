from .loader import load_diamonds, load_kaggle_dataset, load_model_data, prepare_frame
from .splitter import split_data

__all__ = ["load_diamonds", "load_kaggle_dataset", "load_model_data", "prepare_frame", "split_data"]
