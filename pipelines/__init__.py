from .price_model import explore_pipeline, load_with_target, price_model_pipeline

__all__ = ["price_model_pipeline", "explore_pipeline", "load_with_target"]
