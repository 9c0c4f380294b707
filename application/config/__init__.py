from .bootstrap import apply_global_settings, configure_mlflow_backend

__all__ = ["apply_global_settings", "configure_mlflow_backend"]
