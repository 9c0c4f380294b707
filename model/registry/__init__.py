from .specs import REGISTRY, ModelSpec, get_model_spec, regularized_linear

__all__ = ["REGISTRY", "ModelSpec", "get_model_spec", "regularized_linear"]
