from .features import add_log_price, back_transform

__all__ = ["add_log_price", "back_transform"]
