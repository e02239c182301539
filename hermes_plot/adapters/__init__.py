from .normalize import normalize_data, validate_dimensions

__all__ = ["normalize_data", "validate_dimensions"]
