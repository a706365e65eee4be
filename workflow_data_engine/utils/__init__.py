from .values import deep_clone, deep_equals, deep_merge, is_number, is_truthy, json_size

__all__ = ["deep_clone", "deep_equals", "deep_merge", "is_number", "is_truthy", "json_size"]
