"""SSFS - quota-metered webhook intake service."""

__version__ = "1.0.0"

__all__ = [
    "__version__",
]
