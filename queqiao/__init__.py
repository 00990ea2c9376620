"""JSON document model, reader and writers, configuration loading and numeric helpers."""

__version__ = "0.1.0"
__all__ = ["value", "reader", "writer", "config", "constant"]