from .arguments import ArgumentValidator

__all__ = ["ArgumentValidator"]
