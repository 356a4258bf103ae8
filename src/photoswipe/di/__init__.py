from .bootstrap import bootstrap
from .container import Container, Lifetime

__all__ = ["Container", "Lifetime", "bootstrap"]
