from .status import StatusPrinter

__all__ = ["StatusPrinter"]
