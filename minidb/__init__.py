"""Network server and client for a small database, with its statement and result structures."""

__version__ = "0.1.0"

__all__ = ["__version__"]