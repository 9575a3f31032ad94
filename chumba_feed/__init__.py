"""Property feed core for the Chumba Connect room-rental client."""

__version__ = "0.1.0"
