"""Project analysis server exposing a bounded project model over WebSockets."""

__version__ = "1.0.0"
