"""Title-to-stream link resolver."""

__version__ = "0.1.0"
