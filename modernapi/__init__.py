"""Fibonacci HTTP server and client, and the parts of a books catalogue backend."""

__version__ = "0.1.0"