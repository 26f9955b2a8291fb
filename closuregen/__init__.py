"""Closure build rule generation from goog.provide/goog.require declarations."""

__version__ = "0.3.0"

__all__ = ["__version__"]
