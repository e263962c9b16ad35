"""GZCLP linear progression tracker."""

__version__ = "0.1.0"
