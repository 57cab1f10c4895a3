"""GitHub pull request statistics generator."""

__version__ = "0.1.0"
