"""klarlint: standards enforcement for Klar source code."""

__version__ = "0.1.0"
