"""Privacy-aware placeholder engine for organization profile READMEs."""

__version__ = "0.1.0"
