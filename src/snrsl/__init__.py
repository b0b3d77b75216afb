"""snrsl -- compile natural-language rating specifications into a graph."""

__version__ = "0.1.0"
