"""Block Fit: a timed polyomino placement puzzle."""

__version__ = "0.1.0"
