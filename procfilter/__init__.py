"""procfilter: filter the process table with a small query language."""

__version__ = "0.1.0"
