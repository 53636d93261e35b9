"""Monthly SolisCloud production chart."""

__version__ = "0.1.0"
