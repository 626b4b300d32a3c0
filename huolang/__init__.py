"""A parser and tree-walking interpreter for the Huo scripting language."""

__version__ = "0.1.0"