"""deriva: derive structural map/traverse operations for algebraic data types."""

__version__ = "0.3.0"
