"""KDEX Core - constant-product pairs with ILP fee rebalancing."""

__version__ = "0.1.0"
__all__ = ["__version__"]
