"""UNIKRON - cross-chain token swaps through the Symbiosis aggregator."""

__version__ = "0.1.0"
