"""PhantomSpread: single-hop spread arbitrage over Jito bundles."""

__version__ = "0.1.0"
