"""AMM quote engine: pool identification, price conversion and quotes."""

from quote_engine.engine import QuoteEngine

__version__ = "0.1.0"
__all__ = ["QuoteEngine", "__version__"]
