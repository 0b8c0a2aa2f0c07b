"""HTTP adapter for the quote engine."""
