"""TrendBot: LLM-assisted trending topics research and curation."""

__version__ = "0.1.0"
