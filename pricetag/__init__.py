"""PriceTag - генератор ценников для термопринтеров."""

__version__ = "0.1.0"
