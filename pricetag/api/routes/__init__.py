# API routes
from pricetag.api.routes import health, labels, preferences, products

__all__ = ["health", "labels", "preferences", "products"]
