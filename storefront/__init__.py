"""Cookie-based session authentication for the Eterno storefront."""

__version__ = "0.1.0"
