"""
Pricing-related exceptions.
"""


class PricingError(Exception):
    """Exception raised when a price cannot be calculated."""
    pass
