"""
Love4Detailing booking core: booking flow state machine and pricing.
"""

__version__ = "1.0.0"
