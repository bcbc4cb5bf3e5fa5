"""
Revenue cycle core for healthcare claims.

Claim lifecycle, remittance posting, denial/appeal tracking and revenue
reporting over an in-memory aggregate store.
"""

__version__ = "1.0.0"
