"""
Client-side core for a synthetic perpetuals venue.

Storage key derivation, fixed-point arithmetic, trade option state,
increase-order payloads and position scoring.
"""

__version__ = "0.1.0"
