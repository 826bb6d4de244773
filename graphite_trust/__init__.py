"""
Graphite Trust Gateway

A Python service wrapping the Graphite node client and trust protocol,
providing trust profiles, KYC management and trust-based lending and
marketplace decisions.
"""

__version__ = "1.0.0"
