"""
hedge_broker - keeps a custodial USD liability delta-neutral with a short BTC position
"""

__version__ = "0.1.0"
