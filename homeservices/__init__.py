"""
HomeServices

Backend for a home-services marketplace: product catalog, customer
accounts, home profiles and quote requests.
"""

__version__ = "1.0.0"
