"""
Freight Logistics Web Client.

Server-rendered pages (public site, customer portal and admin back-office)
built on top of the Freight Logistics REST API. The web client never talks
to MongoDB directly; every page goes through ``ApiClient``.
"""

__version__ = "0.1.0"
