"""
API Layer - PlayHub upstream access

Thin async wrappers over the PlayHub REST API:
- http: aiohttp session factory and fetch-with-retry transport
- client: typed, uncached endpoint calls (events, rounds, stores)

Caching, pagination policy and error-to-result mapping live in the
services layer on top of this package.
"""
