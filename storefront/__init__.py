"""Storefront cart core: cart state, session persistence and HTTP API."""
