"""Storefront service: catalog browsing, cart and checkout."""
