"""Clients for the upstream archive API."""
