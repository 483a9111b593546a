"""Tests for the archive search service.

Covers the re-ranking pipeline, the upstream archive client against a mocked
transport, search orchestration, the HTTP API and the shared config, logging
and metrics helpers. No test talks to the real archive.org.
"""
