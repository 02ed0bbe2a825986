"""Adapters package for reportwatch.

Adapters translate between the core ports and concrete integrations: the
Fandom HTTP API, the JSON ledger file and the notification sinks.
"""
