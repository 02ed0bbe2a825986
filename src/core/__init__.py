"""Core domain package for reportwatch.

Core contains the polling cycle, deduplication ledger, report transformation
and permalink logic without any HTTP or file-specific code, keeping the
business logic portable.
"""
