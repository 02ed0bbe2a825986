"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PollerConfig:
    """Scheduling and batching settings for the polling loop."""

    interval_seconds: float
    page_size: int = 100
    batch_size: int = 10


@dataclass(frozen=True)
class FormattingConfig:
    """Display limits applied when reports become notification payloads."""

    wiki_base: str
    title_chars: int = 256
    body_chars: int = 500
    untitled_placeholder: str = "(untitled)"
