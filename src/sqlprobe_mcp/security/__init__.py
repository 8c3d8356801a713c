"""Secret handling helpers."""

from __future__ import annotations

from .scrub import SecretBuffer, scrub_all

__all__ = ["SecretBuffer", "scrub_all"]
