"""ocr-desk core library.

This package turns Mistral OCR responses into a single renderable markup
document and keeps a small local history of past extractions.

Repo rules:
- The normalizer is pure; all I/O lives in the client, the store and the CLI.
- History is bounded; the oldest entry is evicted first.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
