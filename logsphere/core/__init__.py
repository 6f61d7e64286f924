"""Shared building blocks: document decoding, API envelopes and types."""

from .documents import DocumentDecoder
from .responses import api_error, api_response
from .types import APIResponse, FirestoreDocument

__all__ = [
    "APIResponse",
    "DocumentDecoder",
    "FirestoreDocument",
    "api_error",
    "api_response",
]
