"""
Manova Error Taxonomy

Provider errors (unavailable / malformed) are always recovered locally.
Vector store errors surface on upsert and are swallowed on query.
Validation errors are only raised at API boundaries.
"""
from typing import Any, Dict, Optional


class ManovaError(Exception):
    """Base class for all Manova errors."""

    kind = "error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        payload = {"kind": self.kind, "error": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ProviderUnavailable(ManovaError):
    """Network, auth, rate limit or missing configuration for an external provider."""

    kind = "provider_unavailable"


class MalformedProviderResponse(ManovaError):
    """Provider answered but the content could not be trusted."""

    kind = "malformed_provider_response"


class VectorStoreError(ManovaError):
    """Upsert / query / delete failure in the vector store."""

    kind = "vector_store_error"


class IndexNotFoundError(VectorStoreError):
    kind = "index_not_found"


class ValidationError(ManovaError):
    """Caller supplied missing or invalid fields."""

    kind = "validation_error"
