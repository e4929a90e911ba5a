from .embedding_adapter import EmbeddingAdapter, fallback_embedding, build_context_text
from .vector_store import QdrantVectorStore
from .recurrence_detector import RecurrenceDetector

__all__ = [
    'EmbeddingAdapter',
    'fallback_embedding',
    'build_context_text',
    'QdrantVectorStore',
    'RecurrenceDetector',
]
