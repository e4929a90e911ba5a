"""
Recurrence Detector
Stores high-stress response embeddings and flags answers that closely
match the same user's earlier high-stress answers in the same domain.
"""
from typing import Dict, Any, List, Optional

import numpy as np

from config import (
    RECURRENCE_SIMILARITY_THRESHOLD, RECURRENCE_TOP_K,
    RECURRENCE_MIN_STRESS, CLEANUP_KEEP_RECENT, HISTORY_LIMIT
)
from manova.domains import canonical_domain, stored_stress_score
from manova.errors import VectorStoreError
from manova.memory.vector_store import QdrantVectorStore, normalize_metadata
from manova.models import RecurrenceFinding


class RecurrenceDetector:
    """Domain-isolated recurrence check over a user's vector memory."""

    def __init__(
        self,
        store: QdrantVectorStore,
        similarity_threshold: float = RECURRENCE_SIMILARITY_THRESHOLD,
        min_stress: int = RECURRENCE_MIN_STRESS,
        top_k: int = RECURRENCE_TOP_K
    ):
        self.store = store
        self.similarity_threshold = similarity_threshold
        self.min_stress = min_stress
        self.top_k = top_k

    def record(self, user_id: str, embedding: List[float], metadata: Dict[str, Any]) -> Dict[str, Any]:
        """
        Append an embedding with its metadata.

        Raises:
            IndexNotFoundError, VectorStoreError: surfaced so the caller can retry
        """
        payload = normalize_metadata(metadata)
        payload["domain"] = canonical_domain(payload.get("domain"))

        result = self.store.upsert(user_id, embedding, payload)
        print(f"  [Recurrence] Stored {result['vectorId']} ({payload['domain']}, "
              f"stress {payload.get('stress_score')})")
        return result

    def find_recurrence(
        self,
        user_id: str,
        embedding: List[float],
        domain: str,
        k: Optional[int] = None
    ) -> RecurrenceFinding:
        """
        Neighbours must clear the similarity threshold, share the domain
        and be high-stress. A failed query counts as no recurrence.
        """
        domain = canonical_domain(domain)

        try:
            neighbours = self.store.query(embedding, k or self.top_k, user_id)
        except VectorStoreError as e:
            print(f"  Warning: Recurrence query failed ({e.message}), assuming no recurrence")
            return RecurrenceFinding.none(domain)

        matches = [
            n for n in neighbours
            if n["similarity"] > self.similarity_threshold
            and canonical_domain(n["metadata"].get("domain")) == domain
            and (stored_stress_score(n["metadata"]) or 0) >= self.min_stress
        ]

        if not matches:
            return RecurrenceFinding.none(domain)

        average = float(np.mean([m["similarity"] for m in matches]))
        print(f"  [Recurrence] {len(matches)} similar high-stress moment(s) in {domain} "
              f"(avg similarity {average:.2f})")

        return RecurrenceFinding(
            is_recurring=True,
            match_count=len(matches),
            average_similarity=average,
            domain=domain,
            matches=[
                {
                    "id": m["id"],
                    "similarity": round(m["similarity"], 4),
                    "questionId": m["metadata"].get("question_id"),
                    "stressScore": m["metadata"].get("stress_score"),
                    "timestamp": m["metadata"].get("timestamp"),
                }
                for m in matches
            ],
        )

    def history(self, user_id: str, limit: int = HISTORY_LIMIT) -> List[Dict[str, Any]]:
        """Recent records, newest first; empty on store failure."""
        try:
            return self.store.history(user_id, limit)
        except VectorStoreError as e:
            print(f"  Warning: History lookup failed ({e.message})")
            return []

    def cleanup(self, user_id: str, keep_recent: int = CLEANUP_KEEP_RECENT) -> int:
        """Best-effort pruning; never raises."""
        try:
            deleted = self.store.cleanup(user_id, keep_recent)
        except VectorStoreError as e:
            print(f"  Warning: Cleanup failed ({e.message})")
            return 0

        if deleted:
            print(f"  [Recurrence] Pruned {deleted} old record(s) for {user_id}")
        return deleted
