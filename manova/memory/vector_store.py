"""
Qdrant Vector Store
Per-user emotional memory: one point per high-stress response,
payload-filtered by user so queries never cross users.
"""
import time
import uuid
from typing import Dict, Any, List, Optional

from qdrant_client import QdrantClient
from qdrant_client.http.exceptions import UnexpectedResponse
from qdrant_client.models import (
    VectorParams, Distance, PointStruct,
    Filter, FieldCondition, MatchValue,
    PointIdsList, FilterSelector, PayloadSchemaType
)

from config import COLLECTION_NAME, EMBEDDING_DIM, HISTORY_LIMIT
from manova.errors import VectorStoreError, IndexNotFoundError


METADATA_KEYS = {
    "userId": "user_id",
    "questionId": "question_id",
    "stressScore": "stress_score",
    "causeTag": "cause_tag",
}

SCROLL_PAGE = 256


def normalize_metadata(metadata: Dict[str, Any]) -> Dict[str, Any]:
    """camelCase survey metadata -> snake_case payload keys."""
    return {METADATA_KEYS.get(k, k): v for k, v in (metadata or {}).items()}


def _is_missing_collection(error: Exception) -> bool:
    if isinstance(error, UnexpectedResponse) and error.status_code == 404:
        return True
    return "not found" in str(error).lower()


class QdrantVectorStore:
    """
    Thin wrapper over one Qdrant collection (cosine distance).
    Upsert failures raise; read helpers raise VectorStoreError for the caller to handle.
    """

    def __init__(
        self,
        client: QdrantClient,
        collection_name: str = COLLECTION_NAME,
        dim: int = EMBEDDING_DIM
    ):
        self.client = client
        self.collection_name = collection_name
        self.dim = dim

        self._ensure_collection()

    def _ensure_collection(self):
        """Create the collection and the user_id payload index if missing."""
        if self.client.collection_exists(self.collection_name):
            return

        print(f"  Creating collection: {self.collection_name} (dim={self.dim})")
        self.client.create_collection(
            collection_name=self.collection_name,
            vectors_config=VectorParams(size=self.dim, distance=Distance.COSINE)
        )

        try:
            self.client.create_payload_index(
                collection_name=self.collection_name,
                field_name="user_id",
                field_schema=PayloadSchemaType.KEYWORD
            )
        except Exception as e:
            print(f"  Warning: Could not create user_id index: {e}")

    @staticmethod
    def _user_filter(user_id: str) -> Filter:
        return Filter(must=[FieldCondition(key="user_id", match=MatchValue(value=user_id))])

    def upsert(self, user_id: str, vector: List[float], metadata: Dict[str, Any]) -> Dict[str, Any]:
        """
        Append one record. Duplicate submissions create distinct records.

        Returns:
            {"success": True, "vectorId": "<user>_<epoch_ms>_<random9>"}

        Raises:
            IndexNotFoundError: the collection does not exist
            VectorStoreError: any other store failure
        """
        now_ms = int(time.time() * 1000)
        record_id = f"{user_id}_{now_ms}_{uuid.uuid4().hex[:9]}"

        payload = normalize_metadata(metadata)
        payload.update({
            "user_id": user_id,
            "record_id": record_id,
            "created_at": time.time_ns(),
        })

        point = PointStruct(
            id=str(uuid.uuid5(uuid.NAMESPACE_URL, record_id)),
            vector=list(vector),
            payload=payload
        )

        try:
            self.client.upsert(collection_name=self.collection_name, points=[point])
        except Exception as e:
            if _is_missing_collection(e):
                raise IndexNotFoundError(
                    f"Collection '{self.collection_name}' not found",
                    {"collection": self.collection_name}
                )
            raise VectorStoreError(f"Upsert failed: {e}", {"collection": self.collection_name})

        return {"success": True, "vectorId": record_id}

    def query(self, vector: List[float], top_k: int, user_id: str) -> List[Dict[str, Any]]:
        """Nearest neighbours among the user's own records, best first."""
        try:
            results = self.client.query_points(
                collection_name=self.collection_name,
                query=list(vector),
                query_filter=self._user_filter(user_id),
                limit=top_k,
                with_payload=True
            ).points
        except Exception as e:
            raise VectorStoreError(f"Query failed: {e}", {"user_id": user_id})

        return [
            {
                "id": (r.payload or {}).get("record_id", str(r.id)),
                "score": r.score,
                "similarity": r.score,
                "metadata": dict(r.payload or {}),
            }
            for r in results
        ]

    def _scroll_user(self, user_id: str) -> List[Any]:
        points, offset = [], None
        while True:
            batch, offset = self.client.scroll(
                collection_name=self.collection_name,
                scroll_filter=self._user_filter(user_id),
                limit=SCROLL_PAGE,
                offset=offset,
                with_payload=True,
                with_vectors=False
            )
            points.extend(batch)
            if offset is None:
                return points

    def _newest_first(self, user_id: str) -> List[Any]:
        points = self._scroll_user(user_id)
        return sorted(points, key=lambda p: (p.payload or {}).get("created_at", 0), reverse=True)

    def history(self, user_id: str, limit: int = HISTORY_LIMIT) -> List[Dict[str, Any]]:
        """The user's most recent records, newest first."""
        try:
            points = self._newest_first(user_id)
        except Exception as e:
            raise VectorStoreError(f"History lookup failed: {e}", {"user_id": user_id})

        return [
            {"id": (p.payload or {}).get("record_id", str(p.id)), "metadata": dict(p.payload or {})}
            for p in points[:limit]
        ]

    def cleanup(self, user_id: str, keep_recent: int) -> int:
        """Delete all but the newest keep_recent records. Returns the number deleted."""
        try:
            stale = self._newest_first(user_id)[keep_recent:]
            if stale:
                self.client.delete(
                    collection_name=self.collection_name,
                    points_selector=PointIdsList(points=[p.id for p in stale])
                )
        except Exception as e:
            raise VectorStoreError(f"Cleanup failed: {e}", {"user_id": user_id})

        return len(stale)

    def reset(self, user_id: str) -> Dict[str, Any]:
        """Delete every record belonging to the user."""
        try:
            self.client.delete(
                collection_name=self.collection_name,
                points_selector=FilterSelector(filter=self._user_filter(user_id))
            )
        except Exception as e:
            if _is_missing_collection(e):
                raise IndexNotFoundError(f"Collection '{self.collection_name}' not found")
            raise VectorStoreError(f"Reset failed: {e}", {"user_id": user_id})

        return {"success": True, "userId": user_id}

    def count(self, user_id: str) -> int:
        return len(self._scroll_user(user_id))
