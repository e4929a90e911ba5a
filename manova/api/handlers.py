"""
API Handlers
Request-shaped entry points: each takes a JSON body and returns
(status_code, payload). Caller input is validated here and only here.
"""
from numbers import Real
from typing import Dict, Any, Tuple, Optional, List

from config import HISTORY_LIMIT_MAX, RECURRENCE_TOP_K
from manova.errors import ValidationError, VectorStoreError, IndexNotFoundError
from manova.memory.vector_store import QdrantVectorStore
from manova.orchestration.pipeline import StressPipeline

Response = Tuple[int, Dict[str, Any]]

STRESS_ANALYSIS_FIELDS = ("questionId", "responseText", "domain", "userId")
RESPONSE_TEXT_FIELDS = (
    "questionId", "question_id", "question", "question_text",
    "answer", "answer_text", "responseText", "domain", "userId", "user_id",
)


def _require_user_id(body: Dict[str, Any]) -> str:
    user_id = body.get("userId")
    if not isinstance(user_id, str) or not user_id.strip():
        raise ValidationError("userId must be a non-empty string")
    return user_id.strip()


def _require_embedding(body: Dict[str, Any], dim: int) -> List[float]:
    embedding = body.get("embedding")
    if not isinstance(embedding, list) or not embedding:
        raise ValidationError("Missing or invalid required fields: userId, embedding (array)")
    if not all(isinstance(v, Real) and not isinstance(v, bool) for v in embedding):
        raise ValidationError("Embedding must contain only numeric values")
    if len(embedding) != dim:
        raise ValidationError(
            f"Invalid embedding dimensions: {len(embedding)}, expected {dim}",
            {"received": len(embedding), "expected": dim}
        )
    return [float(v) for v in embedding]


def _require_top_k(body: Dict[str, Any], default: int) -> int:
    top_k = body.get("topK", default)
    if isinstance(top_k, bool) or not isinstance(top_k, int) or top_k <= 0:
        raise ValidationError("topK must be a positive integer")
    return top_k


def _require_text_fields(data: Dict[str, Any], fields: Tuple[str, ...], where: str = "") -> None:
    """Fields that are present must be strings; questionId may also be a number."""
    wrong = []
    for name in fields:
        value = data.get(name)
        if value is None:
            continue
        if name == "questionId" and isinstance(value, Real) and not isinstance(value, bool):
            continue
        if not isinstance(value, str):
            wrong.append(name)
    if wrong:
        raise ValidationError(
            f"{where}{', '.join(wrong)} must be {'a string' if len(wrong) == 1 else 'strings'}",
            {"invalid": wrong}
        )


def _validate_metadata(metadata: Any) -> Dict[str, Any]:
    if not isinstance(metadata, dict):
        raise ValidationError("metadata must be an object")
    for key in ("stressScore", "stress_score"):
        if key not in metadata:
            continue
        score = metadata[key]
        if isinstance(score, bool) or not isinstance(score, Real) or not 1 <= score <= 10:
            raise ValidationError(
                f"metadata.{key} must be a number between 1 and 10",
                {"received": score}
            )
    return metadata


def _bad_request(error: ValidationError) -> Response:
    print(f"  Warning: Rejected request ({error.message})")
    return 400, dict(error.to_dict(), success=False)


def _method_not_allowed() -> Response:
    return 405, {"success": False, "error": "Method not allowed. Use POST."}


class ManovaHandlers:
    """Binds the request handlers to one composed pipeline and store."""

    def __init__(self, pipeline: StressPipeline, store: Optional[QdrantVectorStore], dim: int):
        self.pipeline = pipeline
        self.store = store
        self.dim = dim

    def handle_stress_analysis(self, body: Dict[str, Any], method: str = "POST") -> Response:
        """Score one answer: {questionId, responseText, domain, userId, question?}."""
        if method != "POST":
            return _method_not_allowed()

        body = body or {}
        missing = [f for f in STRESS_ANALYSIS_FIELDS if not body.get(f)]
        if missing:
            return _bad_request(ValidationError(
                f"Missing required fields: {', '.join(STRESS_ANALYSIS_FIELDS)}",
                {"missing": missing}
            ))

        try:
            _require_text_fields(body, STRESS_ANALYSIS_FIELDS + ("question",))
        except ValidationError as e:
            return _bad_request(e)

        # Without the question text the answer doubles as the question
        question = body.get("question") or body["responseText"]
        assessment = self.pipeline.scorer.score(
            question, body["responseText"], body["domain"], str(body["questionId"])
        )
        return 200, {"success": True, "data": assessment.to_dict()}

    def handle_survey_analysis(self, body: Dict[str, Any], method: str = "POST") -> Response:
        """Full survey: {userId, responses: [{questionId, question, answer, domain}], timestamp?}."""
        if method != "POST":
            return _method_not_allowed()

        body = body or {}
        try:
            user_id = _require_user_id(body)
            responses = body.get("responses")
            if not isinstance(responses, list):
                raise ValidationError("responses must be an array")
            for i, r in enumerate(responses):
                if not isinstance(r, dict):
                    raise ValidationError("each response must be an object")
                _require_text_fields(r, RESPONSE_TEXT_FIELDS, f"responses[{i}]: ")
        except ValidationError as e:
            return _bad_request(e)

        analysis = self.pipeline.analyze_survey(user_id, responses, body.get("timestamp"))
        return 200, {"success": True, "data": analysis.to_dict()}

    def handle_vector_upsert(self, body: Dict[str, Any], method: str = "POST") -> Response:
        """Store one embedding: {userId, embedding, metadata}."""
        if method != "POST":
            return _method_not_allowed()

        body = body or {}
        try:
            user_id = _require_user_id(body)
            embedding = _require_embedding(body, self.dim)
            metadata = _validate_metadata(body.get("metadata") or {})
        except ValidationError as e:
            return _bad_request(e)

        if self.store is None:
            return 500, {"success": False, "error": "Vector store not configured"}

        try:
            result = self.store.upsert(user_id, embedding, metadata)
        except IndexNotFoundError as e:
            return 404, dict(e.to_dict(), success=False)
        except VectorStoreError as e:
            return 500, dict(e.to_dict(), success=False)

        return 200, {"success": True, "status": "success", "insertedCount": 1,
                     "vectorId": result["vectorId"]}

    def handle_vector_query(self, body: Dict[str, Any], method: str = "POST") -> Response:
        """Similarity search or history: {userId, embedding?, topK, operation}."""
        if method != "POST":
            return _method_not_allowed()

        body = body or {}
        operation = body.get("operation", "similarity")
        try:
            user_id = _require_user_id(body)
            top_k = _require_top_k(body, RECURRENCE_TOP_K)
            if operation == "similarity":
                embedding = _require_embedding(body, self.dim)
            elif operation != "history":
                raise ValidationError('Invalid operation. Use "similarity" or "history"')
        except ValidationError as e:
            return _bad_request(e)

        if self.store is None:
            return 500, {"success": False, "error": "Vector store not configured"}

        try:
            if operation == "similarity":
                results = self.store.query(embedding, top_k, user_id)
            else:
                results = self.store.history(user_id, min(top_k, HISTORY_LIMIT_MAX))
        except IndexNotFoundError as e:
            return 404, dict(e.to_dict(), success=False)
        except VectorStoreError as e:
            return 500, dict(e.to_dict(), success=False)

        for r in results:
            if "similarity" in r:
                r["similarity"] = round(r["similarity"], 2)

        return 200, {"success": True, "operation": operation, "userId": user_id,
                     "results": results, "count": len(results)}

    def handle_vector_reset(self, body: Dict[str, Any], method: str = "POST") -> Response:
        """Delete every stored vector for {userId}."""
        if method != "POST":
            return _method_not_allowed()

        try:
            user_id = _require_user_id(body or {})
        except ValidationError as e:
            return _bad_request(e)

        if self.store is None:
            return 500, {"success": False, "error": "Vector store not configured"}

        try:
            result = self.store.reset(user_id)
        except IndexNotFoundError as e:
            return 404, dict(e.to_dict(), success=False)
        except VectorStoreError as e:
            return 500, dict(e.to_dict(), success=False)

        print(f"  [API] Cleared vector memory for {user_id}")
        return 200, result
