"""
Manova Settings
Gathers the constants in config.py into one object that the composition
root validates at startup and hands to each component.
"""
from dataclasses import dataclass, field, asdict
from typing import Dict, Any, Optional

import config
from manova.errors import ValidationError


@dataclass
class Settings:
    # Providers
    groq_api_key: str = ""
    groq_model: str = config.GROQ_MODEL
    use_llm_scoring: bool = False
    provider_timeout: float = config.PROVIDER_TIMEOUT

    embedding_api_key: str = ""
    embedding_base_url: Optional[str] = None
    embedding_model: str = config.EMBEDDING_MODEL
    embedding_dim: int = config.EMBEDDING_DIM

    # Vector store
    qdrant_url: Optional[str] = None
    qdrant_api_key: Optional[str] = None
    qdrant_path: str = config.QDRANT_PATH
    collection_name: str = config.COLLECTION_NAME

    # Recurrence
    similarity_threshold: float = config.RECURRENCE_SIMILARITY_THRESHOLD
    recurrence_top_k: int = config.RECURRENCE_TOP_K
    recurrence_min_stress: int = config.RECURRENCE_MIN_STRESS
    pattern_min_matches: int = config.RECURRENCE_PATTERN_MIN_MATCHES
    cleanup_keep_recent: int = config.CLEANUP_KEEP_RECENT
    history_limit: int = config.HISTORY_LIMIT

    # Trigger aggregation
    baseline_increase_pct: float = config.BASELINE_INCREASE_PCT
    confidence_weights: Dict[str, float] = field(
        default_factory=lambda: dict(config.CONFIDENCE_WEIGHTS)
    )

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from config.py, which reads the environment."""
        return cls(
            groq_api_key=config.GROQ_API_KEY,
            groq_model=config.GROQ_MODEL,
            use_llm_scoring=config.USE_LLM_SCORING,
            provider_timeout=config.PROVIDER_TIMEOUT,
            embedding_api_key=config.EMBEDDING_API_KEY,
            embedding_base_url=config.EMBEDDING_BASE_URL,
            embedding_model=config.EMBEDDING_MODEL,
            embedding_dim=config.EMBEDDING_DIM,
            qdrant_url=config.QDRANT_URL,
            qdrant_api_key=config.QDRANT_API_KEY,
            qdrant_path=config.QDRANT_PATH,
            collection_name=config.COLLECTION_NAME,
        )

    @property
    def has_llm(self) -> bool:
        return bool(self.groq_api_key)

    @property
    def has_embeddings(self) -> bool:
        return bool(self.embedding_api_key)

    def validate(self) -> "Settings":
        """
        Fail fast on inconsistent values.

        Missing credentials are allowed: the matching provider is simply
        disabled and its local fallback is used.

        Raises:
            ValidationError: listing every invalid field
        """
        problems = {}

        if not 0.0 <= self.similarity_threshold <= 1.0:
            problems["similarity_threshold"] = "must be within [0, 1]"
        if self.embedding_dim <= 0:
            problems["embedding_dim"] = "must be positive"
        if self.recurrence_top_k <= 0:
            problems["recurrence_top_k"] = "must be positive"
        if not 1 <= self.recurrence_min_stress <= 10:
            problems["recurrence_min_stress"] = "must be within [1, 10]"
        if self.pattern_min_matches < 1:
            problems["pattern_min_matches"] = "must be at least 1"
        if self.cleanup_keep_recent < 0:
            problems["cleanup_keep_recent"] = "must not be negative"
        if not 1 <= self.history_limit <= config.HISTORY_LIMIT_MAX:
            problems["history_limit"] = f"must be within [1, {config.HISTORY_LIMIT_MAX}]"
        if self.provider_timeout <= 0:
            problems["provider_timeout"] = "must be positive"
        if self.baseline_increase_pct < 0:
            problems["baseline_increase_pct"] = "must not be negative"
        if not self.collection_name:
            problems["collection_name"] = "must not be empty"

        for name, weight in self.confidence_weights.items():
            if not 0.0 <= weight <= 1.0:
                problems[f"confidence_weights.{name}"] = "must be within [0, 1]"

        if problems:
            raise ValidationError("Invalid settings", problems)

        return self

    def to_dict(self) -> Dict[str, Any]:
        """Settings without secrets, for startup banners."""
        data = asdict(self)
        for key in ("groq_api_key", "embedding_api_key", "qdrant_api_key"):
            data[key] = "***" if data.get(key) else ""
        return data
