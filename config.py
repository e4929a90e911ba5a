"""
Manova Configuration
Stress scoring, deep-dive, recurrence and trigger parameters
"""
import os

# LLM Configuration (scoring + deep dive)
GROQ_API_KEY = os.environ.get("GROQ_API_KEY", "")
GROQ_MODEL = os.environ.get("GROQ_MODEL", "llama-3.3-70b-versatile")
USE_LLM_SCORING = os.environ.get("MANOVA_USE_LLM_SCORING", "false").lower() in ("1", "true", "yes")
PROVIDER_TIMEOUT = float(os.environ.get("MANOVA_PROVIDER_TIMEOUT", "20"))

SCORING_TEMPERATURE = 0.3
SCORING_MAX_TOKENS = 300
DEEP_DIVE_TEMPERATURE = 0.7
DEEP_DIVE_MAX_TOKENS = 400

# Embedding Configuration
EMBEDDING_API_KEY = os.environ.get("OPENAI_API_KEY", "")
EMBEDDING_BASE_URL = os.environ.get("OPENAI_BASE_URL", "") or None
EMBEDDING_MODEL = os.environ.get("MANOVA_EMBEDDING_MODEL", "text-embedding-3-small")
EMBEDDING_DIM = 1536  # text-embedding-3-small / ada-002
EMPTY_TEXT_PLACEHOLDER = "empty text"

# Qdrant Configuration
QDRANT_URL = os.environ.get("QDRANT_URL", "") or None
QDRANT_API_KEY = os.environ.get("QDRANT_API_KEY", "") or None
QDRANT_PATH = os.environ.get("QDRANT_PATH", "./manova_memory")
COLLECTION_NAME = os.environ.get("MANOVA_COLLECTION", "manova_emotions")

# Stress Banding
HIGH_STRESS_THRESHOLD = 7  # score >= 7 is High / red
MODERATE_STRESS_THRESHOLD = 4  # score 4-6 is Moderate / yellow

# Recurrence Detection
RECURRENCE_SIMILARITY_THRESHOLD = 0.85  # strict >
RECURRENCE_TOP_K = 3
RECURRENCE_MIN_STRESS = 7
RECURRENCE_PATTERN_MIN_MATCHES = 2  # matches needed for a "recurring pattern"
CLEANUP_KEEP_RECENT = 50
HISTORY_LIMIT = 10
HISTORY_LIMIT_MAX = 50

# Trigger Aggregation
CRITICAL_AVERAGE_SCORE = 8.0
CRITICAL_HIGH_STRESS_COUNT = 5
HIGH_AVERAGE_SCORE = 6.0
HIGH_HIGH_STRESS_COUNT = 3
DOMAIN_STRESS_AVERAGE = 6.0
MULTI_DOMAIN_COUNT = 2
BASELINE_INCREASE_PCT = 25.0

CONFIDENCE_WEIGHTS = {
    "high_stress": 0.3,
    "recurring_patterns": 0.4,
    "critical_risk": 0.5,
    "high_risk": 0.3,
    "multi_domain": 0.2,
    "baseline_deviation": 0.2,
}

# History Comparison (percentage change bands)
HISTORY_STABLE_PCT = 10.0
HISTORY_SHIFT_PCT = 20.0

# Domain aliases (label variants used across surveys and deep-dive tables)
DOMAIN_ALIASES = {
    'work': 'Work & Career',
    'work & career': 'Work & Career',
    'career': 'Work & Career',
    'personal life': 'Personal Life',
    'personal relationships': 'Personal Life',
    'relationships': 'Personal Life',
    'financial stress': 'Financial Stress',
    'financial security': 'Financial Stress',
    'financial': 'Financial Stress',
    'health': 'Health',
    'health & wellness': 'Health',
    'self-worth & identity': 'Self-Worth & Identity',
    'self-worth': 'Self-Worth & Identity',
    'identity': 'Self-Worth & Identity',
}
