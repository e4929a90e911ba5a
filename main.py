"""
Main entry point for Manova - Stress Analysis Core
Builds every external client once and injects it into the components,
then runs a survey from the command line.
"""
import sys
from typing import Optional

from groq import Groq
from openai import OpenAI
from qdrant_client import QdrantClient

from manova.api.handlers import ManovaHandlers
from manova.errors import ValidationError
from manova.insight.deep_dive import DeepDiveGenerator
from manova.memory.embedding_adapter import EmbeddingAdapter
from manova.memory.recurrence_detector import RecurrenceDetector
from manova.memory.vector_store import QdrantVectorStore
from manova.models import SurveyAnalysis, SurveyResponse
from manova.orchestration.pipeline import StressPipeline
from manova.orchestration.trigger_aggregator import TriggerAggregator
from manova.scoring.llm_scorer import LLMStressScorer
from manova.scoring.stress_scorer import StressScorer
from manova.settings import Settings


SAMPLE_SURVEY = [
    ("work_1", "How often do you feel supported at work?", "Work & Career"),
    ("work_2", "How overwhelmed do you feel by your workload?", "Work & Career"),
    ("personal_1", "How often do you feel understood by the people close to you?", "Personal Life"),
    ("finance_1", "How often does money cause you stress?", "Financial Stress"),
    ("health_1", "How often do you have energy for the things you enjoy?", "Health"),
]

ANSWER_CHOICES = ["Never", "Rarely", "Sometimes", "Often", "Very Often"]


def create_manova(settings: Optional[Settings] = None, qdrant_client: Optional[QdrantClient] = None) -> ManovaHandlers:
    """
    Create and wire a Manova instance.

    Args:
        settings: validated settings (read from the environment if not provided)
        qdrant_client: existing Qdrant client, e.g. an in-memory one

    Returns:
        ManovaHandlers bound to the composed pipeline and vector store
    """
    settings = (settings or Settings.from_env()).validate()

    print("=" * 60)
    print("Initializing Manova Stress Analysis Core")
    print("=" * 60)

    # Completion provider (scoring + deep dive)
    llm_client = None
    if settings.has_llm:
        llm_client = Groq(api_key=settings.groq_api_key, timeout=settings.provider_timeout)
        print(f"\n  Completion provider: Groq ({settings.groq_model})")
    else:
        print("\n  Warning: GROQ_API_KEY not set, using heuristic scoring and fallback deep dives")

    # Embedding provider
    embedding_client = None
    if settings.has_embeddings:
        embedding_client = OpenAI(
            api_key=settings.embedding_api_key,
            base_url=settings.embedding_base_url,
            timeout=settings.provider_timeout
        )
        print(f"  Embedding provider: {settings.embedding_model}")
    else:
        print("  Warning: OPENAI_API_KEY not set, using deterministic fallback embeddings")

    # Vector store
    if qdrant_client is None:
        if settings.qdrant_url:
            qdrant_client = QdrantClient(
                url=settings.qdrant_url,
                api_key=settings.qdrant_api_key,
                timeout=int(settings.provider_timeout)
            )
        else:
            qdrant_client = QdrantClient(path=settings.qdrant_path)
    print(f"  Vector store: {settings.qdrant_url or settings.qdrant_path}")

    store = QdrantVectorStore(qdrant_client, settings.collection_name, settings.embedding_dim)

    heuristic = StressScorer()
    if settings.use_llm_scoring and llm_client is not None:
        scorer = LLMStressScorer(llm_client, settings.groq_model, fallback=heuristic)
    else:
        scorer = heuristic

    pipeline = StressPipeline(
        scorer=scorer,
        deep_dive=DeepDiveGenerator(llm_client, settings.groq_model),
        embedder=EmbeddingAdapter(embedding_client, settings.embedding_model, settings.embedding_dim),
        detector=RecurrenceDetector(
            store,
            similarity_threshold=settings.similarity_threshold,
            min_stress=settings.recurrence_min_stress,
            top_k=settings.recurrence_top_k
        ),
        aggregator=TriggerAggregator(
            weights=settings.confidence_weights,
            baseline_increase_pct=settings.baseline_increase_pct,
            pattern_min_matches=settings.pattern_min_matches
        ),
        history_limit=settings.history_limit,
        keep_recent=settings.cleanup_keep_recent
    )

    print("\n" + "=" * 60)
    print("Manova initialized successfully!")
    print("=" * 60 + "\n")

    return ManovaHandlers(pipeline, store, settings.embedding_dim)


def run_interactive_survey(manova: ManovaHandlers, user_id: str):
    """Ask the sample survey on stdin and print the analysis."""
    print("\nAnswer each question with one of: " + ", ".join(ANSWER_CHOICES))
    print("-" * 40 + "\n")

    responses = []
    for question_id, question, domain in SAMPLE_SURVEY:
        answer = input(f"[{domain}] {question}\n> ").strip()
        responses.append(SurveyResponse(question_id, question, answer, domain, user_id))

    analysis = manova.pipeline.analyze_survey(user_id, responses)
    _print_analysis(analysis)


def _print_analysis(analysis: SurveyAnalysis):
    """Print a readable summary of one survey analysis."""
    print("\n" + "-" * 40)
    for r in analysis.results:
        a = r.assessment
        print(f"  {r.response.question_id}: {a.score}/10 {a.intensity} ({a.label_color}) "
              f"| {a.tag} | {a.cause_tag}")
        if r.deep_dive:
            print(f"    Causes ({r.deep_dive.generated_by}): {'; '.join(r.deep_dive.causes)}")
            print(f"    Try: {'; '.join(r.deep_dive.solutions)}")
        if r.recurrence and r.recurrence.is_recurring:
            print(f"    Recurring: {r.recurrence.match_count} match(es), "
                  f"avg similarity {r.recurrence.average_similarity:.2f}")
        if r.storage_error:
            print(f"    Not stored: {r.storage_error.get('error')}")

    d = analysis.decision
    print(f"\n  Trigger: {d.should_trigger} | Priority: {d.priority} | "
          f"Confidence: {d.confidence:.2f} | Type: {d.trigger_type}")
    if d.focus_areas:
        print(f"  Focus: {', '.join(d.focus_areas)}")
    if d.message:
        print(f"\n  {d.message.title}")
        print(f"  {d.message.message}")
        for item in d.message.action_items:
            print(f"   - {item}")
    for q in d.follow_up_questions:
        print(f"  ? {q.question}")

    print(f"\n  {analysis.summary.get('summary', '')}")
    print(f"  History: {analysis.history_comparison.get('message', '')}")
    print("-" * 40)


if __name__ == "__main__":
    user_id = sys.argv[1] if len(sys.argv) > 1 else "default_user"

    try:
        manova = create_manova()
    except ValidationError as e:
        print(f"Error: {e.message}")
        for field, problem in e.details.items():
            print(f"  {field}: {problem}")
        sys.exit(1)

    run_interactive_survey(manova, user_id)
