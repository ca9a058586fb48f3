"""
AcadBoost - Test Enrichment
Topic and per-test narrative generation for seeded test histories.

The generative collaborator is optional: every call has a deterministic
fallback built only from the numeric data, so seeding never waits on or
fails because of the text service.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

from acadboost.ai.core.llm import LLMClient, get_llm_client
from acadboost.ai.core.telemetry import service_span
from acadboost.core.config import settings
from acadboost.core.exceptions import ExternalServiceError
from acadboost.models.subject import (
    SUBJECT_CONTEXTS,
    SUBJECT_NAMES,
    PerformanceLevel,
    SubjectKey,
    parse_subject,
)

logger = logging.getLogger(__name__)

TESTS_PER_BATCH = 4


@dataclass(frozen=True)
class TestSnapshot:
    """Numeric view of one test, as sent to the text service."""
    test_number: int
    marks: int
    difficulty: str
    topic: str = ""

    __test__ = False


class GenerativeTextService(Protocol):
    """External text generator used to enrich seeded tests."""

    async def generate_topics(self, subject: SubjectKey) -> list[str]:
        """Exactly 4 topic names, basic to advanced."""
        ...

    async def generate_batch_analysis(
        self, subject: SubjectKey, tests: Sequence[TestSnapshot]
    ) -> list[str]:
        """Exactly 4 narratives, one per test, in test-number order."""
        ...


# =============================================================================
# Deterministic fallbacks
# =============================================================================

DEFAULT_TOPICS: dict[SubjectKey, tuple[str, ...]] = {
    SubjectKey.OS: ("Process Scheduling", "Memory Management", "File Systems", "Synchronization"),
    SubjectKey.CN: ("TCP/IP Protocol", "Network Security", "Routing Algorithms", "HTTP/HTTPS"),
    SubjectKey.DBMS: ("SQL Queries", "Normalization", "Transaction Management", "Indexing"),
    SubjectKey.OOPS: ("Inheritance", "Polymorphism", "Encapsulation", "Design Patterns"),
    SubjectKey.DSA: ("Sorting Algorithms", "Tree Traversal", "Graph Algorithms", "Dynamic Programming"),
    SubjectKey.QA: ("Arithmetic", "Probability", "Logical Reasoning", "Data Interpretation"),
}

LEVEL_GUIDANCE: dict[PerformanceLevel, str] = {
    PerformanceLevel.HIGH: "Strong performance. Focus on advanced topics and competitive problem-solving.",
    PerformanceLevel.MEDIUM: "Moderate performance. Review weak concepts and practice consistently.",
    PerformanceLevel.LOW: "Needs improvement. Start with fundamentals and build up gradually.",
}


def default_topics(subject: "str | SubjectKey") -> list[str]:
    """Fixed topic list for a subject. Same subject, same list."""
    return list(DEFAULT_TOPICS[parse_subject(subject)])


def _average(scores: Sequence[int]) -> float:
    return sum(scores) / len(scores) if scores else 0.0


def local_subject_analysis(scores: Sequence[int], level: PerformanceLevel) -> str:
    """One-paragraph subject summary built from the score history."""
    if not scores:
        return f"Performance Level: {PerformanceLevel(level).value}. No tests recorded yet."
    if scores[-1] > scores[0]:
        trend = "improving"
    elif scores[-1] < scores[0]:
        trend = "declining"
    else:
        trend = "stable"
    level = PerformanceLevel(level)
    return (
        f"Performance Level: {level.value}. Average Score: {_average(scores):.1f}/100. "
        f"Trend: {trend}. {LEVEL_GUIDANCE[level]}"
    )


def fallback_test_analysis(
    subject: SubjectKey,
    test: TestSnapshot,
    all_scores: Sequence[int],
) -> str:
    """Sectioned narrative for one test built from score, difficulty, topic and trend."""
    subject_label = SUBJECT_NAMES[subject]
    focus = test.topic or subject_label
    marks = test.marks
    previous = all_scores[test.test_number - 2] if test.test_number > 1 else None

    sections = []

    if marks >= 75:
        reading = "This is an excellent score indicating strong understanding."
    elif marks >= 40:
        reading = "This shows a decent understanding but room for growth."
    else:
        reading = "This indicates fundamental concepts need more attention."
    sections.append(
        f"SCORE BREAKDOWN\nYou scored {marks}/100 on {focus} ({test.difficulty} difficulty). {reading}"
    )

    if previous is None:
        trend = f"Baseline test. Average across all tests: {_average(all_scores):.1f}."
    elif marks > previous:
        trend = (
            f"Improved by {marks - previous} points from Test {test.test_number - 1} "
            f"({previous} -> {marks}). Keep it up!"
        )
    elif marks < previous:
        trend = (
            f"Dropped by {previous - marks} points from Test {test.test_number - 1} "
            f"({previous} -> {marks}). Review recent concepts."
        )
    else:
        trend = f"Same score as Test {test.test_number - 1}. Aim for improvement."
    sections.append(f"PERFORMANCE TREND\n{trend}")

    if marks >= 60:
        strengths = f"- Good grasp of {test.topic or 'core concepts'}\n- Consistent test-taking ability"
    else:
        strengths = "- Attempting all questions\n- Showing willingness to learn"
    sections.append(f"STRENGTHS\n{strengths}")

    if marks < 75:
        improvements = f"- Deepen understanding of {focus} fundamentals\n- Practice timed problem-solving"
    else:
        improvements = f"- Challenge yourself with advanced {focus} problems\n- Explore edge cases and optimization"
    sections.append(f"AREAS FOR IMPROVEMENT\n{improvements}")

    sections.append(
        "STUDY PLAN\n"
        f"- Review {focus} notes and textbook chapters\n"
        "- Practice 10-15 problems on this topic daily\n"
        "- Take a mock test under timed conditions"
    )
    sections.append(f"NEXT TARGET\nAim for {min(100, marks + 10)}/100 on the next test.")

    return "\n\n".join(sections)


def fallback_batch_analysis(subject: SubjectKey, tests: Sequence[TestSnapshot]) -> list[str]:
    all_scores = [t.marks for t in tests]
    return [fallback_test_analysis(subject, t, all_scores) for t in tests]


# =============================================================================
# LLM-backed text service
# =============================================================================

def _require_strings(payload, expected: int, what: str) -> list[str]:
    """
    Validate a decoded JSON payload as a list of `expected` non-empty strings.

    Raises:
        ExternalServiceError: On any other shape
    """
    if not isinstance(payload, list) or len(payload) != expected:
        raise ExternalServiceError(f"Expected a JSON array of {expected} {what}, got {type(payload).__name__}")
    items = []
    for item in payload:
        if not isinstance(item, str) or not item.strip():
            raise ExternalServiceError(f"Malformed {what} entry: {item!r}")
        items.append(item.strip())
    return items


class LLMTextService:
    """GenerativeTextService backed by the shared LLM client."""

    TOPICS_PROMPT = """You are an expert educator creating tests for {name}.

Context: {context}

Generate exactly 4 important test topics for {name} that are:
- Relevant for academic performance improvement
- Cover different areas of the subject
- Progressively challenging (from basic to advanced)
- Practical and industry-relevant

Return ONLY a JSON array of 4 topic names, nothing else.
Example format: ["Topic 1", "Topic 2", "Topic 3", "Topic 4"]"""

    BATCH_ANALYSIS_PROMPT = """You are an expert educator. Provide detailed analysis for each of 4 test attempts in {name}.

Subject Context: {context}
Average Score: {average}/100
All Scores: {scores}

Test Data:
{tests}

For EACH test (Test 1 through Test 4), provide a SEPARATE analysis structured as:

SCORE BREAKDOWN - What the score means for the difficulty level and topic
PERFORMANCE TREND - Comparison to previous tests with specific numbers
STRENGTHS - 2-3 specific strengths demonstrated
AREAS FOR IMPROVEMENT - 2-3 specific weak concepts
STUDY PLAN - 3 concrete study actions with specific resources/topics
NEXT TARGET - Predicted score and target for next test

Return ONLY a JSON array of exactly 4 strings, one full analysis per test, in test order.
Each analysis should be 150-200 words. Use an encouraging but honest tone."""

    def __init__(self, llm_client: Optional[LLMClient] = None):
        self.llm = llm_client or get_llm_client()

    @staticmethod
    def _describe_tests(tests: Sequence[TestSnapshot]) -> str:
        lines = []
        for index, test in enumerate(tests):
            if index == 0:
                trend = "first"
            else:
                delta = test.marks - tests[index - 1].marks
                trend = f"{delta:+d}" if delta else "+/-0"
            lines.append(
                f"Test {test.test_number}: Score={test.marks}/100, Difficulty={test.difficulty}, "
                f'Topic="{test.topic or "General"}", Trend={trend}'
            )
        return "\n".join(lines)

    async def _generate_list(self, prompt: str, expected: int, what: str) -> list[str]:
        try:
            payload = await self.llm.generate_json(prompt=prompt, caller=type(self).__name__)
        except ExternalServiceError:
            raise
        except Exception as e:
            raise ExternalServiceError(f"Text generation failed: {e}") from e
        return _require_strings(payload, expected, what)

    async def generate_topics(self, subject: SubjectKey) -> list[str]:
        subject = parse_subject(subject)
        prompt = self.TOPICS_PROMPT.format(
            name=SUBJECT_NAMES[subject],
            context=SUBJECT_CONTEXTS[subject],
        )
        return await self._generate_list(prompt, TESTS_PER_BATCH, "topics")

    async def generate_batch_analysis(
        self, subject: SubjectKey, tests: Sequence[TestSnapshot]
    ) -> list[str]:
        subject = parse_subject(subject)
        scores = [t.marks for t in tests]
        prompt = self.BATCH_ANALYSIS_PROMPT.format(
            name=SUBJECT_NAMES[subject],
            context=SUBJECT_CONTEXTS[subject],
            average=f"{_average(scores):.1f}",
            scores=", ".join(str(s) for s in scores),
            tests=self._describe_tests(tests),
        )
        return await self._generate_list(prompt, len(tests), "analyses")


# =============================================================================
# Enrichment with fallback
# =============================================================================

class EnrichmentService:
    """
    Wraps a GenerativeTextService with a timeout and local fallbacks.

    Never raises for collaborator failures; every method returns usable text.
    """

    def __init__(
        self,
        text_service: Optional[GenerativeTextService] = None,
        timeout: Optional[float] = None,
    ):
        self.text_service = text_service
        self.timeout = timeout or settings.LLM_TIMEOUT_SECONDS

    async def _call(self, coro, subject: SubjectKey, operation: str):
        try:
            return await asyncio.wait_for(coro, timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("%s for '%s' timed out after %ss, using fallback", operation, subject.value, self.timeout)
        except Exception as e:
            logger.warning("%s for '%s' failed, using fallback: %s", operation, subject.value, e)
        return None

    async def generate_topics(self, subject: "str | SubjectKey") -> list[str]:
        subject = parse_subject(subject)
        if self.text_service is None:
            return default_topics(subject)

        with service_span("generate_topics", type(self).__name__, {"subject": subject.value}) as span:
            topics = await self._call(self.text_service.generate_topics(subject), subject, "Topic generation")
            try:
                topics = _require_strings(topics, TESTS_PER_BATCH, "topics") if topics is not None else None
            except ExternalServiceError as e:
                logger.warning("Topic generation for '%s' returned bad data, using fallback: %s", subject.value, e)
                topics = None
            span.set_attribute("enrichment.fallback", topics is None)
            return topics if topics is not None else default_topics(subject)

    async def generate_batch_analysis(
        self, subject: "str | SubjectKey", tests: Sequence[TestSnapshot]
    ) -> list[str]:
        subject = parse_subject(subject)
        if self.text_service is None:
            return fallback_batch_analysis(subject, tests)

        with service_span("generate_batch_analysis", type(self).__name__, {"subject": subject.value}) as span:
            analyses = await self._call(
                self.text_service.generate_batch_analysis(subject, tests), subject, "Batch analysis"
            )
            try:
                analyses = _require_strings(analyses, len(tests), "analyses") if analyses is not None else None
            except ExternalServiceError as e:
                logger.warning("Batch analysis for '%s' returned bad data, using fallback: %s", subject.value, e)
                analyses = None
            span.set_attribute("enrichment.fallback", analyses is None)
            return analyses if analyses is not None else fallback_batch_analysis(subject, tests)


def get_enrichment_service() -> EnrichmentService:
    """Enrichment wired to the configured LLM, or local-only when disabled."""
    if not settings.ENRICHMENT_ENABLED:
        return EnrichmentService(text_service=None)
    return EnrichmentService(text_service=LLMTextService())


__all__ = [
    "TestSnapshot",
    "GenerativeTextService",
    "LLMTextService",
    "EnrichmentService",
    "get_enrichment_service",
    "default_topics",
    "local_subject_analysis",
    "fallback_test_analysis",
    "fallback_batch_analysis",
]
