"""LLM service for OpenAI sentiment classification."""

import hashlib
import json
import logging
import re
from dataclasses import dataclass, field
from textwrap import dedent
from typing import Any, Callable, Dict, List, Optional, Sequence

import openai
from diskcache import Cache
from tenacity import Retrying, stop_after_attempt, wait_exponential

from ..core.config import settings
from ..core.constants import CacheConstants, ClassifierConstants
from ..core.errors import ClassificationError
from ..core.keyword_classifier import KeywordClassifier
from ..core.models import Exemplar, OverallLabel, SentimentBucket, SentimentSummary, Snippet

logger = logging.getLogger(__name__)

SENTIMENT_PROMPT = dedent("""
You are an expert sentiment analyst for product reviews and social media discussion.
Return ONLY JSON (no prose) with exactly these keys:
{
  "overallSentiment": "positive" | "negative" | "neutral" | "mixed",
  "positiveRatio": integer 0-100,
  "negativeRatio": integer 0-100,
  "neutralRatio": integer 0-100,
  "summary": "2-3 paragraph summary of overall reception, strengths, concerns and trends",
  "keyThemes": ["theme", ...] (5-8 short themes),
  "positiveIndices": [integer, ...],
  "negativeIndices": [integer, ...],
  "neutralIndices": [integer, ...]
}

Rules:
- The three ratios describe ALL comments and must sum to 100.
- Indices refer to the bracketed comment numbers in the input (1-based).
- Pick 3-5 of the most representative comments for each sentiment.
- Be objective and balanced.
""").strip()

REQUIRED_FIELDS = (
    "overallSentiment", "positiveRatio", "negativeRatio", "neutralRatio",
    "summary", "keyThemes", "positiveIndices", "negativeIndices", "neutralIndices",
)

_INDEX_FIELDS = {
    SentimentBucket.POSITIVE: "positiveIndices",
    SentimentBucket.NEGATIVE: "negativeIndices",
    SentimentBucket.NEUTRAL: "neutralIndices",
}


def _strip_code_fences(s: str) -> str:
    s = s.strip()
    return re.sub(r"^```(?:json)?|```$", "", s, flags=re.IGNORECASE | re.MULTILINE).strip()


def _safe_json_loads(s: str) -> Any:
    """Parse JSON from an LLM response, tolerating fences and surrounding prose."""
    if not s:
        raise ClassificationError("Empty response from classifier")
    try:
        return json.loads(s)
    except ValueError:
        pass

    cleaned = _strip_code_fences(s)
    try:
        return json.loads(cleaned)
    except ValueError:
        pass

    obj_match = re.search(r"\{.*\}", cleaned, re.S)
    if obj_match:
        try:
            return json.loads(obj_match.group(0))
        except ValueError:
            pass
    raise ClassificationError(f"Could not parse JSON from: {s[:200]}...")


def format_candidates(candidates: Sequence[Snippet]) -> str:
    """Numbered comment list, 1-based, as sent to the model."""
    lines = []
    for i, snippet in enumerate(candidates, 1):
        who = f"{snippet.source_label} - {snippet.author}" if snippet.author else snippet.source_label
        lines.append(f"[{i}] ({who}): {snippet.text}")
    return "\n\n".join(lines)


def select_exemplars(indices: Sequence[Any], candidates: Sequence[Snippet]) -> List[Exemplar]:
    """Map untrusted 1-based indices to exemplars.

    Non-integers, out-of-range values and repeats are dropped; at most
    MAX_EXEMPLARS survive, in the order the model listed them.
    """
    picked = []
    seen = set()
    for raw in indices:
        if isinstance(raw, bool) or not isinstance(raw, int):
            continue
        if raw < 1 or raw > len(candidates) or raw in seen:
            continue
        seen.add(raw)
        picked.append(Exemplar.from_snippet(candidates[raw - 1]))
        if len(picked) == ClassifierConstants.MAX_EXEMPLARS:
            break
    return picked


def _as_ratio(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ClassificationError(f"{name} is not an integer")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int):
        raise ClassificationError(f"{name} is not an integer")
    if not 0 <= value <= 100:
        raise ClassificationError(f"{name} out of range: {value}")
    return value


def parse_classification(data: Any, subject: str, candidates: Sequence[Snippet]) -> SentimentSummary:
    """Validate a structured classifier response and turn it into a summary.

    Raises ClassificationError for anything malformed; ratios are taken
    as given and never re-derived from the exemplar lists.
    """
    if not isinstance(data, dict):
        raise ClassificationError("Classifier response is not a JSON object")
    missing = [k for k in REQUIRED_FIELDS if k not in data]
    if missing:
        raise ClassificationError(f"Classifier response missing fields: {', '.join(missing)}")

    try:
        label = OverallLabel(data["overallSentiment"])
    except ValueError:
        raise ClassificationError(f"Unknown overall sentiment: {data['overallSentiment']!r}") from None

    pos = _as_ratio("positiveRatio", data["positiveRatio"])
    neg = _as_ratio("negativeRatio", data["negativeRatio"])
    neu = _as_ratio("neutralRatio", data["neutralRatio"])
    if pos + neg + neu != 100:
        raise ClassificationError(f"Ratios sum to {pos + neg + neu}, expected 100")

    if not isinstance(data["summary"], str):
        raise ClassificationError("summary is not a string")
    if not isinstance(data["keyThemes"], list):
        raise ClassificationError("keyThemes is not a list")

    exemplars = {}
    for bucket, key in _INDEX_FIELDS.items():
        if not isinstance(data[key], list):
            raise ClassificationError(f"{key} is not a list")
        exemplars[bucket] = select_exemplars(data[key], candidates)

    return SentimentSummary(
        subject=subject,
        overall_label=label,
        positive_ratio=pos,
        negative_ratio=neg,
        neutral_ratio=neu,
        narrative_summary=data["summary"],
        key_themes=[str(t) for t in data["keyThemes"] if str(t).strip()],
        exemplars=exemplars,
        classified_by=OpenAIClassifier.name,
    )


@dataclass
class ClassificationAttempt:
    """Outcome of asking the primary classifier: a summary or an error message."""
    summary: Optional[SentimentSummary] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.summary is not None


def choose_summary(attempt: Optional[ClassificationAttempt],
                   fallback: Callable[[], SentimentSummary]) -> SentimentSummary:
    """Pick the primary summary when it succeeded, otherwise run the fallback."""
    if attempt is not None and attempt.ok:
        return attempt.summary
    return fallback()


class OpenAIClassifier:
    """OpenAI-based sentiment classifier."""

    name = "llm"

    def __init__(self, client=None, model: Optional[str] = None, timeout: Optional[float] = None,
                 max_retries: Optional[int] = None, cache=None, use_cache: Optional[bool] = None):
        self.timeout = timeout or settings.classifier_timeout
        # retries are handled by tenacity below
        self.client = client or openai.OpenAI(
            api_key=settings.effective_openai_key, timeout=self.timeout, max_retries=0
        )
        self.model = model or settings.openai_model
        self.max_retries = max_retries or settings.max_retries
        if use_cache is None:
            use_cache = settings.llm_cache_enabled
        self.cache = cache if cache is not None else (Cache(settings.cache_dir) if use_cache else None)
        logger.info(f"OpenAI classifier initialized (model={self.model}, timeout={self.timeout}s)")

    def _cache_key(self, system: str, user: str) -> str:
        return hashlib.md5(
            f"{self.model}|{system}|{user}|{ClassifierConstants.PROMPT_VERSION}".encode()
        ).hexdigest()

    def chat(self, system: str, user: str) -> str:
        """Chat completion in JSON mode, retried; served from the cache when present.

        Nothing is written to the cache here; callers store a reply only once
        it has been validated.
        """
        if self.cache is not None:
            cache_key = self._cache_key(system, user)
            cached_response = self.cache.get(cache_key)
            if cached_response:
                logger.debug(f"Cache hit for LLM request: {cache_key[:CacheConstants.CACHE_KEY_LENGTH]}...")
                return cached_response

        for attempt in Retrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=settings.retry_delay, max=settings.retry_backoff * 10),
            reraise=True,
        ):
            with attempt:
                response = self.client.chat.completions.create(
                    model=self.model,
                    messages=[
                        {"role": "system", "content": system},
                        {"role": "user", "content": user},
                    ],
                    response_format={"type": "json_object"},
                    max_tokens=ClassifierConstants.LLM_MAX_TOKENS,
                    temperature=ClassifierConstants.LLM_TEMPERATURE,
                    timeout=self.timeout,
                )

        content = response.choices[0].message.content
        if not content:
            raise ClassificationError("No response from LLM")
        return content.strip()

    def classify(self, subject: str, candidates: Sequence[Snippet]) -> SentimentSummary:
        """Classify the candidates; raises on any failure.

        Only replies that parse into a valid summary are cached.
        """
        user = (
            f'Analyze the following user comments about "{subject}":\n\n'
            f"{format_candidates(candidates)}\n\n"
            "Respond with the JSON object described above."
        )
        raw = self.chat(SENTIMENT_PROMPT, user)
        summary = parse_classification(_safe_json_loads(raw), subject, candidates)

        if self.cache is not None:
            cache_key = self._cache_key(SENTIMENT_PROMPT, user)
            if cache_key not in self.cache:
                self.cache.set(cache_key, raw, expire=3600 * CacheConstants.CACHE_TTL_HOURS)
        return summary

    def try_classify(self, subject: str, candidates: Sequence[Snippet]) -> ClassificationAttempt:
        """Classify without raising; failures are reported in the attempt."""
        try:
            return ClassificationAttempt(summary=self.classify(subject, candidates))
        except Exception as e:
            logger.warning(f"LLM classification failed for '{subject}': {e}")
            return ClassificationAttempt(error=str(e) or type(e).__name__)


@dataclass
class ClassificationStrategy:
    """Primary classifier plus the local fallback used when it fails."""
    primary: Optional[Any] = None
    fallback: KeywordClassifier = field(default_factory=KeywordClassifier)

    def classify(self, subject: str, candidates: Sequence[Snippet]) -> SentimentSummary:
        attempt = None
        if self.primary is not None and candidates:
            attempt = self.primary.try_classify(subject, candidates)
            if not attempt.ok:
                logger.warning(f"Using keyword fallback for '{subject}': {attempt.error}")
        return choose_summary(attempt, lambda: self.fallback.classify(subject, candidates))


class LLMServiceFactory:
    """Factory for creating the classification strategy."""

    @staticmethod
    def create() -> ClassificationStrategy:
        """Create the strategy; the LLM stage is only present with an API key."""
        if settings.effective_openai_key:
            return ClassificationStrategy(primary=OpenAIClassifier())
        logger.info("No OpenAI key configured, using keyword classifier only")
        return ClassificationStrategy(primary=None)
