"""Turn the model's free-text profile review into an ``AnalysisResult``.

The reply is prose, so the interpreter layers progressively looser heuristics:
explicit section headers first, keyword classification of the remaining
paragraphs second, a whole-text keyword scan for any category that had no
explicit section, and finally hard defaults.  It never raises for narrative
content; every string, including the empty string, yields a usable result.

Keyword matching is English-only and prefix-based (``\\bkeyword``), so
``"strength"`` also matches ``"strengths"``.
"""

import logging
import re
from typing import Iterable, Iterator, List, Pattern, Sequence

from .schemas import AnalysisResult, Priority, Section, Suggestion

logger = logging.getLogger(__name__)

DEFAULT_SCORE = 50

# Lines at or below this many characters (after cleaning) are noise.
MIN_LINE_LENGTH = 10

# Digits only: "Rating: -5" or "Score: 7.5" are not recognised.
SCORE_PATTERN = re.compile(r"\b(?:score|rating)\s*:\s*(\d+)", re.IGNORECASE)

# One or more blank lines between paragraphs.
BLOCK_SEPARATOR = re.compile(r"\n[ \t]*\n\s*")

BULLET_PATTERN = re.compile(r"^\s*(?:[-•·–—+]|\*(?!\*)|\d{1,2}[.)](?!\d))\s*")

# --- Explicit section headers ---
STRENGTH_HEADER_KEYWORDS = ("strengths", "strong points", "positives", "what's good")
WEAKNESS_HEADER_KEYWORDS = (
    "weaknesses",
    "weak points",
    "negatives",
    "areas to improve",
    "improvement areas",
    "areas for improvement",
)

# --- Suggestion block categories ---
EXPERIENCE_KEYWORDS = (
    "experience",
    "role",
    "position",
    "job",
    "work history",
    "career",
    "employment",
    "responsibilities",
)
NETWORK_KEYWORDS = (
    "network",
    "connection",
    "engage",
    "post",
    "activity",
    "community",
    "recommendation",
    "endorse",
    "follower",
)

# --- Suggestion priority ---
HIGH_PRIORITY_KEYWORDS = (
    "critical",
    "crucial",
    "essential",
    "urgent",
    "important",
    "must",
    "should",
    "need to",
)
LOW_PRIORITY_KEYWORDS = ("consider", "might", "could", "optional", "maybe")

# --- Fallback sentiment scan ---
POSITIVE_KEYWORDS = (
    "strength",
    "good",
    "excellent",
    "impressive",
    "well done",
    "great",
    "strong",
)
POSITIVE_EXCLUSIONS = ("improve", "should")
DEFICIENCY_KEYWORDS = (
    "lack",
    "missing",
    "weak",
    "improve",
    "should add",
    "consider adding",
    "could be better",
)

# --- Section headings ---
SUGGESTION_HEADING_KEYWORDS = (
    "suggestions",
    "recommendations",
    "action items",
    "next steps",
    "tips",
)
# Words that may surround a header keyword in a bare heading ("Key Strengths",
# "Suggestions for your Experience").
HEADING_QUALIFIERS = (
    "key",
    "main",
    "top",
    "major",
    "notable",
    "overall",
    "additional",
    "actionable",
    "specific",
    "your",
    "the",
    "and",
    "for",
    "of",
    "profile",
    "experience",
    "network",
    "networking",
)

DEFAULT_SUGGESTION = Suggestion(
    section="profile",
    suggestion=(
        "Add more detail to your headline, summary and experience descriptions "
        "so reviewers can see the full scope of your work."
    ),
    priority="medium",
)
DEFAULT_STRENGTH = "No specific strengths were identified in the analysis."
DEFAULT_WEAKNESS = "No specific weaknesses were identified in the analysis."

_MARKDOWN_CHARS = "*_#`> "
_SCORE_LINE = re.compile(r"^(?:[a-z]+\s+)?(?:score|rating)\s*:", re.IGNORECASE)


def _keyword_pattern(keywords: Sequence[str]) -> Pattern[str]:
    alternatives = "|".join(re.escape(k).replace("'", "['’]") for k in keywords)
    return re.compile(rf"\b(?:{alternatives})", re.IGNORECASE)


_STRENGTH_HEADER = _keyword_pattern(STRENGTH_HEADER_KEYWORDS)
_WEAKNESS_HEADER = _keyword_pattern(WEAKNESS_HEADER_KEYWORDS)
_EXPERIENCE = _keyword_pattern(EXPERIENCE_KEYWORDS)
_NETWORK = _keyword_pattern(NETWORK_KEYWORDS)
_HIGH_PRIORITY = _keyword_pattern(HIGH_PRIORITY_KEYWORDS)
_LOW_PRIORITY = _keyword_pattern(LOW_PRIORITY_KEYWORDS)
_POSITIVE = _keyword_pattern(POSITIVE_KEYWORDS)
_POSITIVE_EXCLUDED = _keyword_pattern(POSITIVE_EXCLUSIONS)
_DEFICIENCY = _keyword_pattern(DEFICIENCY_KEYWORDS)
_ANY_HEADING = _keyword_pattern(
    STRENGTH_HEADER_KEYWORDS + WEAKNESS_HEADER_KEYWORDS + SUGGESTION_HEADING_KEYWORDS
)

_WORD = re.compile(r"[a-z]+(?:'[a-z]+)?")


def _words(text: str) -> List[str]:
    return _WORD.findall(text.lower().replace("’", "'"))


_HEADING_VOCABULARY = frozenset(
    word
    for phrase in (
        STRENGTH_HEADER_KEYWORDS
        + WEAKNESS_HEADER_KEYWORDS
        + SUGGESTION_HEADING_KEYWORDS
        + HEADING_QUALIFIERS
    )
    for word in _words(phrase)
)


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def extract_score(text: str) -> int:
    """Return the first labelled rating in ``text`` clamped to [0, 100], else 50."""
    match = SCORE_PATTERN.search(text or "")
    if not match:
        return DEFAULT_SCORE
    digits = match.group(1).lstrip("0") or "0"
    # Anything past three digits is above the range; skip the int() conversion,
    # which rejects very long digit strings.
    if len(digits) > 3:
        return 100
    return max(0, min(100, int(digits)))


def split_blocks(text: str) -> List[str]:
    normalized = (text or "").replace("\r\n", "\n").replace("\r", "\n")
    return [block for block in BLOCK_SEPARATOR.split(normalized) if block.strip()]


def clean_line(line: str) -> str:
    """Strip a leading bullet marker or list number and surrounding whitespace."""
    return BULLET_PATTERN.sub("", line, count=1).strip()


def is_heading(line: str) -> bool:
    """A bare section heading such as ``**Key Strengths:**`` or ``Network Suggestions``.

    Only header keywords plus qualifier words; a line carrying any other word
    (``Missing key elements:``) is content, colon or not.
    """
    words = _words(line)
    if not words or not _ANY_HEADING.search(line):
        return False
    return all(word in _HEADING_VOCABULARY for word in words)


def is_score_line(line: str) -> bool:
    return bool(_SCORE_LINE.match(line.strip().strip(_MARKDOWN_CHARS)))


def is_strengths_header(text: str) -> bool:
    return bool(_STRENGTH_HEADER.search(text))


def is_weaknesses_header(text: str) -> bool:
    return bool(_WEAKNESS_HEADER.search(text))


def classify_section(text: str) -> Section:
    if _EXPERIENCE.search(text):
        return "experience"
    if _NETWORK.search(text):
        return "network"
    return "profile"


def classify_priority(line: str) -> Priority:
    if _HIGH_PRIORITY.search(line):
        return "high"
    if _LOW_PRIORITY.search(line):
        return "low"
    return "medium"


def is_positive_line(line: str) -> bool:
    return bool(_POSITIVE.search(line)) and not _POSITIVE_EXCLUDED.search(line)


def is_deficiency_line(line: str) -> bool:
    return bool(_DEFICIENCY.search(line))


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


def _section_lines(block: str) -> Iterator[str]:
    for raw in block.split("\n"):
        line = clean_line(raw)
        if len(line) > MIN_LINE_LENGTH and not is_heading(line):
            yield line


def _block_suggestions(block: str) -> Iterator[Suggestion]:
    section = classify_section(block)
    for raw in block.split("\n"):
        line = clean_line(raw)
        if len(line) <= MIN_LINE_LENGTH or is_heading(line) or is_score_line(line):
            continue
        yield Suggestion(section=section, suggestion=line, priority=classify_priority(line))


def _scan_lines(text: str) -> Iterator[str]:
    """Every candidate line of the whole text, ignoring paragraph boundaries."""
    for raw in (text or "").splitlines():
        line = clean_line(raw)
        if len(line) >= MIN_LINE_LENGTH and not is_heading(line):
            yield line


def _dedupe(items: Iterable[str]) -> List[str]:
    seen = set()
    unique = []
    for item in items:
        key = item.casefold()
        if key not in seen:
            seen.add(key)
            unique.append(item)
    return unique


def interpret(text: str) -> AnalysisResult:
    """Interpret one narrative reply into a structured analysis."""
    text = text or ""
    score = extract_score(text)

    strengths: List[str] = []
    weaknesses: List[str] = []
    suggestions: List[Suggestion] = []
    found_strengths = False
    found_weaknesses = False

    for block in split_blocks(text):
        if is_strengths_header(block):
            found_strengths = True
            strengths.extend(_section_lines(block))
        elif is_weaknesses_header(block):
            found_weaknesses = True
            weaknesses.extend(_section_lines(block))
        else:
            suggestions.extend(_block_suggestions(block))

    if not found_strengths:
        strengths.extend(line for line in _scan_lines(text) if is_positive_line(line))
    if not found_weaknesses:
        weaknesses.extend(line for line in _scan_lines(text) if is_deficiency_line(line))

    strengths = _dedupe(strengths)
    weaknesses = _dedupe(weaknesses)

    logger.debug(
        "Interpreted narrative (%d chars): score=%d suggestions=%d strengths=%d "
        "weaknesses=%d explicit_strengths=%s explicit_weaknesses=%s",
        len(text),
        score,
        len(suggestions),
        len(strengths),
        len(weaknesses),
        found_strengths,
        found_weaknesses,
    )

    return AnalysisResult(
        score=score,
        suggestions=suggestions or [DEFAULT_SUGGESTION],
        strengths=strengths or [DEFAULT_STRENGTH],
        weaknesses=weaknesses or [DEFAULT_WEAKNESS],
    )
