"""
AstroScope configuration.

All tunables in one place for easy adjustment. Values are read from the
environment once at import time; main.py loads .env before importing anything
from this package.

RANKING POLICY:
The field weights below are a tunable policy, not a fixed requirement.
Title matches count most, then the event/lesson narrative, then the
abstract/recommendation summary, then metadata tags.
"""

import os
from pathlib import Path
from typing import Dict

# ============================================================================
# RETRIEVAL
# ============================================================================

DEFAULT_TOP_K: int = int(os.getenv("ASTRO_SEARCH_TOP_K", "5"))
MAX_TOP_K: int = 50

FIELD_WEIGHTS: Dict[str, float] = {
    "title": 4.0,
    "driving_event": 3.0,
    "lesson_text": 3.0,
    "abstract": 2.0,
    "recommendation": 2.0,
    "mission": 1.0,
    "center": 1.0,
    "subjects": 1.0,
}

# ============================================================================
# CONTEXT WINDOW
# ============================================================================

# Per-field character bounds for SanitizedLesson
MAX_TITLE_CHARS: int = 150
MAX_ABSTRACT_CHARS: int = 250
MAX_ROOT_CAUSE_CHARS: int = 300
MAX_RECOMMENDATION_CHARS: int = 200
MAX_MISSION_CHARS: int = 50
MAX_CENTER_CHARS: int = 30

EMPTY_FIELD_PLACEHOLDER: str = "Not specified"

# ============================================================================
# GENERATION
# ============================================================================

LLM_PROVIDER: str = os.getenv("ASTRO_LLM_PROVIDER", "google").lower()

GEMINI_MODEL: str = os.getenv("ASTRO_GEMINI_MODEL", "gemini-2.5-flash")
OPENAI_MODEL: str = os.getenv("ASTRO_OPENAI_MODEL", "gpt-4.1-mini")

GENERATION_TIMEOUT_MS: int = int(os.getenv("ASTRO_GENERATION_TIMEOUT_MS", "30000"))
TEMPERATURE: float = float(os.getenv("ASTRO_TEMPERATURE", "0.4"))
MAX_OUTPUT_TOKENS: int = int(os.getenv("ASTRO_MAX_OUTPUT_TOKENS", "2048"))
GEMINI_TOP_K: int = 40
GEMINI_TOP_P: float = 0.95

# Placeholder value shipped in .env.example; treated as "not configured"
API_KEY_PLACEHOLDER: str = "your_gemini_api_key_here"

# Number of context lessons cited when the fallback answer is used
FALLBACK_CITATION_COUNT: int = 3

# ============================================================================
# STREAMING
# ============================================================================

STREAM_CHUNK_WORDS: int = int(os.getenv("ASTRO_STREAM_CHUNK_WORDS", "5"))
STREAM_DELAY_MS: int = int(os.getenv("ASTRO_STREAM_DELAY_MS", "30"))

# ============================================================================
# FOLLOW-UPS
# ============================================================================

FOLLOW_UP_HISTORY: int = 3
FOLLOW_UP_ANSWER_CHARS: int = 200
FOLLOW_UP_COUNT: int = 3

# ============================================================================
# CORPUS SOURCE
# ============================================================================

# "seed" = data/lessons_seed.json, "database" = lessons table (seeded on first run)
CORPUS_SOURCE: str = os.getenv("ASTRO_CORPUS_SOURCE", "seed").lower()

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
SEED_PATH: Path = Path(os.getenv("ASTRO_SEED_PATH", str(_PROJECT_ROOT / "data" / "lessons_seed.json")))

DATABASE_URL: str = os.getenv("ASTRO_DATABASE_URL", "sqlite:///./data/astroscope.db")

# Canonical record location for citation follow-through
LLIS_LESSON_URL: str = "https://llis.nasa.gov/lesson/{lesson_id}"
