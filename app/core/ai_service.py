# Fichier: app/core/ai_service.py

import logging
from typing import List, Optional

from openai import OpenAI

from app.core.config import settings
from app.core.skill_levels import SkillLevelConfig

logger = logging.getLogger(__name__)


class ContentProviderError(ConnectionError):
    """Raised when the content-generation provider cannot answer."""


try:
    if settings.OPENROUTER_API_KEY:
        openai_client: Optional[OpenAI] = OpenAI(
            api_key=settings.OPENROUTER_API_KEY,
            base_url=settings.OPENROUTER_BASE_URL,
            timeout=settings.CONTENT_PROVIDER_TIMEOUT_SECONDS,
        )
        logger.info("✅ Content provider client configured (%s).", settings.CONTENT_MODEL)
    else:
        openai_client = None
        logger.warning("⚠️ OPENROUTER_API_KEY missing. Content generation calls will fail.")
except Exception as e:
    openai_client = None
    logger.error(f"❌ Content provider configuration error: {e}")


def call_content_provider(prompt: str) -> str:
    """Send ``prompt`` as a single user message and return the raw text answer.

    No schema is enforced by the provider; callers parse defensively.
    """
    if not openai_client:
        raise ContentProviderError("Content provider client is not configured.")

    try:
        logger.info("Calling content provider with model %s", settings.CONTENT_MODEL)
        response = openai_client.chat.completions.create(
            model=settings.CONTENT_MODEL,
            messages=[{"role": "user", "content": prompt}],
            extra_headers={"X-Title": "Learning Paths API"},
        )
    except Exception as exc:
        logger.error("Content provider request failed: %s", exc)
        raise ContentProviderError(str(exc)) from exc

    if not response.choices:
        return ""
    return response.choices[0].message.content or ""


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

def build_outline_prompt(topic: str, structure: SkillLevelConfig) -> str:
    units_lo, units_hi = structure.units
    levels_lo, levels_hi = structure.levels_per_unit
    lessons_lo, lessons_hi = structure.lessons_per_level
    audience = (
        f"\nAUDIENCE: {structure.label} - {structure.description}.\n"
        if structure.id != "default"
        else ""
    )

    return f"""Create a DUOLINGO-STYLE learning path for "{topic}".
{audience}
STRUCTURE:
- {units_lo}-{units_hi} UNITS (major sections)
- Each unit has {levels_lo}-{levels_hi} LEVELS
- Each level has {lessons_lo}-{lessons_hi} LESSONS (bite-sized, 3-8 minute videos each)

LESSON DESIGN PRINCIPLES:
- Each lesson covers ONE focused concept
- Lessons progress from simple to complex within each level
- Each lesson builds on the previous one

Return ONLY a valid JSON object with this EXACT structure:
{{
  "topic": "{topic}",
  "units": [
    {{
      "unitNumber": 1,
      "title": "Unit Title",
      "description": "What this unit covers",
      "color": "#hex color for this unit",
      "levels": [
        {{
          "levelNumber": 1,
          "title": "Level Title",
          "description": "What you'll learn in this level",
          "icon": "emoji icon",
          "lessons": [
            {{
              "title": "Lesson Title",
              "description": "One sentence about this lesson",
              "searchQuery": "specific YouTube search query for this exact lesson"
            }}
          ],
          "challengeProject": "Optional mini-project for this level"
        }}
      ],
      "bossChallenge": "Final project for completing this unit"
    }}
  ]
}}

IMPORTANT RULES:
1. searchQuery must be VERY SPECIFIC so it finds a single focused video
2. Lessons are ATOMIC - one concept per lesson
3. Colors are vibrant and distinct for each unit
4. Icons are relevant emojis

Return ONLY the JSON object, no other text."""


def build_resources_prompt(topic: str, count: int, kinds: List[str]) -> str:
    kinds_label = ", ".join(kinds)
    return f"""Suggest {count} high-quality learning resources ({kinds_label} ONLY) for "{topic}".

URL INSTRUCTIONS:
1. ARTICLES: direct links to authoritative sources (official documentation, Wikipedia, major publications).
2. COURSES: the main landing page of famous, stable courses (Coursera, edX, freeCodeCamp, Khan Academy).
3. BOOKS and PODCASTS: the publisher or official page.
4. VIDEOS: actual YouTube URLs of the form https://www.youtube.com/watch?v=VIDEO_ID
5. Prefer well-established resources whose URLs are stable.

Return in this EXACT JSON format:
[{{
  "title": "Resource Title",
  "type": one of {kinds_label},
  "description": "Brief description",
  "url": "https://actual-url.com",
  "views": "1.5M views",
  "viewCount": 1500000,
  "publishedDate": "2024-01-15",
  "durationMin": 10
}}]

Return ONLY the JSON array, no other text."""


def build_suggestions_prompt(topic: str) -> str:
    return f"""Generate 5 trending, popular search queries related to the topic "{topic}".
Focus on recent developments, emerging trends, or highly popular specific aspects people are interested in right now.

Example: "basketball" -> ["NBA Playoffs Predictions", "Top 10 Dunks this season", "Best defensive drills for guards", "How the pick and roll works", "History of the three point line"].

Return ONLY a valid JSON array of strings, no other text."""
