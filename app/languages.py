"""Language heuristics used to split English and Hindi recommendations."""

from __future__ import annotations

from .models import CandidateItem, Language


HINDI_INDICATORS: tuple[str, ...] = (
    "shah rukh", "salman khan", "aamir khan", "amitabh bachchan",
    "akshay kumar", "hrithik roshan", "ranveer singh", "ranbir kapoor",
    "deepika padukone", "priyanka chopra", "kareena kapoor", "alia bhatt",
    "katrina kaif", "anushka sharma", "sonam kapoor", "vidya balan",
    "bollywood", "hindi", "mumbai", "delhi", "india", "indian",
    "baahubali", "dangal", "lagaan", "sholay", "dilwale",
    "zindagi", "kuch kuch", "kabhi",
    "yash raj", "dharma", "balaji", "eros", "reliance",
)


def is_likely_hindi_content(item: CandidateItem) -> bool:
    """Return whether title or cast hints at a Hindi production."""

    title = item.title.lower()
    actors = (item.actors or "").lower()
    return any(
        indicator in title or indicator in actors for indicator in HINDI_INDICATORS
    )


def is_language_match(item: CandidateItem, language: Language) -> bool:
    if language == "all":
        return True
    item_language = (item.language or "").lower()
    if language == "hindi":
        return "hindi" in item_language or is_likely_hindi_content(item)
    if language == "english":
        return "english" in item_language and not is_likely_hindi_content(item)
    return True
