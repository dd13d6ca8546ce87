from collections.abc import Iterable

from cardledger.domain.models import Card


def normalize_tags(tags: Iterable[str]) -> list[str]:
    """Strip, lowercase and de-duplicate tags, keeping first-seen order."""
    seen: list[str] = []
    for tag in tags:
        cleaned = tag.strip().lower()
        if cleaned and cleaned not in seen:
            seen.append(cleaned)
    return seen


def card_matches_query(card: Card, query: str) -> bool:
    # Case-insensitive substring match over front, back and tags
    needle = query.strip().lower()
    if not needle:
        return True
    if needle in card.front.lower() or needle in card.back.lower():
        return True
    return any(needle in tag for tag in card.tags)
