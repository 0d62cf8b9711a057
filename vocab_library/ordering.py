from __future__ import annotations
import random
import unicodedata
from typing import Iterable, List, Optional

from .models import Flashcard, OrderStrategy


def collation_key(word: str):
    """Sort key close to ICU's default collation for Latin scripts.

    Primary: letters without accents or case. Secondary: accents
    (plain before accented). Tertiary: case (lowercase before uppercase).
    """
    decomposed = unicodedata.normalize('NFKD', word or '')
    base = ''.join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (base.casefold(), decomposed.casefold(), decomposed.swapcase())


def _card_key(card: Flashcard):
    return collation_key(card.word)


def shuffle_cards(cards: Iterable[Flashcard], seed: Optional[float] = None) -> List[Flashcard]:
    """Seeded Fisher-Yates permutation; the same seed and input give the same output."""
    out = list(cards)
    if seed is None:
        seed = random.random()
    random.Random(seed).shuffle(out)
    return out


def order_flashcards(cards: Iterable[Flashcard], order, seed: Optional[float] = None) -> List[Flashcard]:
    """Arrange a wordlist's cards for study.

    ``cards`` must be in membership insertion order; ``created_at`` keeps that
    order untouched.
    """
    order = OrderStrategy.parse(order)
    if order is OrderStrategy.ALPHA:
        return sorted(cards, key=_card_key)
    if order is OrderStrategy.SHUFFLE:
        return shuffle_cards(cards, seed)
    return list(cards)
