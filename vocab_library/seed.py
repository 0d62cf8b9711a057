from __future__ import annotations
import logging

from .models import OrderStrategy, Wordlist
from .store import LibraryStore

logger = logging.getLogger(__name__)

DEMO_FLASHCARDS = [
    {'word': 'focus', 'meaning': 'The center of interest or activity.',
     'comment': 'Use this often in UI copy.', 'frequency': 3},
    {'word': 'eloquent', 'meaning': 'Fluent or persuasive in speaking or writing.',
     'comment': '', 'frequency': 1},
    {'word': 'resilient', 'meaning': 'Able to withstand or recover quickly from difficult conditions.',
     'comment': 'Appears in tech culture pieces.', 'frequency': 2},
]


def seed_demo(store: LibraryStore) -> Wordlist:
    """Load the starter deck shown on first launch."""
    wl = store.add_wordlist('Starter Deck', 'Ten-minute warmup words', OrderStrategy.CREATED_AT)
    for item in DEMO_FLASHCARDS:
        card = store.add_flashcard(dictionary_id='wordnet', **item)
        store.add_flashcard_to_wordlist(wl.id, card.id)
    logger.info('demo library seeded for %s', store.user_id)
    return wl
