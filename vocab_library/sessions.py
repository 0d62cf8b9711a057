from __future__ import annotations
from enum import Enum
from typing import List, Optional, Tuple

from .models import Flashcard
from .store import LibraryStore


class SessionMode(str, Enum):
    LEARN = 'learn'
    TEST = 'test'


class StudySession:
    """Walks a wordlist's cards in its configured order, wrapping at the end.

    The card sequence is fixed when the session starts; reordering the
    wordlist afterwards only affects new sessions.
    """

    def __init__(self, store: LibraryStore, wordlist_id: str, mode=SessionMode.LEARN):
        self.store = store
        self.wordlist_id = wordlist_id
        self.mode = SessionMode(mode)
        self.cards: List[Flashcard] = store.ordered_flashcards(wordlist_id)
        self.index = 0
        self.revealed = False
        self._counted = False

    @property
    def is_empty(self) -> bool:
        return not self.cards

    @property
    def current(self) -> Optional[Flashcard]:
        if self.is_empty:
            return None
        # re-read so frequency bumps show up
        card = self.cards[self.index]
        return self.store.get_flashcard(card.id) or card

    @property
    def position(self) -> Tuple[int, int]:
        if self.is_empty:
            return (0, 0)
        return (self.index + 1, len(self.cards))

    def advance(self) -> Optional[Flashcard]:
        if self.is_empty:
            return None
        self.index = (self.index + 1) % len(self.cards)
        self.revealed = False
        self._counted = False
        return self.current

    def reveal(self) -> Optional[Flashcard]:
        """Show the meaning; counts as one study of the current card."""
        if self.mode is not SessionMode.TEST:
            raise ValueError('reveal() is only available in test sessions')
        self.revealed = True
        self._bump_once()
        return self.current

    def mark_learned(self) -> Optional[Flashcard]:
        card = self.current
        if card is None:
            return None
        self._bump_once()
        return self.advance()

    def _bump_once(self) -> None:
        card = self.current
        if card is None or self._counted:
            return
        self.store.bump_frequency(card.id)
        self._counted = True
