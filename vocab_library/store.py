"""
In-memory library store.

Owns flashcards, wordlists, folders and the two join collections linking
them. Every public operation runs under one lock and, when it changed
anything, sends ``changed`` with a fresh :class:`LibraryState` snapshot.

Signals go out after the lock is released, so with several writing threads
a receiver can see snapshots out of order. Each snapshot carries the
store's ``version`` at capture time; receivers should drop older ones.
"""
from __future__ import annotations
import logging
import random
import threading
from dataclasses import replace
from typing import Dict, List, Optional

from blinker import Signal

from .errors import CapacityExceededError, ValidationError
from .models import (
    COMMENT_MAX_LENGTH, Flashcard, Folder, FolderWordlist, LibraryState,
    OrderStrategy, Stats, Wordlist, WordlistFlashcard, new_id, utcnow,
)
from .ordering import collation_key, order_flashcards

logger = logging.getLogger(__name__)

MAX_FLASHCARDS_PER_WORDLIST = 5000
MAX_WORDLISTS_PER_USER = 1000
MAX_FOLDERS_PER_USER = 500
MAX_WORDLISTS_PER_FOLDER = 500


def _check_comment(comment: str) -> str:
    comment = comment or ''
    if not isinstance(comment, str):
        raise ValidationError('comment must be a string', field='comment')
    if len(comment) > COMMENT_MAX_LENGTH:
        raise ValidationError(f'Comment max length is {COMMENT_MAX_LENGTH} characters', field='comment')
    return comment


def _check_text(value, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f'{field} is required', field=field)
    return value.strip()


def _check_frequency(value) -> int:
    if value is None:
        return 0
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError('frequency must be an integer', field='frequency')
    if value < 0:
        raise ValidationError('frequency must be >= 0', field='frequency')
    return value


class LibraryStore:

    def __init__(self, user_id: str = 'demo-user'):
        self.user_id = user_id
        self.changed = Signal('Sent with action= and state= after every change.')
        self._lock = threading.RLock()
        self._flashcards: Dict[str, Flashcard] = {}
        self._wordlists: Dict[str, Wordlist] = {}
        self._wordlist_flashcards: List[WordlistFlashcard] = []
        self._folders: Dict[str, Folder] = {}
        self._folder_wordlists: List[FolderWordlist] = []
        self._version = 0

    # ----------------------------- state -----------------------------

    def _capture(self) -> LibraryState:
        return LibraryState.capture(
            self.user_id, self._flashcards, self._wordlists, self._wordlist_flashcards,
            self._folders, self._folder_wordlists, version=self._version,
        )

    def _commit(self) -> Optional[LibraryState]:
        """Record a change; call with the lock held."""
        self._version += 1
        # copying the collections is skipped while nobody listens
        return self._capture() if self.changed.receivers else None

    def _emit(self, action: str, state: Optional[LibraryState]) -> None:
        if state is None:
            return
        self.changed.send(self, action=action, state=state)

    @property
    def state(self) -> LibraryState:
        with self._lock:
            return self._capture()

    @property
    def stats(self) -> Stats:
        with self._lock:
            return Stats(len(self._flashcards), len(self._wordlists), len(self._folders))

    def reset(self) -> None:
        with self._lock:
            self._flashcards.clear()
            self._wordlists.clear()
            self._wordlist_flashcards.clear()
            self._folders.clear()
            self._folder_wordlists.clear()
            state = self._commit()
        logger.debug('library reset for %s', self.user_id)
        self._emit('reset', state)

    # --------------------------- flashcards ---------------------------

    def add_flashcard(self, word: str, meaning: str, comment: str = '', frequency: int = 0,
                      dictionary_id: Optional[str] = None, audio_url: Optional[str] = None) -> Flashcard:
        word = _check_text(word, 'word')
        meaning = _check_text(meaning, 'meaning')
        comment = _check_comment(comment)
        frequency = _check_frequency(frequency)

        now = utcnow()
        with self._lock:
            card = Flashcard(
                id=new_id(), word=word, meaning=meaning, created_by=self.user_id,
                comment=comment, frequency=frequency, dictionary_id=dictionary_id or None,
                audio_url=audio_url or None, created_at=now, updated_at=now,
            )
            self._flashcards[card.id] = card
            state = self._commit()
        logger.debug('flashcard %s added (%s)', card.id, card.word)
        self._emit('add_flashcard', state)
        return card

    def get_flashcard(self, flashcard_id: str) -> Optional[Flashcard]:
        with self._lock:
            return self._flashcards.get(flashcard_id)

    def update_flashcard_comment(self, flashcard_id: str, comment: str) -> None:
        try:
            comment = _check_comment(comment)
        except ValidationError:
            logger.warning('comment on %s rejected: %d characters', flashcard_id, len(comment))
            raise
        with self._lock:
            card = self._flashcards.get(flashcard_id)
            if card is None:
                return
            self._flashcards[flashcard_id] = replace(card, comment=comment, updated_at=utcnow())
            state = self._commit()
        self._emit('update_flashcard_comment', state)

    def bump_frequency(self, flashcard_id: str) -> None:
        with self._lock:
            card = self._flashcards.get(flashcard_id)
            if card is None:
                return
            self._flashcards[flashcard_id] = replace(card, frequency=card.frequency + 1, updated_at=utcnow())
            state = self._commit()
        self._emit('bump_frequency', state)

    def delete_flashcard(self, flashcard_id: str) -> None:
        with self._lock:
            if self._flashcards.pop(flashcard_id, None) is None:
                return
            self._wordlist_flashcards[:] = [
                j for j in self._wordlist_flashcards if j.flashcard_id != flashcard_id
            ]
            state = self._commit()
        logger.debug('flashcard %s deleted', flashcard_id)
        self._emit('delete_flashcard', state)

    def search_flashcards(self, query: str = '') -> List[Flashcard]:
        """Cards whose word, meaning or comment contain ``query``, alphabetically.

        Matching ignores case. A blank query returns every card.
        """
        needle = (query or '').strip().casefold()
        with self._lock:
            cards = list(self._flashcards.values())
        if needle:
            cards = [c for c in cards if needle in f'{c.word} {c.meaning} {c.comment}'.casefold()]
        return sorted(cards, key=lambda c: collation_key(c.word))

    def flashcard_wordlists(self, flashcard_id: str) -> List[Wordlist]:
        with self._lock:
            return [
                self._wordlists[j.wordlist_id]
                for j in self._wordlist_flashcards
                if j.flashcard_id == flashcard_id and j.wordlist_id in self._wordlists
            ]

    # ---------------------------- wordlists ----------------------------

    def add_wordlist(self, name: str, comment: str = '', order=OrderStrategy.CREATED_AT) -> Wordlist:
        name = _check_text(name, 'name')
        order = OrderStrategy.parse(order)
        now = utcnow()
        with self._lock:
            if len(self._wordlists) >= MAX_WORDLISTS_PER_USER:
                logger.warning('wordlist cap reached for %s', self.user_id)
                raise CapacityExceededError(f'Wordlist cap reached ({MAX_WORDLISTS_PER_USER}).',
                                            limit=MAX_WORDLISTS_PER_USER)
            wl = Wordlist(
                id=new_id(), name=name, created_by=self.user_id, comment=comment or '',
                order=order, created_at=now, updated_at=now,
            )
            self._wordlists[wl.id] = wl
            state = self._commit()
        logger.debug('wordlist %s added (%s)', wl.id, wl.name)
        self._emit('add_wordlist', state)
        return wl

    def get_wordlist(self, wordlist_id: str) -> Optional[Wordlist]:
        with self._lock:
            return self._wordlists.get(wordlist_id)

    def delete_wordlist(self, wordlist_id: str) -> None:
        with self._lock:
            if self._wordlists.pop(wordlist_id, None) is None:
                return
            self._wordlist_flashcards[:] = [
                j for j in self._wordlist_flashcards if j.wordlist_id != wordlist_id
            ]
            self._folder_wordlists[:] = [
                j for j in self._folder_wordlists if j.wordlist_id != wordlist_id
            ]
            state = self._commit()
        logger.debug('wordlist %s deleted', wordlist_id)
        self._emit('delete_wordlist', state)

    def add_flashcard_to_wordlist(self, wordlist_id: str, flashcard_id: str) -> None:
        with self._lock:
            if wordlist_id not in self._wordlists or flashcard_id not in self._flashcards:
                logger.debug('link %s -> %s ignored: unknown id', flashcard_id, wordlist_id)
                return
            count = 0
            for j in self._wordlist_flashcards:
                if j.wordlist_id != wordlist_id:
                    continue
                if j.flashcard_id == flashcard_id:
                    return
                count += 1
            if count >= MAX_FLASHCARDS_PER_WORDLIST:
                logger.warning('wordlist %s is full', wordlist_id)
                raise CapacityExceededError(
                    f'This wordlist already has {MAX_FLASHCARDS_PER_WORDLIST} flashcards.',
                    limit=MAX_FLASHCARDS_PER_WORDLIST,
                )
            self._wordlist_flashcards.append(
                WordlistFlashcard(id=new_id(), wordlist_id=wordlist_id, flashcard_id=flashcard_id)
            )
            state = self._commit()
        self._emit('add_flashcard_to_wordlist', state)

    def remove_flashcard_from_wordlist(self, wordlist_id: str, flashcard_id: str) -> None:
        with self._lock:
            before = len(self._wordlist_flashcards)
            self._wordlist_flashcards[:] = [
                j for j in self._wordlist_flashcards
                if not (j.wordlist_id == wordlist_id and j.flashcard_id == flashcard_id)
            ]
            if len(self._wordlist_flashcards) == before:
                return
            state = self._commit()
        self._emit('remove_flashcard_from_wordlist', state)

    def reorder_wordlist(self, wordlist_id: str, order) -> None:
        order = OrderStrategy.parse(order)
        with self._lock:
            wl = self._wordlists.get(wordlist_id)
            if wl is None:
                return
            # leaving shuffle keeps the old seed around
            seed = random.random() if order is OrderStrategy.SHUFFLE else wl.shuffle_seed
            self._wordlists[wordlist_id] = replace(
                wl, order=order, shuffle_seed=seed, updated_at=utcnow(), updated_by=self.user_id,
            )
            state = self._commit()
        self._emit('reorder_wordlist', state)

    def wordlist_flashcards(self, wordlist_id: str) -> List[Flashcard]:
        """Member cards in the order they were added to the wordlist."""
        with self._lock:
            return [
                self._flashcards[j.flashcard_id]
                for j in self._wordlist_flashcards
                if j.wordlist_id == wordlist_id and j.flashcard_id in self._flashcards
            ]

    def ordered_flashcards(self, wordlist_id: str) -> List[Flashcard]:
        with self._lock:
            wl = self._wordlists.get(wordlist_id)
            if wl is None:
                return []
            cards = self.wordlist_flashcards(wordlist_id)
        return order_flashcards(cards, wl.order, wl.shuffle_seed)

    def wordlist_folders(self, wordlist_id: str) -> List[Folder]:
        with self._lock:
            return [
                self._folders[j.folder_id]
                for j in self._folder_wordlists
                if j.wordlist_id == wordlist_id and j.folder_id in self._folders
            ]

    # ----------------------------- folders -----------------------------

    def add_folder(self, name: str, comment: str = '') -> Folder:
        name = _check_text(name, 'name')
        now = utcnow()
        with self._lock:
            if len(self._folders) >= MAX_FOLDERS_PER_USER:
                logger.warning('folder cap reached for %s', self.user_id)
                raise CapacityExceededError(f'Folder cap reached ({MAX_FOLDERS_PER_USER}).',
                                            limit=MAX_FOLDERS_PER_USER)
            folder = Folder(
                id=new_id(), name=name, created_by=self.user_id, comment=comment or '',
                created_at=now, updated_at=now,
            )
            self._folders[folder.id] = folder
            state = self._commit()
        logger.debug('folder %s added (%s)', folder.id, folder.name)
        self._emit('add_folder', state)
        return folder

    def get_folder(self, folder_id: str) -> Optional[Folder]:
        with self._lock:
            return self._folders.get(folder_id)

    def delete_folder(self, folder_id: str) -> None:
        with self._lock:
            if self._folders.pop(folder_id, None) is None:
                return
            self._folder_wordlists[:] = [j for j in self._folder_wordlists if j.folder_id != folder_id]
            state = self._commit()
        logger.debug('folder %s deleted', folder_id)
        self._emit('delete_folder', state)

    def add_wordlist_to_folder(self, folder_id: str, wordlist_id: str) -> None:
        with self._lock:
            if folder_id not in self._folders or wordlist_id not in self._wordlists:
                logger.debug('link %s -> %s ignored: unknown id', wordlist_id, folder_id)
                return
            count = 0
            for j in self._folder_wordlists:
                if j.folder_id != folder_id:
                    continue
                if j.wordlist_id == wordlist_id:
                    return
                count += 1
            if count >= MAX_WORDLISTS_PER_FOLDER:
                logger.warning('folder %s is full', folder_id)
                raise CapacityExceededError(
                    f'This folder already has {MAX_WORDLISTS_PER_FOLDER} wordlists.',
                    limit=MAX_WORDLISTS_PER_FOLDER,
                )
            self._folder_wordlists.append(
                FolderWordlist(id=new_id(), folder_id=folder_id, wordlist_id=wordlist_id)
            )
            state = self._commit()
        self._emit('add_wordlist_to_folder', state)

    def remove_wordlist_from_folder(self, folder_id: str, wordlist_id: str) -> None:
        with self._lock:
            before = len(self._folder_wordlists)
            self._folder_wordlists[:] = [
                j for j in self._folder_wordlists
                if not (j.folder_id == folder_id and j.wordlist_id == wordlist_id)
            ]
            if len(self._folder_wordlists) == before:
                return
            state = self._commit()
        self._emit('remove_wordlist_from_folder', state)

    def folder_wordlists(self, folder_id: str) -> List[Wordlist]:
        with self._lock:
            return [
                self._wordlists[j.wordlist_id]
                for j in self._folder_wordlists
                if j.folder_id == folder_id and j.wordlist_id in self._wordlists
            ]

    # --------------------------- snapshots ---------------------------

    def to_dict(self) -> dict:
        with self._lock:
            return {
                'userId': self.user_id,
                'flashcards': {k: v.to_dict() for k, v in self._flashcards.items()},
                'wordlists': {k: v.to_dict() for k, v in self._wordlists.items()},
                'wordlistFlashcards': [j.to_dict() for j in self._wordlist_flashcards],
                'folders': {k: v.to_dict() for k, v in self._folders.items()},
                'folderWordlists': [j.to_dict() for j in self._folder_wordlists],
            }

    def load(self, data: dict) -> None:
        """Replace the whole library with a snapshot produced by ``to_dict``."""
        flashcards = {}
        for raw in (data.get('flashcards') or {}).values():
            card = Flashcard.from_dict(raw)
            card = replace(
                card, word=_check_text(card.word, 'word'), meaning=_check_text(card.meaning, 'meaning'),
                comment=_check_comment(card.comment), frequency=_check_frequency(card.frequency),
            )
            flashcards[card.id] = card
        wordlists = {}
        for raw in (data.get('wordlists') or {}).values():
            wl = Wordlist.from_dict(raw)
            wl = replace(wl, name=_check_text(wl.name, 'name'))
            wordlists[wl.id] = wl
        folders = {}
        for raw in (data.get('folders') or {}).values():
            folder = Folder.from_dict(raw)
            folder = replace(folder, name=_check_text(folder.name, 'name'))
            folders[folder.id] = folder
        if len(wordlists) > MAX_WORDLISTS_PER_USER:
            raise CapacityExceededError(f'Wordlist cap reached ({MAX_WORDLISTS_PER_USER}).',
                                        limit=MAX_WORDLISTS_PER_USER)
        if len(folders) > MAX_FOLDERS_PER_USER:
            raise CapacityExceededError(f'Folder cap reached ({MAX_FOLDERS_PER_USER}).',
                                        limit=MAX_FOLDERS_PER_USER)

        wordlist_flashcards = _load_joins(
            data.get('wordlistFlashcards') or [], WordlistFlashcard.from_dict,
            lambda j: (j.wordlist_id, j.flashcard_id),
            lambda j: j.wordlist_id in wordlists and j.flashcard_id in flashcards,
            MAX_FLASHCARDS_PER_WORDLIST, 'This wordlist already has {} flashcards.',
        )
        folder_wordlists = _load_joins(
            data.get('folderWordlists') or [], FolderWordlist.from_dict,
            lambda j: (j.folder_id, j.wordlist_id),
            lambda j: j.folder_id in folders and j.wordlist_id in wordlists,
            MAX_WORDLISTS_PER_FOLDER, 'This folder already has {} wordlists.',
        )

        with self._lock:
            self.user_id = data.get('userId') or self.user_id
            self._flashcards = flashcards
            self._wordlists = wordlists
            self._wordlist_flashcards = wordlist_flashcards
            self._folders = folders
            self._folder_wordlists = folder_wordlists
            state = self._commit()
        logger.info('library loaded: %s', self.stats)
        self._emit('load', state)

    @classmethod
    def from_dict(cls, data: dict) -> 'LibraryStore':
        store = cls(user_id=data.get('userId') or 'demo-user')
        store.load(data)
        return store


def _load_joins(rows, parse, pair_of, is_live, limit, cap_message):
    out, seen, counts = [], set(), {}
    for raw in rows:
        join = parse(raw)
        pair = pair_of(join)
        if pair in seen or not is_live(join):
            continue
        counts[pair[0]] = counts.get(pair[0], 0) + 1
        if counts[pair[0]] > limit:
            raise CapacityExceededError(cap_message.format(limit), limit=limit)
        seen.add(pair)
        out.append(join)
    return out
