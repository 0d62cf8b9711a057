from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional
import uuid

from .errors import ValidationError

COMMENT_MAX_LENGTH = 500


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


def _parse_ts(value) -> datetime:
    if isinstance(value, datetime):
        return value
    if not value:
        return utcnow()
    # fromisoformat() only accepts a trailing 'Z' on 3.11+
    if isinstance(value, str) and value.endswith('Z'):
        value = value[:-1] + '+00:00'
    return datetime.fromisoformat(value)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class OrderStrategy(str, Enum):
    CREATED_AT = 'created_at'
    ALPHA = 'alpha'
    SHUFFLE = 'shuffle'

    @classmethod
    def parse(cls, value) -> 'OrderStrategy':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            allowed = ', '.join(o.value for o in cls)
            raise ValidationError(f'order must be one of: {allowed}', field='order') from None


@dataclass(frozen=True)
class Flashcard:
    id: str
    word: str
    meaning: str
    created_by: str
    comment: str = ''
    frequency: int = 0
    dictionary_id: Optional[str] = None
    audio_url: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'word': self.word,
            'dictionaryId': self.dictionary_id,
            'meaning': self.meaning,
            'audioUrl': self.audio_url,
            'comment': self.comment,
            'frequency': self.frequency,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
            'createdBy': self.created_by,
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> 'Flashcard':
        return cls(
            id=data['id'],
            word=data['word'],
            meaning=data.get('meaning') or '',
            created_by=data.get('createdBy') or '',
            comment=data.get('comment') or '',
            frequency=data.get('frequency', 0),
            dictionary_id=data.get('dictionaryId'),
            audio_url=data.get('audioUrl'),
            created_at=_parse_ts(data.get('createdAt')),
            updated_at=_parse_ts(data.get('updatedAt')),
        )


@dataclass(frozen=True)
class Wordlist:
    id: str
    name: str
    created_by: str
    comment: str = ''
    order: OrderStrategy = OrderStrategy.CREATED_AT
    shuffle_seed: Optional[float] = None
    updated_by: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'comment': self.comment,
            'order': self.order.value,
            'shuffleSeed': self.shuffle_seed,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
            'createdBy': self.created_by,
            'updatedBy': self.updated_by,
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> 'Wordlist':
        seed = data.get('shuffleSeed')
        return cls(
            id=data['id'],
            name=data['name'],
            created_by=data.get('createdBy') or '',
            comment=data.get('comment') or '',
            order=OrderStrategy.parse(data.get('order') or OrderStrategy.CREATED_AT),
            shuffle_seed=float(seed) if seed is not None else None,
            updated_by=data.get('updatedBy'),
            created_at=_parse_ts(data.get('createdAt')),
            updated_at=_parse_ts(data.get('updatedAt')),
        )


@dataclass(frozen=True)
class WordlistFlashcard:
    id: str
    wordlist_id: str
    flashcard_id: str
    created_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'wordlistId': self.wordlist_id,
            'flashcardId': self.flashcard_id,
            'createdAt': _iso(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> 'WordlistFlashcard':
        return cls(
            id=data.get('id') or new_id(),
            wordlist_id=data['wordlistId'],
            flashcard_id=data['flashcardId'],
            created_at=_parse_ts(data.get('createdAt')),
        )


@dataclass(frozen=True)
class Folder:
    id: str
    name: str
    created_by: str
    comment: str = ''
    updated_by: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'comment': self.comment,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
            'createdBy': self.created_by,
            'updatedBy': self.updated_by,
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> 'Folder':
        return cls(
            id=data['id'],
            name=data['name'],
            created_by=data.get('createdBy') or '',
            comment=data.get('comment') or '',
            updated_by=data.get('updatedBy'),
            created_at=_parse_ts(data.get('createdAt')),
            updated_at=_parse_ts(data.get('updatedAt')),
        )


@dataclass(frozen=True)
class FolderWordlist:
    id: str
    folder_id: str
    wordlist_id: str
    created_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'folderId': self.folder_id,
            'wordlistId': self.wordlist_id,
            'createdAt': _iso(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> 'FolderWordlist':
        return cls(
            id=data.get('id') or new_id(),
            folder_id=data['folderId'],
            wordlist_id=data['wordlistId'],
            created_at=_parse_ts(data.get('createdAt')),
        )


@dataclass(frozen=True)
class Stats:
    flashcards: int = 0
    wordlists: int = 0
    folders: int = 0

    def to_dict(self) -> dict:
        return {'flashcards': self.flashcards, 'wordlists': self.wordlists, 'folders': self.folders}


@dataclass(frozen=True)
class LibraryState:
    """Read-only view of the store at one point in time.

    ``version`` grows by one with every change. Observers may receive
    snapshots out of order under concurrent writers; keep the highest.
    """

    user_id: str
    flashcards: Mapping[str, Flashcard]
    wordlists: Mapping[str, Wordlist]
    wordlist_flashcards: tuple
    folders: Mapping[str, Folder]
    folder_wordlists: tuple
    stats: Stats
    version: int = 0

    @classmethod
    def capture(cls, user_id, flashcards, wordlists, wordlist_flashcards, folders, folder_wordlists,
                version: int = 0) -> 'LibraryState':
        return cls(
            user_id=user_id,
            flashcards=MappingProxyType(dict(flashcards)),
            wordlists=MappingProxyType(dict(wordlists)),
            wordlist_flashcards=tuple(wordlist_flashcards),
            folders=MappingProxyType(dict(folders)),
            folder_wordlists=tuple(folder_wordlists),
            stats=Stats(len(flashcards), len(wordlists), len(folders)),
            version=version,
        )
