from __future__ import annotations
import random
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..models import Flashcard

MAX_ITEMS = 5
DISTRACTORS = ('A random distractor', 'Another distractor', 'Yet another')


@dataclass
class ExampleSentence:
    word: str
    sentences: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {'word': self.word, 'sentences': list(self.sentences)}


@dataclass
class QuizQuestion:
    id: str
    type: str  # mcq|fill
    prompt: str
    answer: str
    choices: Optional[List[str]] = None

    def to_dict(self) -> dict:
        return {'id': self.id, 'type': self.type, 'prompt': self.prompt,
                'choices': self.choices, 'answer': self.answer}


# Placeholder content until an LLM backend is wired in; both functions are pure.

def generate_examples(wordlist_name: str, cards: Sequence[Flashcard]) -> List[ExampleSentence]:
    return [
        ExampleSentence(
            word=card.word,
            sentences=[
                f'In {wordlist_name}, we often stress the word "{card.word}" when presenting.',
                f'She stayed {card.word} despite the noisy room.',
                f'{card.word} practice keeps your skills sharp.',
            ],
        )
        for card in list(cards)[:MAX_ITEMS]
    ]


def generate_quiz(wordlist_name: str, cards: Sequence[Flashcard],
                  rng: Optional[random.Random] = None) -> List[QuizQuestion]:
    rng = rng or random.Random()
    questions = []
    for idx, card in enumerate(list(cards)[:MAX_ITEMS]):
        if idx % 2 == 0:
            choices = [card.meaning, *DISTRACTORS]
            rng.shuffle(choices)
            questions.append(QuizQuestion(
                id=f'{card.id}-{idx}', type='mcq',
                prompt=f'Choose the closest meaning of "{card.word}"',
                answer=card.meaning, choices=choices,
            ))
        else:
            questions.append(QuizQuestion(
                id=f'{card.id}-{idx}', type='fill',
                prompt=f'Fill in the blank: She remained ____ under pressure ("{card.word}").',
                answer=card.meaning,
            ))
    return questions
