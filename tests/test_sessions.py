import pytest

from vocab_library.sessions import SessionMode, StudySession


@pytest.fixture()
def deck(store):
    wl = store.add_wordlist('Starter', order='alpha')
    for word in ('resilient', 'focus', 'eloquent'):
        card = store.add_flashcard(word, f'meaning of {word}')
        store.add_flashcard_to_wordlist(wl.id, card.id)
    return wl


def test_learn_session_walks_ordered_cards(store, deck):
    s = StudySession(store, deck.id)
    assert s.position == (1, 3)
    assert s.current.word == 'eloquent'
    assert s.advance().word == 'focus'
    assert s.advance().word == 'resilient'
    assert s.advance().word == 'eloquent'


def test_mark_learned_bumps_frequency(store, deck):
    s = StudySession(store, deck.id)
    first = s.current
    nxt = s.mark_learned()
    assert store.get_flashcard(first.id).frequency == 1
    assert nxt.word == 'focus'


def test_test_mode_reveal_resets_on_advance(store, deck):
    s = StudySession(store, deck.id, mode='test')
    assert s.mode is SessionMode.TEST
    assert not s.revealed
    first = s.reveal()
    assert s.revealed
    assert first.frequency == 1
    s.reveal()
    assert store.get_flashcard(first.id).frequency == 1
    second = s.advance()
    assert not s.revealed
    assert second.frequency == 0
    assert s.reveal().frequency == 1


def test_reveal_then_got_it_counts_once(store, deck):
    s = StudySession(store, deck.id, mode='test')
    first = s.current
    s.reveal()
    s.mark_learned()
    assert store.get_flashcard(first.id).frequency == 1


def test_reveal_not_available_in_learn_mode(store, deck):
    with pytest.raises(ValueError):
        StudySession(store, deck.id).reveal()


def test_empty_session(store):
    s = StudySession(store, 'missing')
    assert s.is_empty
    assert s.current is None
    assert s.position == (0, 0)
    assert s.advance() is None
    assert s.mark_learned() is None
