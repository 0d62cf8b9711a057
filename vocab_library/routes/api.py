from __future__ import annotations
from flask import Blueprint, request, jsonify

from ..extensions import library
from ..services.ai import generate_examples, generate_quiz
from ..sessions import SessionMode, StudySession

bp = Blueprint('api', __name__)


def _body() -> dict:
    return request.get_json(force=True, silent=True) or {}


def _missing(field: str):
    return jsonify({"ok": False, "error": f"missing field: {field}"}), 400


def _not_found():
    return jsonify({"ok": False, "error": "not found"}), 404


@bp.get('/state')
def state():
    store = library.store
    data = store.to_dict()
    data['stats'] = store.stats.to_dict()
    return jsonify(data)


@bp.get('/stats')
def stats():
    return jsonify(library.store.stats.to_dict())


# ---------------------------- flashcards ----------------------------

@bp.get('/flashcards')
def flashcards():
    q = request.args.get('q', '')
    return jsonify([c.to_dict() for c in library.store.search_flashcards(q)])


@bp.post('/flashcards')
def add_flashcard():
    data = _body()
    word = (data.get('word') or '').strip()
    meaning = (data.get('meaning') or '').strip()
    if not word:
        return _missing('word')
    if not meaning:
        return _missing('meaning')
    card = library.store.add_flashcard(
        word, meaning,
        comment=data.get('comment') or '',
        frequency=data.get('frequency') or 0,
        dictionary_id=data.get('dictionaryId'),
        audio_url=data.get('audioUrl'),
    )
    return jsonify({"ok": True, "data": card.to_dict()}), 201


@bp.get('/flashcards/<flashcard_id>')
def get_flashcard(flashcard_id):
    card = library.store.get_flashcard(flashcard_id)
    if card is None:
        return _not_found()
    out = card.to_dict()
    out['wordlists'] = [w.name for w in library.store.flashcard_wordlists(flashcard_id)]
    return jsonify(out)


@bp.delete('/flashcards/<flashcard_id>')
def delete_flashcard(flashcard_id):
    library.store.delete_flashcard(flashcard_id)
    return jsonify({"ok": True})


@bp.post('/flashcards/<flashcard_id>/comment')
def update_comment(flashcard_id):
    data = _body()
    if 'comment' not in data:
        return _missing('comment')
    library.store.update_flashcard_comment(flashcard_id, str(data['comment'] or ''))
    return jsonify({"ok": True})


@bp.post('/flashcards/<flashcard_id>/bump')
def bump(flashcard_id):
    library.store.bump_frequency(flashcard_id)
    return jsonify({"ok": True})


# ---------------------------- wordlists ----------------------------

@bp.get('/wordlists')
def wordlists():
    store = library.store
    out = []
    for wl in store.state.wordlists.values():
        item = wl.to_dict()
        item['count'] = len(store.wordlist_flashcards(wl.id))
        out.append(item)
    return jsonify(out)


@bp.post('/wordlists')
def add_wordlist():
    data = _body()
    name = (data.get('name') or '').strip()
    if not name:
        return _missing('name')
    wl = library.store.add_wordlist(name, data.get('comment') or '', data.get('order') or 'created_at')
    return jsonify({"ok": True, "data": wl.to_dict()}), 201


@bp.get('/wordlists/<wordlist_id>')
def get_wordlist(wordlist_id):
    store = library.store
    wl = store.get_wordlist(wordlist_id)
    if wl is None:
        return _not_found()
    out = wl.to_dict()
    out['flashcards'] = [c.to_dict() for c in store.ordered_flashcards(wordlist_id)]
    out['folders'] = [f.id for f in store.wordlist_folders(wordlist_id)]
    return jsonify(out)


@bp.delete('/wordlists/<wordlist_id>')
def delete_wordlist(wordlist_id):
    library.store.delete_wordlist(wordlist_id)
    return jsonify({"ok": True})


@bp.post('/wordlists/<wordlist_id>/flashcards')
def link_flashcard(wordlist_id):
    fid = _body().get('flashcardId')
    if not fid:
        return _missing('flashcardId')
    library.store.add_flashcard_to_wordlist(wordlist_id, fid)
    return jsonify({"ok": True})


@bp.delete('/wordlists/<wordlist_id>/flashcards/<flashcard_id>')
def unlink_flashcard(wordlist_id, flashcard_id):
    library.store.remove_flashcard_from_wordlist(wordlist_id, flashcard_id)
    return jsonify({"ok": True})


@bp.post('/wordlists/<wordlist_id>/order')
def reorder(wordlist_id):
    order = _body().get('order')
    if not order:
        return _missing('order')
    library.store.reorder_wordlist(wordlist_id, order)
    return jsonify({"ok": True})


@bp.get('/wordlists/<wordlist_id>/examples')
def examples(wordlist_id):
    store = library.store
    wl = store.get_wordlist(wordlist_id)
    if wl is None:
        return _not_found()
    items = generate_examples(wl.name, store.wordlist_flashcards(wordlist_id))
    return jsonify({"ok": True, "data": [e.to_dict() for e in items]})


@bp.get('/wordlists/<wordlist_id>/quiz')
def quiz(wordlist_id):
    store = library.store
    wl = store.get_wordlist(wordlist_id)
    if wl is None:
        return _not_found()
    items = generate_quiz(wl.name, store.wordlist_flashcards(wordlist_id))
    return jsonify({"ok": True, "data": [q.to_dict() for q in items]})


@bp.get('/wordlists/<wordlist_id>/session')
def session(wordlist_id):
    store = library.store
    if store.get_wordlist(wordlist_id) is None:
        return _not_found()
    mode = request.args.get('mode', SessionMode.LEARN.value)
    try:
        study = StudySession(store, wordlist_id, mode)
    except ValueError:
        return jsonify({"ok": False, "error": "mode must be learn or test"}), 400
    current = study.current
    return jsonify({"ok": True, "data": {
        "mode": study.mode.value,
        "position": list(study.position),
        "current": current.to_dict() if current else None,
        "cards": [c.to_dict() for c in study.cards],
    }})


# ----------------------------- folders -----------------------------

@bp.get('/folders')
def folders():
    return jsonify([f.to_dict() for f in library.store.state.folders.values()])


@bp.post('/folders')
def add_folder():
    data = _body()
    name = (data.get('name') or '').strip()
    if not name:
        return _missing('name')
    folder = library.store.add_folder(name, data.get('comment') or '')
    return jsonify({"ok": True, "data": folder.to_dict()}), 201


@bp.get('/folders/<folder_id>')
def get_folder(folder_id):
    store = library.store
    folder = store.get_folder(folder_id)
    if folder is None:
        return _not_found()
    out = folder.to_dict()
    out['wordlists'] = [w.to_dict() for w in store.folder_wordlists(folder_id)]
    return jsonify(out)


@bp.delete('/folders/<folder_id>')
def delete_folder(folder_id):
    library.store.delete_folder(folder_id)
    return jsonify({"ok": True})


@bp.post('/folders/<folder_id>/wordlists')
def link_wordlist(folder_id):
    wid = _body().get('wordlistId')
    if not wid:
        return _missing('wordlistId')
    library.store.add_wordlist_to_folder(folder_id, wid)
    return jsonify({"ok": True})


@bp.delete('/folders/<folder_id>/wordlists/<wordlist_id>')
def unlink_wordlist(folder_id, wordlist_id):
    library.store.remove_wordlist_from_folder(folder_id, wordlist_id)
    return jsonify({"ok": True})
