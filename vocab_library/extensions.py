from __future__ import annotations
from flask import Flask, current_app

from .store import LibraryStore


class LibraryExtension:
    """Binds one LibraryStore to each Flask app, like the other Flask extensions."""

    def __init__(self, app: Flask | None = None):
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        store = LibraryStore(user_id=app.config.get('LIBRARY_USER_ID', 'demo-user'))
        app.extensions['library'] = store

    @property
    def store(self) -> LibraryStore:
        return current_app.extensions['library']


library = LibraryExtension()
