import pytest

from vocab_library import create_app
from vocab_library.store import LibraryStore


@pytest.fixture()
def store():
    return LibraryStore(user_id='u1')


@pytest.fixture()
def app_instance():
    app = create_app({'TESTING': True, 'LIBRARY_SEED_DEMO': False, 'LIBRARY_USER_ID': 'tester'})
    yield app


@pytest.fixture()
def client(app_instance):
    return app_instance.test_client()
