import pytest

from reduxmini import Store, session_storage


@pytest.fixture(autouse=True)
def fresh_store():
    Store.clear_all()
    session_storage.clear()
    yield
    Store.clear_all()
    session_storage.clear()
