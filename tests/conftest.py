import pytest
from rest_framework.test import APIClient

from tasks.services import BoardService


@pytest.fixture(autouse=True)
def enable_db_access_for_all_tests(db):
    """
    Automatically enable database access for all tests.
    This fixture runs for every test function.
    """
    pass


@pytest.fixture
def board():
    """Board service bound to the default database"""
    return BoardService()


@pytest.fixture
def api_client():
    return APIClient()
