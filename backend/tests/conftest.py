"""Shared fixtures: an app wired to a mongomock-backed document store"""
import pytest
from fastapi.testclient import TestClient

from studykit.database import MockDocumentStore
from studykit.main import create_app
from studykit.services.planner import PlannerService


@pytest.fixture
def store():
    return MockDocumentStore("studykit_test")


@pytest.fixture
def planner(store):
    return PlannerService(store)


@pytest.fixture
def client(store):
    with TestClient(create_app(store=store)) as test_client:
        yield test_client
