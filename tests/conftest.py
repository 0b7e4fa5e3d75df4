"""Shared fixtures for problem bank tests."""

import pytest

from problembank.config import ConfigModel
from problembank.db import InMemoryStore
from problembank.models import CycleAggregate, ProblemRecord
from problembank.pipeline import ProblemBankService


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def config():
    return ConfigModel()


@pytest.fixture
def service(store, config):
    return ProblemBankService(store, config)


@pytest.fixture
def add_problem(store):
    """Insert a problem straight into the store and return it."""

    def _add(title="A problem", statement="Something is broken", **fields):
        return store.insert_problem(ProblemRecord(title=title, problem_statement=statement, **fields))

    return _add


@pytest.fixture
def add_cycle(store):
    """Seed a cycle aggregate from nested step dicts."""

    def _add(cycle_id="cycle-1", **fields):
        cycle = CycleAggregate(id=cycle_id, **fields)
        store.add_cycle(cycle)
        return cycle

    return _add
