"""
Shared fixtures: a small sample domain, a manual scheduler and view model.
"""

import pytest

from navigator_search.repositories import InMemoryDataStore
from navigator_search.services import QueryController
from navigator_search.view_model import TechniqueViewModel

from factories import DOMAIN_VERSION, ManualScheduler, build_sample_domain


@pytest.fixture
def domain():
    return build_sample_domain()


@pytest.fixture
def store(domain):
    return InMemoryDataStore([domain])


@pytest.fixture
def view_model():
    return TechniqueViewModel(DOMAIN_VERSION)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def controller(store, view_model, scheduler):
    controller = QueryController(store, view_model, scheduler=scheduler)
    controller.load()
    return controller
