"""
Fixtures compartidas: rabbitmqctl simulado y caché aislada por test.
"""

from unittest.mock import Mock

import pytest

from warren.core.project.models import ExchangeDeclaration, UserPermissionsDeclaration
from warren.core.runtime.cache import ListingCache
from warren.providers.rabbitmq.rabbitmqctl import Rabbitmqctl


@pytest.fixture
def ctl():
    """rabbitmqctl simulado; los listados devuelven vacío salvo que el test diga otra cosa."""
    mock = Mock(spec=Rabbitmqctl)
    mock.rabbitmqctl_list.return_value = ""
    mock.rabbitmqctl.return_value = ""
    mock.rabbitmqadmin.return_value = ""
    return mock


@pytest.fixture
def cache():
    """Caché de listados nueva para cada test."""
    return ListingCache()


@pytest.fixture
def permissions():
    """Fábrica de declaraciones user_permissions."""
    def make(name="foo@bar", **attributes):
        return UserPermissionsDeclaration(name=name, **attributes)
    return make


@pytest.fixture
def exchange():
    """Fábrica de declaraciones exchange."""
    def make(name="myexchange@myvhost", **attributes):
        attributes.setdefault("type", "topic")
        return ExchangeDeclaration(name=name, **attributes)
    return make
