"""
Providers de RabbitMQ sobre rabbitmqctl / rabbitmqadmin.
"""

from warren.providers.rabbitmq.rabbitmqctl import Rabbitmqctl
from warren.providers.rabbitmq.parser import GrantRecord, parse_line, find_record
from warren.providers.rabbitmq.user_permissions import UserPermissionsProvider, list_user_permissions
from warren.providers.rabbitmq.exchange import ExchangeProvider

__all__ = [
    "Rabbitmqctl",
    "GrantRecord",
    "parse_line",
    "find_record",
    "UserPermissionsProvider",
    "list_user_permissions",
    "ExchangeProvider",
]
