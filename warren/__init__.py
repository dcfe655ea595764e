"""
warren - Reconciliación declarativa de permisos de RabbitMQ sobre rabbitmqctl.
"""

__version__ = "1.0.0"
