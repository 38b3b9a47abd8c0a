"""Celery tasks package.

Import task modules here so Celery autodiscovery registers them when loading
``contramind.tasks``.
"""

# Explicit imports keep Celery from dropping "unregistered task" messages.
from contramind.tasks import contract_analysis  # noqa: F401

__all__ = [
	"contract_analysis",
]
