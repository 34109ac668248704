"""Chaos budgets: resource types, budget and policy evaluation, Prometheus metrics, reconciliation and the /check decision API."""

__version__ = "0.1.0"