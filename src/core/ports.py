"""Ports (interfaces) used by the core.

Ports define the minimal contracts for dataset and display adapters so that
the core can be reused with different loaders and frontends.
"""

from __future__ import annotations

from typing import Protocol

from core.models import Dataset, RegionEntity


class DatasetSource(Protocol):
    """One-shot bulk load of messages and the location cache."""

    def load(self) -> Dataset:
        ...


class RefreshListener(Protocol):
    """Display consumer told whenever a region entity changes."""

    def request_refresh(self, region: RegionEntity) -> None:
        ...
