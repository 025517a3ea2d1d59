"""Customer record as loaded from the store."""

from __future__ import annotations

from dataclasses import dataclass

from orderquery.domain.model.value_objects import Address


@dataclass
class Customer:
    id: int
    name: str
    address: Address
