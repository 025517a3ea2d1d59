"""Product record as loaded from the store.

Products live independently of orders; an order line keeps its own copy
of the price it was ordered at.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Product:
    id: int
    name: str
    price: int
    stock_quantity: int
