"""Question generators for the coin-counting and price-comparison mini-games."""

from __future__ import annotations

import random
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Callable, Dict, Tuple, Union

from .exceptions import UnknownMiniGameError
from .money import to_decimal

COIN_VALUES: Tuple[Tuple[str, Decimal, int], ...] = (
    ("penny", Decimal("0.01"), 10),
    ("nickel", Decimal("0.05"), 5),
    ("dime", Decimal("0.10"), 8),
    ("quarter", Decimal("0.25"), 4),
)

PRICE_PAIRS: Tuple[Tuple[str, Decimal, Decimal], ...] = (
    ("Apple", Decimal("1.50"), Decimal("1.25")),
    ("Notebook", Decimal("3.00"), Decimal("2.75")),
    ("Pencil", Decimal("0.50"), Decimal("0.75")),
)


@dataclass(frozen=True, slots=True)
class CoinPile:
    coin: str
    value: Decimal
    count: int

    @property
    def label(self) -> str:
        return f"{self.count} {self.coin}{'s' if self.count > 1 else ''}"


@dataclass(frozen=True, slots=True)
class CoinCountingPuzzle:
    """Count a handful of coins and give the total value."""

    piles: Tuple[CoinPile, ...]
    game_key: str = "coinCounting"

    @property
    def answer(self) -> Decimal:
        return to_decimal(sum((pile.value * pile.count for pile in self.piles), Decimal("0")))

    @property
    def prompt(self) -> str:
        return "Count these coins: " + ", ".join(pile.label for pile in self.piles)

    def check(self, response: object) -> bool:
        try:
            return to_decimal(str(response).strip().lstrip("$")) == self.answer
        except (InvalidOperation, TypeError):
            return False

    def as_dict(self) -> Dict[str, object]:
        return {
            "game": self.game_key,
            "prompt": self.prompt,
            "coins": [{"coin": pile.coin, "value": str(pile.value), "count": pile.count} for pile in self.piles],
        }


@dataclass(frozen=True, slots=True)
class PriceComparisonPuzzle:
    """Pick the cheaper of two offers for the same item."""

    item: str
    price_a: Decimal
    price_b: Decimal
    game_key: str = "priceComparison"

    @property
    def answer(self) -> str:
        return "A" if self.price_a < self.price_b else "B"

    @property
    def prompt(self) -> str:
        return f"Which is cheaper? A) {self.item} for ${self.price_a} or B) {self.item} for ${self.price_b}"

    def check(self, response: object) -> bool:
        return str(response).strip().upper() == self.answer

    def as_dict(self) -> Dict[str, object]:
        return {
            "game": self.game_key,
            "prompt": self.prompt,
            "item": self.item,
            "options": {"A": str(self.price_a), "B": str(self.price_b)},
        }


Puzzle = Union[CoinCountingPuzzle, PriceComparisonPuzzle]


def coin_counting(rng: random.Random) -> CoinCountingPuzzle:
    piles = tuple(
        CoinPile(coin=name, value=value, count=rng.randint(1, most))
        for name, value, most in COIN_VALUES
    )
    return CoinCountingPuzzle(piles=piles)


def price_comparison(rng: random.Random) -> PriceComparisonPuzzle:
    item, price_a, price_b = rng.choice(PRICE_PAIRS)
    return PriceComparisonPuzzle(item=item, price_a=price_a, price_b=price_b)


GENERATORS: Dict[str, Callable[[random.Random], Puzzle]] = {
    "coinCounting": coin_counting,
    "priceComparison": price_comparison,
}


def generate_puzzle(game_key: str, rng: random.Random | None = None) -> Puzzle:
    """Build a fresh question for ``game_key``."""

    try:
        generator = GENERATORS[game_key]
    except KeyError as exc:
        raise UnknownMiniGameError(f"No puzzle generator for '{game_key}'.") from exc
    return generator(rng or random.Random())


__all__ = [
    "CoinCountingPuzzle",
    "CoinPile",
    "GENERATORS",
    "PriceComparisonPuzzle",
    "Puzzle",
    "generate_puzzle",
]
