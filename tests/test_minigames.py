import random
from decimal import Decimal

import pytest

from piggyrace.exceptions import UnknownMiniGameError
from piggyrace.minigames import (
    CoinCountingPuzzle,
    CoinPile,
    PriceComparisonPuzzle,
    generate_puzzle,
)


def test_coin_counting_total_and_answer_checking() -> None:
    puzzle = CoinCountingPuzzle(
        piles=(
            CoinPile("penny", Decimal("0.01"), 3),
            CoinPile("nickel", Decimal("0.05"), 1),
            CoinPile("dime", Decimal("0.10"), 2),
            CoinPile("quarter", Decimal("0.25"), 4),
        )
    )

    assert puzzle.answer == Decimal("1.28")
    assert puzzle.check("1.28")
    assert puzzle.check("$1.28")
    assert puzzle.check(Decimal("1.280"))
    assert not puzzle.check("1.27")
    assert not puzzle.check("lots")
    assert "3 pennys" in puzzle.prompt
    assert "1 nickel," in puzzle.prompt


def test_price_comparison_picks_cheaper_offer() -> None:
    apples = PriceComparisonPuzzle("Apple", Decimal("1.50"), Decimal("1.25"))
    pencils = PriceComparisonPuzzle("Pencil", Decimal("0.50"), Decimal("0.75"))

    assert apples.answer == "B"
    assert pencils.answer == "A"
    assert apples.check(" b ")
    assert not apples.check("A")


def test_generated_puzzles_are_reproducible() -> None:
    first = generate_puzzle("coinCounting", random.Random(11))
    second = generate_puzzle("coinCounting", random.Random(11))

    assert first == second
    for pile in first.piles:
        assert pile.count >= 1
    assert first.as_dict()["game"] == "coinCounting"


def test_price_comparison_generator_uses_known_items() -> None:
    puzzle = generate_puzzle("priceComparison", random.Random(3))

    assert puzzle.item in {"Apple", "Notebook", "Pencil"}
    assert set(puzzle.as_dict()["options"]) == {"A", "B"}


def test_unknown_game_has_no_generator() -> None:
    with pytest.raises(UnknownMiniGameError):
        generate_puzzle("sudoku")
