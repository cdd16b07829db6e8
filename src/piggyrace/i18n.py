"""Internationalisation helpers for the celebratory messages of Piggy Race."""

from __future__ import annotations

from typing import Dict, Mapping, Optional


class Translator:
    """Store translations for short interface strings with ``str.format`` fields."""

    def __init__(self, default_locale: str = "en", *, translations: Optional[Mapping[str, Mapping[str, str]]] = None) -> None:
        self.default_locale = default_locale
        self._translations: Dict[str, Dict[str, str]] = {
            "en": {
                "goal.selected": "Goal selected: {goal}!",
                "allowance.credited": "Daily allowance: +{amount}. Total savings: {total}",
                "chore.completed": "Chore completed: +{amount}. Total savings: {total}",
                "interest.credited": "Weekly interest: +{amount}. Your money is growing! Total: {total}",
                "temptation.saved": "Great choice! You saved {price} and earned a {amount} bonus!",
                "temptation.spent": "You spent {price} on {item}. This purchase delayed your goal by {days} days.",
                "temptation.insufficient": "Not enough savings to spend {price}.",
                "minigame.correct": "Correct! You earned {amount}.",
                "minigame.incorrect": "Not quite right. Try again next time!",
                "milestone.25": "Great start! You're a quarter of the way there!",
                "milestone.50": "Halfway there! You're doing amazing!",
                "milestone.75": "So close! You're three-quarters done!",
                "milestone.100": "Congratulations! You've reached your goal!",
                "milestone.title": "Milestone reached: {threshold}%!",
                "goal.completed.title": "Goal completed!",
                "goal.completed": "Congratulations! You can now buy your {goal}!",
                "persistence.failed": "Your progress could not be saved right now.",
            },
            "es": {
                "goal.selected": "Meta elegida: {goal}!",
                "allowance.credited": "Mesada diaria: +{amount}. Ahorro total: {total}",
                "chore.completed": "Tarea completada: +{amount}. Ahorro total: {total}",
                "interest.credited": "Interés semanal: +{amount}. ¡Tu dinero crece! Total: {total}",
                "minigame.correct": "¡Correcto! Ganaste {amount}.",
                "minigame.incorrect": "Casi. ¡Inténtalo la próxima vez!",
                "milestone.25": "¡Buen comienzo! Ya llevas una cuarta parte.",
                "milestone.50": "¡A mitad de camino! Lo estás haciendo genial.",
                "milestone.75": "¡Muy cerca! Ya llevas tres cuartas partes.",
                "milestone.100": "¡Felicidades! Alcanzaste tu meta.",
                "milestone.title": "¡Hito alcanzado: {threshold}%!",
                "goal.completed.title": "¡Meta cumplida!",
                "goal.completed": "¡Felicidades! Ya puedes comprar tu {goal}.",
            },
        }
        if translations:
            for locale, mapping in translations.items():
                self._translations.setdefault(locale, {}).update(mapping)

    def set_translation(self, locale: str, key: str, value: str) -> None:
        self._translations.setdefault(locale, {})[key] = value

    def translate(self, key: str, *, locale: Optional[str] = None, **params: object) -> str:
        target_locale = locale or self.default_locale
        language = self._translations.get(target_locale) or self._translations[self.default_locale]
        template = language.get(key) or self._translations["en"].get(key, key)
        return template.format(**params) if params else template

    def available_locales(self) -> tuple[str, ...]:
        return tuple(sorted(self._translations))


__all__ = ["Translator"]
