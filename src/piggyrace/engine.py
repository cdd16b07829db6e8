"""The savings engine: the only code allowed to move money in a game."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Iterable, List, Optional, Tuple

from .catalog import Catalog, GameRules
from .exceptions import (
    AlreadyCollectedError,
    InsufficientFundsError,
    PersistenceFailedError,
    PiggyRaceError,
    TooSoonError,
)
from .i18n import Translator
from .models import (
    AIRacer,
    Choice,
    CompletedGoal,
    Credited,
    GameEvent,
    GamePhase,
    GameStatus,
    Goal,
    GoalCompleted,
    MilestoneReached,
    MiniGameOutcome,
    TemptationOutcome,
    utc_now,
)
from .money import ZERO, ceil_days, format_currency, to_decimal
from .notifications import Notification, NotificationCenter, NotificationChannel, NotificationType
from .ops import StateStore, StructuredLogger
from .state import GameState, load, serialize

RACER_FACTOR_MIN = Decimal("0.75")
RACER_FACTOR_MAX = Decimal("1.25")


class SavingsEngine:
    """Apply the savings rules to a single, exclusively owned :class:`GameState`.

    Every public operation either completes entirely (including the save to the
    configured store) or raises a :class:`~piggyrace.exceptions.PiggyRaceError`
    without touching the state. A failing store does not roll anything back: the
    in-memory state stays authoritative, the result reports ``persisted=False``
    and :attr:`persistence_error` holds the cause until the next good save.
    """

    __slots__ = (
        "_state",
        "_catalog",
        "_store",
        "_notifications",
        "_logger",
        "_translator",
        "_locale",
        "_clock",
        "_now",
        "_persistence_error",
    )

    def __init__(
        self,
        state: GameState | None = None,
        *,
        catalog: Catalog | None = None,
        store: StateStore | None = None,
        notifications: NotificationCenter | None = None,
        logger: StructuredLogger | None = None,
        translator: Translator | None = None,
        locale: str | None = None,
        clock: Callable[[], date] = date.today,
        now: Callable[[], datetime] = utc_now,
    ) -> None:
        self._catalog = catalog or Catalog()
        self._store = store
        self._notifications = notifications or NotificationCenter()
        self._logger = logger or StructuredLogger()
        self._translator = translator or Translator()
        self._locale = locale
        self._clock = clock
        self._now = now
        self._persistence_error: PersistenceFailedError | None = None
        if state is None:
            state = load(store.load() if store is not None else None, today=clock())
        self._state = state
        self._logger.log(
            "game_loaded",
            phase=state.game_phase.value,
            goal=state.current_goal.goal_id if state.current_goal else None,
            savings=float(state.current_savings),
        )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def state(self) -> GameState:
        return self._state

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    @property
    def rules(self) -> GameRules:
        return self._catalog.rules

    @property
    def notifications(self) -> NotificationCenter:
        return self._notifications

    @property
    def logger(self) -> StructuredLogger:
        return self._logger

    @property
    def persistence_error(self) -> PersistenceFailedError | None:
        """The last save failure, cleared by the next successful save."""

        return self._persistence_error

    def today(self) -> date:
        return self._clock()

    # ------------------------------------------------------------------
    # Goals
    # ------------------------------------------------------------------
    def select_goal(self, goal_id: str) -> Goal:
        try:
            goal = self._catalog.goal(goal_id)
        except PiggyRaceError as exc:
            self._reject("select_goal", exc)
            raise
        state = self._state
        state.current_goal = goal
        state.target_amount = goal.price
        state.current_savings = ZERO
        state.milestones_reached = set()
        state.goal_archived = False
        state.game_phase = GamePhase.DASHBOARD
        self._persist()
        self._logger.log("goal_selected", goal=goal.goal_id, target=float(goal.price))
        self._notify(NotificationType.GOAL_SELECTED, "goal.selected", goal=goal.name)
        return goal

    def reset_for_new_goal(self) -> None:
        """Drop the current goal, keeping the gallery and the racers."""

        state = self._state
        state.current_goal = None
        state.target_amount = ZERO
        state.current_savings = ZERO
        state.milestones_reached = set()
        state.goal_archived = False
        state.game_phase = GamePhase.GOAL_SELECTION
        self._persist()
        self._logger.log("goal_reset", completed_goals=len(state.completed_goals))

    def start_new_game(self) -> GameState:
        """Throw away all progress, history included."""

        self._state = GameState(last_interest_date=self._clock())
        self._persist()
        self._logger.log("new_game")
        return self._state

    def gallery(self) -> Tuple[CompletedGoal, ...]:
        return tuple(self._state.completed_goals)

    # ------------------------------------------------------------------
    # Earning and spending
    # ------------------------------------------------------------------
    def credit_allowance(self, today: date | None = None) -> Credited:
        day = today or self._clock()
        last = self._state.last_allowance_date
        if last is not None and day <= last:
            error = AlreadyCollectedError(
                f"Allowance for {day.isoformat()} was already collected."
                if day == last
                else f"Allowance was already collected through {last.isoformat()}."
            )
            self._reject("credit_allowance", error)
            raise error
        self._state.last_allowance_date = day
        return self._credit(
            self.rules.daily_allowance, "allowance", NotificationType.ALLOWANCE, "allowance.credited"
        )

    def complete_chore(self) -> Credited:
        # No daily cap on chores, unlike the allowance.
        return self._credit(self.rules.chore_reward, "chore", NotificationType.CHORE, "chore.completed")

    def credit_weekly_interest(self, today: date | None = None) -> Credited:
        day = today or self._clock()
        elapsed = (day - self._state.last_interest_date).days
        interval = self.rules.interest_interval_days
        if elapsed < interval:
            error = TooSoonError(
                f"Interest is paid every {interval} days; only {max(elapsed, 0)} elapsed."
            )
            self._reject("credit_weekly_interest", error)
            raise error
        self._state.last_interest_date = day
        return self._credit(
            self.rules.weekly_interest, "interest", NotificationType.INTEREST, "interest.credited"
        )

    def resolve_temptation(self, temptation_id: str, choice: Choice | str) -> TemptationOutcome:
        try:
            temptation = self._catalog.temptation(temptation_id)
        except PiggyRaceError as exc:
            self._reject("resolve_temptation", exc)
            raise
        decision = Choice(choice)
        state = self._state

        if decision is Choice.SAVE:
            bonus = self.rules.save_bonus
            state.current_savings = to_decimal(state.current_savings + bonus)
            events = self._check_milestones_and_completion()
            persisted = self._persist()
            self._logger.log(
                "temptation_resisted",
                temptation=temptation.temptation_id,
                bonus=float(bonus),
                savings=float(state.current_savings),
            )
            self._notify(
                NotificationType.TEMPTATION,
                "temptation.saved",
                price=format_currency(temptation.price),
                amount=format_currency(bonus),
            )
            return TemptationOutcome(
                temptation=temptation,
                choice=decision,
                credited=bonus,
                cost=ZERO,
                new_total=state.current_savings,
                events=events,
                persisted=persisted,
            )

        if state.current_savings < temptation.price:
            self._notify(
                NotificationType.TEMPTATION,
                "temptation.insufficient",
                price=format_currency(temptation.price),
            )
            error = InsufficientFundsError(
                f"Savings of {format_currency(state.current_savings)} cannot cover "
                f"{format_currency(temptation.price)}."
            )
            self._reject("resolve_temptation", error)
            raise error

        state.current_savings = to_decimal(state.current_savings - temptation.price)
        delay = ceil_days(temptation.price, self.rules.average_daily_rate)
        events = self._check_milestones_and_completion()
        persisted = self._persist()
        self._logger.log(
            "temptation_bought",
            temptation=temptation.temptation_id,
            cost=float(temptation.price),
            delay_days=delay,
            savings=float(state.current_savings),
        )
        self._notify(
            NotificationType.TEMPTATION,
            "temptation.spent",
            price=format_currency(temptation.price),
            item=temptation.item,
            days=delay,
        )
        return TemptationOutcome(
            temptation=temptation,
            choice=decision,
            credited=ZERO,
            cost=temptation.price,
            new_total=state.current_savings,
            delay_days=delay,
            events=events,
            persisted=persisted,
        )

    def resolve_mini_game(self, game_type: str, answer_correct: bool) -> MiniGameOutcome:
        try:
            game = self._catalog.mini_game(game_type)
        except PiggyRaceError as exc:
            self._reject("resolve_mini_game", exc)
            raise
        state = self._state
        if not answer_correct:
            self._logger.log("mini_game_missed", game=game.key)
            self._notify(NotificationType.MINI_GAME, "minigame.incorrect")
            return MiniGameOutcome(game=game, correct=False, reward=ZERO, new_total=state.current_savings)

        state.current_savings = to_decimal(state.current_savings + game.reward)
        events = self._check_milestones_and_completion()
        persisted = self._persist()
        self._logger.log(
            "mini_game_won",
            game=game.key,
            reward=float(game.reward),
            savings=float(state.current_savings),
        )
        self._notify(NotificationType.MINI_GAME, "minigame.correct", amount=format_currency(game.reward))
        return MiniGameOutcome(
            game=game,
            correct=True,
            reward=game.reward,
            new_total=state.current_savings,
            events=events,
            persisted=persisted,
        )

    # ------------------------------------------------------------------
    # Racers
    # ------------------------------------------------------------------
    def advance_ai_racers(self, factors: Iterable[float | Decimal]) -> Tuple[AIRacer, ...]:
        """Advance each racer by its daily progress scaled by the matching factor.

        ``factors`` holds one sample per racer, each within ``[0.75, 1.25]``.
        """

        racers = self._state.ai_racers
        samples: List[Decimal] = [Decimal(str(factor)) for factor in factors]
        if len(samples) != len(racers):
            raise ValueError(f"Expected {len(racers)} racer factors, got {len(samples)}.")
        for sample in samples:
            if not RACER_FACTOR_MIN <= sample <= RACER_FACTOR_MAX:
                raise ValueError(f"Racer factor {sample} is outside [0.75, 1.25].")
        for racer, sample in zip(racers, samples):
            racer.advance(sample)
        self._persist()
        self._logger.log(
            "racers_advanced",
            racers={racer.name: float(racer.savings) for racer in racers},
        )
        return tuple(racers)

    # ------------------------------------------------------------------
    # Read-only projections
    # ------------------------------------------------------------------
    def estimated_completion(self, today: date | None = None) -> Optional[date]:
        """Date the goal is expected to be reached at the average daily earning rate."""

        state = self._state
        if state.current_goal is None:
            return None
        day = today or self._clock()
        remaining = state.target_amount - state.current_savings
        return day + timedelta(days=ceil_days(remaining, self.rules.average_daily_rate))

    def get_status(self, today: date | None = None) -> GameStatus:
        state = self._state
        if state.target_amount > Decimal("0"):
            progress = int(state.progress.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
        else:
            progress = 0
        return GameStatus(
            phase=state.game_phase,
            goal=state.current_goal,
            savings=state.current_savings,
            target=state.target_amount,
            progress=progress,
            completed_goals=len(state.completed_goals),
            milestones=tuple(sorted(state.milestones_reached)),
            estimated_completion=self.estimated_completion(today),
            ready_for_new_goal=state.current_goal is None or state.goal_archived,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _credit(
        self,
        amount: Decimal,
        source: str,
        notification_type: NotificationType,
        message_key: str,
    ) -> Credited:
        state = self._state
        state.current_savings = to_decimal(state.current_savings + amount)
        events = self._check_milestones_and_completion()
        persisted = self._persist()
        self._logger.log("credited", source=source, amount=float(amount), savings=float(state.current_savings))
        self._notify(
            notification_type,
            message_key,
            amount=format_currency(amount),
            total=format_currency(state.current_savings),
        )
        return Credited(
            amount=amount,
            new_total=state.current_savings,
            source=source,
            events=events,
            persisted=persisted,
        )

    def _check_milestones_and_completion(self) -> Tuple[GameEvent, ...]:
        state = self._state
        goal = state.current_goal
        target = state.target_amount
        if goal is None or target <= Decimal("0"):
            return ()
        saved_percent = state.current_savings * 100
        events: List[GameEvent] = []
        for threshold in self.rules.milestones:
            if threshold in state.milestones_reached:
                continue
            if saved_percent >= target * threshold:
                state.milestones_reached.add(threshold)
                events.append(MilestoneReached(threshold=threshold, goal_id=goal.goal_id))
                self._logger.log("milestone_reached", goal=goal.goal_id, threshold=threshold)
                self._notify(
                    NotificationType.MILESTONE,
                    f"milestone.{threshold}",
                    channel=NotificationChannel.MODAL,
                    title_key="milestone.title",
                    threshold=threshold,
                )
        if saved_percent >= target * 100 and not state.goal_archived:
            entry = CompletedGoal(goal=goal, completed_at=self._now(), final_amount=state.current_savings)
            state.completed_goals.append(entry)
            state.goal_archived = True
            events.append(GoalCompleted(goal=goal, entry=entry))
            self._logger.log("goal_completed", goal=goal.goal_id, final_amount=float(entry.final_amount))
            self._notify(
                NotificationType.GOAL_COMPLETED,
                "goal.completed",
                channel=NotificationChannel.MODAL,
                title_key="goal.completed.title",
                goal=goal.name,
            )
        return tuple(events)

    def _persist(self) -> bool:
        if self._store is None:
            return True
        try:
            self._store.save(serialize(self._state))
        except PersistenceFailedError as exc:
            self._persistence_error = exc
            self._logger.log("persistence_failed", error=str(exc))
            self._notify(NotificationType.PERSISTENCE_FAILED, "persistence.failed")
            return False
        self._persistence_error = None
        return True

    def _reject(self, operation: str, error: PiggyRaceError) -> None:
        self._logger.log("operation_rejected", operation=operation, reason=type(error).__name__, detail=str(error))

    def _notify(
        self,
        notification_type: NotificationType,
        message_key: str,
        *,
        channel: NotificationChannel = NotificationChannel.TOAST,
        title_key: str | None = None,
        **params: object,
    ) -> None:
        body = self._translator.translate(message_key, locale=self._locale, **params)
        title = self._translator.translate(title_key, locale=self._locale, **params) if title_key else ""
        metadata = {key: str(value) for key, value in params.items()}
        self._notifications.queue(
            Notification(
                channel=channel,
                type=notification_type,
                title=title,
                body=body,
                metadata=metadata,
            )
        )


__all__ = ["RACER_FACTOR_MAX", "RACER_FACTOR_MIN", "SavingsEngine"]
