# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal

from pydantic import ValidationError

from agent_pay.amounts import AmountLike, to_decimal
from agent_pay.config import DEFAULT_POLICY
from agent_pay.errors import StoreCorruptedError
from agent_pay.ledger import (
    Clock,
    add_spend,
    as_utc,
    new_state,
    normalize_address,
    prune_velocity_window,
    refresh_periods,
    utc_now,
)
from agent_pay.rules import evaluate_payment, usd
from agent_pay.status import build_status
from agent_pay.storage.interface import StateStore
from agent_pay.storage.memory import MemoryStore
from agent_pay.types import PaymentPolicy, PolicyDecision, SpendingState, SpendingStatus

logger = logging.getLogger("agent_pay.policy")


class PolicyEnforcer:
    """
    Spending policy gate for an autonomous payment agent.

    Design contract
    ---------------
    - ``check_payment()`` is read-only. It rolls expired buckets over and
      prunes the velocity window on a private copy, and persists nothing.
    - ``record_payment()`` records what actually happened. It is not gated
      by ``check_payment()`` and accepts amounts the policy would deny.
    - Every save replaces the whole ledger through the StateStore; the
      in-memory state only changes after the save succeeds.
    - All operations take a re-entrant lock. Hold ``locked()`` across a
      check, the payment itself, and the record to rule out two payments
      both passing against the same totals, or use ``check_and_record()``.
    - A ledger that cannot be loaded or validated is replaced with a zeroed
      one. Spend counters silently reset in that case.

    Usage
    -----
    ::

        enforcer = PolicyEnforcer(
            PaymentPolicy(max_per_transaction="1.00", daily_limit="10.00"),
            store=JsonFileStore("spending.json"),
        )

        with enforcer.locked():
            decision = enforcer.check_payment("0.25", "0xabc...")
            if decision.allowed:
                pay()
                enforcer.record_payment("0.25", "0xabc...")
    """

    def __init__(
        self,
        policy: PaymentPolicy | None = None,
        store: StateStore | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._policy: PaymentPolicy = policy if policy is not None else DEFAULT_POLICY
        self._store: StateStore = store if store is not None else MemoryStore()
        self._clock: Clock = clock if clock is not None else utc_now
        self._lock = threading.RLock()
        self._frozen = False
        self._state: SpendingState = self._load_state()

    # ─── Properties ───────────────────────────────────────────────────────────

    @property
    def policy(self) -> PaymentPolicy:
        return self._policy

    @property
    def state(self) -> SpendingState:
        """A rolled-over copy of the ledger. Mutating it has no effect."""
        with self._lock:
            return self._current_view(self._now())

    @property
    def frozen(self) -> bool:
        return self._frozen

    @contextmanager
    def locked(self) -> Iterator[None]:
        """Hold the enforcer lock across several calls."""
        with self._lock:
            yield

    # ─── Decisions ────────────────────────────────────────────────────────────

    def check_payment(self, amount: AmountLike, recipient: str) -> PolicyDecision:
        """
        Decide whether a payment is allowed right now.

        Returns a PolicyDecision; a denial carries a human-readable ``reason``
        and the ``rule`` that failed. Raises InvalidAmountError or
        InvalidRecipientError on malformed input.
        """
        value = to_decimal(amount)
        address = normalize_address(recipient)

        with self._lock:
            now = self._now()
            decision = evaluate_payment(
                self._policy, self._current_view(now), value, address, now
            )

        if not decision.allowed:
            logger.info(
                "Payment of %s to %s denied (%s): %s",
                usd(value),
                address,
                decision.rule,
                decision.reason,
            )
        return decision

    def requires_approval(self, amount: AmountLike) -> bool:
        """True unless ``auto_approve_under`` is set and ``amount`` is below it."""
        value = to_decimal(amount)
        threshold = self._policy.auto_approve_under
        if threshold is None:
            return True
        return value >= threshold

    # ─── Mutations ────────────────────────────────────────────────────────────

    def record_payment(self, amount: AmountLike, recipient: str) -> None:
        """
        Add a completed payment to every bucket and the velocity window, then
        persist the ledger.

        If the store raises, the in-memory ledger is left unchanged and the
        error propagates.
        """
        value = to_decimal(amount)
        address = normalize_address(recipient)

        with self._lock:
            now = self._now()
            state = self._current_view(now)
            add_spend(state, value, address, now)
            self._persist(state)
            self._state = state

        logger.debug(
            "Recorded %s to %s (daily total %s)", usd(value), address, usd(state.daily_spent)
        )

    def check_and_record(self, amount: AmountLike, recipient: str) -> PolicyDecision:
        """
        Check and, when allowed, record a payment under one lock acquisition.

        Use when the spend should be reserved before the payment is made.
        """
        with self._lock:
            decision = self.check_payment(amount, recipient)
            if decision.allowed:
                self.record_payment(amount, recipient)
            return decision

    def freeze(self) -> None:
        """
        Emergency stop: set the per-transaction and daily limits to zero so
        every later ``check_payment`` is denied.

        There is no unfreeze. Construct a new enforcer with a new policy to
        resume spending.

        The frozen state is not persisted: only the ledger is saved, so a new
        enforcer built on the same store with the original policy will allow
        payments again.
        """
        with self._lock:
            self._policy = self._policy.model_copy(
                update={"max_per_transaction": Decimal("0"), "daily_limit": Decimal("0")}
            )
            self._frozen = True
            state = self._current_view(self._now())
            self._persist(state)
            self._state = state

        logger.warning("Spending frozen: all further payments will be denied")

    # ─── Queries ──────────────────────────────────────────────────────────────

    def get_status(self) -> SpendingStatus:
        """Spent, limit and remaining for every configured window."""
        with self._lock:
            now = self._now()
            return build_status(self._policy, self._current_view(now), now)

    # ─── Private helpers ──────────────────────────────────────────────────────

    def _now(self) -> datetime:
        return as_utc(self._clock())

    def _current_view(self, now: datetime) -> SpendingState:
        state = self._state.model_copy(deep=True)
        refresh_periods(state, now)
        prune_velocity_window(state, now)
        return state

    def _persist(self, state: SpendingState) -> None:
        self._store.save(state.model_dump(mode="json", by_alias=True))

    def _load_state(self) -> SpendingState:
        now = self._now()
        try:
            raw = self._store.load()
        except StoreCorruptedError as exc:
            logger.warning("Spending ledger unreadable, starting from zero: %s", exc)
            return new_state(now)

        if raw is None:
            return new_state(now)

        try:
            state = SpendingState.model_validate(raw)
        except ValidationError as exc:
            logger.warning(
                "Spending ledger failed validation, starting from zero: %s",
                exc.errors(include_url=False),
            )
            return new_state(now)

        refresh_periods(state, now)
        prune_velocity_window(state, now)
        return state
