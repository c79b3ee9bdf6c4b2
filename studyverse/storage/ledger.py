"""Credit ledger - usage allowance and plan tier of the active account."""

from __future__ import annotations

import logging
from typing import NamedTuple

from pydantic import ValidationError

from studyverse.models.account import (
    PLAN_CATALOG,
    AccountScope,
    Identity,
    PlanType,
    UserProfile,
)
from studyverse.storage.gateway import PersistenceGateway

logger = logging.getLogger(__name__)

PROFILE_PREFIX = "profile"


class DeductionResult(NamedTuple):
    """Outcome of a deduction attempt. ``profile`` is None when it failed."""

    ok: bool
    profile: UserProfile | None = None


def can_afford(profile: UserProfile) -> bool:
    """True when the profile can pay for one generation."""
    return profile.credits > 0


def try_deduct(profile: UserProfile) -> DeductionResult:
    """
    Deduct one credit if the balance allows it.

    Args:
        profile: Current profile; never mutated

    Returns:
        DeductionResult with the updated profile, or ok=False if credits are 0
    """
    if not can_afford(profile):
        return DeductionResult(ok=False)
    return DeductionResult(
        ok=True,
        profile=profile.model_copy(update={"credits": profile.credits - 1}),
    )


def apply_top_up(profile: UserProfile, amount: int, plan: PlanType) -> UserProfile:
    """Add purchased credits and switch the plan label."""
    if amount < 0:
        raise ValueError("Top-up amount cannot be negative")
    return profile.model_copy(
        update={"credits": profile.credits + amount, "plan_type": PlanType(plan)}
    )


class CreditLedger:
    """
    Persistent credit balance for one account scope.

    The profile document is loaded lazily, merged over the defaults and seeded
    from the identity on first use, and written back after every change.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        scope: AccountScope,
        identity: Identity | None = None,
        default_credits: int = 100,
        unlimited_plan_credits: int = 100_000,
    ):
        self.gateway = gateway
        self.scope = scope
        self.identity = identity
        self.default_credits = default_credits
        self.unlimited_plan_credits = unlimited_plan_credits
        self._profile: UserProfile | None = None

    @property
    def key(self) -> str:
        return self.scope.storage_key(PROFILE_PREFIX)

    @property
    def profile(self) -> UserProfile:
        if self._profile is None:
            self._profile = self._load()
        return self._profile

    @property
    def credits(self) -> int:
        return self.profile.credits

    def _defaults(self) -> dict:
        defaults = UserProfile(credits=self.default_credits).model_dump()
        if self.identity is not None:
            defaults["display_name"] = self.identity.display_name
            defaults["photo_url"] = self.identity.photo_url
        return defaults

    def _load(self) -> UserProfile:
        defaults = self._defaults()
        stored = self.gateway.read(self.key, expected=dict)
        if stored is None:
            return UserProfile(**defaults)

        merged = {**defaults, **stored}
        # Identity fills in display fields the user never set
        if not merged.get("display_name"):
            merged["display_name"] = defaults["display_name"]
        if not merged.get("photo_url"):
            merged["photo_url"] = defaults["photo_url"]

        try:
            return UserProfile(**merged)
        except ValidationError as e:
            logger.warning("Stored profile %s is invalid, using defaults: %s", self.key, e)
            return UserProfile(**defaults)

    def save(self, profile: UserProfile) -> None:
        """Replace the stored profile; the cached one changes only if the write succeeds."""
        self.gateway.write(self.key, profile.model_dump(mode="json"))
        self._profile = profile

    def can_afford(self) -> bool:
        return can_afford(self.profile)

    def try_deduct(self) -> DeductionResult:
        """Deduct one credit and persist; no change when the balance is 0."""
        result = try_deduct(self.profile)
        if result.ok:
            self.save(result.profile)
            logger.info("Credit deducted for %s, %d left", self.key, result.profile.credits)
        else:
            logger.warning("Deduction refused for %s: no credits left", self.key)
        return result

    def top_up(self, amount: int, plan: PlanType) -> UserProfile:
        """Apply a plan purchase: add ``amount`` credits and set the plan tier."""
        profile = apply_top_up(self.profile, amount, plan)
        self.save(profile)
        logger.info("Added %d credits to %s (plan %s)", amount, self.key, profile.plan_type.value)
        return profile

    def upgrade(self, plan: PlanType) -> UserProfile:
        """Top up with the credits of a catalog plan."""
        offer = PLAN_CATALOG.get(PlanType(plan))
        if offer is None:
            raise ValueError(f"Plan {plan} cannot be purchased")
        amount = self.unlimited_plan_credits if offer.is_unlimited else offer.generations
        return self.top_up(amount, offer.plan)

    def update_profile(self, **fields) -> UserProfile:
        """Edit display metadata. Credits and plan only change via deduct/top-up."""
        blocked = {"credits", "plan_type"} & fields.keys()
        if blocked:
            raise ValueError(f"Cannot edit {', '.join(sorted(blocked))} directly")
        profile = UserProfile(**{**self.profile.model_dump(), **fields})
        self.save(profile)
        return profile
