"""Pydantic models for account identity, scope and profile."""

from enum import Enum

from pydantic import BaseModel, Field

GUEST_SCOPE_KEY = "guest"


class PlanType(str, Enum):
    """Plan tiers a profile can be on."""

    FREE = "Free"
    STARTER = "Starter"
    SCHOLAR = "Scholar"
    ACHIEVER = "Achiever"


class PlanOffer(BaseModel):
    """A purchasable plan tier."""

    plan: PlanType
    price: int = Field(..., ge=0, description="Price in INR")
    generations: int | None = Field(
        None,
        ge=1,
        description="Credits granted on purchase; None means unlimited",
    )
    features: list[str] = Field(default_factory=list)

    @property
    def is_unlimited(self) -> bool:
        return self.generations is None


PLAN_CATALOG: dict[PlanType, PlanOffer] = {
    PlanType.STARTER: PlanOffer(
        plan=PlanType.STARTER,
        price=99,
        generations=500,
        features=["500 AI Generations", "Basic Support", "Standard Speed"],
    ),
    PlanType.SCHOLAR: PlanOffer(
        plan=PlanType.SCHOLAR,
        price=299,
        generations=2000,
        features=["2000 AI Generations", "Priority Support", "Fast Generation", "Export to DOCX"],
    ),
    PlanType.ACHIEVER: PlanOffer(
        plan=PlanType.ACHIEVER,
        price=499,
        generations=None,
        features=["Unlimited Generations", "24/7 Priority Support", "Turbo Speed", "All Future Features"],
    ),
}


class Identity(BaseModel):
    """Signed-in user as reported by the identity provider. Read-only here."""

    uid: str = Field(..., min_length=1)
    display_name: str = ""
    photo_url: str = ""
    email: str = ""


class AccountScope(BaseModel):
    """Namespace for persisted documents: a concrete account or the guest."""

    account_id: str | None = None

    model_config = {"frozen": True}

    @classmethod
    def guest(cls) -> "AccountScope":
        return cls(account_id=None)

    @classmethod
    def for_identity(cls, identity: Identity | None) -> "AccountScope":
        if identity is None:
            return cls.guest()
        return cls(account_id=identity.uid)

    @property
    def is_guest(self) -> bool:
        return self.account_id is None

    def storage_key(self, prefix: str) -> str:
        """Key of the ``prefix`` document for this scope, e.g. ``history_abc``."""
        return f"{prefix}_{self.account_id or GUEST_SCOPE_KEY}"


class UserProfile(BaseModel):
    """Usage allowance and display metadata for an account."""

    display_name: str = ""
    phone_number: str = ""
    institution: str = ""
    bio: str = ""
    photo_url: str = ""
    learning_goal: str = ""
    learning_style: str = "Visual"
    credits: int = Field(default=100, ge=0)
    plan_type: PlanType = PlanType.FREE
