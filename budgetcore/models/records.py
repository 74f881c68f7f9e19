"""
Input Records for Budget Core

These models define the snapshots the host application hands to the engine.
They are designed to:
1. Accept the camelCase wire format and snake_case Python names alike
2. Be immutable once built (the engine never mutates caller data)
3. Drop presentation metadata (icons, colours classes) at the boundary

DESIGN DECISION: Unknown keys are ignored rather than rejected.
That is how display-only fields such as icons are stripped when a record
crosses into the engine.
"""

from datetime import datetime
from enum import Enum
from typing import Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


RECORD_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    extra="ignore",
    frozen=True,
    str_strip_whitespace=True,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a transaction; also selects the analytics view."""
    INCOME = "income"
    EXPENSE = "expense"


class PayoffStrategy(str, Enum):
    """
    Payment-priority strategy for the extra-payment pool.

    SNOWBALL: lowest balance first
    AVALANCHE: highest interest rate first
    """
    SNOWBALL = "snowball"
    AVALANCHE = "avalanche"


class BillingCycle(str, Enum):
    """Recurrence of a subscription charge."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    HALF_YEARLY = "half-yearly"
    YEARLY = "yearly"


# =============================================================================
# TRANSACTIONS
# =============================================================================

class TransactionSplit(BaseModel):
    """One category share of a split transaction."""
    model_config = RECORD_CONFIG

    category: str
    amount: float = Field(..., ge=0)
    note: Optional[str] = None


class Transaction(BaseModel):
    """
    A single income or expense record.

    If `splits` is present it is meant to sum to `amount`, but the engine
    trusts the caller and does not re-check this.
    """
    model_config = RECORD_CONFIG

    id: Union[int, str]
    title: str = ""
    category: str
    amount: float = Field(
        ...,
        ge=0,
        description="Non-negative magnitude in base currency"
    )
    date: datetime
    type: TransactionType
    splits: Optional[list[TransactionSplit]] = None
    context: Optional[str] = None

    @property
    def has_splits(self) -> bool:
        return bool(self.splits)


# =============================================================================
# CATEGORIES
# =============================================================================

class CategoryDescriptor(BaseModel):
    """
    Data-only view of a category.

    Only `id`, `name` and `color_code` cross the computation boundary.
    Anything renderable is reattached by name outside the engine.
    """
    model_config = RECORD_CONFIG

    id: str
    name: str
    color_code: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("colorCode", "color_code", "code"),
        serialization_alias="colorCode",
    )


def strip_category(category) -> CategoryDescriptor:
    """Reduce a rich category object or mapping to its data-only fields."""
    if isinstance(category, CategoryDescriptor):
        return category
    if isinstance(category, dict):
        return CategoryDescriptor.model_validate(category)
    return CategoryDescriptor(
        id=getattr(category, "id"),
        name=getattr(category, "name"),
        color_code=getattr(category, "color_code", None) or getattr(category, "code", None),
    )


# =============================================================================
# PLANNING RECORDS
# =============================================================================

class Debt(BaseModel):
    """
    An outstanding debt.

    IMPORTANT: Numeric fields are deliberately unconstrained. The simulator
    lets NaN/Infinity propagate into its results; use DebtValidator to check
    inputs before simulating.
    """
    model_config = RECORD_CONFIG

    id: str
    name: str
    current_balance: float
    interest_rate: float = Field(..., description="Annual percentage rate")
    minimum_payment: float
    category: str = "Loan"
    context: Optional[str] = None


class Subscription(BaseModel):
    """A recurring charge."""
    model_config = RECORD_CONFIG

    id: str
    name: str
    amount: float = Field(..., ge=0)
    billing_cycle: BillingCycle = BillingCycle.MONTHLY
    next_billing_date: datetime
    category: Optional[str] = None
    auto_pay: bool = False
    context: Optional[str] = None


class Goal(BaseModel):
    """A savings goal."""
    model_config = RECORD_CONFIG

    id: str
    name: str
    target_amount: float = Field(..., ge=0)
    current_amount: float = Field(default=0.0, ge=0)
    deadline: Optional[datetime] = None
    context: Optional[str] = None


# =============================================================================
# DEFAULT TAXONOMIES
# =============================================================================

EXPENSE_CATEGORIES: tuple[CategoryDescriptor, ...] = (
    CategoryDescriptor(id="food", name="Food", color_code="#f97316"),
    CategoryDescriptor(id="groceries", name="Groceries", color_code="#22c55e"),
    CategoryDescriptor(id="transport", name="Transport", color_code="#3b82f6"),
    CategoryDescriptor(id="bills", name="Bills", color_code="#eab308"),
    CategoryDescriptor(id="ent", name="Fun", color_code="#a855f7"),
    CategoryDescriptor(id="health", name="Health", color_code="#f43f5e"),
    CategoryDescriptor(id="edu", name="Education", color_code="#6366f1"),
    CategoryDescriptor(id="travel", name="Travel", color_code="#0ea5e9"),
    CategoryDescriptor(id="gift", name="Gift", color_code="#ec4899"),
    CategoryDescriptor(id="invest", name="Invest", color_code="#14b8a6"),
)

INCOME_CATEGORIES: tuple[CategoryDescriptor, ...] = (
    CategoryDescriptor(id="salary", name="Salary"),
    CategoryDescriptor(id="freelance", name="Freelance"),
    CategoryDescriptor(id="gift_in", name="Gift"),
    CategoryDescriptor(id="other", name="Other"),
)
