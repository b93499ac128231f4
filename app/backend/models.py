"""
Pydantic models for the credit report extraction pipeline.

Defines strict types for extracted credit items, job summaries and the
HTTP request/response payloads.
"""

from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .normalization import (
    amount_to_cents,
    normalize_account_last4,
    normalize_bureaus,
    normalize_credit_type,
    parse_date,
)


class CreditItemType(str, Enum):
    """Financial account categories a credit item can belong to."""

    COLLECTION = "COLLECTION"
    CHARGE_OFF = "CHARGE_OFF"
    LATE_PAYMENT = "LATE_PAYMENT"
    JUDGMENT = "JUDGMENT"
    BANKRUPTCY = "BANKRUPTCY"
    REPOSSESSION = "REPOSSESSION"
    FORECLOSURE = "FORECLOSURE"
    TAX_LIEN = "TAX_LIEN"
    STUDENT_LOAN = "STUDENT_LOAN"
    CREDIT_CARD = "CREDIT_CARD"
    AUTO_LOAN = "AUTO_LOAN"
    MORTGAGE = "MORTGAGE"
    PERSONAL_LOAN = "PERSONAL_LOAN"
    OTHER = "OTHER"


class Bureau(str, Enum):
    """Credit reporting agencies."""

    EXPERIAN = "Experian"
    EQUIFAX = "Equifax"
    TRANSUNION = "TransUnion"


class CreditItemStatus(str, Enum):
    """Workflow status of a credit item. New items always start as TO_SEND."""

    TO_SEND = "TO_SEND"


class CreditItem(BaseModel):
    """
    A single credit account extracted from a report.

    Accepts both the camelCase keys the language model is asked for and
    snake_case keys. Values are normalized on the way in:
    amounts to integer cents, dates to YYYY-MM-DD, bureaus to their
    canonical names.

    Attributes:
        creditor: Name of the creditor or collection agency.
        type: Account category.
        amount: Balance or amount owed, in cents.
        opened_date: Date the account was opened (ISO).
        reported_date: Date the account was last reported (ISO).
        account_last4: Last four characters of the account number.
        bureaus: Bureaus reporting this account.
        is_negative: Whether this is a derogatory item.
        notes: Free-text details.
        confidence: Extraction confidence.
        status: Workflow status, fixed to TO_SEND on creation.
    """

    creditor: str = Field(..., min_length=1, max_length=255)
    type: CreditItemType = Field(default=CreditItemType.OTHER)
    amount: int | None = Field(
        default=None,
        validation_alias=AliasChoices("amount", "amount_cents", "amountCents"),
    )
    opened_date: str | None = Field(
        default=None,
        validation_alias=AliasChoices("opened_date", "openedDate"),
    )
    reported_date: str | None = Field(
        default=None,
        validation_alias=AliasChoices("reported_date", "reportedDate"),
    )
    account_last4: str | None = Field(
        default=None,
        validation_alias=AliasChoices("account_last4", "accountLast4"),
    )
    bureaus: list[Bureau] = Field(default_factory=list)
    is_negative: bool = Field(
        default=False,
        validation_alias=AliasChoices("is_negative", "isNegative"),
    )
    notes: str | None = None
    confidence: float = Field(default=0.8, ge=0.0, le=1.0)
    status: CreditItemStatus = CreditItemStatus.TO_SEND

    @field_validator("creditor", mode="before")
    @classmethod
    def strip_creditor(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("type", mode="before")
    @classmethod
    def coerce_type(cls, v: Any) -> str:
        if isinstance(v, CreditItemType):
            return v.value
        return normalize_credit_type(v)

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v: Any) -> int | None:
        return amount_to_cents(v)

    @field_validator("opened_date", "reported_date", mode="before")
    @classmethod
    def coerce_date(cls, v: Any) -> str | None:
        return parse_date(v)

    @field_validator("account_last4", mode="before")
    @classmethod
    def coerce_last4(cls, v: Any) -> str | None:
        return normalize_account_last4(v)

    @field_validator("bureaus", mode="before")
    @classmethod
    def coerce_bureaus(cls, v: Any) -> list[str]:
        if isinstance(v, (list, tuple)) and all(isinstance(b, Bureau) for b in v):
            return [b.value for b in v]
        return normalize_bureaus(v)

    @field_validator("is_negative", mode="before")
    @classmethod
    def coerce_negative(cls, v: Any) -> Any:
        if v is None:
            return False
        return v

    @field_validator("notes", mode="before")
    @classmethod
    def blank_notes_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def dedup_key(self) -> tuple[str, str, int]:
        """Key used to collapse repeated records within one extraction batch."""
        return (self.creditor, self.type.value, self.amount or 0)


class NegativeAccount(BaseModel):
    """Read-only projection of a negative item stored in the job summary."""

    creditor: str
    type: CreditItemType
    amount_cents: int | None = None
    bureaus: list[Bureau] = Field(default_factory=list)


class JobSummary(BaseModel):
    """Result summary written to the job record on completion."""

    total_items: int = Field(..., ge=0)
    negative_items: int = Field(..., ge=0)
    items_saved: bool = True
    negative_accounts: list[NegativeAccount] = Field(default_factory=list)


# =============================================================================
# API Request/Response Models
# =============================================================================


class ProcessRequest(BaseModel):
    """Request body for POST /process."""

    model_config = ConfigDict(populate_by_name=True)

    job_id: str = Field(..., min_length=1, alias="jobId")
    profile_id: str = Field(..., min_length=1, alias="profileId")
    file_path: str = Field(..., min_length=1, alias="filePath")
    file_name: str = Field(default="", alias="fileName")


class ProcessResponse(BaseModel):
    """Successful response for POST /process."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    job_id: str = Field(..., alias="jobId")
    total_items: int = Field(..., alias="totalItems")
    negative_items: int = Field(..., alias="negativeItems")


class ProcessErrorResponse(BaseModel):
    """Failure response for POST /process."""

    success: bool = False
    error: str


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = "healthy"
    timestamp: str


class JobResponse(BaseModel):
    """Response model for GET /jobs/{job_id}."""

    id: str
    profile_id: str
    file_path: str | None = None
    file_name: str | None = None
    status: str
    started_at: str | None = None
    completed_at: str | None = None
    error_message: str | None = None
    result_json: dict[str, Any] | None = None
