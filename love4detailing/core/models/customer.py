"""
Customer and booking confirmation models.
"""

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class AuthUser(BaseModel):
    """Signed-in user as returned by the auth endpoint."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    email: str = ""
    name: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("name", "full_name", "fullName")
    )
    first_name: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("first_name", "firstName")
    )
    last_name: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("last_name", "lastName")
    )
    phone: Optional[str] = None

    @property
    def full_name(self) -> str:
        if self.name:
            return self.name.strip()
        return " ".join(p for p in (self.first_name, self.last_name) if p).strip()


class BookingConfirmation(BaseModel):
    """Result of a successful booking creation request."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    booking_reference: str = Field(
        validation_alias=AliasChoices(
            "booking_reference", "bookingReference", "confirmationNumber"
        )
    )
    booking_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("booking_id", "bookingId", "id")
    )
    customer_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("customer_id", "customerId", "userId")
    )
    requires_password_setup: bool = Field(
        default=False,
        validation_alias=AliasChoices("requires_password_setup", "requiresPasswordSetup"),
    )
