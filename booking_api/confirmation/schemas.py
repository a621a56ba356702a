from typing import Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# module booking_api.confirmation.schemas

class BookingDetails(BaseModel):
    """
    Détails saisis par le client, recopiés dans les e-mails.
    Tous optionnels: un paiement vérifié est confirmé même si le front n'envoie rien.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    passenger_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    passengers: Optional[Union[int, str]] = None
    pickup_date: Optional[str] = None
    pickup_time: Optional[str] = None
    pickup_location: Optional[str] = None
    destination: Optional[str] = None
    route: Optional[str] = None
    vehicle: Optional[str] = None
    trip: Optional[str] = None
    flight: Optional[str] = None
    luggage: Optional[Union[int, str]] = None
    child_seats: Optional[Union[int, str]] = None
    notes: Optional[str] = None

    @property
    def customer_email(self) -> str:
        return (self.email or "").strip()

    def as_context(self) -> dict:
        """Tous les champs en chaînes ("" si absent) pour les gabarits."""
        return {k: ("" if v is None else str(v)) for k, v in self.model_dump().items()}


class ConfirmRequest(BaseModel):
    """Corps de POST /confirm-booking: {orderId, bookingDetails} ('booking' accepté)."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    order_id: str = Field(default="", validation_alias=AliasChoices("orderId", "order_id"))
    booking_details: BookingDetails = Field(
        default_factory=BookingDetails,
        validation_alias=AliasChoices("bookingDetails", "booking_details", "booking"),
    )

    @field_validator("order_id", mode="before")
    def strip_order_id(cls, v):
        return (v or "").strip() if isinstance(v, str) or v is None else v

    @field_validator("booking_details", mode="before")
    def null_booking_is_empty(cls, v):
        return {} if v is None else v
