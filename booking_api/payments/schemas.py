from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

# module booking_api.payments.schemas

class BookingRequest(BaseModel):
    """
    Corps de POST /create-payment-link.
    - camelCase (front) ou snake_case acceptés, champs inconnus ignorés.
    - Aucun champ montant: le prix est toujours recalculé côté serveur.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    route: str = Field(min_length=1)
    vehicle_class: str = Field(min_length=1)
    trip_type: str = Field(min_length=1)
    hours: Optional[Union[int, float]] = None
    reference_id: Optional[str] = None
    buyer_email: Optional[EmailStr] = None
    buyer_phone: Optional[str] = None
    redirect_path: Optional[str] = None
    note: Optional[str] = None
    passenger_name: Optional[str] = None
    pickup_location: Optional[str] = None
    destination: Optional[str] = None
    pickup_date: Optional[str] = None
    pickup_time: Optional[str] = None

    @field_validator("buyer_email", mode="before")
    def blank_email_is_none(cls, v):
        # Un champ vide du formulaire ne doit pas faire échouer la validation EmailStr
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("reference_id", "buyer_phone", "redirect_path", "note")
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None
