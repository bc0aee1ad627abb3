"""
Database Schemas for Flower Stop

Each Pydantic model maps to a MongoDB collection and doubles as the
request body for creating or replacing a document:
- Listing -> "listings"
- Florist -> "florists"

Every rule is a field constraint or a field validator, so pydantic reports
all failing fields of a body together. Custom failures are raised as
``PydanticCustomError`` with the error kind as their type.
"""

from datetime import date, datetime, timezone
from typing import Annotated, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

from validators import (
    CONTACT_METHODS,
    IMAGE_EXTENSIONS,
    MAX_QUANTITY,
    MIN_CONTACT_LENGTH,
    MIN_USERNAME_LENGTH,
    split_values,
)

LISTINGS = "listings"
FLORISTS = "florists"


def _today() -> date:
    return datetime.now(timezone.utc).date()


def _number_to_text(v):
    # Phone numbers often arrive as JSON numbers
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(v)
    return v


def _split(v):
    if v is None or isinstance(v, (str, list)):
        return split_values(v)
    return v


Tags = Annotated[List[str], BeforeValidator(_split)]
ContactNumber = Annotated[Optional[str], BeforeValidator(_number_to_text)]


# Florist details copied onto each listing
class FloristRef(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    florist_id: Optional[str] = None
    florist_name: Optional[str] = None
    contact: ContactNumber = None
    contact_method: Tags = Field(default_factory=list)

    @field_validator("florist_name")
    @classmethod
    def florist_name_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v:
            raise PydanticCustomError("required", "Florist name cannot be empty.")
        return v


# Flowers offered for sale
class Listing(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., description="Listing title")
    date_listed: date = Field(default_factory=_today, description="Date the listing went up")
    description: Optional[str] = None
    flower_type: Tags = Field(..., description="Flower types, list or comma separated")
    price: float = Field(..., gt=0, allow_inf_nan=False)
    occasion: Tags = Field(..., description="Occasions, list or comma separated")
    quantity: int = Field(..., gt=0, le=MAX_QUANTITY)
    image: str = Field(..., description="Image URL (.jpg, .jpeg or .png)")
    florist: Optional[FloristRef] = None

    @field_validator("date_listed", mode="before")
    @classmethod
    def default_date_listed(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return _today()
        return v

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v:
            raise PydanticCustomError("required", "Name cannot be empty.")
        return v

    @field_validator("flower_type")
    @classmethod
    def flower_type_not_empty(cls, v: List[str]) -> List[str]:
        if not v:
            raise PydanticCustomError("required", "Please select at least one flower type.")
        return v

    @field_validator("occasion")
    @classmethod
    def occasion_not_empty(cls, v: List[str]) -> List[str]:
        if not v:
            raise PydanticCustomError("required", "Please select at least one occasion.")
        return v

    @field_validator("image")
    @classmethod
    def image_is_picture(cls, v: str) -> str:
        if not v.lower().endswith(IMAGE_EXTENSIONS):
            raise PydanticCustomError("bad_extension", "Image must be a .jpg, .jpeg or .png file.")
        return v


# Seller profiles
class Florist(BaseModel):
    """
    Contact fields are checked against ``contact_method``, which is declared
    before them so its validated value is available in ``info.data``.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str
    username: str = Field(..., min_length=MIN_USERNAME_LENGTH)
    login_email: str
    contact_method: List[str]
    contact: ContactNumber = Field(None, validate_default=True, description="Phone number, required for whatsapp")
    instagram: Optional[str] = Field(None, validate_default=True)
    facebook: Optional[str] = Field(None, validate_default=True)

    @field_validator("contact_method", mode="before")
    @classmethod
    def split_contact_methods(cls, v):
        v = _split(v)
        if isinstance(v, list):
            return [m.lower() for m in v]
        return v

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v:
            raise PydanticCustomError("required", "Name cannot be empty.")
        return v

    @field_validator("login_email")
    @classmethod
    def login_email_looks_valid(cls, v: str) -> str:
        if "@" not in v or "." not in v:
            raise PydanticCustomError("bad_email", "Please enter a valid email address.")
        return v

    @field_validator("contact_method")
    @classmethod
    def contact_methods_known(cls, v: List[str]) -> List[str]:
        if not v:
            raise PydanticCustomError("required", "Please select at least one contact method.")
        unknown = [m for m in v if m not in CONTACT_METHODS]
        if unknown:
            raise PydanticCustomError(
                "unknown_choice", "Unknown contact method: {methods}.", {"methods": ", ".join(unknown)}
            )
        return v

    @field_validator("contact")
    @classmethod
    def whatsapp_needs_number(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        if "whatsapp" in info.data.get("contact_method", []) and len(v or "") < MIN_CONTACT_LENGTH:
            raise PydanticCustomError(
                "too_short", "Contact number must be at least {min_length} digits long.",
                {"min_length": MIN_CONTACT_LENGTH},
            )
        return v

    @field_validator("instagram")
    @classmethod
    def instagram_link(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        if "instagram" in info.data.get("contact_method", []) and "instagram.com" not in (v or ""):
            raise PydanticCustomError("bad_url", "Please enter a valid instagram.com link.")
        return v

    @field_validator("facebook")
    @classmethod
    def facebook_link(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        if "facebook" in info.data.get("contact_method", []) and "facebook.com" not in (v or ""):
            raise PydanticCustomError("bad_url", "Please enter a valid facebook.com link.")
        return v


class DeleteListingBody(BaseModel):
    florist_id: Optional[str] = None
    login_email: Optional[str] = None
