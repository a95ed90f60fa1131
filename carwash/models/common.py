from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from carwash.date_utils import as_utc

ARABIC_INDIC_DIGITS = "٠١٢٣٤٥٦٧٨٩"
_TO_WESTERN = str.maketrans(ARABIC_INDIC_DIGITS, "0123456789")
_TO_ARABIC = str.maketrans("0123456789", ARABIC_INDIC_DIGITS)


def normalize_digits(value: str) -> str:
    """Arabic-Indic digits to Western digits."""
    return value.translate(_TO_WESTERN)


def to_arabic_digits(value: str) -> str:
    return value.translate(_TO_ARABIC)


def clean_plate(value: str) -> str:
    return value.strip().upper()


def blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class OutModel(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    @field_validator("*", mode="after")
    @classmethod
    def tag_utc(cls, value):
        # Stored datetimes are naive UTC
        if isinstance(value, datetime):
            return as_utc(value)
        return value


def dump(schema, obj):
    """Serializes an ORM object (or list of them) through an output schema."""
    if obj is None:
        return None
    if isinstance(obj, list):
        return [schema.model_validate(item).model_dump(by_alias=True, mode="json") for item in obj]
    return schema.model_validate(obj).model_dump(by_alias=True, mode="json")


def success(data=None) -> dict:
    return {"success": True, "data": data}
