"""Dynamic variable definitions: named generators of fake test data."""

from enum import Enum
from pydantic import BaseModel, Field


class DataGeneratorType(str, Enum):
    # Person data
    FIRST_NAME = "first_name"
    LAST_NAME = "last_name"
    FULL_NAME = "full_name"
    EMAIL = "email"
    PHONE_NUMBER = "phone_number"
    USERNAME = "username"

    # Numbers
    INTEGER = "integer"
    DECIMAL = "decimal"

    # Dates
    DATE = "date"
    DATE_PAST = "date_past"
    DATE_FUTURE = "date_future"
    DATE_TIME = "date_time"

    # Text
    WORD = "word"
    SENTENCE = "sentence"
    PARAGRAPH = "paragraph"

    # Internet
    URL = "url"
    IP_ADDRESS = "ip_address"
    MAC_ADDRESS = "mac_address"

    # Identifiers
    GUID = "guid"
    UUID = "uuid"

    # Finance
    CREDIT_CARD_NUMBER = "credit_card_number"
    CURRENCY_CODE = "currency_code"
    AMOUNT = "amount"

    # Address
    STREET_ADDRESS = "street_address"
    CITY = "city"
    COUNTRY = "country"
    ZIP_CODE = "zip_code"

    BOOLEAN = "boolean"
    CUSTOM = "custom"


class ConstraintType(str, Enum):
    # Numeric
    MINIMUM = "minimum"
    MAXIMUM = "maximum"

    # Dates
    MINIMUM_AGE = "minimum_age"
    MAXIMUM_AGE = "maximum_age"
    MINIMUM_DATE = "minimum_date"
    MAXIMUM_DATE = "maximum_date"

    # Offsets relative to now
    DAYS_OFFSET = "days_offset"
    HOURS_OFFSET = "hours_offset"
    MINUTES_OFFSET = "minutes_offset"
    SECONDS_OFFSET = "seconds_offset"

    # Strings
    MIN_LENGTH = "min_length"
    MAX_LENGTH = "max_length"
    PATTERN = "pattern"

    FORMAT = "format"


class ConstraintRule(BaseModel):
    """A single constraint applied to generated data."""
    type: ConstraintType
    value: str = ""


class DynamicVariable(BaseModel):
    """
    A variable whose value is generated fresh on every resolution.

    Referenced with the same {{ name }} syntax as static variables, but static
    values of the same name always win.
    """
    name: str
    generator_type: DataGeneratorType
    constraints: list[ConstraintRule] = Field(default_factory=list)
    is_secret: bool = False  # Masked in UI
