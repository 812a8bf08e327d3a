"""Fake test data generation for dynamic variables."""

import logging
import uuid
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation

from faker import Faker

from chainpost.models.dynamic_variable import (
    ConstraintRule,
    ConstraintType,
    DataGeneratorType as G,
    DynamicVariable,
)

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"
DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S"

_OFFSET_UNITS = {
    ConstraintType.DAYS_OFFSET: "days",
    ConstraintType.HOURS_OFFSET: "hours",
    ConstraintType.MINUTES_OFFSET: "minutes",
    ConstraintType.SECONDS_OFFSET: "seconds",
}


def _parse_int(value: str) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _parse_decimal(value: str) -> Decimal | None:
    try:
        return Decimal(value)
    except (TypeError, InvalidOperation):
        return None


def _parse_date(value: str) -> date | None:
    try:
        return datetime.fromisoformat(value).date()
    except (TypeError, ValueError):
        return None


class DataGeneratorService:
    """
    Generates values for dynamic variables using Faker.

    Every call produces a fresh value; nothing is cached between calls.
    """

    def __init__(self, faker: Faker | None = None):
        self.faker = faker or Faker()

    def generate_value(self, dynamic_variable: DynamicVariable) -> str:
        """
        Generate a value for a dynamic variable.

        Args:
            dynamic_variable: Variable definition with generator type and constraints

        Returns:
            Generated value as a string, or "[Error: ...]" if generation failed
        """
        constraints = dynamic_variable.constraints
        f = self.faker

        generators = {
            # Person data
            G.FIRST_NAME: f.first_name,
            G.LAST_NAME: f.last_name,
            G.FULL_NAME: f.name,
            G.EMAIL: f.email,
            G.PHONE_NUMBER: f.phone_number,
            G.USERNAME: f.user_name,
            # Numbers
            G.INTEGER: lambda: self._generate_integer(constraints),
            G.DECIMAL: lambda: self._generate_decimal(constraints),
            # Dates
            G.DATE: lambda: self._generate_date(constraints),
            G.DATE_PAST: lambda: self._apply_offsets(datetime.now(), constraints).strftime(DATE_FORMAT),
            G.DATE_FUTURE: lambda: self._apply_offsets(datetime.now(), constraints).strftime(DATE_FORMAT),
            G.DATE_TIME: lambda: self._generate_datetime(constraints),
            # Text
            G.WORD: f.word,
            G.SENTENCE: f.sentence,
            G.PARAGRAPH: f.paragraph,
            # Internet
            G.URL: f.url,
            G.IP_ADDRESS: f.ipv4,
            G.MAC_ADDRESS: f.mac_address,
            # Identifiers
            G.GUID: lambda: str(uuid.uuid4()),
            G.UUID: lambda: str(uuid.uuid4()),
            # Finance
            G.CREDIT_CARD_NUMBER: f.credit_card_number,
            G.CURRENCY_CODE: f.currency_code,
            G.AMOUNT: lambda: f"{f.pyfloat(min_value=0, max_value=1000, right_digits=2):.2f}",
            # Address
            G.STREET_ADDRESS: f.street_address,
            G.CITY: f.city,
            G.COUNTRY: f.country,
            G.ZIP_CODE: f.postcode,
            G.BOOLEAN: lambda: str(f.boolean()).lower(),
        }

        generator = generators.get(dynamic_variable.generator_type, f.word)
        try:
            return str(generator())
        except Exception as e:
            logger.warning("Failed to generate value for %s: %s", dynamic_variable.name, e)
            return f"[Error: {e}]"

    def validate_configuration(self, dynamic_variable: DynamicVariable) -> bool:
        """Check that the variable has a name and that every constraint value parses."""
        if not dynamic_variable.name or not dynamic_variable.name.strip():
            return False

        for constraint in dynamic_variable.constraints:
            value = constraint.value
            if constraint.type in (ConstraintType.MINIMUM, ConstraintType.MAXIMUM):
                if _parse_decimal(value) is None:
                    return False
            elif constraint.type in (ConstraintType.MINIMUM_DATE, ConstraintType.MAXIMUM_DATE):
                if _parse_date(value) is None:
                    return False
            elif constraint.type in (ConstraintType.PATTERN, ConstraintType.FORMAT):
                continue
            elif _parse_int(value) is None:
                return False

        return True

    def _generate_integer(self, constraints: list[ConstraintRule]) -> str:
        minimum = maximum = None
        for c in constraints:
            if c.type == ConstraintType.MINIMUM and _parse_int(c.value) is not None:
                minimum = _parse_int(c.value)
            elif c.type == ConstraintType.MAXIMUM and _parse_int(c.value) is not None:
                maximum = _parse_int(c.value)

        if minimum is None or maximum is None:
            # Unbounded on either side
            if minimum is not None:
                return str(self.faker.random_int(minimum, minimum + 1_000_000))
            if maximum is not None:
                return str(self.faker.random_int(maximum - 1_000_000, maximum))
            return str(self.faker.random_int(0, 1_000_000))

        if minimum >= maximum:
            maximum = minimum + 1000
        return str(self.faker.random_int(minimum, maximum))

    def _generate_decimal(self, constraints: list[ConstraintRule]) -> str:
        minimum = Decimal(0)
        maximum = Decimal(1_000_000)
        for c in constraints:
            parsed = _parse_decimal(c.value)
            if parsed is None:
                continue
            if c.type == ConstraintType.MINIMUM:
                minimum = parsed
            elif c.type == ConstraintType.MAXIMUM:
                maximum = parsed

        if minimum >= maximum:
            maximum = minimum + 1000

        value = self.faker.random.uniform(float(minimum), float(maximum))
        return f"{value:.2f}"

    def _generate_date(self, constraints: list[ConstraintRule]) -> str:
        if any(c.type in _OFFSET_UNITS for c in constraints):
            # Offsets replace random generation
            return self._apply_offsets(datetime.now(), constraints).strftime(DATE_FORMAT)

        min_date = max_date = None
        min_age = max_age = None
        for c in constraints:
            if c.type == ConstraintType.MINIMUM_DATE:
                min_date = _parse_date(c.value) or min_date
            elif c.type == ConstraintType.MAXIMUM_DATE:
                max_date = _parse_date(c.value) or max_date
            elif c.type == ConstraintType.MINIMUM_AGE:
                min_age = _parse_int(c.value)
            elif c.type == ConstraintType.MAXIMUM_AGE:
                max_age = _parse_int(c.value)

        today = date.today()
        if max_age is not None:
            # Born no earlier than max_age years ago
            min_date = _years_ago(today, max_age)
        if min_age is not None:
            # Born no later than min_age years ago, minus a day
            max_date = _years_ago(today, min_age) - timedelta(days=1)

        if min_date is not None or max_date is not None:
            start = min_date or _years_ago(today, 100)
            end = max_date or today
            return self.faker.date_between(start_date=start, end_date=end).strftime(DATE_FORMAT)

        return self.faker.past_date(start_date="-30y").strftime(DATE_FORMAT)

    def _generate_datetime(self, constraints: list[ConstraintRule]) -> str:
        moment = self._apply_offsets(datetime.now(), constraints)
        fmt = next(
            (c.value for c in constraints if c.type == ConstraintType.FORMAT and c.value),
            None,
        )
        if fmt:
            try:
                return moment.strftime(fmt)
            except ValueError:
                logger.debug("Invalid date format %r, using default", fmt)
        return moment.strftime(DATETIME_FORMAT)

    @staticmethod
    def _apply_offsets(moment: datetime, constraints: list[ConstraintRule]) -> datetime:
        for c in constraints:
            unit = _OFFSET_UNITS.get(c.type)
            amount = _parse_int(c.value)
            if unit and amount is not None:
                moment += timedelta(**{unit: amount})
        return moment


def _years_ago(today: date, years: int) -> date:
    try:
        return today.replace(year=today.year - years)
    except ValueError:
        # Feb 29 in a non-leap target year
        return today.replace(year=today.year - years, day=28)
