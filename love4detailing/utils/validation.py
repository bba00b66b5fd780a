"""
Validation utilities for data validation and sanitization.
"""

import re
from datetime import date
from typing import List, Optional, Tuple

UK_POSTCODE_PATTERN = re.compile(
    r"^[A-Z]{1,2}[0-9][A-Z0-9]?\s?[0-9][A-Z]{2}$", re.IGNORECASE
)
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class ValidationUtils:
    """Validation utilities for various data types."""

    @staticmethod
    def validate_uk_postcode(postcode: str) -> Tuple[bool, Optional[str]]:
        """
        Validate UK postcode format.

        Args:
            postcode: Postcode to validate, with or without the inner space

        Returns:
            Tuple of (is_valid, error_message)
        """
        if not postcode or not isinstance(postcode, str):
            return False, "Postcode is required"

        if not UK_POSTCODE_PATTERN.match(postcode.strip()):
            return False, "Enter a valid UK postcode"

        return True, None

    @staticmethod
    def normalize_uk_postcode(postcode: str) -> str:
        """
        Format a UK postcode consistently (upper case, single inner space).

        Args:
            postcode: Raw postcode

        Returns:
            Normalized postcode, e.g. ``SW1A 1AA``
        """
        if not postcode:
            return ""

        compact = re.sub(r"\s+", "", postcode).upper()
        if len(compact) > 3:
            return f"{compact[:-3]} {compact[-3:]}"
        return compact

    @staticmethod
    def outward_code(postcode: str) -> str:
        """Return the outward part of a postcode (``SW1A`` for ``SW1A 1AA``)."""
        normalized = ValidationUtils.normalize_uk_postcode(postcode)
        return normalized.split(" ")[0] if normalized else ""

    @staticmethod
    def validate_name(name: str) -> Tuple[bool, Optional[str]]:
        """
        Validate name format.

        Args:
            name: Name to validate

        Returns:
            Tuple of (is_valid, error_message)
        """
        if not name or not isinstance(name, str):
            return False, "Name is required"

        name = name.strip()
        if len(name) < 2:
            return False, "Name is too short"

        if len(name) > 100:
            return False, "Name is too long"

        return True, None

    @staticmethod
    def validate_email(email: str) -> Tuple[bool, Optional[str]]:
        if not email or not isinstance(email, str):
            return False, "Email is required"

        if not EMAIL_PATTERN.match(email.strip()):
            return False, "Enter a valid email address"

        return True, None

    @staticmethod
    def validate_uk_phone(phone: str) -> Tuple[bool, Optional[str]]:
        """
        Validate a UK phone number.

        Accepts national (``07700 900123``) and international (``+44 7700 900123``)
        formats.

        Args:
            phone: Phone number to validate

        Returns:
            Tuple of (is_valid, error_message)
        """
        if not phone:
            return False, "Phone number is required"

        digits = re.sub(r"\D", "", phone)

        if digits.startswith("44") and len(digits) in (11, 12):
            digits = "0" + digits[2:]

        if not digits.startswith("0") or len(digits) not in (10, 11):
            return False, "Enter a valid UK phone number"

        return True, None

    @staticmethod
    def validate_vehicle_year(
        year: Optional[int], today: Optional[date] = None
    ) -> Tuple[bool, Optional[str]]:
        """Validate an optional vehicle year (1900 up to next year)."""
        if year is None:
            return True, None

        latest = (today or date.today()).year + 1
        if not isinstance(year, int) or year < 1900 or year > latest:
            return False, f"Year must be between 1900 and {latest}"

        return True, None

    @staticmethod
    def validate_iso_date(value: str) -> Tuple[bool, Optional[str]]:
        if not value:
            return False, "Choose a date"

        if not ISO_DATE_PATTERN.match(value):
            return False, "Date must be in YYYY-MM-DD format"

        try:
            date.fromisoformat(value)
        except ValueError:
            return False, "Date is not a valid calendar date"

        return True, None

    @staticmethod
    def sanitize_text(text: str) -> str:
        """
        Sanitize text by removing potentially harmful characters.

        Args:
            text: Text to sanitize

        Returns:
            Sanitized text
        """
        if not text:
            return ""

        # Remove control characters except newlines and tabs
        text = re.sub(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]", "", text)

        # Normalize whitespace
        text = re.sub(r"\s+", " ", text)

        return text.strip()

    @staticmethod
    def validate_service_identifiers(identifiers: List[str]) -> Tuple[List[str], List[str]]:
        """
        Validate service identifiers.

        Args:
            identifiers: List of service identifiers to validate

        Returns:
            Tuple of (valid_identifiers, invalid_identifiers)
        """
        valid = []
        invalid = []

        for identifier in identifiers:
            if not identifier or not isinstance(identifier, str):
                invalid.append(str(identifier))
                continue

            identifier = identifier.strip()
            if len(identifier) < 1:
                invalid.append(identifier)
            else:
                valid.append(identifier)

        return valid, invalid
