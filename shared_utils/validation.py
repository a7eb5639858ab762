"""
Input validation and sanitization utilities.
Provides functions for validating and cleaning input data.
"""

from typing import Iterable
import re

from shared_utils.error_handler import ValidationError


class InputValidator:
    """Utility class for input validation."""

    @staticmethod
    def validate_non_empty_string(value: str, field_name: str) -> str:
        """Validate non-empty string.

        Args:
            value: String to validate
            field_name: Name of field for error messages

        Returns:
            Validated string, stripped

        Raises:
            ValidationError: If validation fails
        """
        if not isinstance(value, str):
            raise ValidationError(f"{field_name} must be a string")

        if not value or not value.strip():
            raise ValidationError(f"{field_name} cannot be empty")

        return value.strip()

    @staticmethod
    def validate_positive_int(value: int, field_name: str, allow_zero: bool = False) -> int:
        """Validate positive integer.

        Args:
            value: Integer to validate
            field_name: Name of field for error messages
            allow_zero: Whether zero is valid

        Returns:
            Validated integer

        Raises:
            ValidationError: If validation fails
        """
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(f"{field_name} must be an integer")

        min_val = 0 if allow_zero else 1
        if value < min_val:
            raise ValidationError(f"{field_name} must be >= {min_val}")

        return value

    @staticmethod
    def validate_file_extension(filename: str, allowed_extensions: Iterable[str]) -> str:
        """Validate file extension.

        Args:
            filename: Filename to validate
            allowed_extensions: Allowed extensions (without dots)

        Returns:
            Validated filename

        Raises:
            ValidationError: If validation fails
        """
        allowed = [e.lower() for e in allowed_extensions]
        if '.' not in filename:
            raise ValidationError("File must have an extension", context={"file": filename})

        ext = filename.rsplit('.', 1)[1].lower()
        if ext not in allowed:
            raise ValidationError(
                f"File extension .{ext} not allowed. Allowed: {allowed}",
                context={"file": filename},
            )

        return filename

    @staticmethod
    def sanitize_filename(filename: str, max_length: int = 255) -> str:
        """Sanitize filename to prevent path traversal and other issues.

        Args:
            filename: Filename to sanitize
            max_length: Maximum filename length

        Returns:
            Sanitized filename

        Raises:
            ValidationError: If validation fails
        """
        filename = filename.replace('\\', '').replace('/', '')
        filename = re.sub(r'[<>:"|?*]', '', filename)

        if not filename or '..' in filename or filename.startswith('.'):
            raise ValidationError("Invalid filename format")

        if len(filename) > max_length:
            raise ValidationError(f"Filename too long (max {max_length} characters)")

        return filename
