from postboard.errors import ValidationError
from postboard.utils import is_email


def validate_password(password: str) -> None:
    """Validate password meets requirements.

    Requirements:
    - No whitespace characters
    - Minimum length of 8 characters

    Raises:
        ValidationError: If password doesn't meet requirements
    """
    if len(password) < 8:
        raise ValidationError("Password must be at least 8 characters long")

    if any(char.isspace() for char in password):
        raise ValidationError("Password cannot contain whitespace characters")


def normalize_email(email: str) -> str:
    """Trim and lowercase an email address, raising ValidationError if malformed."""
    normalized = email.strip().lower()
    if not is_email(normalized):
        raise ValidationError(f"Invalid email address: '{email}'")
    return normalized
