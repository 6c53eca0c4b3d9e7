"""
Input rules shared by the API schema and the domain services.

Email normalization: strip whitespace + lowercase, applied on every
entry point (signup, login, forgot and reset password) so stored and
looked-up forms always match.
"""

MIN_PASSWORD_LENGTH = 8


def normalize_email(email: str) -> str:
    return email.strip().lower()


def password_policy_errors(password: str) -> list[str]:
    """
    Check a password against the minimum strength policy.

    Returns:
        One message per unmet rule; empty when the password is acceptable
    """
    errors = []
    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if not any(c.islower() for c in password):
        errors.append("Password must contain a lowercase letter")
    if not any(c.isupper() for c in password):
        errors.append("Password must contain an uppercase letter")
    if not any(c.isdigit() for c in password):
        errors.append("Password must contain a digit")
    if all(c.isalnum() for c in password):
        errors.append("Password must contain a special character")
    return errors
