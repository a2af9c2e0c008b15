"""Field-level checks shared by the registry and the catalog.

Every function is pure and returns a ``ValidationResult``; callers decide
whether a failure becomes an error.
"""
import re
from decimal import Decimal, InvalidOperation
from typing import Optional

from pydantic import BaseModel

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
USERNAME_RE = re.compile(r"^[a-zA-Z0-9]+$")

MAX_PRICE = Decimal("1000000")


class ValidationResult(BaseModel):
    valid: bool
    message: Optional[str] = None


OK = ValidationResult(valid=True)


def _fail(message: str) -> ValidationResult:
    return ValidationResult(valid=False, message=message)


def validate_email(email: str) -> ValidationResult:
    if not email or not EMAIL_RE.match(email.strip()):
        return _fail("Email must be a valid email address format")
    return OK


def validate_password(password: str) -> ValidationResult:
    if password is None or len(password) < 8:
        return _fail("Password must be at least 8 characters long")
    if len(password) > 100:
        return _fail("Password must be less than 100 characters")
    if not re.search(r"[a-z]", password):
        return _fail("Password must contain a lowercase letter")
    if not re.search(r"[A-Z]", password):
        return _fail("Password must contain an uppercase letter")
    if not re.search(r"\d", password):
        return _fail("Password must contain a digit")
    return OK


def validate_username(username: str) -> ValidationResult:
    if not username or not username.strip():
        return _fail("Username is required")
    username = username.strip()
    if len(username) < 3:
        return _fail("Username must be at least 3 characters long")
    if len(username) > 50:
        return _fail("Username must be less than 50 characters")
    if not USERNAME_RE.match(username):
        return _fail("Username may only contain letters and digits")
    return OK


def validate_price(price) -> ValidationResult:
    if isinstance(price, bool):
        return _fail("Price must be a number")
    try:
        value = Decimal(str(price))
    except (InvalidOperation, TypeError, ValueError):
        return _fail("Price must be a number")
    if not value.is_finite():
        return _fail("Price must be a number")
    if value <= 0:
        return _fail("Price must be greater than 0")
    if value > MAX_PRICE:
        return _fail("Price cannot exceed 1,000,000")
    if value.as_tuple().exponent < -2 and value != value.quantize(Decimal("0.01")):
        return _fail("Price cannot have more than 2 decimal places")
    return OK


def validate_stock(stock) -> ValidationResult:
    if isinstance(stock, bool) or not isinstance(stock, int):
        return _fail("Stock must be an integer")
    if stock < 0:
        return _fail("Stock cannot be negative")
    return OK


def validate_product_name(name: str) -> ValidationResult:
    if not name or len(name.strip()) < 3:
        return _fail("Product name must be at least 3 characters long")
    if len(name.strip()) > 100:
        return _fail("Product name must be less than 100 characters")
    return OK


def validate_product_description(description: str) -> ValidationResult:
    if not description or len(description.strip()) < 10:
        return _fail("Product description must be at least 10 characters long")
    return OK


def validate_quantity(quantity) -> ValidationResult:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        return _fail("Quantity must be an integer")
    if quantity <= 0:
        return _fail("Quantity must be greater than 0")
    return OK
