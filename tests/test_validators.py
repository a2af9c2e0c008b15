from decimal import Decimal

import pytest

from storefront.core import validators as v


@pytest.mark.parametrize("email", ["user@example.com", "a.b@sub.domain.org"])
def test_valid_emails(email):
    assert v.validate_email(email).valid


@pytest.mark.parametrize("email", ["", "plainaddress", "no@tld", "sp ace@example.com", "@example.com"])
def test_invalid_emails(email):
    result = v.validate_email(email)
    assert not result.valid
    assert result.message


def test_password_requires_length_and_complexity():
    assert v.validate_password("Passw0rd").valid
    assert v.validate_password("Pa0rd").message == "Password must be at least 8 characters long"
    assert not v.validate_password("password1").valid
    assert not v.validate_password("PASSWORD1").valid
    assert not v.validate_password("Password").valid
    assert not v.validate_password("Aa1" + "x" * 100).valid


def test_username_rules():
    assert v.validate_username("buyer42").valid
    assert not v.validate_username("ab").valid
    assert not v.validate_username("x" * 51).valid
    assert not v.validate_username("bad name").valid
    assert not v.validate_username("under_score").valid
    assert v.validate_username("   ").message == "Username is required"


def test_price_bounds():
    assert v.validate_price(Decimal("0.01")).valid
    assert v.validate_price(Decimal("1000000")).valid
    assert v.validate_price(10).valid
    assert v.validate_price(0).message == "Price must be greater than 0"
    assert not v.validate_price(Decimal("-1")).valid
    assert v.validate_price(Decimal("1000000.01")).message == "Price cannot exceed 1,000,000"
    assert not v.validate_price(Decimal("1.001")).valid
    assert not v.validate_price("abc").valid
    assert not v.validate_price(True).valid


def test_stock_rules():
    assert v.validate_stock(0).valid
    assert v.validate_stock(7).valid
    assert v.validate_stock(-1).message == "Stock cannot be negative"
    assert v.validate_stock(2.5).message == "Stock must be an integer"
    assert not v.validate_stock(True).valid


def test_product_text_lengths():
    assert v.validate_product_name("Pen").valid
    assert not v.validate_product_name("Pe").valid
    assert not v.validate_product_name("x" * 101).valid
    assert v.validate_product_description("Ten chars!").valid
    assert not v.validate_product_description("too short").valid


def test_quantity():
    assert v.validate_quantity(1).valid
    assert not v.validate_quantity(0).valid
    assert not v.validate_quantity(-3).valid
