import pytest

from paylink.checkout.services.card_validator import (
    CVC_MESSAGE,
    MONTH_MESSAGE,
    NUMBER_LENGTH_MESSAGE,
    NUMBER_LUHN_MESSAGE,
    YEAR_MESSAGE,
    CardValidator,
    luhn_check,
)

from conftest import (
    CARD_ADYEN_EXCEPTION,
    CARD_ADYEN_FAILED,
    CARD_BAD_LUHN,
    CARD_OK,
    CARD_SDK_FAILURE,
    CARD_STRIPE_EXCEPTION,
    CARD_STRIPE_FAILED,
    make_card,
)


@pytest.mark.parametrize(
    "number",
    [
        CARD_OK,
        CARD_STRIPE_EXCEPTION,
        CARD_STRIPE_FAILED,
        CARD_ADYEN_EXCEPTION,
        CARD_ADYEN_FAILED,
        CARD_SDK_FAILURE,
        "79927398713",
    ],
)
def test_luhn_accepts_valid_numbers(number):
    assert luhn_check(number)


@pytest.mark.parametrize(
    "number",
    [CARD_BAD_LUHN, "79927398710", "12ab", "", "４２４２４２４２４２４２４２４２", "4242424242424242\n"],
)
def test_luhn_rejects_invalid_numbers(number):
    assert not luhn_check(number)


def test_luhn_is_deterministic():
    assert luhn_check(CARD_OK) == luhn_check(CARD_OK)
    assert luhn_check(CARD_BAD_LUHN) == luhn_check(CARD_BAD_LUHN)


def test_luhn_single_digit_change_never_stays_valid():
    """Altering one digit of a valid number never keeps it valid"""
    passes = fails = 0
    for position in range(len(CARD_OK)):
        for digit in "0123456789":
            if digit == CARD_OK[position]:
                continue
            altered = CARD_OK[:position] + digit + CARD_OK[position + 1:]
            if luhn_check(altered):
                passes += 1
            else:
                fails += 1
    assert passes == 0
    assert fails > 0


def test_valid_card_passes():
    card = make_card()
    result = CardValidator().validate(card)
    assert result.is_valid
    assert result.card is card
    assert result.errors == {}


def test_number_whitespace_is_stripped():
    result = CardValidator().validate(make_card(number="4242 4242 4242 4242"))
    assert result.is_valid


@pytest.mark.parametrize("number", ["424242424242", "42424242424242421", "4242-4242-4242-4242"])
def test_number_must_have_16_digits(number):
    result = CardValidator().validate(make_card(number=number))
    assert result.errors == {"number": NUMBER_LENGTH_MESSAGE}


def test_luhn_failure_reported_on_number():
    result = CardValidator().validate(make_card(number=CARD_BAD_LUHN))
    assert result.errors == {"number": NUMBER_LUHN_MESSAGE}


def test_luhn_can_be_disabled():
    result = CardValidator(enforce_luhn=False).validate(make_card(number=CARD_BAD_LUHN))
    assert result.is_valid


@pytest.mark.parametrize("month", ["0", "13", "", "ab", "-1", "²", "١٢"])
def test_month_out_of_range(month):
    result = CardValidator().validate(make_card(exp_month=month))
    assert result.errors == {"month": MONTH_MESSAGE}


@pytest.mark.parametrize("year", ["", "202", "2x", "28\n", "²"])
def test_year_must_be_one_or_two_digits(year):
    result = CardValidator().validate(make_card(exp_year=year))
    assert result.errors == {"year": YEAR_MESSAGE}


def test_past_year_is_not_a_form_error():
    assert CardValidator().validate(make_card(exp_year="01")).is_valid


@pytest.mark.parametrize("cvc", ["12", "1234", "12a", "123\n", "１２３"])
def test_form_cvc_is_exactly_three_digits(cvc):
    result = CardValidator().validate(make_card(cvc=cvc))
    assert result.errors == {"cvc": CVC_MESSAGE}


def test_first_failing_rule_wins():
    card = make_card(number="123", exp_month="99", exp_year="abc", cvc="1")
    result = CardValidator().validate(card)
    assert not result.is_valid
    assert result.field == "number"
    assert list(result.errors) == ["number"]
