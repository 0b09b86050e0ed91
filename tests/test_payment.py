import pytest

from order_surcharges.schemas import PaymentMethod, SurchargeConfig, SurchargeKind
from order_surcharges.surcharges.payment import is_cash_on_delivery


def _config(handler=None):
    return SurchargeConfig(kind=SurchargeKind.COD_FEE, active=True, amount="5", payment_handler_identifier=handler)


@pytest.mark.parametrize("name", [
    "Nachnahme",
    "NACHNAHME (DHL)",
    "Cash on Delivery",
    "COD",
    "Cash",
    "Barzahlung / Cash",
])
def test_cod_names(name):
    assert is_cash_on_delivery(PaymentMethod(name=name), _config())


@pytest.mark.parametrize("name", ["Bar", "Invoice", "PayPal", "Vorkasse", ""])
def test_other_names(name):
    assert not is_cash_on_delivery(PaymentMethod(name=name), _config())


def test_handler_identifier_match():
    method = PaymentMethod(name="Rechnung", technical_name="payment_cash_handler")

    assert is_cash_on_delivery(method, _config("payment_cash_handler"))
    assert not is_cash_on_delivery(method, _config("payment_other"))


def test_blank_identifier_never_matches():
    method = PaymentMethod(name="Invoice", technical_name="")

    assert not is_cash_on_delivery(method, _config(""))
    assert not is_cash_on_delivery(method, _config("   "))


def test_missing_payment_method():
    assert not is_cash_on_delivery(None, _config())


def test_missing_config_still_checks_name():
    assert is_cash_on_delivery(PaymentMethod(name="Nachnahme"), None)
