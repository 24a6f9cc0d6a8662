import pytest

from slipcheck.emvco import append_crc, tlv

ACCOUNT_ID = "0066812345678"
PROMPTPAY_AID = "A000000677010111"


def build_slip(*fields: str, encoding: str = "ascii") -> str:
    return append_crc("".join(fields), encoding=encoding)


def promptpay_account(account: str = ACCOUNT_ID, tag: str = "29") -> str:
    return tlv(tag, tlv("00", PROMPTPAY_AID) + tlv("01", account))


@pytest.fixture
def hex_slip() -> str:
    """All-hex slip: amount 1000, CRC over hex bytes."""
    return "00020101021229370016A0000006770101110113006681234567853037645404100063040247"


@pytest.fixture
def text_slip() -> str:
    """PromptPay QR text: amount 100.00, country TH, CRC over ASCII."""
    return "00020101021229370016A0000006770101110113006681234567853037645406100.005802TH6304F142"
