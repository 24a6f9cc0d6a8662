import pytest

from slipcheck.emvco import (
    CRCResult,
    Primitive,
    Template,
    TLVFormatError,
    append_crc,
    checksum,
    crc16_ccitt,
    describe,
    parse_emv,
    tlv,
    verify_crc,
)

# All-hex slip payload: PromptPay account 0066812345678, amount 1000, CRC over hex bytes.
HEX_SLIP = "00020101021229370016A0000006770101110113006681234567853037645404100063040247"
# Text PromptPay payload for the same account, amount 100.00, CRC over ASCII.
TEXT_SLIP = "00020101021229370016A0000006770101110113006681234567853037645406100.005802TH6304F142"


def test_crc16_check_value():
    assert crc16_ccitt(b"123456789") == 0x29B1
    assert checksum("313233343536373839") == "29B1"
    assert checksum("123456789", encoding="ascii") == "29B1"


def test_verify_crc_hex_payload():
    result = verify_crc(HEX_SLIP)
    assert result == CRCResult(ok=True, expected="0247", actual="0247")


def test_verify_crc_accepts_lowercase_checksum():
    assert verify_crc(HEX_SLIP[:-4] + "0247".lower()).ok


def test_verify_crc_ascii_payload():
    result = verify_crc(TEXT_SLIP, encoding="ascii")
    assert result.ok
    assert result.expected == "F142"


def test_verify_crc_text_payload_is_not_hex():
    result = verify_crc(TEXT_SLIP)
    assert result == CRCResult(ok=False, expected=None, actual="F142")


def test_verify_crc_detects_single_character_change():
    marker = HEX_SLIP.index("6304")
    for i in range(marker):
        replacement = "1" if HEX_SLIP[i] == "0" else "0"
        tampered = HEX_SLIP[:i] + replacement + HEX_SLIP[i + 1 :]
        assert not verify_crc(tampered).ok, f"change at offset {i} not detected"


def test_verify_crc_mismatch():
    result = verify_crc(HEX_SLIP[:-4] + "0000")
    assert not result.ok
    assert result.expected == "0247"
    assert result.actual == "0000"


def test_verify_crc_missing_marker():
    assert verify_crc("000201") == CRCResult(ok=False, expected=None, actual=None)
    assert verify_crc("") == CRCResult(ok=False, expected=None, actual=None)


def test_verify_crc_truncated_checksum():
    result = verify_crc(HEX_SLIP[:-2])
    assert not result.ok
    assert result.expected == "0247"
    assert result.actual == "02"


def test_verify_crc_odd_length_data():
    result = verify_crc("0" + HEX_SLIP)
    assert result.ok is False
    assert result.expected is None


def test_verify_crc_unknown_encoding():
    with pytest.raises(ValueError):
        verify_crc(HEX_SLIP, encoding="utf-16")


def test_append_crc():
    assert append_crc(HEX_SLIP[:-8]) == HEX_SLIP
    assert append_crc(TEXT_SLIP[:-8], encoding="ascii") == TEXT_SLIP
    with pytest.raises(ValueError):
        append_crc("5802TH")


def test_parse_flat_fields():
    expected = {"00": "01", "52": "5999", "53": "764", "59": "SHOP NAME"}
    payload = "".join(tlv(tag, value) for tag, value in expected.items())

    parsed = parse_emv(payload)

    assert parsed == {tag: Primitive(tag, value) for tag, value in expected.items()}


def test_parse_merchant_template():
    account = "0066812345678"
    merchant = tlv("00", "A000000677010111") + tlv("01", account)

    parsed = parse_emv(tlv("00", "01") + tlv("29", merchant))

    node = parsed["29"]
    assert isinstance(node, Template)
    assert node.raw == merchant
    assert node.value == merchant
    assert node.sub["01"] == Primitive("01", account)


def test_parse_nested_template_inside_template():
    inner = tlv("00", "ABC")
    parsed = parse_emv(tlv("29", tlv("31", inner) + tlv("02", "X")))

    nested = parsed["29"].sub["31"]
    assert isinstance(nested, Template)
    assert nested.sub == {"00": Primitive("00", "ABC")}
    assert parsed["29"].sub["02"] == Primitive("02", "X")


def test_parse_only_template_tags_recurse():
    parsed = parse_emv(tlv("62", tlv("05", "REF1")) + tlv("33", "0001"))
    assert isinstance(parsed["62"], Primitive)
    assert isinstance(parsed["33"], Primitive)


def test_parse_hex_slip():
    parsed = parse_emv(HEX_SLIP)
    assert parsed["54"].value == "1000"
    assert parsed["53"].value == "764"
    assert parsed["63"].value == "0247"
    assert parsed["29"].sub["00"].value == "A000000677010111"


def test_parse_truncated_value_keeps_remainder():
    parsed = parse_emv("000201" + "5910ABC")
    assert parsed["59"] == Primitive("59", "ABC")


def test_parse_truncated_template():
    parsed = parse_emv("2910" + "0006")
    assert parsed["29"].raw == "0006"
    assert parsed["29"].sub == {"00": Primitive("00", "")}


@pytest.mark.parametrize("trailer", ["5", "54", "540"])
def test_parse_ignores_short_trailing_fragment(trailer):
    assert parse_emv("000201" + trailer) == {"00": Primitive("00", "01")}


@pytest.mark.parametrize("payload", ["00AB01", "00020159AB", "00 1ABC"])
def test_parse_rejects_non_numeric_length(payload):
    with pytest.raises(TLVFormatError):
        parse_emv(payload)


def test_format_error_is_value_error():
    assert issubclass(TLVFormatError, ValueError)


def test_parse_duplicate_tag_last_wins():
    parsed = parse_emv(tlv("54", "10.00") + tlv("54", "20.00"))
    assert parsed["54"].value == "20.00"


def test_parse_empty_payload():
    assert parse_emv("") == {}


def test_parse_and_crc_are_repeatable():
    assert parse_emv(HEX_SLIP) == parse_emv(HEX_SLIP)
    assert verify_crc(HEX_SLIP) == verify_crc(HEX_SLIP)
    assert verify_crc(TEXT_SLIP, "ascii") == verify_crc(TEXT_SLIP, "ascii")


def test_tlv_encoding():
    assert tlv("54", "100.00") == "5406100.00"
    assert tlv("00", "") == "0000"
    with pytest.raises(ValueError):
        tlv("5", "1")
    with pytest.raises(ValueError):
        tlv("59", "x" * 100)


def test_describe():
    assert describe("54") == "Transaction Amount"
    assert describe("99") == "Unknown Tag"


def test_template_is_unhashable():
    template = parse_emv(tlv("29", tlv("01", "0066812345678")))["29"]
    with pytest.raises(TypeError):
        hash(template)
    assert hash(Primitive("54", "1.00")) == hash(Primitive("54", "1.00"))
