import logging

from services.redaction import mask_email, redact_dict, redact_text


def test_mask_email():
    assert mask_email("jane@example.com") == "j***@example.com"
    assert mask_email("") == ""
    assert mask_email(None) == ""


def test_redact_text_masks_phone_and_email():
    text = "recipient jane.doe@example.com phone +15550001111"
    redacted = redact_text(text)
    assert "jane.doe@example.com" not in redacted
    assert "+15550001111" not in redacted
    assert redacted == "recipient j***@example.com phone +15550****11"


def test_redact_dict_masks_sensitive_keys():
    payload = {
        "email": "jane@example.com",
        "Api-Key": "sk-live-123",
        "authorization": "Bearer abc",
        "client_secret": "shh",
        "metadata": {"send_transfer_id": "0xabc", "access_token": "t"},
        "amount": "1.5",
    }
    redacted = redact_dict(payload)
    assert redacted["email"] == "j***@example.com"
    assert redacted["Api-Key"] == "[REDACTED]"
    assert redacted["authorization"] == "[REDACTED]"
    assert redacted["client_secret"] == "[REDACTED]"
    assert redacted["metadata"] == {"send_transfer_id": "0xabc", "access_token": "[REDACTED]"}
    assert redacted["amount"] == "1.5"


def test_log_line_uses_redaction_helper(caplog):
    logger = logging.getLogger("redaction-test")
    caplog.set_level(logging.INFO)
    logger.info("payload=%s", redact_text("email jane@example.com phone +15550001111"))
    assert "jane@example.com" not in caplog.text
    assert "+15550001111" not in caplog.text
