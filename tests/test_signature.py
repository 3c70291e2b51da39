# tests/test_signature.py
from intent_capture.utils.signature import compute_signature, parse_signature_header, verify_webhook_signature

SECRET = "wsec_test"
BODY = b'{"type": "post_call_transcription"}'
NOW = 1_700_000_000

def header(timestamp, body=BODY, secret=SECRET):
    return f"t={timestamp},{compute_signature(secret, str(timestamp), body)}"

def test_parse_signature_header():
    assert parse_signature_header("t=123,v0=abc") == ("123", "v0=abc")
    assert parse_signature_header("garbage") == (None, None)

def test_valid_signature_is_accepted():
    assert verify_webhook_signature(header(NOW), None, BODY, SECRET, now=NOW)
    assert verify_webhook_signature(header(NOW), str(NOW), BODY, SECRET, now=NOW)

def test_missing_or_malformed_signature_is_rejected():
    assert not verify_webhook_signature(None, None, BODY, SECRET, now=NOW)
    assert not verify_webhook_signature("v0=deadbeef", None, BODY, SECRET, now=NOW)
    assert not verify_webhook_signature("t=notanumber,v0=deadbeef", None, BODY, SECRET, now=NOW)

def test_tampered_body_or_wrong_secret_is_rejected():
    assert not verify_webhook_signature(header(NOW), None, BODY + b" ", SECRET, now=NOW)
    assert not verify_webhook_signature(header(NOW, secret="other"), None, BODY, SECRET, now=NOW)

def test_expired_signature_is_rejected():
    issued = NOW - 31 * 60
    assert not verify_webhook_signature(header(issued), None, BODY, SECRET, now=NOW)
    assert verify_webhook_signature(header(NOW - 29 * 60), None, BODY, SECRET, now=NOW)

def test_timestamp_header_must_match_signature():
    assert not verify_webhook_signature(header(NOW), str(NOW - 1), BODY, SECRET, now=NOW)
