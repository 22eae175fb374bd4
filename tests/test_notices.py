import pytest

from src.notices import GENERIC_NOTICE, friendly_notice


@pytest.mark.parametrize("message,needle", [
    ("Kling submit failed (429): Too Many Requests", "rate limiting"),
    ("RESOURCE_EXHAUSTED: quota", "rate limiting"),
    ("Veo submit failed (401): API key not valid", "API key"),
    ("Kling generation timed out after 60 polls", "too long"),
    ("Read timeout", "too long"),
    ("image is required", "Pick an image"),
])
def test_known_errors_get_friendly_notice(message, needle):
    assert needle in friendly_notice(message)


def test_unknown_error_gets_generic_notice():
    assert friendly_notice("generation_failed") == GENERIC_NOTICE
    assert friendly_notice("") == GENERIC_NOTICE
    assert friendly_notice(None) == GENERIC_NOTICE
