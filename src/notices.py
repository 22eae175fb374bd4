"""Friendlier wording for provider errors shown in the UI."""

GENERIC_NOTICE = "The shake machine jammed. Try again in a moment."

# checked in order, first match wins
NOTICE_RULES = [
    (("image is required",), "Pick an image first, then shake it."),
    (("429", "resource_exhausted", "rate limit"), "Too many shakes right now. The provider is rate limiting us, try again shortly."),
    (("401", "403", "api key", "api_key", "unauthorized"), "The provider rejected our API key. Check the server configuration."),
    (("timeout", "timed out"), "The provider took too long to finish the video. Try again or pick another provider."),
    (("unknown provider",), "That provider is not available. Choose local, kling or veo."),
]


def friendly_notice(message: str) -> str:
    text = (message or "").lower()
    for needles, notice in NOTICE_RULES:
        if any(needle in text for needle in needles):
            return notice
    return GENERIC_NOTICE
