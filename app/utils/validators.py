"""Email and phone number format checks used at registration."""
import re

# re.ASCII: \d and friends must not accept non-Latin digits
EMAIL_RE = re.compile(r"[a-zA-Z0-9._]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}", re.ASCII)

# Uzbek mobile numbers: +998 / 998 / 8 followed by an operator code and 7 digits
OPERATOR_CODES = ("90", "91", "93", "94", "97", "88", "98", "33", "71")
PHONE_RE = re.compile(
    r"\+?998(?:{ops})\d{{7}}|8(?:{ops})\d{{7}}".format(ops="|".join(OPERATOR_CODES)),
    re.ASCII,
)


def is_valid_email(email: str) -> bool:
    return EMAIL_RE.fullmatch(email or "") is not None


def is_valid_phone_number(phone_number: str) -> bool:
    return PHONE_RE.fullmatch(phone_number or "") is not None
