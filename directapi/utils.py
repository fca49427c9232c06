import re
import urllib.parse
from typing import Dict, Optional, Tuple

PASSWORD_PLACEHOLDER = "|password|"
ENCODED_PLACEHOLDER = urllib.parse.quote_plus(PASSWORD_PLACEHOLDER)
PARAM_PATTERN = re.compile(r"^([^=]+)=(.*)$", re.DOTALL)


def encode_parameters(parameters: Dict[str, str], password: str) -> str:
    """Urlencode `parameters` and splice the raw password into placeholders.

    The encoder turns "|password|" into "%7Cpassword%7C", which is replaced so
    the password reaches the panel verbatim while every other character stays
    percent-encoded.
    """
    blob = urllib.parse.urlencode(parameters)
    return blob.replace(ENCODED_PLACEHOLDER, password)


def mask_secret(text: str, secret: Optional[str]) -> str:
    if not secret:
        return text
    return text.replace(secret, "***")


def parse_param(raw: str) -> Tuple[str, str]:
    m = PARAM_PATTERN.match(raw)
    if not m:
        raise ValueError(f"expected key=value, got: {raw!r}")
    return m.group(1), m.group(2)
