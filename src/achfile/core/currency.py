"""
Currency field parsing.

ACH amounts are stored as zero-padded digit runs with two implied decimal
places. Some producers also insert thousands separators, so commas are
dropped before parsing.
"""

import re
from typing import Union

from achfile.core.exceptions import FieldParseError

# Plain base-10 numeral: optional sign, digits, optional fraction.
_NUMERAL = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)")


def parse_currency(value: Union[bytes, bytearray, str], field: str = "amount") -> float:
    """
    Parse a fixed-width currency field.

    Args:
        value: Raw field bytes (or text), e.g. b"0000012345" or b" 1,234.50"
        field: Field name used in the error message

    Returns:
        The numeral as a float. Scaling for implied decimals is left to the caller.

    Raises:
        FieldParseError: If the cleaned field is not a valid numeral
    """
    if isinstance(value, (bytes, bytearray)):
        text = bytes(value).decode("ascii", errors="replace")
    else:
        text = value

    cleaned = text.replace(",", "").strip(" ")

    if not _NUMERAL.fullmatch(cleaned):
        raise FieldParseError(
            f"Invalid currency value for {field}: {text!r}",
            field=field,
            value=text,
        )

    return float(cleaned)
