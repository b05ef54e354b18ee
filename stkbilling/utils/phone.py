import re

_WHITESPACE = re.compile(r'\s+')

COUNTRY_CODE = '254'


def normalize_phone(phone) -> str:
    """
    Normalise a phone number to the 2547XXXXXXXX form the gateway expects.

    Accepts: 0712345678, +254712345678, 254712345678, "0712 345 678".
    Anything else is returned as-is (whitespace removed); length and
    country code are not validated.
    """
    if phone is None:
        return ''
    phone = _WHITESPACE.sub('', str(phone))
    if phone.startswith('0'):
        return COUNTRY_CODE + phone[1:]
    if phone.startswith('+'):
        return phone[1:]
    return phone
