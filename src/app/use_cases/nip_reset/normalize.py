import re

_NON_DIGITS = re.compile(r"\D+")
_NIP = re.compile(r"[0-9]{4}")


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def normalize_phone(phone: str) -> str:
    """Digits only, last ten (drops country prefixes like +52)"""
    return _NON_DIGITS.sub("", phone or "")[-10:]


def is_valid_nip(nip: str) -> bool:
    return bool(_NIP.fullmatch(nip or ""))
