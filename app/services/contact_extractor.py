"""
Heuristic recovery of a candidate's name, email and phone from free text.

Every field is searched over progressively larger windows of the document
(``header`` = first 10 lines, ``contact`` = first 20 lines, ``full`` = all of
it) with an ordered list of patterns. Anything that fails validation is
dropped silently; an unknown field comes back as an empty string.
"""
import re
from typing import Callable, List, NamedTuple

from app.models.models import ContactInfo
from app.utils.logging_config import get_logger

logger = get_logger(__name__)

Matcher = Callable[[str], List[str]]

HEADER_LINES = 10
CONTACT_LINES = 20
DEFAULT_COUNTRY_CODE = "+91"

_HSPACE_RE = re.compile(r"[^\S\n]+")


class Sections(NamedTuple):
    header: str
    contact: str
    full: str


def _finder(pattern: str, flags: int = 0) -> Matcher:
    regex = re.compile(pattern, flags)

    def find(text: str) -> List[str]:
        return [m.group(0) for m in regex.finditer(text)]

    return find


def _first(pattern: str, flags: int = 0) -> Matcher:
    """Like _finder but only the first hit, returning capture group 1."""
    regex = re.compile(pattern, flags)

    def find(text: str) -> List[str]:
        m = regex.search(text)
        return [m.group(1)] if m and m.group(1) else []

    return find


# ---------------------------------------------------------------- patterns

_WORD = r"[A-Z][a-z]+"
_NAME = rf"({_WORD}(?:[ \t]+{_WORD}){{1,2}})"

NAME_PATTERNS: List[Matcher] = [
    # two or three capitalised words opening the document
    _first(rf"^\s*{_NAME}"),
    # same, followed by credentials ("Jane Doe, PhD")
    _first(rf"^\s*{_NAME}(?:\s*,\s*[A-Za-z\s.]+)?"),
    # alone on its own line
    _first(rf"(?:^|\n){_NAME}(?:\n|$)"),
    # after a document heading
    _first(rf"(?:curriculum vitae|resume|cv)[\s:]+{_NAME}", re.IGNORECASE),
]

_RFC_EMAIL = (
    r"(?:[a-z0-9!#$%&'*+/=?^_`{|}~-]+(?:\.[a-z0-9!#$%&'*+/=?^_`{|}~-]+)*"
    r"|\"(?:[\x01-\x08\x0b\x0c\x0e-\x1f\x21\x23-\x5b\x5d-\x7f]|\\[\x01-\x09\x0b\x0c\x0e-\x7f])*\")"
    r"@(?:(?:[a-z0-9](?:[a-z0-9-]*[a-z0-9])?\.)+[a-z0-9](?:[a-z0-9-]*[a-z0-9])?"
    r"|\[(?:(?:25[0-5]|2[0-4][0-9]|1[0-9][0-9]|[1-9]?[0-9])\.){3}"
    r"(?:25[0-5]|2[0-4][0-9]|1[0-9][0-9]|[1-9]?[0-9]|[a-z0-9-]*[a-z0-9]:"
    r"(?:[\x01-\x08\x0b\x0c\x0e-\x1f\x21-\x5a\x53-\x7f]|\\[\x01-\x09\x0b\x0c\x0e-\x7f])+)\])"
)

EMAIL_PATTERNS: List[Matcher] = [
    _finder(_RFC_EMAIL, re.IGNORECASE),
    _finder(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}"),
    _finder(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\.[A-Za-z]{2,}"),
    _first(r"(?:Email|E-mail|E):?\s*([A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,})", re.IGNORECASE),
]

PHONE_PATTERNS: List[Matcher] = [
    # optional country code + 10 digits
    _finder(r"(?:\+\d{1,3}[-.\s]?)?\d{10}"),
    # international with parenthesised area code
    _finder(r"\+\d{1,3}\s*\(\d{3}\)\s*\d{3}[-.\s]?\d{4}"),
    # Indian mobile
    _finder(r"[6789]\d{9}"),
    # 3-3-4 groups
    _finder(r"\d{3}[-.\s]?\d{3}[-.\s]?\d{4}"),
]

_PHONE_LABEL_RE = re.compile(
    r"(?:Phone|Mobile|Cell|Tel|Telephone|Contact|Ph|Phone Number):?\s*([+\d\s().-]{10,})",
    re.IGNORECASE,
)
_PHONE_LABEL_WORDS = ("mobile", "phone", "cell", "tel")

_NAME_CHARS_RE = re.compile(r"^[A-Za-z\s]+$")


# ---------------------------------------------------------------- sections

def normalize_lines(text: str) -> List[str]:
    """Newline-normalised, non-blank lines with whitespace runs collapsed."""
    text = (text or "").replace("\r\n", "\n").replace("\r", "\n")
    lines = (_HSPACE_RE.sub(" ", line).strip() for line in text.split("\n"))
    return [line for line in lines if line]


def build_sections(text: str) -> Sections:
    lines = normalize_lines(text)
    return Sections(
        header="\n".join(lines[:HEADER_LINES]),
        contact="\n".join(lines[:CONTACT_LINES]),
        full="\n".join(lines),
    )


# ---------------------------------------------------------------- name

def _valid_name(candidate: str) -> bool:
    return 2 < len(candidate) < 50 and bool(_NAME_CHARS_RE.match(candidate))


def extract_name(text: str, sections: Sections = None) -> str:
    sections = sections or build_sections(text)
    for window_name, window in (("header", sections.header), ("full", sections.full)):
        for pattern in NAME_PATTERNS:
            for hit in pattern(window):
                name = hit.strip()
                if _valid_name(name):
                    logger.debug(f"Name found in {window_name} window")
                    return name
    return ""


# ---------------------------------------------------------------- email

def is_valid_email(email: str) -> bool:
    return (
        "@" in email
        and "." in email
        and len(email) >= 5
        and ".." not in email
        and not email.startswith(".")
        and not email.endswith(".")
        and "@." not in email
        and ".@" not in email
        and "." in email.split("@", 1)[1]
        and not re.search(r"\s", email)
    )


def find_emails(sections: Sections) -> List[str]:
    """All validated emails, lower-cased and de-duplicated, in tier order."""
    found: List[str] = []
    for pattern in EMAIL_PATTERNS:
        found.extend(pattern(sections.header))
        if not found:
            found.extend(pattern(sections.contact))
        if not found:
            found.extend(pattern(sections.full))

    seen = set()
    emails = []
    for email in found:
        email = email.lower().strip()
        if email in seen:
            continue
        seen.add(email)
        if is_valid_email(email):
            emails.append(email)
    return emails


def extract_email(text: str, sections: Sections = None) -> str:
    emails = find_emails(sections or build_sections(text))
    return emails[0] if emails else ""


# ---------------------------------------------------------------- phone

def clean_and_validate_phone(phone: str) -> str:
    """
    Normalise a raw phone match, or return "" when it is not a phone number.

    Ten digits get the default country code; 11 to 15 digits keep their own.
    """
    lowered = phone.lower()
    if any(word in lowered for word in _PHONE_LABEL_WORDS):
        return ""

    cleaned = re.sub(r"[^\d+]", "", phone)
    digits = re.sub(r"\D", "", cleaned)
    if not 10 <= len(digits) <= 15:
        return ""

    if not re.match(r"^[+\d]", cleaned):
        return ""
    if cleaned.count("+") > 1:
        return ""
    if cleaned.startswith("+") and not re.match(r"^\+\d{1,3}", cleaned):
        return ""

    if len(digits) == 10:
        return f"{DEFAULT_COUNTRY_CODE}{digits}"
    if cleaned.startswith("+"):
        return cleaned
    return f"+{digits}"


def _strip_label(match: str) -> str:
    labelled = _PHONE_LABEL_RE.search(match)
    return labelled.group(1) if labelled else match


def find_phones(sections: Sections) -> List[str]:
    """All normalised phone numbers, de-duplicated, in pattern then tier order."""
    phones: List[str] = []
    for pattern in PHONE_PATTERNS:
        matches = pattern(sections.header)
        if not matches:
            matches = pattern(sections.contact)
        if not matches:
            matches = pattern(sections.full)

        for match in matches:
            phone = clean_and_validate_phone(_strip_label(match))
            if phone and phone not in phones:
                phones.append(phone)
    return phones


def extract_phone(text: str, sections: Sections = None) -> str:
    phones = find_phones(sections or build_sections(text))
    return phones[0] if phones else ""


def extract_contact_info(text: str) -> ContactInfo:
    sections = build_sections(text)
    info = ContactInfo(
        name=extract_name(text, sections),
        email=extract_email(text, sections),
        phone=extract_phone(text, sections),
    )
    logger.debug(
        "Contact extraction: name=%s email=%s phone=%s",
        bool(info.name), bool(info.email), bool(info.phone),
    )
    return info
