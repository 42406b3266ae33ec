"""Detection of placeholder values emitted by the collection generator.

The generator fills fields it has no example for with lorem-ipsum text,
random alphanumeric emails, timestamps from decades ago, ``urn:uuid:``
identifiers and huge integers. ``is_random_value`` recognizes those shapes;
it is a heuristic, tuned to the generator, not a proof.
"""

import re

# Integers outside this band are treated as generator noise.
MAX_REASONABLE_INTEGER = 1_000_000
MIN_REASONABLE_INTEGER = -1_000

# Millisecond timestamps before this year are treated as generator noise.
RANDOM_DATE_CUTOFF_YEAR = 2000

LOREM_WORDS = frozenset(
    """
    lorem ipsum dolor sit amet consectetur adipiscing elit sed do eiusmod tempor
    incididunt ut labore et dolore magna aliqua enim ad minim veniam quis nostrud
    exercitation ullamco laboris nisi aliquip ex ea commodo consequat duis aute
    irure in reprehenderit voluptate velit esse cillum eu fugiat nulla pariatur
    excepteur sint occaecat cupidatat non proident sunt culpa qui officia deserunt
    mollit anim id est laborum
    """.split()
)

# Single lorem words shorter than this ("in", "do", "id", "non") are real words too.
MIN_SINGLE_LOREM_WORD = 5

KNOWN_TLDS = frozenset(
    """
    com org net edu gov mil int io dev app ai co biz info me tv us uk de fr es it nl
    be ch at se no dk fi pl cz ru ua cn jp kr in au nz ca br mx ar za eu local test
    example
    """.split()
)

RANDOM_EMAIL = re.compile(r"^([A-Za-z0-9]+)@([A-Za-z0-9]+)\.([A-Za-z]+)$")
GENERATED_TIMESTAMP = re.compile(r"^(\d{4})-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$")
WORD = re.compile(r"[A-Za-z]+")


def is_random_value(value) -> bool:
    """Return True if ``value`` looks like a generator placeholder."""
    if isinstance(value, bool) or value is None:
        return False
    if isinstance(value, int):
        return value > MAX_REASONABLE_INTEGER or value < MIN_REASONABLE_INTEGER
    if not isinstance(value, str):
        return False

    text = value.strip()
    if not text:
        return False
    return (
        text.startswith("urn:uuid:")
        or _is_lorem(text)
        or _is_random_email(text)
        or _is_old_timestamp(text)
    )


def _is_lorem(text: str) -> bool:
    # only letters, spaces and light punctuation, like "Duis nulla." or "ut labore sint"
    if re.search(r"[^A-Za-z\s.,]", text):
        return False
    words = [w.lower() for w in WORD.findall(text)]
    if not words or not all(w in LOREM_WORDS for w in words):
        return False
    return len(words) > 1 or len(words[0]) >= MIN_SINGLE_LOREM_WORD


def _is_random_email(text: str) -> bool:
    match = RANDOM_EMAIL.match(text)
    if not match:
        return False
    local, domain, tld = match.groups()
    if not _looks_generated(local):
        return False
    return _looks_generated(domain) or tld.lower() not in KNOWN_TLDS


def _looks_generated(token: str) -> bool:
    """Mixed letters and digits, or camel-case switches no human would type."""
    has_digit = any(c.isdigit() for c in token)
    has_alpha = any(c.isalpha() for c in token)
    if has_digit and has_alpha:
        return True
    switches = sum(1 for a, b in zip(token, token[1:]) if a.islower() and b.isupper())
    return switches >= 2


def _is_old_timestamp(text: str) -> bool:
    match = GENERATED_TIMESTAMP.match(text)
    return bool(match) and int(match.group(1)) < RANDOM_DATE_CUTOFF_YEAR
