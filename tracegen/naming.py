"""Name pools for generated applications, packages, classes and methods.

Each pool is drawn from without replacement. Once a pool runs dry, names
are synthesized from Faker business-speak words and sanitized into valid
Java identifiers, so large landscapes never run out of names.
"""

from __future__ import annotations

import random
import re
from collections.abc import Callable
from importlib import resources

from faker import Faker

CATEGORIES = ("app", "package", "class", "method")

_RESOURCE_FILES = {
    "app": "app-names.txt",
    "package": "package-names.txt",
    "class": "class-names.txt",
    "method": "method-names.txt",
}

JAVA_RESERVED_TOKENS = frozenset({
    "abstract", "continue", "for", "new", "switch",
    "assert", "default", "if", "package", "synchronized",
    "boolean", "do", "goto", "private", "this",
    "break", "double", "implements", "protected", "throw",
    "byte", "else", "import", "public", "throws",
    "case", "enum", "instanceof", "return", "transient",
    "catch", "extends", "int", "short", "try",
    "char", "final", "interface", "static", "void",
    "class", "finally", "long", "strictfp", "volatile",
    "const", "float", "native", "super", "while",
    "true", "false", "null",
})

IDENTIFIER_FALLBACK = "fallbackIdentifier"

# Re-draws of a colliding fallback name before it gets a numeric suffix
MAX_FALLBACK_ATTEMPTS = 20


def capitalize(text: str) -> str:
    """Upper-case the first character only (unlike ``str.capitalize``)."""
    return text[:1].upper() + text[1:]


def sanitize_java_identifier(identifier: str) -> str:
    """Turn any string into a valid Java identifier.

    Strips characters outside ``[0-9A-Za-z_$]`` and leading digits. Reserved
    words and empty results are replaced by :data:`IDENTIFIER_FALLBACK`.
    """
    identifier = re.sub(r"[^0-9a-zA-Z_$]", "", identifier)
    identifier = re.sub(r"^[0-9]+", "", identifier)
    if not identifier or identifier in JAVA_RESERVED_TOKENS:
        return IDENTIFIER_FALLBACK
    return identifier


def load_default_pools() -> dict[str, list[str]]:
    """Read the bundled name lists, one name per line."""
    base = resources.files("tracegen") / "resources"
    pools: dict[str, list[str]] = {}
    for category, filename in _RESOURCE_FILES.items():
        text = (base / filename).read_text(encoding="utf-8")
        pools[category] = [line.strip() for line in text.splitlines() if line.strip()]
    return pools


class NamePool:
    """Unique identifier supply, one pool per category.

    All randomness comes from the ``rng`` passed in, so a seeded generator
    yields the same names on every run. No name is handed out twice within
    a category; colliding fallbacks are re-drawn, then numbered.
    """

    def __init__(
        self,
        rng: random.Random,
        pools: dict[str, list[str]] | None = None,
    ) -> None:
        self._rng = rng
        source = pools if pools is not None else load_default_pools()
        self._pools: dict[str, list[str]] = {c: list(source.get(c, [])) for c in CATEGORIES}
        self._issued: dict[str, set[str]] = {c: set() for c in CATEGORIES}
        self._faker = Faker()
        self._faker.seed_instance(rng.getrandbits(32))

    def remaining(self, category: str) -> int:
        """Number of pooled names left before falling back."""
        return len(self._pools[category])

    def app_name(self) -> str:
        return self._draw("app") or self._fallback(
            "app", lambda: self._noun() + self._noun() + self._noun()
        )

    def package_name(self) -> str:
        return self._draw("package") or self._fallback(
            "package", lambda: (self._noun() + self._noun() + self._noun()).lower()
        )

    def class_name(self) -> str:
        return self._draw("class") or self._fallback(
            "class", lambda: capitalize(self._adjective()) + capitalize(self._noun())
        )

    def method_name(self) -> str:
        return self._draw("method") or self._fallback(
            "method", lambda: self._verb() + capitalize(self._noun())
        )

    def _draw(self, category: str) -> str | None:
        pool = self._pools[category]
        if not pool:
            return None
        name = pool.pop(self._rng.randrange(len(pool)))
        self._issued[category].add(name)
        return name

    def _fallback(self, category: str, compose: Callable[[], str]) -> str:
        issued = self._issued[category]
        name = sanitize_java_identifier(compose())
        attempts = 1
        while name in issued and attempts < MAX_FALLBACK_ATTEMPTS:
            name = sanitize_java_identifier(compose())
            attempts += 1

        base, suffix = name, 2
        while name in issued:
            name = f"{base}{suffix}"
            suffix += 1
        issued.add(name)
        return name

    # Faker's bs() is "<verb> <adjective> <noun>"
    def _bs_words(self) -> list[str]:
        return self._faker.bs().split()

    def _verb(self) -> str:
        return self._bs_words()[0]

    def _adjective(self) -> str:
        words = self._bs_words()
        return words[1] if len(words) > 2 else words[0]

    def _noun(self) -> str:
        return self._bs_words()[-1]
