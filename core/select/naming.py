"""Deterministic synthetic class names for consolidation candidates."""

from __future__ import annotations

import hashlib
import itertools
import string
from collections.abc import Iterable, Iterator

from core.config.models import OptimizerConfig
from core.select.selector import ConsolidationCandidate
from core.utils.errors import NamingError

BASE36_ALPHABET = string.digits + string.ascii_lowercase
_FIRST_CHAR_ALPHABET = string.ascii_lowercase


def to_base36(value: int, length: int) -> str:
    """Fixed-width base-36 rendering of value modulo 36**length."""

    chars: list[str] = []
    for _ in range(length):
        value, remainder = divmod(value, 36)
        chars.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(chars))


def from_base36(text: str) -> int:
    return int(text, 36)


def content_hash_name(normalized_key: str, prefix: str, length: int) -> str:
    digest = hashlib.sha256(normalized_key.encode("utf-8")).digest()
    return prefix + to_base36(int.from_bytes(digest, "big"), length)


def iter_sequential_suffixes(max_length: int) -> Iterator[str]:
    """a..z, then a0..az, b0..zz, then a00.. growing one character at a time."""

    for length in range(1, max_length + 1):
        for first in _FIRST_CHAR_ALPHABET:
            for rest in itertools.product(BASE36_ALPHABET, repeat=length - 1):
                yield first + "".join(rest)


def assign_names(
    candidates: list[ConsolidationCandidate],
    config: OptimizerConfig,
    reserved: Iterable[str] = (),
) -> list[ConsolidationCandidate]:
    """Fill candidate.name in list order; earlier candidates win collisions."""

    used: set[str] = set(reserved)
    if config.naming == "sequential":
        _assign_sequential(candidates, config, used)
    else:
        _assign_hashed(candidates, config, used)
    return candidates


def _assign_hashed(
    candidates: list[ConsolidationCandidate], config: OptimizerConfig, used: set[str]
) -> None:
    prefix = config.name_prefix
    length = config.name_length
    space = 36**length

    for candidate in candidates:
        name = content_hash_name(candidate.normalized_key, prefix, length)
        if name in used:
            value = from_base36(name[len(prefix) :])
            for step in range(1, space):
                name = prefix + to_base36((value + step) % space, length)
                if name not in used:
                    break
            else:
                raise NamingError(f"No free synthetic name left for prefix {prefix!r}")
        used.add(name)
        candidate.name = name


def _assign_sequential(
    candidates: list[ConsolidationCandidate], config: OptimizerConfig, used: set[str]
) -> None:
    suffixes = iter_sequential_suffixes(config.name_length)
    for candidate in candidates:
        for suffix in suffixes:
            name = config.name_prefix + suffix
            if name not in used:
                break
        else:
            raise NamingError(
                f"Sequential names longer than {config.name_length} characters would be needed"
            )
        used.add(name)
        candidate.name = name
