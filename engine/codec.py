"""Compact text encoding of allocation matrices.

An expression is ``method code [+ type code] [+ (target codes)] + (tier runs)``,
for example ``A(2×1+28×0)`` or ``B1(3+4)(5×2+25×1)``. Targets that share an
identical 30-tier row are grouped into one expression.
"""

import logging
import re
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple

from config.code_tables import (
    DELIVERY_TYPE_CODES, METHOD_ALIASES, METHOD_CODES, METHODS_WITH_TARGET_CODES,
    TARGET_CODE_TABLES,
)
from config.defaults import CITY_WIDE_TARGET, TIER_COUNT
from engine.errors import CodecError, InvalidInputError
from models.allocation import DecodedExpression
from models.tiers import to_decimal

logger = logging.getLogger(__name__)

RUN_SEPARATOR = "+"
COUNT_SEPARATOR = "×"
EXPRESSION_SEPARATOR = ";"
JOIN_SEPARATOR = "; "

_FULL_WIDTH_BRACKETS = str.maketrans({"（": "(", "）": ")"})
_BRACKET_RE = re.compile(r"\(([^()]*)\)")

_METHOD_BY_CODE = {code: name for name, code in METHOD_CODES.items()}
_TYPE_BY_CODE = {code: name for name, code in DELIVERY_TYPE_CODES.items()}


def format_value(value) -> str:
    """Integral values without a decimal point, others as plain decimals."""
    d = to_decimal(value)
    if d == d.to_integral_value():
        return str(int(d))
    return format(d.normalize(), "f")


# ---------------------------------------------------------------------------
# Run-length helpers
# ---------------------------------------------------------------------------

def run_length_encode(row: Sequence) -> str:
    """Maximal runs of equal values as ``count×value`` joined by ``+``."""
    if len(row) != TIER_COUNT:
        raise CodecError(f"Tier row must have {TIER_COUNT} values, got {len(row)}")
    try:
        values = [to_decimal(v) for v in row]
    except InvalidInputError as exc:
        raise CodecError(str(exc)) from exc

    runs = []
    start = 0
    for i in range(1, TIER_COUNT + 1):
        if i == TIER_COUNT or values[i] != values[start]:
            runs.append(f"{i - start}{COUNT_SEPARATOR}{format_value(values[start])}")
            start = i
    return RUN_SEPARATOR.join(runs)


def run_length_decode(text: str) -> List[Decimal]:
    """Expand ``count×value`` runs to exactly 30 tier values."""
    if not text or not text.strip():
        raise CodecError("Empty tier pattern")

    values: List[Decimal] = []
    for segment in text.split(RUN_SEPARATOR):
        segment = segment.strip()
        count_text, sep, value_text = segment.partition(COUNT_SEPARATOR)
        if not sep or not count_text or not value_text:
            raise CodecError(f"Malformed tier run '{segment}'")
        if not (count_text.isascii() and count_text.isdigit()):
            raise CodecError(f"Run count must be a positive integer: '{count_text}'")
        count = int(count_text)
        if count <= 0:
            raise CodecError(f"Run count must be a positive integer: '{count_text}'")
        if value_text.startswith(("-", "+")):
            raise CodecError(f"Tier value must be unsigned: '{value_text}'")
        try:
            value = to_decimal(value_text)
        except InvalidInputError as exc:
            raise CodecError(f"Bad tier value '{value_text}'") from exc
        values.extend([value] * count)
        if len(values) > TIER_COUNT:
            break

    if len(values) != TIER_COUNT:
        raise CodecError(
            f"Tier pattern expands to {len(values)} values, expected {TIER_COUNT}",
            {"pattern": text},
        )
    return values


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------

def method_code(method: str) -> str:
    canonical = METHOD_ALIASES.get(method, method)
    try:
        return METHOD_CODES[canonical]
    except KeyError:
        raise CodecError(f"Unknown delivery method '{method}'") from None


def _target_table(delivery_type: Optional[str]) -> Dict[str, str]:
    if not delivery_type:
        raise CodecError("Extended delivery requires a delivery type")
    if delivery_type not in DELIVERY_TYPE_CODES:
        raise CodecError(f"Unknown delivery type '{delivery_type}'")
    table = TARGET_CODE_TABLES.get(delivery_type)
    if table is None:
        raise CodecError(f"Delivery type '{delivery_type}' has no target code table")
    return table


def group_rows(targets: Sequence[str], matrix: Sequence[Sequence]) -> List[Tuple[List[str], List[Decimal]]]:
    """Group targets by identical rows; groups in first-occurrence order."""
    groups: Dict[Tuple[Decimal, ...], List[str]] = {}
    for target, row in zip(targets, matrix):
        key = tuple(to_decimal(v) for v in row)
        groups.setdefault(key, []).append(target)
    return [(names, list(key)) for key, names in groups.items()]


def _encode_groups(
    method: str,
    delivery_type: Optional[str],
    targets: Sequence[str],
    matrix: Sequence[Sequence],
) -> List[Tuple[List[str], str]]:
    code = method_code(method)
    if len(targets) != len(matrix):
        raise CodecError(f"{len(targets)} targets but {len(matrix)} matrix rows")

    with_targets = code in METHODS_WITH_TARGET_CODES
    table = _target_table(delivery_type) if with_targets else None
    prefix = code + (DELIVERY_TYPE_CODES[delivery_type] if with_targets else "")

    encoded = []
    for names, row in group_rows(targets, matrix):
        text = prefix
        if with_targets:
            missing = [n for n in names if n not in table]
            if missing:
                raise CodecError(
                    f"No code for target(s) {missing} under '{delivery_type}'",
                    {"targets": missing},
                )
            text += "(" + RUN_SEPARATOR.join(table[n] for n in names) + ")"
        text += "(" + run_length_encode(row) + ")"
        encoded.append((names, text))

    logger.debug("Encoded %d targets into %d expressions", len(targets), len(encoded))
    return encoded


def encode(
    method: str,
    delivery_type: Optional[str],
    targets: Sequence[str],
    matrix: Sequence[Sequence],
) -> List[str]:
    """One expression per group of targets sharing a tier row."""
    return [text for _, text in _encode_groups(method, delivery_type, targets, matrix)]


def encode_by_target(
    method: str,
    delivery_type: Optional[str],
    targets: Sequence[str],
    matrix: Sequence[Sequence],
) -> Dict[str, str]:
    """Expression of the group each target belongs to, keyed by target."""
    return {
        name: text
        for names, text in _encode_groups(method, delivery_type, targets, matrix)
        for name in names
    }


def encode_to_string(method, delivery_type, targets, matrix) -> str:
    return JOIN_SEPARATOR.join(encode(method, delivery_type, targets, matrix))


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def _split_brackets(text: str, expected: int) -> List[str]:
    contents = []
    pos = 0
    while pos < len(text):
        match = _BRACKET_RE.match(text, pos)
        if not match:
            raise CodecError(f"Malformed brackets near '{text[pos:]}'")
        contents.append(match.group(1))
        pos = match.end()
    if len(contents) != expected:
        raise CodecError(f"Expected {expected} bracket group(s), found {len(contents)}")
    return contents


def decode(expression: str) -> DecodedExpression:
    """Parse one expression back into method, type, targets and tier values."""
    if expression is None or not expression.strip():
        raise CodecError("Empty expression")
    text = expression.strip().translate(_FULL_WIDTH_BRACKETS)

    code = text[0]
    if code not in _METHOD_BY_CODE:
        raise CodecError(f"Unknown method code '{code}'")
    method = _METHOD_BY_CODE[code]
    rest = text[1:]

    if code not in METHODS_WITH_TARGET_CODES:
        (pattern,) = _split_brackets(rest, 1)
        return DecodedExpression(
            method=method,
            delivery_type=None,
            targets=[CITY_WIDE_TARGET],
            tier_values=run_length_decode(pattern),
        )

    if not rest or rest[0] not in _TYPE_BY_CODE:
        raise CodecError(f"Missing or unknown delivery type code in '{expression}'")
    delivery_type = _TYPE_BY_CODE[rest[0]]
    table = _target_table(delivery_type)
    names_by_code = {c: name for name, c in table.items()}

    target_text, pattern = _split_brackets(rest[1:], 2)
    targets = []
    for target_code in target_text.split(RUN_SEPARATOR):
        target_code = target_code.strip()
        if target_code not in names_by_code:
            raise CodecError(f"Unknown target code '{target_code}' for '{delivery_type}'")
        targets.append(names_by_code[target_code])

    return DecodedExpression(
        method=method,
        delivery_type=delivery_type,
        targets=targets,
        tier_values=run_length_decode(pattern),
    )


def decode_many(text: str) -> List[DecodedExpression]:
    """Decode a ``;``-separated list of expressions."""
    if text is None:
        raise CodecError("Empty expression list")
    parts = [p.strip() for p in text.split(EXPRESSION_SEPARATOR)]
    parts = [p for p in parts if p]
    if not parts:
        raise CodecError("Empty expression list")
    return [decode(p) for p in parts]


def expand(decoded: Sequence[DecodedExpression]) -> Tuple[List[str], List[List[Decimal]]]:
    """Flatten decoded expressions to parallel (targets, matrix) lists."""
    targets, matrix = [], []
    for item in decoded:
        for target in item.targets:
            targets.append(target)
            matrix.append(list(item.tier_values))
    return targets, matrix
