# /marksheet-backend/app/services/marksheet_helpers/number_words.py

import logging

logger = logging.getLogger(__name__)

UNITS = [
    "", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine", "Ten",
    "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen", "Seventeen", "Eighteen", "Nineteen",
]
TENS = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]
SCALES = ["", "Thousand", "Million", "Billion", "Trillion"]


def _below_hundred(num: int) -> str:
    if num < 20:
        return UNITS[num]
    words = TENS[num // 10]
    if num % 10:
        words += " " + UNITS[num % 10]
    return words


def _below_thousand(num: int) -> str:
    parts = []
    hundreds, remainder = divmod(num, 100)
    if hundreds:
        parts.append(f"{UNITS[hundreds]} Hundred")
    if remainder:
        parts.append(_below_hundred(remainder))
    return " ".join(parts)


def number_to_words(num) -> str:
    """
    Converts a non-negative integer into English words, e.g. 523 ->
    "Five Hundred Twenty Three". Returns "Zero" for 0.

    Negative, fractional, or non-numeric input is logged and yields "" so a
    marksheet can still render without the words line.
    """
    if isinstance(num, bool) or not isinstance(num, (int, float)):
        logger.warning("number_to_words: unsupported value %r", num)
        return ""
    if isinstance(num, float):
        if not num.is_integer():
            logger.warning("number_to_words: only non-negative integers are supported, got %r", num)
            return ""
        num = int(num)
    if num < 0:
        logger.warning("number_to_words: only non-negative integers are supported, got %r", num)
        return ""
    if num == 0:
        return "Zero"

    segments = []
    scale_index = 0
    while num > 0:
        num, chunk = divmod(num, 1000)
        if chunk:
            if scale_index >= len(SCALES):
                logger.warning("number_to_words: value exceeds the largest supported scale (%s)", SCALES[-1])
                return ""
            words = _below_thousand(chunk)
            if SCALES[scale_index]:
                words += " " + SCALES[scale_index]
            segments.insert(0, words)
        scale_index += 1
    return " ".join(segments)
