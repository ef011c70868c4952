"""Color quantization for color byte code blocks.

Each block carries one 6-bit symbol (0-63). The symbol is split into three
base-4 digits, one per RGB channel, and each digit selects one of four
evenly spaced channel levels: 0, 85, 170, 255.

    symbol = red * 16 + green * 4 + blue
"""

from __future__ import annotations

# Quantization levels per channel (4 * 4 * 4 = 64 symbols)
R_CHANNEL_PARTITION = 4
G_CHANNEL_PARTITION = 4
B_CHANNEL_PARTITION = 4

CHANNEL_MAX = 255

SYMBOL_COUNT = R_CHANNEL_PARTITION * G_CHANNEL_PARTITION * B_CHANNEL_PARTITION

Pixel = tuple[int, int, int]


def _level(index: int, partition: int, max_value: int = CHANNEL_MAX) -> float:
    return index * (max_value / (partition - 1))


def symbol_to_pixel(symbol: int) -> Pixel:
    """Convert a symbol [0-63] to its block color.

    Args:
        symbol: Symbol value. Values >= 64 wrap (only the low 6 bits are used).

    Returns:
        (r, g, b) tuple with each channel in {0, 85, 170, 255}.
    """
    b_code = symbol % B_CHANNEL_PARTITION
    symbol //= B_CHANNEL_PARTITION

    g_code = symbol % G_CHANNEL_PARTITION
    symbol //= G_CHANNEL_PARTITION

    r_code = symbol % R_CHANNEL_PARTITION

    return (
        round(_level(r_code, R_CHANNEL_PARTITION)),
        round(_level(g_code, G_CHANNEL_PARTITION)),
        round(_level(b_code, B_CHANNEL_PARTITION)),
    )


def nearest_level_index(value: float, partition: int, max_value: int = CHANNEL_MAX) -> int:
    """Find the quantization level closest to a channel value.

    Scans levels upward and stops at the first level that is farther away
    than the best one so far. Ties go to the higher level.

    The early exit is only correct while the levels are evenly spaced
    (distance is unimodal over the scan). Non-uniform levels need a full scan.
    """
    best = 0
    best_diff = float(max_value)
    for i in range(partition):
        diff = abs(_level(i, partition, max_value) - value)
        if diff > best_diff:
            break
        best = i
        best_diff = diff
    return best


def pixel_to_symbol(pixel: tuple[int, ...]) -> int:
    """Classify a sampled color into the nearest symbol [0-63].

    Works for any RGB triple. Only exact for colors produced by
    symbol_to_pixel; other colors snap to the nearest level per channel.
    Extra channels (alpha) are ignored.
    """
    symbol = nearest_level_index(pixel[0], R_CHANNEL_PARTITION)
    symbol = symbol * G_CHANNEL_PARTITION + nearest_level_index(pixel[1], G_CHANNEL_PARTITION)
    symbol = symbol * B_CHANNEL_PARTITION + nearest_level_index(pixel[2], B_CHANNEL_PARTITION)
    return symbol
