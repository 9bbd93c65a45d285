DEFAULT_END_REACHED_THRESHOLD = 0.1

MIN_END_REACHED_THRESHOLD = 0.01
MAX_END_REACHED_THRESHOLD = 1.0


def calculate_end_reached_threshold(
    threshold: float | None, default_threshold: float = DEFAULT_END_REACHED_THRESHOLD
) -> float:
    """
    Converts an item-count threshold into the fractional distance-from-end
    value consumed by scroll-position observers.

    The conversion is threshold / 100, i.e. the item count is read as a
    percentage of the visible list length, clamped to [0.01, 1.0].
    A missing or zero threshold yields default_threshold.

    Usage:
        calculate_end_reached_threshold(5)     # 0.05
        calculate_end_reached_threshold(None)  # 0.1
    """
    if not threshold:
        return default_threshold

    # NOTE: treats an item count as a percentage of list length. Renderers
    # are tuned against this exact formula, do not change it.
    calculated = threshold / 100
    return max(MIN_END_REACHED_THRESHOLD, min(MAX_END_REACHED_THRESHOLD, calculated))
