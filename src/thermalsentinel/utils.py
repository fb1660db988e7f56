def clamp(value: float, lower: float, upper: float) -> float:
    """Limit value to the closed interval [lower, upper]."""
    return max(lower, min(upper, value))


def guarded_range(min_value: float, max_value: float) -> float:
    """Temperature span of a frame, substituting 1 for a flat frame."""
    span = max_value - min_value
    return span if span != 0 else 1.0
