from typing import Callable, Dict

def linear(r: float) -> float:
    return r

def ease_in(r: float) -> float:
    return r * r

def ease_out(r: float) -> float:
    return 1.0 - (1.0 - r) * (1.0 - r)

def ease_in_out(r: float) -> float:
    # smoothstep
    return r * r * (3.0 - 2.0 * r)

EASINGS: Dict[str, Callable[[float], float]] = {
    'linear': linear,
    'ease_in': ease_in,
    'ease_out': ease_out,
    'ease_in_out': ease_in_out,
}

def ease(kind: str, r: float) -> float:
    """Apply easing ``kind`` to raw progress r; input and output are clamped to [0, 1]."""
    try:
        fn = EASINGS[kind]
    except KeyError:
        raise ValueError(f"unknown easing {kind!r}") from None
    r = max(0.0, min(1.0, float(r)))
    return max(0.0, min(1.0, fn(r)))
