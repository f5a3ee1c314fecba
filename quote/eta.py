# quote/eta.py
# Delivery ETA bounds for domestic parcels, from service type, state and
# whether each postcode sits inside a metro range.

from __future__ import annotations

METRO_POSTCODE_RANGES = [
    (1000, 1935), (2000, 2079), (2085, 2107), (2109, 2156), (2158, 2172),
    (2174, 2229), (2232, 2249), (2557, 2559), (2564, 2567), (2740, 2744),
    (2747, 2751), (2759, 2764), (2766, 2774), (2776, 2777), (2890, 2897),
    (3000, 3062), (3064, 3098), (3101, 3138), (3140, 3210), (3800, 3801),
    (4000, 4018), (4029, 4068), (4072, 4123), (4127, 4129), (4131, 4132),
    (4151, 4164), (4169, 4182), (4205, 4206), (5000, 5113), (5115, 5117),
    (5125, 5130), (5158, 5169), (5800, 5999), (8000, 8999), (9000, 9275),
    (9999, 9999),
]


def is_metro(postcode) -> bool:
    code = int(postcode)
    return any(low <= code <= high for low, high in METRO_POSTCODE_RANGES)


def calculate_eta(origin_postcode, destination_postcode, origin_state, destination_state, is_express):
    """Return ``(min_days, max_days)``.

    Express is 1-2 days within a state and 1-3 interstate; standard is 2-4
    and 3-6. Rural ends widen the upper bound: +2/+3 (express/standard)
    when both ends are rural, +1/+2 when one is.
    """
    same_state = origin_state == destination_state
    origin_metro = is_metro(origin_postcode)
    destination_metro = is_metro(destination_postcode)

    if is_express:
        base_min, base_max = 1, 2 if same_state else 3
    else:
        base_min = 2 if same_state else 3
        base_max = 4 if same_state else 6

    adjustment = 0
    if not origin_metro and not destination_metro:
        adjustment = 2 if is_express else 3
    elif not origin_metro or not destination_metro:
        adjustment = 1 if is_express else 2

    return base_min, base_max + adjustment
