"""Translation of ICE vehicle series to Discord asset keys."""

DEFAULT_IMAGE = "ice"

SERIES_IMAGES = {
    "401": "ice1",
    "402": "ice2",
    "403": "ice3",
    "406": "ice3m",
    "407": "ice3_velaro",
    "408": "ice3neo",
    "411": "icet",
    "415": "icet",
    "412": "ice4",
    "605": "icetd",
}


def translate_series(series: str | None) -> str:
    """Asset key of the large presence image for a vehicle series."""
    if not series:
        return DEFAULT_IMAGE
    # The portal sometimes pads the series, e.g. "0412" or " 412"
    key = series.strip().lstrip("0")
    return SERIES_IMAGES.get(key, DEFAULT_IMAGE)
