"""Study-time unit normalization.

Study time was first stored in minutes and later in seconds, in the same
column and without a migration. Rows written by this engine carry an
explicit ``unit`` stamp; older rows do not, and are disambiguated by
magnitude: a value below ``LEGACY_MINUTES_THRESHOLD`` is read as minutes.
"""

LEGACY_MINUTES_THRESHOLD = 10_000
SECONDS_UNIT = "seconds"


def normalize_study_seconds(raw: int | None, unit: str | None = None) -> int:
    """Return the stored study-time value in seconds."""
    if raw is None:
        return 0
    if unit == SECONDS_UNIT:
        return raw
    if raw < LEGACY_MINUTES_THRESHOLD:
        return raw * 60
    return raw
