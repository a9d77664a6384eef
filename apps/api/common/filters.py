# apps/api/common/filters.py


def split_multi(value: str):
    """
    Comma separated string -> list (null-safe)
    """
    if not value:
        return []
    return [v.strip() for v in value.split(",") if v.strip()]
