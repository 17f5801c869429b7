from .normalizer import normalize_date, parse_date

__all__ = ["normalize_date", "parse_date"]
