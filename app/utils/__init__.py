"""
Utility modules for the Phorest sync service
"""
from .converters import to_decimal, to_int, parse_date, parse_datetime, time_of_day

__all__ = ['to_decimal', 'to_int', 'parse_date', 'parse_datetime', 'time_of_day']
