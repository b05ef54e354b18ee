import calendar
from datetime import datetime


def add_months(moment: datetime, months: int) -> datetime:
    """
    Move a datetime forward by whole calendar months.

    The day is clamped to the last day of the target month, so
    31 Jan + 1 month is 28 (or 29) Feb.
    """
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)
