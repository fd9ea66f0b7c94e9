"""
Tabular (Kuwaiti) Hijri calendar. Approximate: real month starts depend on moon sighting
and may differ by a day.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

# (Malay, Arabic)
HIJRI_MONTHS: Tuple[Tuple[str, str], ...] = (
    ("Muharram", "محرم"),
    ("Safar", "صفر"),
    ("Rabiulawal", "ربيع الأول"),
    ("Rabiulakhir", "ربيع الثاني"),
    ("Jamadilawal", "جمادى الأولى"),
    ("Jamadilakhir", "جمادى الثانية"),
    ("Rejab", "رجب"),
    ("Syaaban", "شعبان"),
    ("Ramadhan", "رمضان"),
    ("Syawal", "شوال"),
    ("Zulkaedah", "ذو القعدة"),
    ("Zulhijjah", "ذو الحجة"),
)

# date.toordinal() + JDN_OFFSET is the Julian Day Number
JDN_OFFSET = 1721425


@dataclass(frozen=True)
class HijriDate:
    day: int
    month: int  # 1-12
    year: int

    @property
    def month_name(self) -> str:
        return HIJRI_MONTHS[self.month - 1][0]

    @property
    def month_name_arabic(self) -> str:
        return HIJRI_MONTHS[self.month - 1][1]

    def __str__(self) -> str:
        return f"{self.day} {self.month_name} {self.year}H"


@dataclass
class HijriMonthData:
    month_name: str
    month_name_arabic: str
    year: int
    days: List[Dict[str, Any]] = field(default_factory=list)  # [{"day": 1, "is_today": False}, ...]
    first_day_of_week: int = 0  # 0 = Sunday
    today: Optional[HijriDate] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "month_name": self.month_name,
            "month_name_arabic": self.month_name_arabic,
            "year": self.year,
            "days": self.days,
            "first_day_of_week": self.first_day_of_week,
            "today": {"day": self.today.day, "month": self.today.month_name, "year": self.today.year},
        }


def gregorian_to_hijri(day: date) -> HijriDate:
    jd = day.toordinal() + JDN_OFFSET
    l = jd - 1948440 + 10632
    n = (l - 1) // 10631
    l = l - 10631 * n + 354
    j = ((10985 - l) // 5316) * ((50 * l) // 17719) + (l // 5670) * ((43 * l) // 15238)
    l = l - ((30 - j) // 15) * ((17719 * j) // 50) - (j // 16) * ((15238 * j) // 43) + 29
    month = (24 * l) // 709
    return HijriDate(day=l - (709 * month) // 24, month=month, year=30 * n + j - 30)


def days_in_hijri_month(month: int) -> int:
    """Simplified alternation: Muharram, Rabiulawal, ... have 29 days; Safar, Rabiulakhir, ... 30."""
    return 29 if month % 2 == 1 else 30


def get_hijri_month_data(today: date) -> HijriMonthData:
    hijri = gregorian_to_hijri(today)
    sunday_based_weekday = today.isoweekday() % 7
    return HijriMonthData(
        month_name=hijri.month_name,
        month_name_arabic=hijri.month_name_arabic,
        year=hijri.year,
        days=[{"day": d, "is_today": d == hijri.day} for d in range(1, days_in_hijri_month(hijri.month) + 1)],
        first_day_of_week=(sunday_based_weekday - (hijri.day - 1) % 7) % 7,
        today=hijri,
    )
