"""
Philippine holiday calendar and the announcement text posted for each.
"""

from .models import HolidayType

REGULAR_DESCRIPTION = "Regular Holiday"
SPECIAL_DESCRIPTION = "Special (Non-Working)"


def _holiday(name: str, month: int, day: int, holiday_type: HolidayType) -> dict:
    return {
        "name": name,
        "month": month,
        "day": day,
        "type": holiday_type,
        "description": (
            REGULAR_DESCRIPTION if holiday_type == HolidayType.REGULAR else SPECIAL_DESCRIPTION
        ),
    }


PHILIPPINE_HOLIDAYS: list[dict] = [
    _holiday("New Year's Day", 1, 1, HolidayType.REGULAR),
    _holiday("EDSA People Power Anniversary", 2, 25, HolidayType.SPECIAL),
    _holiday("Araw ng Kagitingan", 4, 9, HolidayType.REGULAR),
    _holiday("Labor Day", 5, 1, HolidayType.REGULAR),
    _holiday("Independence Day", 6, 12, HolidayType.REGULAR),
    _holiday("Ninoy Aquino Day", 8, 21, HolidayType.SPECIAL),
    _holiday("All Saints' Day", 11, 1, HolidayType.SPECIAL),
    _holiday("Bonifacio Day", 11, 30, HolidayType.REGULAR),
    _holiday("Feast of the Immaculate Conception", 12, 8, HolidayType.SPECIAL),
    _holiday("Christmas Day", 12, 25, HolidayType.REGULAR),
    _holiday("Rizal Day", 12, 30, HolidayType.REGULAR),
    _holiday("New Year's Eve", 12, 31, HolidayType.SPECIAL),
]

HOLIDAY_EVENT_HEADER = "Class Suspended"

DEFAULT_HOLIDAY_MESSAGE = "Classes are suspended today in observance of this holiday. Thank you."

HOLIDAY_MESSAGES: dict[str, str] = {
    "New Year's Day": (
        "Happy New Year! There are no classes today as we welcome a brand new year. "
        "May it be filled with blessings and joy for you and your family."
    ),
    "EDSA People Power Anniversary": (
        "In observance of the EDSA People Power Revolution Anniversary, there will be no "
        "classes today. Let us reflect on the value of peace, freedom, and unity. "
        "Classes will resume tomorrow."
    ),
    "Araw ng Kagitingan": (
        "Classes are suspended today in honor of Araw ng Kagitingan. Let us remember and "
        "give thanks to the bravery of our Filipino heroes. Classes will resume soon. Thank you."
    ),
    "Labor Day": (
        "Today we celebrate Labor Day. Classes are suspended in recognition of the hard work "
        "and dedication of all workers, including our beloved teachers and staff. Enjoy your day!"
    ),
    "Independence Day": (
        "Classes are suspended today in celebration of Philippine Independence Day. Let us take "
        "this time to honor the freedom and history of our country. Mabuhay ang Pilipinas!"
    ),
    "Ninoy Aquino Day": (
        "Classes are suspended today in observance of Ninoy Aquino Day. Let us remember his "
        "courage and contribution to our nation's democracy."
    ),
    "All Saints' Day": (
        "Our classes are suspended for today in observance of All Saints' Day. Please take this "
        "time to remember and pray for our dearly departed. Classes will resume tomorrow. "
        "Thank you."
    ),
    "Bonifacio Day": (
        "There are no classes today in celebration of Bonifacio Day. Let us remember the bravery "
        "of Gat Andres Bonifacio and his role in our country's fight for freedom. Enjoy your day "
        "and see you in class soon!"
    ),
    "Feast of the Immaculate Conception": (
        "Today is the Feast of the Immaculate Conception of Mary. Classes are suspended to honor "
        "this important day in the Catholic faith. Thank you and God bless."
    ),
    "Christmas Day": (
        "Merry Christmas! There are no classes today as we celebrate the birth of our Savior, "
        "Jesus Christ. May your day be filled with love, joy, and peace."
    ),
    "Rizal Day": (
        "There are no classes today in honor of Dr. Jose Rizal, our national hero. May we be "
        "inspired by his love for our country and dedication to education."
    ),
    "New Year's Eve": (
        "As we prepare to welcome the new year, there are no classes today. Take this time to "
        "reflect, rest, and celebrate with your family. See you next year!"
    ),
}


def holiday_message(name: str) -> str:
    """Announcement body for a holiday, or the generic one."""
    return HOLIDAY_MESSAGES.get(name, DEFAULT_HOLIDAY_MESSAGE)
