import pytest

from todosync.models import CalendarInfo
from todosync.selection import (
    CalendarSelectionError,
    prompt_calendar_selection,
    validate_calendar_choice,
)

CALENDARS = [
    CalendarInfo(id="me@example.com", summary="Me", primary=True, access_role="owner"),
    CalendarInfo(id="todo@example.com", summary="Todo", access_role="writer"),
]


def _answers(*values):
    queue = list(values)
    return lambda _prompt: queue.pop(0)


class TestPromptCalendarSelection:

    def test_valid_choice(self):
        printed = []
        chosen = prompt_calendar_selection(CALENDARS, _answers("2"), printed.append)
        assert chosen == "todo@example.com"
        assert printed == [
            "Available calendars:",
            "1: Me (ID: me@example.com)",
            "2: Todo (ID: todo@example.com)",
        ]

    def test_reprompts_after_invalid_answers(self):
        printed = []
        chosen = prompt_calendar_selection(CALENDARS, _answers("0", "abc", "1"),
                                           printed.append)
        assert chosen == "me@example.com"
        assert printed.count("Invalid selection. Please try again.") == 2

    def test_gives_up_after_max_attempts(self):
        with pytest.raises(CalendarSelectionError):
            prompt_calendar_selection(CALENDARS, _answers("9", "9"), lambda _: None,
                                      max_attempts=2)

    def test_no_calendars(self):
        with pytest.raises(CalendarSelectionError, match="No calendars found"):
            prompt_calendar_selection([], _answers(), lambda _: None)


class TestValidateCalendarChoice:

    def test_known_calendar(self):
        assert validate_calendar_choice(CALENDARS, " todo@example.com ").id == "todo@example.com"

    def test_unknown_calendar(self):
        with pytest.raises(CalendarSelectionError):
            validate_calendar_choice(CALENDARS, "someone-else@example.com")
