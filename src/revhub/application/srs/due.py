"""
Due-set selection and bulk date shifting.

Pure computation over bookmarks; callers supply a single "today".
"""

from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import date

from revhub.domain.srs.models import Bookmark, CustomReminder, DueQuestion, SchedulingState

from .clock import add_days


def is_due(state: SchedulingState, reminder: CustomReminder, today: date) -> bool:
    """
    True if the question should be reviewed today or earlier.

    An active custom reminder decides alone; otherwise a missing SRS date
    (never reviewed) counts as due.
    """
    if reminder.active and reminder.date is not None:
        return reminder.date <= today
    if state.next_review_date is None:
        return True
    return state.next_review_date <= today


def select_due(bookmarks: Iterable[Bookmark], today: date) -> list[DueQuestion]:
    return [
        DueQuestion(
            bookmark_id=b.id,
            question_id=b.question_id,
            via_custom_reminder=b.reminder.active and b.reminder.date is not None,
        )
        for b in bookmarks
        if is_due(b.state, b.reminder, today)
    ]


def _shift(value: date | None, delta_days: int, today: date) -> date | None:
    if value is None:
        return None
    return max(add_days(value, delta_days), today)


@dataclass(frozen=True)
class ShiftedBookmark:
    bookmark: Bookmark
    became_due: bool


def shift_bookmark(bookmark: Bookmark, delta_days: int, today: date) -> ShiftedBookmark:
    """
    Move both the SRS date and the custom reminder date by delta_days.

    Dates landing on or before today snap to today. The bookmark only counts
    as newly due when its effective date was strictly after today before the
    shift, so items that were already due are not counted twice.
    """
    before = bookmark.effective_due_date()

    state = replace(
        bookmark.state,
        next_review_date=_shift(bookmark.state.next_review_date, delta_days, today),
    )
    reminder = replace(
        bookmark.reminder,
        date=_shift(bookmark.reminder.date, delta_days, today),
    )
    shifted = replace(bookmark, state=state, reminder=reminder)

    after = shifted.effective_due_date()
    became_due = before is not None and before > today and after is not None and after <= today
    return ShiftedBookmark(bookmark=shifted, became_due=became_due)
