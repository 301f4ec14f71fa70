from typing import Union

from .models import Outcome, ResponseWrapper

WON_STATUSES = frozenset({201})
# Server-declared contention rejections: seat already taken (400) or the
# claim failed and was rolled back (500)
EXPECTED_REJECTION_STATUSES = frozenset({400, 500})


def classify(response: Union[ResponseWrapper, int]) -> Outcome:
    """
    Maps one contention response to its outcome. Pure and total:
    201 -> WON, 400/500 -> REJECTED_EXPECTED, anything else
    (transport failure status 0 included) -> REJECTED_UNEXPECTED.
    """
    status = response if isinstance(response, int) else response.status_code
    if status in WON_STATUSES:
        return Outcome.WON
    if status in EXPECTED_REJECTION_STATUSES:
        return Outcome.REJECTED_EXPECTED
    return Outcome.REJECTED_UNEXPECTED
