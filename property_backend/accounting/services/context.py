# accounting/services/context.py

"""
EXPLICIT EXECUTION CONTEXT

Every mutating engine call receives a PostingContext.
No engine reads "current user" or "current company" from global state.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from django.utils import timezone


@dataclass(frozen=True)
class PostingContext:
    actor_id: int | None
    company_id: int
    fiscal_year_id: int | None = None
    # Clock override (reversal dating, statistics "as of")
    today: date | None = None

    def as_of(self) -> date:
        return self.today or timezone.localdate()
