"""Per-user service container.

A :class:`UserSession` owns the change feed and the services for one user
and ties their lifetime together: ``open()`` prepares the store and the
budget month, ``close()`` cancels every live subscription.  The Streamlit
pages keep one session in ``st.session_state`` and close it when the
profile changes.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from . import db
from .advisor import FinancialAdvisor
from .budget import BudgetLedger
from .chat import ChatService
from .events import ChangeFeed
from .exceptions import AdvisorConfigurationError
from .notifications import NotificationCenter

logger = logging.getLogger(__name__)


class UserSession:
    def __init__(self, user_id: str, advisor: Optional[FinancialAdvisor] = None):
        self.user_id = user_id
        self.feed = ChangeFeed()
        self.notifications = NotificationCenter(user_id, self.feed)
        self.ledger = BudgetLedger(user_id, self.feed, self.notifications)
        self._advisor = advisor
        self.chat = ChatService(user_id, advisor, self.ledger, self.feed, advisor_provider=lambda: self.advisor)
        self.is_open = False

    @property
    def advisor(self) -> Optional[FinancialAdvisor]:
        """The advisor, created lazily from config; ``None`` if no API key is set."""
        if self._advisor is None:
            try:
                self._advisor = FinancialAdvisor()
            except AdvisorConfigurationError as e:
                logger.warning("Advisor unavailable: %s", e)
                return None
            self.chat.advisor = self._advisor
        return self._advisor

    def open(self, now: Optional[datetime] = None) -> 'UserSession':
        db.init_db()
        self.ledger.load()
        self.ledger.check_and_reset_monthly_budget(now)
        self.is_open = True
        logger.info("Session opened for %s", self.user_id)
        return self

    def close(self) -> None:
        self.feed.close()
        self.is_open = False
        logger.info("Session closed for %s", self.user_id)

    def __enter__(self) -> 'UserSession':
        return self.open()

    def __exit__(self, *exc_info) -> None:
        self.close()
