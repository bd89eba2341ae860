"""Mail queries package"""

from application.queries.mail.fetch_mailbox import (
    FetchMailboxQuery,
    FetchMailboxResult,
)

__all__ = [
    "FetchMailboxQuery",
    "FetchMailboxResult",
]
