"""
Domain events emitted by relationship and engagement writes.

Writes never call the notifier directly. They emit one of the signals below
and the receivers in receivers.py turn the event into a Notification row.
Dispatch is deferred until the surrounding transaction commits, and
receivers run through send_robust so a failing receiver is logged instead of
reaching the caller or undoing the write.
"""

import logging

from django.db import transaction
from django.dispatch import Signal

logger = logging.getLogger(__name__)

# Keyword arguments sent with every signal: actor_id, plus the event subject
friend_request_sent = Signal()       # friend_request
friend_request_accepted = Signal()   # friend_request
user_followed = Signal()             # followed
post_liked = Signal()                # post
comment_liked = Signal()             # comment
poll_voted = Signal()                # post, option_index


def emit(signal, sender, **kwargs):
    """Send ``signal`` once the current transaction commits."""

    def dispatch():
        for receiver, response in signal.send_robust(sender=sender, **kwargs):
            if isinstance(response, Exception):
                logger.error(
                    "Receiver %s failed handling %s event",
                    getattr(receiver, '__qualname__', receiver),
                    sender.__name__,
                    exc_info=response,
                )

    transaction.on_commit(dispatch)
