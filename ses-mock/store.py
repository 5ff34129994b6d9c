"""
store.py - In-Memory Email Store
=================================
Holds a record of every email the mock has "sent".

One EmailStore belongs to one Flask app (see main.create_app). Its lifetime is
the process lifetime: nothing is written to disk.

Append, clear and read take the same lock, so threaded servers never see a
half-appended list. Reads return a copy.
"""

import logging
import threading
import time
from dataclasses import dataclass, field

log = logging.getLogger(__name__)


@dataclass
class Destination:
    to:  list[str] = field(default_factory=list)
    cc:  list[str] = field(default_factory=list)
    bcc: list[str] = field(default_factory=list)


@dataclass
class EmailBody:
    text: str | None = None
    html: str | None = None

    def to_dict(self) -> dict:
        """Absent variants are left out rather than serialized as null."""
        result = {}
        if self.text is not None:
            result['text'] = self.text
        if self.html is not None:
            result['html'] = self.html
        return result


@dataclass
class EmailRecord:
    message_id:  str
    sender:      str
    reply_to:    list[str]
    destination: Destination
    subject:     str
    body:        EmailBody
    attachments: list = field(default_factory=list)
    at:          int = 0       # stamped by EmailStore.append

    def to_dict(self) -> dict:
        return {
            "messageId":   self.message_id,
            "from":        self.sender,
            "replyTo":     list(self.reply_to),
            "destination": {
                "to":  list(self.destination.to),
                "cc":  list(self.destination.cc),
                "bcc": list(self.destination.bcc),
            },
            "subject":     self.subject,
            "body":        self.body.to_dict(),
            "attachments": list(self.attachments),
            "at":          self.at,
        }


class EmailStore:

    def __init__(self, clock=time.time):
        self._clock = clock
        self._lock = threading.Lock()
        self._emails: list[EmailRecord] = []
        self._last_at = 0

    def append(self, record: EmailRecord) -> EmailRecord:
        """Stamp `at` and add the record. `at` never goes backwards, even if the clock does."""
        with self._lock:
            self._last_at = max(int(self._clock()), self._last_at)
            record.at = self._last_at
            self._emails.append(record)
            count = len(self._emails)
        log.info(f"[{record.message_id}] Stored: from={record.sender} to={record.destination.to} "
                 f"at={record.at} total={count}")
        return record

    def clear(self) -> int:
        with self._lock:
            removed = len(self._emails)
            self._emails = []
        log.info(f"Store cleared: {removed} email(s) removed")
        return removed

    def emails(self, since: int | None = None) -> list[EmailRecord]:
        """Snapshot in send order, optionally only records with at >= since."""
        with self._lock:
            snapshot = list(self._emails)
        if since is None:
            return snapshot
        return [record for record in snapshot if record.at >= since]

    def __len__(self) -> int:
        with self._lock:
            return len(self._emails)

    def to_dict(self, since: int | None = None) -> dict:
        return {"emails": [record.to_dict() for record in self.emails(since)]}
