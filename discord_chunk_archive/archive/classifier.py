"""Attachment download prioritization.

Ephemeral attachments are queued ahead of durable ones.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from discord_chunk_archive.archive.records import ArchivedAttachment, ArchivedMessage


@dataclass
class DownloadQueues:
    """Attachments split by download priority."""

    ephemeral: list[ArchivedAttachment] = field(default_factory=list)
    durable: list[ArchivedAttachment] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.ephemeral) + len(self.durable)

    def in_priority_order(self) -> list[ArchivedAttachment]:
        return [*self.ephemeral, *self.durable]


def classify_attachments(messages: Iterable[ArchivedMessage]) -> DownloadQueues:
    """Split every message attachment into the ephemeral or durable queue.

    Order follows the messages, then attachments within a message. Replied-to
    messages are not scanned and nothing is deduplicated.
    """
    queues = DownloadQueues()
    for message in messages:
        for attachment in message.attachments:
            if attachment.ephemeral:
                queues.ephemeral.append(attachment)
            else:
                queues.durable.append(attachment)
    return queues
