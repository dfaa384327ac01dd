"""Delivery channel interface shared by every digest notifier"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from loguru import logger


class ChannelDeliveryError(Exception):
    """Raised by a channel when the platform rejects or fails a delivery."""


@dataclass
class ChannelResult:
    channel: str
    ok: bool
    skipped: bool = False
    reason: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"channel": self.channel, "ok": self.ok}
        if self.skipped:
            data["skipped"] = True
        if self.reason is not None:
            data["reason"] = self.reason
        if self.error is not None:
            data["error"] = self.error
        return data


def utf8_size(text: str) -> int:
    return len(text.encode("utf-8"))


def _head_length(line: str, limit: int, size: Callable[[str], int]) -> int:
    # Every character measures at least 1, so ``limit`` characters is an upper bound.
    end = min(len(line), limit)
    while end > 1 and size(line[:end]) > limit:
        end -= 1
    return end


def split_message(text: str, limit: int, size: Callable[[str], int] = len) -> List[str]:
    """
    Split ``text`` into chunks where ``size(chunk) <= limit``.

    ``size`` defaults to the character count; pass ``utf8_size`` for
    platforms that cap messages in bytes. Splits on line boundaries where
    possible; a single line over the limit is cut hard.
    """
    if size(text) <= limit:
        return [text]

    chunks: List[str] = []
    current = ""
    for line in text.split("\n"):
        while size(line) > limit:
            if current:
                chunks.append(current)
                current = ""
            end = _head_length(line, limit, size)
            chunks.append(line[:end])
            line = line[end:]
        candidate = f"{current}\n{line}" if current else line
        if size(candidate) > limit:
            chunks.append(current)
            current = line
        else:
            current = candidate
    if current:
        chunks.append(current)
    return chunks


class DigestChannel(ABC):
    """One external delivery target for the digest."""

    name: str = "channel"

    @abstractmethod
    def is_configured(self) -> bool:
        ...

    def skip_reason(self) -> str:
        return f"{self.name} not configured"

    @abstractmethod
    async def deliver(self, message: str) -> None:
        """Deliver the message; raise on failure."""
        ...

    async def send(self, message: str) -> ChannelResult:
        """Deliver the message and report the outcome. Never raises."""
        if not self.is_configured():
            reason = self.skip_reason()
            logger.info(f"[publisher] {self.name} skipped: {reason}")
            return ChannelResult(channel=self.name, ok=False, skipped=True, reason=reason)

        try:
            await self.deliver(message)
        except Exception as exc:  # noqa: BLE001
            error = str(exc) or exc.__class__.__name__
            logger.error(f"[publisher] {self.name} delivery failed: {error}")
            return ChannelResult(channel=self.name, ok=False, error=error)

        logger.info(f"[publisher] {self.name} delivered")
        return ChannelResult(channel=self.name, ok=True)
