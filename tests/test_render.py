"""Digest message formatting tests"""
from datetime import date, datetime

from product_digest.domain.digest import (
    NO_RELEASES_TEXT,
    NO_UPCOMING_TEXT,
    DigestItem,
    DigestSnapshot,
    format_digest_message,
)


def _released(idx: int, title: str, site: str = "Acme", domain: str = "acme.example.com"):
    return DigestItem(
        id=idx,
        website_key=site.lower(),
        website_name=site,
        primary_domain=domain,
        title=title,
        summary=f"{title} summary",
        released_at=datetime(2024, 6, 1, 9, idx),
    )


def _planned(idx: int, title: str, target: date):
    return DigestItem(
        id=idx,
        website_key="axesms",
        website_name="AxeSMS",
        primary_domain="sms.kimiaxe.com",
        title=title,
        summary=f"{title} summary",
        target_date=target,
    )


class TestFormatDigestMessage:
    """format_digest_message"""

    def test_empty_snapshot_uses_placeholders(self):
        message = format_digest_message(DigestSnapshot(date_key="2024-06-01"))

        assert message.splitlines() == [
            "🚀 KimiAxe Daily Product Digest (2024-06-01)",
            "",
            "Today Released:",
            NO_RELEASES_TEXT,
            "",
            "Coming Next (7 Days):",
            NO_UPCOMING_TEXT,
        ]

    def test_released_block_layout(self):
        snapshot = DigestSnapshot(
            date_key="2024-06-01",
            released_today=(_released(1, "New pricing"),),
        )
        message = format_digest_message(snapshot)

        assert "✅ Acme (acme.example.com)\n• New pricing\n• New pricing summary" in message
        assert NO_RELEASES_TEXT not in message
        assert NO_UPCOMING_TEXT in message

    def test_upcoming_block_shows_target_date(self):
        snapshot = DigestSnapshot(
            date_key="2024-06-01",
            upcoming=(_planned(7, "Bulk templates", date(2024, 6, 4)),),
        )
        message = format_digest_message(snapshot)

        assert "🗓️ 2024-06-04 — AxeSMS\n• Bulk templates\n• Bulk templates summary" in message
        assert NO_RELEASES_TEXT in message

    def test_blocks_separated_by_one_blank_line_in_given_order(self):
        snapshot = DigestSnapshot(
            date_key="2024-06-01",
            released_today=(_released(2, "Second"), _released(1, "First")),
        )
        message = format_digest_message(snapshot)

        assert "• Second summary\n\n✅ Acme (acme.example.com)\n• First" in message
        assert message.index("Second") < message.index("First")
        assert "\n\n\n" not in message

    def test_is_deterministic(self):
        snapshot = DigestSnapshot(
            date_key="2024-06-01",
            released_today=(_released(1, "One"),),
            upcoming=(_planned(2, "Two", date(2024, 6, 8)),),
        )
        assert format_digest_message(snapshot) == format_digest_message(snapshot)
