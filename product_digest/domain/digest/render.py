from .models import DigestItem, DigestSnapshot

DIGEST_TITLE = "KimiAxe Daily Product Digest"
NO_RELEASES_TEXT = "No releases shipped today."
NO_UPCOMING_TEXT = "No planned items in the next 7 days."


def _render_released(item: DigestItem) -> str:
    return "\n".join(
        [
            f"✅ {item.website_name} ({item.primary_domain})",
            f"• {item.title}",
            f"• {item.summary}",
        ]
    )


def _render_upcoming(item: DigestItem) -> str:
    target = item.target_date.isoformat() if item.target_date else "TBD"
    return "\n".join(
        [
            f"🗓️ {target} — {item.website_name}",
            f"• {item.title}",
            f"• {item.summary}",
        ]
    )


def format_digest_message(snapshot: DigestSnapshot) -> str:
    """
    Render a digest snapshot as the plain-text message sent to every channel.

    Items keep the order of the snapshot. An empty section renders a fixed
    placeholder sentence.
    """
    released = (
        "\n\n".join(_render_released(item) for item in snapshot.released_today)
        if snapshot.released_today
        else NO_RELEASES_TEXT
    )
    upcoming = (
        "\n\n".join(_render_upcoming(item) for item in snapshot.upcoming)
        if snapshot.upcoming
        else NO_UPCOMING_TEXT
    )

    lines: list[str] = [
        f"🚀 {DIGEST_TITLE} ({snapshot.date_key})",
        "",
        "Today Released:",
        released,
        "",
        "Coming Next (7 Days):",
        upcoming,
    ]
    return "\n".join(lines)
