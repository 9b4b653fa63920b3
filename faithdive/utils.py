from datetime import datetime, timezone


def now_iso():
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds")


def parse_iso(value):
    text = str(value or "").strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_date(iso_string, now=None, tz=None):
    """Render a stored timestamp the way the journal and favorites lists show it.

    Same calendar distance rules as the list views: ``Today``, ``Yesterday``,
    ``N days ago`` for the last week, then ``Mon D, YYYY``.
    """
    date = parse_iso(iso_string)
    now = now or datetime.now(timezone.utc)
    diff_days = int((now - date).total_seconds() // 86400)

    if diff_days <= 0:
        return "Today"
    if diff_days == 1:
        return "Yesterday"
    if diff_days < 7:
        return f"{diff_days} days ago"
    # Calendar dates are shown in the viewer's zone; ``tz=None`` means the local one.
    local = date.astimezone(tz)
    return f"{local:%b} {local.day}, {local.year}"
