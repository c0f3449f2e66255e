from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from feed.store import FeedStatus, FeedStore

# largest unit first
INTERVALS = [
    ("y", 60 * 60 * 24 * 365),
    ("mo", 60 * 60 * 24 * 30),
    ("w", 60 * 60 * 24 * 7),
    ("d", 60 * 60 * 24),
    ("h", 60 * 60),
    ("m", 60),
]


def relative_time(value: Optional[str], now: Optional[datetime] = None) -> str:
    """Short label like '5m ago' for an ISO-8601 timestamp"""
    if not value:
        return "just now"
    try:
        date = datetime.fromisoformat(value)
    except ValueError:
        return "just now"
    if date.tzinfo is None:
        date = date.replace(tzinfo=timezone.utc)

    now = now or datetime.now(timezone.utc)
    diff = int((now - date).total_seconds())
    if diff < 0:
        return "just now"
    if diff < 60:
        return f"{max(diff, 1)}s ago"

    for label, seconds in INTERVALS:
        count = diff // seconds
        if count >= 1:
            return f"{count}{label} ago"
    return "just now"


def initials(name: str = "") -> str:
    return "".join(chunk[0] for chunk in name.split() if chunk).upper()[:2]


def render_post(post: Dict[str, Any], now: Optional[datetime] = None) -> List[str]:
    author = post.get("author") or "Unknown creator"
    lines = [
        f"[{initials(author) or '?'}] {author} · {relative_time(post.get('created_at'), now)}",
        f"  {post.get('title', '')}",
    ]
    lines.extend(f"  {line}" for line in (post.get("content") or "").splitlines())
    if post.get("image_url"):
        lines.append(f"  image: {post['image_url']}")
    return lines


def render_feed(store: FeedStore, now: Optional[datetime] = None) -> str:
    """Render the feed for a terminal, one block per state"""
    status = store.status
    if status is FeedStatus.LOGGED_OUT:
        return (
            "Share moments with the community\n"
            "Log in to discover posts, create your own stories, and connect with people just like you."
        )

    username = store.user.get("username") or "there"
    lines = [f"Welcome back, {username}", ""]

    if status is FeedStatus.LOADING:
        lines.append("Loading feed...")
    elif status is FeedStatus.ERROR:
        lines.append(f"{store.error} (Try again)")
    elif status is FeedStatus.EMPTY:
        lines.append("Your feed is waiting")
        lines.append("Follow more creators or share something to see it appear here.")
    else:
        for index, post in enumerate(store.posts):
            if index:
                lines.append("")
            lines.extend(render_post(post, now))

    return "\n".join(lines)
