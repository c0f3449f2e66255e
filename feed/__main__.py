"""Render the posts feed in a terminal, optionally sharing a post first."""

import argparse
import asyncio
import logging
import mimetypes
import sys
from pathlib import Path

import aiohttp

import config
from feed.api import FeedApi
from feed.render import render_feed
from feed.store import FeedStore, FeedValidationError


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="feed", description=__doc__)
    parser.add_argument("--base-url", default=config.FEED_API_URL)
    parser.add_argument("--token", default=config.FEED_TOKEN, help="Firebase ID token")
    parser.add_argument("--username", default="you", help="Name shown in the feed header")
    parser.add_argument("--mine", action="store_true", help="Only show your own posts")
    parser.add_argument("--post", nargs=2, metavar=("TITLE", "CONTENT"))
    parser.add_argument("--image", type=Path, help="Image to attach to --post")
    return parser.parse_args(argv)


def read_image(path: Path):
    content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    return path.name, path.read_bytes(), content_type


async def run(args: argparse.Namespace) -> int:
    async with aiohttp.ClientSession() as session:
        store = FeedStore(FeedApi(session, args.base_url, args.token), mine=args.mine)
        user = {"user_id": args.username, "username": args.username} if args.token else None
        await store.set_user(user)

        if args.post:
            image = read_image(args.image) if args.image else None
            try:
                await store.submit(args.post[0], args.post[1], image)
            except FeedValidationError:
                # already queued as a notification
                pass

        for level, message in store.drain_notifications():
            print(f"{level}: {message}", file=sys.stderr)
        print(render_feed(store))
        return 1 if store.error else 0


def main(argv=None) -> int:
    logging.basicConfig(level=config.LOG_LEVEL)
    return asyncio.run(run(parse_args(argv)))


if __name__ == "__main__":
    sys.exit(main())
