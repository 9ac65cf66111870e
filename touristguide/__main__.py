# touristguide/__main__.py
import argparse
import asyncio
import logging
import sys

from .app import TouristGuideApp
from .config import config
from .errors import TouristGuideError
from .models import PlaceView
from .notifications import NotificationService

logger = logging.getLogger("touristguide")


def _print_places(title: str, places: list, base_url: str) -> None:
    print(f"{title}: {len(places)}")
    for view in places:
        place = view.place if isinstance(view, PlaceView) else view
        rating = f"{place.average_rating:.1f}⭐ ({place.reviews_count})" if place.average_rating > 0 else "No ratings yet"
        print(f"  {place.id}  {place.name} — {place.location} [{place.category.name}] {rating}, {place.likes_count} likes")
        images = view.image_urls(base_url) if isinstance(view, PlaceView) else []
        if images:
            print(f"    📷 {images[0]}")


async def check_api_connection(app: TouristGuideApp, max_retries: int = 3, retry_delay: float = 2) -> bool:
    """Проверка подключения к API перед командой"""
    for attempt in range(max_retries):
        if await app.http_client.check_api_health():
            logger.info("✅ API доступен!")
            return True
        logger.warning(f"⚠️ API недоступен. Попытка {attempt + 1}/{max_retries}")
        if attempt < max_retries - 1:
            await asyncio.sleep(retry_delay)
    logger.error("❌ Не удалось подключиться к API после всех попыток")
    return False


async def run_command(args: argparse.Namespace) -> int:
    notifier = NotificationService(sink=lambda message: print(f"» {message}"))
    async with TouristGuideApp(notifier=notifier) as app:
        if not await check_api_connection(app):
            return 1

        if args.command == "login":
            return 0 if await app.auth.login(args.email, args.password) else 1
        if args.command == "register":
            return 0 if await app.auth.register(args.name, args.email, args.password, args.password) else 1
        if args.command == "logout":
            await app.auth.logout()
            return 0
        if args.command == "feed":
            await app.feed.load_categories()
            if args.category:
                match = next((c for c in app.feed.categories if c.name.lower() == args.category.lower()), None)
                if match is None:
                    print(f"Unknown category: {args.category}")
                    return 1
                app.feed.active_category_id = match.id
            await app.feed.refresh()
            _print_places(f"Places in {app.feed.city}", app.feed.all_places, app.http_client.base_url)
            return 0
        if args.command == "search":
            if not await app.feed.search(args.text):
                return 1
            _print_places(f"Results for '{args.text}'", app.feed.all_places, app.http_client.base_url)
            return 0
        if args.command == "pending":
            _print_places("Pending Approvals", await app.moderation.list_pending(), app.http_client.base_url)
            return 0
        if args.command == "approve":
            return 0 if await app.moderation.approve(args.place_id) else 1
        if args.command == "delete":
            return 0 if await app.editor.delete(args.place_id) else 1
        if args.command == "like":
            screen = app.open_place(args.place_id)
            state = await screen.toggle_like()
            return 0 if state else 1
        if args.command == "review":
            screen = app.open_place(args.place_id)
            return 0 if await screen.add_review(args.rating, args.comment) else 1
    return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="touristguide", description=f"Tourist guide client ({config.CITY})")
    sub = parser.add_subparsers(dest="command", required=True)

    login = sub.add_parser("login")
    login.add_argument("email")
    login.add_argument("password")

    register = sub.add_parser("register")
    register.add_argument("name")
    register.add_argument("email")
    register.add_argument("password")

    sub.add_parser("logout")

    feed = sub.add_parser("feed")
    feed.add_argument("--category")

    search = sub.add_parser("search")
    search.add_argument("text")

    sub.add_parser("pending")

    for name in ("approve", "delete", "like"):
        command = sub.add_parser(name)
        command.add_argument("place_id")

    review = sub.add_parser("review")
    review.add_argument("place_id")
    review.add_argument("rating", type=int)
    review.add_argument("comment")

    mock = sub.add_parser("serve-mock")
    mock.add_argument("--host", default="localhost")
    mock.add_argument("--port", type=int, default=5000)
    mock.add_argument("--quirk", action="append", default=[])
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)

    if args.command == "serve-mock":
        from .mock_server import run
        run(args.host, args.port, args.quirk)
        return 0

    try:
        return asyncio.run(run_command(args))
    except TouristGuideError as e:
        print(f"✖ {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
