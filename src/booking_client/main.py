"""Entry point: terminal front-end for the booking client."""

import argparse
import asyncio
import logging
from pathlib import Path
from typing import Awaitable, Callable, TypeVar

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Prompt

from booking_client.app import BookingApp
from booking_client.config import settings
from booking_client.controllers.listings import LISTING_BUCKETS
from booking_client.display.prompts import (
    prompt_booking_details,
    prompt_credentials,
    prompt_payment_details,
    prompt_profile_update,
    prompt_retry,
    prompt_room_selection,
    prompt_step_action,
)
from booking_client.display.tables import (
    render_accommodation_card,
    render_accommodations_table,
    render_bookings_table,
    render_confirmation,
    render_user_card,
)
from booking_client.errors import BookingClientError, HttpError, ValidationError, describe_error
from booking_client.models.booking import BookingTab
from booking_client.models.session import SessionEvent
from booking_client.models.user import GeoPoint, RegisterUserData
from booking_client.models.wizard import WizardStep
from booking_client.sync.cache import Bucket

console = Console()
logger = logging.getLogger(__name__)

T = TypeVar("T")

Command = Callable[[BookingApp, argparse.Namespace], Awaitable[None]]


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Booking client: browse, save and book accommodations"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    sub = parser.add_subparsers(dest="command", required=True)

    login = sub.add_parser("login", help="Log in and store a session token")
    login.add_argument("--email", default=None)
    sub.add_parser("logout", help="Forget the stored session token")
    sub.add_parser("whoami", help="Show the signed-in profile")
    sub.add_parser("register", help="Create a new account")
    reset = sub.add_parser("reset-password", help="Request a password reset email")
    reset.add_argument("email")

    listing = sub.add_parser("list", help="Show a listing bucket")
    listing.add_argument("bucket", choices=[b.value for b in LISTING_BUCKETS])
    listing.add_argument("--refresh", action="store_true", help="Ignore the cache and refetch")
    listing.add_argument("--near", nargs=2, type=float, metavar=("LAT", "LON"), default=None)

    search = sub.add_parser("search", help="Search accommodations")
    search.add_argument("query")
    search.add_argument("--pages", type=int, default=1, help="How many result pages to load")

    show = sub.add_parser("show", help="Show an accommodation with rooms and reviews")
    show.add_argument("accommodation_id")

    review = sub.add_parser("review", help="Review an accommodation")
    review.add_argument("accommodation_id")
    review.add_argument("--rating", type=int, required=True)
    review.add_argument("--comment", required=True)

    favorites = sub.add_parser("favorites", help="List saved accommodations")
    favorites.add_argument("--type", dest="accommodation_type", default=None)
    favorites.add_argument("--refresh", action="store_true")
    fav = sub.add_parser("fav", help="Save or unsave an accommodation")
    fav.add_argument("accommodation_id")

    bookings = sub.add_parser("bookings", help="List your bookings")
    bookings.add_argument("--tab", choices=[t.value for t in BookingTab], default=BookingTab.upcoming.value)
    cancel = sub.add_parser("cancel", help="Cancel a booking")
    cancel.add_argument("booking_id")
    book = sub.add_parser("book", help="Book a room step by step")
    book.add_argument("accommodation_id")

    sub.add_parser("profile", help="Edit your name and phone number")
    avatar = sub.add_parser("avatar", help="Upload a profile picture")
    avatar.add_argument("path", type=Path)
    location = sub.add_parser("location", help="Update your home location")
    location.add_argument("latitude", type=float)
    location.add_argument("longitude", type=float)
    location.add_argument("address")

    return parser.parse_args(argv)


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.WARNING)
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(RichHandler(console=console, show_path=False, rich_tracebacks=True))
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    _configure_logging(args.verbose)
    try:
        asyncio.run(_run(args))
    except (EOFError, KeyboardInterrupt):
        console.print("\n[yellow]Goodbye![/yellow]")


async def _run(args: argparse.Namespace) -> None:
    async with BookingApp() as app:
        app.events.subscribe(_on_session_event)
        await app.start()
        await _COMMANDS[args.command](app, args)


def _on_session_event(event: SessionEvent) -> None:
    if event == SessionEvent.SIGNED_IN:
        console.print("[green]Signed in. Taking you to your home screen.[/green]")
    elif event == SessionEvent.SIGNED_OUT:
        console.print("[dim]Signed out. Back to the login screen.[/dim]")
    elif event == SessionEvent.SESSION_EXPIRED:
        console.print("[yellow]Your session has expired.[/yellow]")
    elif event == SessionEvent.LOGIN_REQUIRED:
        console.print("[yellow]Please log in first:[/yellow] booking-client login")


async def _with_retry(fetch: Callable[[], Awaitable[T]]) -> T | None:
    """Run a fetch, offering a retry on failure. Returns None if the user gives up."""
    while True:
        try:
            return await fetch()
        except ValidationError as e:
            console.print(f"[yellow]{e.message}[/yellow]")
            return None
        except HttpError as e:
            if e.is_unauthorized:
                return None
            if not prompt_retry(describe_error(e)):
                return None
        except BookingClientError as e:
            if not prompt_retry(describe_error(e)):
                return None


def _signed_in(app: BookingApp) -> bool:
    try:
        app.session.require_user()
    except HttpError:
        return False
    return True


# ---------------------------------------------------------------------------
# Account
# ---------------------------------------------------------------------------

async def _cmd_login(app: BookingApp, args: argparse.Namespace) -> None:
    if app.session.is_authenticated and app.session.user is not None:
        console.print(f"Already signed in as [bold]{app.session.user.email}[/bold].")
        return
    email, password = prompt_credentials(args.email)
    try:
        await app.session.login(email, password)
    except HttpError as e:
        if e.is_unauthorized or e.status == 400:
            console.print("[red]Invalid email or password.[/red]")
        else:
            console.print(f"[red]{describe_error(e)}[/red]")
        return
    except BookingClientError as e:
        console.print(f"[red]{describe_error(e)}[/red]")
        return
    try:
        await app.favorites.fetch_favorites()
    except BookingClientError as e:
        logger.warning("Could not load favorites after login: %s", e)


async def _cmd_logout(app: BookingApp, args: argparse.Namespace) -> None:
    await app.session.logout()


async def _cmd_whoami(app: BookingApp, args: argparse.Namespace) -> None:
    if not _signed_in(app):
        return
    user = await app.session.refresh_user()
    if user is not None:
        console.print(render_user_card(user))


async def _cmd_register(app: BookingApp, args: argparse.Namespace) -> None:
    console.print(Panel("[bold cyan]Create your account[/bold cyan]", border_style="cyan"))
    email = Prompt.ask("  Email").strip()
    first = Prompt.ask("  First name").strip()
    last = Prompt.ask("  Last name").strip()
    phone = Prompt.ask("  Phone number", default="").strip()
    address = Prompt.ask("  Address", default="").strip()
    while True:
        password = Prompt.ask("  Password", password=True)
        if password == Prompt.ask("  Confirm password", password=True):
            break
        console.print("  [red]Passwords don't match.[/red]")

    data = RegisterUserData(
        email=email,
        first_name=first,
        last_name=last,
        phone_number=phone,
        location=GeoPoint(address=address),
        password=password,
    )
    try:
        user = await app.session.register(data)
    except BookingClientError as e:
        console.print(f"[red]{describe_error(e)}[/red]")
        return
    console.print(f"[green]Account created for {user.email}. You can log in now.[/green]")


async def _cmd_reset_password(app: BookingApp, args: argparse.Namespace) -> None:
    message = await _with_retry(lambda: app.session.request_password_reset(args.email))
    if message is not None:
        console.print(f"[green]{message or 'Check your inbox for a reset link.'}[/green]")


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------

async def _cmd_list(app: BookingApp, args: argparse.Namespace) -> None:
    bucket = Bucket(args.bucket)
    if args.near:
        app.listings.set_origin(*args.near)
    load = app.listings.refresh if args.refresh else app.listings.on_focus
    items = await _with_retry(lambda: load(bucket))
    if items is not None:
        render_accommodations_table(items, title=bucket.value.title(), favorites=app.favorites.favorites)


async def _cmd_search(app: BookingApp, args: argparse.Namespace) -> None:
    results = await _with_retry(lambda: app.search.search(args.query))
    if results is None:
        return
    for _ in range(args.pages - 1):
        if not app.search.has_more:
            break
        more = await _with_retry(app.search.load_more)
        if more is None:
            break
    render_accommodations_table(
        app.search.results,
        title=f"Results for “{app.search.query}”",
        favorites=app.favorites.favorites,
    )
    if app.search.has_more:
        console.print(f"[dim]Page {app.search.page} of {app.search.total_pages}. Use --pages to load more.[/dim]")


async def _cmd_show(app: BookingApp, args: argparse.Namespace) -> None:
    detail = await _with_retry(lambda: app.listings.load_detail(args.accommodation_id))
    if detail is not None:
        render_accommodation_card(detail, favorited=app.favorites.is_favorited(detail.accommodation.id))


async def _cmd_review(app: BookingApp, args: argparse.Namespace) -> None:
    if not _signed_in(app):
        return
    try:
        await app.listings.submit_review(args.accommodation_id, args.rating, args.comment)
    except BookingClientError as e:
        console.print(f"[red]{describe_error(e)}[/red]")
        return
    console.print("[green]Thanks for your review![/green]")


# ---------------------------------------------------------------------------
# Favorites
# ---------------------------------------------------------------------------

async def _cmd_favorites(app: BookingApp, args: argparse.Namespace) -> None:
    if not _signed_in(app):
        return
    ids = await _with_retry(lambda: app.favorites.fetch_favorites(force=args.refresh))
    if ids is None:
        return
    items = app.favorites.favorite_accommodations(args.accommodation_type)
    render_accommodations_table(items, title="Saved", favorites=ids)


async def _cmd_fav(app: BookingApp, args: argparse.Namespace) -> None:
    if not _signed_in(app):
        return
    try:
        saved = await app.favorites.toggle_favorite(args.accommodation_id)
    except BookingClientError as e:
        console.print(f"[red]Failed to update favorite status. {describe_error(e)}[/red]")
        return
    console.print("[red]♥[/red] Saved." if saved else "Removed from saved.")


# ---------------------------------------------------------------------------
# Bookings
# ---------------------------------------------------------------------------

async def _cmd_bookings(app: BookingApp, args: argparse.Namespace) -> None:
    if not _signed_in(app):
        return
    tab = BookingTab(args.tab)
    bookings = await _with_retry(lambda: app.bookings.load(tab))
    if bookings is not None:
        render_bookings_table(bookings, title=f"{tab.value.title()} bookings")


async def _cmd_cancel(app: BookingApp, args: argparse.Namespace) -> None:
    if not _signed_in(app):
        return
    confirmed = Prompt.ask(f"Cancel booking {args.booking_id}? [y/N]", default="n")
    if not confirmed.lower().startswith("y"):
        return
    try:
        await app.bookings.cancel(args.booking_id)
    except BookingClientError as e:
        console.print(f"[red]{describe_error(e)}[/red]")
        return
    console.print("[green]Booking cancelled.[/green]")


async def _cmd_book(app: BookingApp, args: argparse.Namespace) -> None:
    if not _signed_in(app):
        return
    detail = await _with_retry(lambda: app.listings.load_detail(args.accommodation_id))
    if detail is None:
        return
    render_accommodation_card(detail, favorited=app.favorites.is_favorited(detail.accommodation.id))

    wizard = app.new_booking_wizard(detail.accommodation)
    user = app.session.user
    while True:
        step = wizard.step
        if step == WizardStep.CONFIRMED:
            console.print(render_confirmation(wizard.confirmation(), detail.accommodation.name))
            return

        if step == WizardStep.SELECT_ROOM:
            room = prompt_room_selection(detail.accommodation, wizard.state.selected_room_id)
            if room:
                wizard.select_room(room)
        elif step == WizardStep.ENTER_DETAILS:
            wizard.update_details(**prompt_booking_details(wizard.state.booking_draft))  # type: ignore[arg-type]
        elif step == WizardStep.PAYMENT:
            wizard.update_payment(  # type: ignore[arg-type]
                **prompt_payment_details(wizard.state.payment_draft, user.email if user else "")
            )

        action = prompt_step_action(can_go_back=step != WizardStep.SELECT_ROOM)
        if action == "q":
            console.print("[dim]Booking abandoned.[/dim]")
            return
        if action == "b":
            wizard.back()
            continue

        try:
            await wizard.advance()
        except BookingClientError as e:
            console.print(f"[red]{describe_error(e)}[/red]")
            continue
        if step == WizardStep.SELECT_ROOM and wizard.step == step:
            console.print("[yellow]Pick a room to continue.[/yellow]")


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------

async def _cmd_profile(app: BookingApp, args: argparse.Namespace) -> None:
    if not _signed_in(app) or app.session.user is None:
        return
    changes = prompt_profile_update(app.session.user)
    if not changes.model_dump(exclude_none=True):
        console.print("[dim]Nothing changed.[/dim]")
        return
    user = await _with_retry(lambda: app.session.update_profile(changes))
    if user is not None:
        console.print(render_user_card(user))


async def _cmd_avatar(app: BookingApp, args: argparse.Namespace) -> None:
    if not _signed_in(app):
        return
    try:
        user = await app.session.upload_profile_image(args.path)
    except BookingClientError as e:
        console.print(f"[red]{describe_error(e)}[/red]")
        return
    console.print(render_user_card(user))


async def _cmd_location(app: BookingApp, args: argparse.Namespace) -> None:
    if not _signed_in(app):
        return
    task = app.session.schedule_location_update(args.latitude, args.longitude, args.address)
    try:
        user = await task
    except BookingClientError as e:
        console.print(f"[red]{describe_error(e)}[/red]")
        return
    console.print(render_user_card(user))


_COMMANDS: dict[str, Command] = {
    "login": _cmd_login,
    "logout": _cmd_logout,
    "whoami": _cmd_whoami,
    "register": _cmd_register,
    "reset-password": _cmd_reset_password,
    "list": _cmd_list,
    "search": _cmd_search,
    "show": _cmd_show,
    "review": _cmd_review,
    "favorites": _cmd_favorites,
    "fav": _cmd_fav,
    "bookings": _cmd_bookings,
    "cancel": _cmd_cancel,
    "book": _cmd_book,
    "profile": _cmd_profile,
    "avatar": _cmd_avatar,
    "location": _cmd_location,
}


if __name__ == "__main__":
    main()
