"""Rich tables and cards for accommodations, bookings, reviews and the profile."""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from booking_client.models.accommodation import AccommodationDetail, AccommodationSummary
from booking_client.models.booking import Booking, BookingStatus, PaymentStatus
from booking_client.models.user import UserProfile
from booking_client.models.wizard import Confirmation

console = Console()

_STATUS_COLORS: dict[BookingStatus, str] = {
    BookingStatus.confirmed: "green",
    BookingStatus.pending: "yellow",
    BookingStatus.cancelled: "red",
    BookingStatus.completed: "dim",
}


def render_accommodations_table(
    items: list[AccommodationSummary],
    title: str = "Accommodations",
    favorites: frozenset[str] = frozenset(),
) -> None:
    """Render a listing table; favorited rows get a heart."""
    table = Table(
        title=f"[bold cyan]{title}[/bold cyan]",
        show_header=True,
        header_style="bold magenta",
        border_style="dim",
        show_lines=True,
    )
    table.add_column("♥", width=2, justify="center")
    table.add_column("ID", style="dim")
    table.add_column("Name", min_width=20)
    table.add_column("Type")
    table.add_column("Location", min_width=16)
    table.add_column("Rating", justify="right")
    table.add_column("From / night", justify="right")

    for a in items:
        price = a.lowest_price
        rating = a.average_rating if a.average_rating is not None else a.rating
        table.add_row(
            "[red]♥[/red]" if a.id in favorites else "",
            a.id,
            a.name,
            a.accommodation_type,
            ", ".join(p for p in (a.city, a.country) if p) or a.address,
            f"{_stars(rating)} {rating:.1f}",
            f"${price:,.2f}" if price is not None else "—",
        )

    console.print()
    console.print(table)
    if not items:
        console.print("[dim]Nothing to show yet.[/dim]")
    console.print()


def render_accommodation_card(detail: AccommodationDetail, favorited: bool = False) -> None:
    a = detail.accommodation
    reviews = detail.reviews
    heart = "  [red]♥ saved[/red]" if favorited else ""
    lines = [
        f"  [bold]{a.name}[/bold]  ({a.accommodation_type}){heart}",
        f"  {a.address}, {a.city}, {a.country}".rstrip(", "),
        f"  {_stars(reviews.average_rating)} {reviews.average_rating:.1f} from {reviews.reviews_count} reviews",
    ]
    if a.amenities:
        lines.append(f"  Amenities: {', '.join(a.amenities)}")
    if a.description:
        lines.append(f"\n  {a.description}")
    console.print(Panel("\n".join(lines), title="[bold]Accommodation[/bold]", border_style="blue"))

    rooms = Table(header_style="bold magenta", border_style="dim")
    rooms.add_column("Room ID", style="dim")
    rooms.add_column("Room")
    rooms.add_column("Sleeps", justify="center")
    rooms.add_column("Per night", justify="right")
    rooms.add_column("Available", justify="center")
    for r in a.rooms:
        rooms.add_row(
            r.key,
            r.name,
            str(r.capacity),
            f"${r.price_per_night:,.2f}",
            "[green]yes[/green]" if r.is_available else "[red]no[/red]",
        )
    console.print(rooms)

    for review in reviews.results[:5]:
        console.print(
            f"  [bold]{review.user.display_name}[/bold] {_stars(review.rating)}  "
            f"[dim]{review.created_at[:10]}[/dim]\n  {review.comment}"
        )
    console.print()


def render_bookings_table(bookings: list[Booking], title: str = "Bookings") -> None:
    table = Table(
        title=f"[bold cyan]{title}[/bold cyan]",
        header_style="bold magenta",
        border_style="dim",
        show_lines=True,
    )
    table.add_column("ID", style="dim")
    table.add_column("Accommodation", min_width=18)
    table.add_column("Dates")
    table.add_column("Guests", justify="center")
    table.add_column("Total", justify="right")
    table.add_column("Status")
    table.add_column("Payment")

    for b in bookings:
        name = b.accommodation_details.name if b.accommodation_details else b.accommodation_id
        color = _STATUS_COLORS.get(b.booking_status, "white")
        pay_color = "green" if b.payment_status == PaymentStatus.paid else "yellow"
        table.add_row(
            b.id,
            name,
            f"{b.check_in_date} → {b.check_out_date}",
            str(b.guests),
            f"${b.total_price:,.2f}",
            f"[{color}]{b.booking_status.value}[/{color}]",
            f"[{pay_color}]{b.payment_status.value}[/{pay_color}]",
        )

    console.print()
    console.print(table)
    if not bookings:
        console.print("[dim]No bookings here.[/dim]")
    console.print()


def render_user_card(user: UserProfile) -> Panel:
    role = "  [magenta]admin[/magenta]" if user.is_admin else ""
    lines = [
        f"  [bold]{user.full_name or user.email}[/bold]{role}",
        f"  Email: {user.email}",
        f"  Phone: {user.phone_number or '—'}",
    ]
    if user.location is not None:
        lines.append(
            f"  Location: {user.location.address or '—'} "
            f"({user.location.latitude:.4f}, {user.location.longitude:.4f})"
        )
    if user.profile_image_url:
        lines.append(f"  Avatar: {user.profile_image_url}")
    return Panel("\n".join(lines), title="[bold]Profile[/bold]", border_style="green")


def render_confirmation(confirmation: Confirmation, accommodation_name: str) -> Panel:
    lines = [
        f"  Booking ID: [bold]{confirmation.booking_id}[/bold]",
        f"  {accommodation_name} — room {confirmation.room_id}",
        f"  Check-in: {confirmation.check_in}  →  Check-out: {confirmation.check_out}",
        f"  Guests: {confirmation.guests}",
        f"  Payment: {confirmation.payment_method.value} · receipt to {confirmation.email}",
    ]
    if confirmation.special_requests:
        lines.append(f"  Requests: {confirmation.special_requests}")
    if confirmation.total_price is not None:
        lines.append(f"  Total: ${confirmation.total_price:,.2f}")
    return Panel("\n".join(lines), title="[bold green]Booking Confirmed[/bold green]", border_style="green")


def _stars(rating: float) -> str:
    return "★" * int(round(rating))
