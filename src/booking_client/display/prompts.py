"""Rich prompts for login, profile edits and each booking wizard step."""

from rich.console import Console
from rich.panel import Panel
from rich.prompt import IntPrompt, Prompt

from booking_client.models.accommodation import AccommodationSummary
from booking_client.models.user import UpdateProfileData, UserProfile
from booking_client.models.wizard import BookingDraft, PaymentDraft

console = Console()


def prompt_credentials(email: str | None = None) -> tuple[str, str]:
    console.print()
    console.print(Panel("[bold cyan]Log in to your account[/bold cyan]", border_style="cyan"))
    email = email or Prompt.ask("  Email").strip()
    password = Prompt.ask("  Password", password=True)
    return email, password


def prompt_retry(message: str) -> bool:
    """Show a failure and ask whether to try again."""
    console.print(f"[red]{message}[/red]")
    raw = Prompt.ask("Try again? [Y/n]", default="y")
    return not raw.lower().startswith("n")


def prompt_room_selection(accommodation: AccommodationSummary, current: str = "") -> str:
    """Pick a room by its list number. Returns the room key, or "" to stay put."""
    available = [r for r in accommodation.rooms if r.is_available]
    if not available:
        console.print("[yellow]No rooms are available here right now.[/yellow]")
        return ""

    console.print()
    console.print("[bold]Select a room:[/bold]")
    for i, room in enumerate(available, start=1):
        marker = "[green]●[/green]" if room.key == current else " "
        console.print(
            f"  {marker} [{i}] {room.name} · sleeps {room.capacity} · ${room.price_per_night:,.2f}/night"
        )

    default = next((str(i) for i, r in enumerate(available, start=1) if r.key == current), "1")
    raw = Prompt.ask(f"Room [1–{len(available)}]", default=default)
    try:
        idx = int(raw) - 1
    except ValueError:
        return ""
    if 0 <= idx < len(available):
        return available[idx].key
    return ""


def prompt_booking_details(draft: BookingDraft) -> dict[str, object]:
    console.print()
    console.print("[bold]Your stay[/bold]")
    check_in = Prompt.ask("  Check-in (YYYY-MM-DD)", default=draft.check_in or None)
    check_out = Prompt.ask("  Check-out (YYYY-MM-DD)", default=draft.check_out or None)
    while True:
        guests = IntPrompt.ask("  Guests", default=draft.guests)
        if guests >= 1:
            break
        console.print("  [red]At least one guest.[/red]")
    special = Prompt.ask("  Special requests", default=draft.special_requests)
    return {
        "check_in": (check_in or "").strip(),
        "check_out": (check_out or "").strip(),
        "guests": guests,
        "special_requests": special.strip(),
    }


def prompt_payment_details(draft: PaymentDraft, default_email: str = "") -> dict[str, object]:
    console.print()
    console.print("[bold]Payment[/bold]")
    email = Prompt.ask("  Receipt email", default=draft.email or default_email or None)
    method = Prompt.ask(
        "  Payment method",
        choices=["card", "paypal"],
        default=draft.payment_method.value,
    )
    return {"email": (email or "").strip(), "payment_method": method}


def prompt_step_action(can_go_back: bool) -> str:
    """Returns "c" (continue), "b" (back) or "q" (quit)."""
    choices = ["c", "b", "q"] if can_go_back else ["c", "q"]
    label = "[C]ontinue, [B]ack or [Q]uit" if can_go_back else "[C]ontinue or [Q]uit"
    return Prompt.ask(label, choices=choices, default="c")


def prompt_profile_update(user: UserProfile) -> UpdateProfileData:
    console.print()
    first = Prompt.ask("  First name", default=user.first_name)
    last = Prompt.ask("  Last name", default=user.last_name)
    phone = Prompt.ask("  Phone number", default=user.phone_number)
    return UpdateProfileData(
        first_name=first if first != user.first_name else None,
        last_name=last if last != user.last_name else None,
        phone_number=phone if phone != user.phone_number else None,
    )
