"""Registration of slash commands for the bot."""

from __future__ import annotations

import discord
from discord.ext import commands

from ..core.models import (
    Booking,
    BookingStatus,
    Machine,
    MachineStatus,
    NotificationPreferences,
    ReportType,
    Urgency,
    User,
)
from ..services import LaundryServices
from ..ui.modals import ReportModal
from ..ui.views import (
    BookingView,
    booking_embed,
    bookings_embed,
    machines_embed,
    quota_embed,
    slots_embed,
)
from .utils import describe_failure, find_own_booking, linked_user, parse_clock, parse_day

LANGUAGES = {"en": "English", "de": "Deutsch", "fr": "Français", "es": "Español"}


def register_commands(bot: commands.Bot, services: LaundryServices) -> None:
    """Register bot commands with optional compatibility shims."""
    tree = bot.tree
    choices = getattr(
        discord.app_commands, "choices", lambda **_kwargs: (lambda func: func)
    )
    Choice = discord.app_commands.Choice

    def today():
        return services.clock.now().date()

    def resolve_machine(key: str) -> Machine | None:
        key = key.strip().lower()
        for machine in services.store.list(Machine):
            if key in (machine.id.lower(), machine.name.lower()):
                return machine
        return None

    async def machine_autocomplete(
        interaction: discord.Interaction, current: str
    ) -> list[discord.app_commands.Choice[str]]:
        current_lower = current.lower()
        return [
            Choice(name=f"{m.name} ({m.status.value})", value=m.id)
            for m in services.store.list(Machine)
            if current_lower in m.name.lower() or current_lower in m.id.lower()
        ][:25]

    async def program_autocomplete(
        interaction: discord.Interaction, current: str
    ) -> list[discord.app_commands.Choice[str]]:
        current_lower = current.lower()
        return [
            Choice(name=f"{p.name} ({p.duration} min)", value=p.id)
            for p in services.catalog
            if current_lower in p.name.lower()
        ][:25]

    async def own_booking_autocomplete(
        interaction: discord.Interaction, current: str
    ) -> list[discord.app_commands.Choice[str]]:
        linked = services.auth.user_for_discord(interaction.user.id)
        if not linked.success:
            return []
        user: User = linked.data
        results = []
        for b in services.store.list(
            Booking,
            lambda b: b.user_id == user.id
            and b.status in (BookingStatus.UPCOMING, BookingStatus.IN_PROGRESS),
        ):
            label = f"{b.id[:8]} {b.date.isoformat()} {b.start_time.strftime('%H:%M')}"
            if current.lower() in label.lower():
                results.append(Choice(name=label, value=b.id))
        return results[:25]

    # ------------------------------------------------------------------
    # Account
    @tree.command(name="link", description="Link your laundry account")
    @discord.app_commands.describe(username="Laundry username", secret="Password")
    async def link(interaction: discord.Interaction, username: str, secret: str) -> None:
        login = services.auth.login(username, secret)
        if not login.success:
            await interaction.response.send_message(
                describe_failure(login), ephemeral=True
            )
            return
        linked = services.auth.link_discord(login.data.id, interaction.user.id)
        if not linked.success:
            await interaction.response.send_message(
                describe_failure(linked), ephemeral=True
            )
            return
        await interaction.response.send_message(
            f"Linked to laundry account `{username}`.", ephemeral=True
        )

    @tree.command(name="language", description="Choose your language")
    @discord.app_commands.describe(language="Preferred language")
    @choices(language=[Choice(name=n, value=c) for c, n in LANGUAGES.items()])
    async def language(
        interaction: discord.Interaction, language: discord.app_commands.Choice[str]
    ) -> None:
        user = await linked_user(services, interaction)
        if user is None:
            return
        prefs = user.preferences.model_copy(update={"language": language.value})
        response = services.auth.update_preferences(user.id, prefs)
        if not response.success:
            await interaction.response.send_message(
                describe_failure(response), ephemeral=True
            )
            return
        await interaction.response.send_message(
            f"Language set to {LANGUAGES[language.value]}.", ephemeral=True
        )

    @tree.command(name="notifications", description="Turn a notification on or off")
    @discord.app_commands.describe(setting="Notification", enabled="On or off")
    @choices(
        setting=[
            Choice(name=name.replace("_", " ").capitalize(), value=name)
            for name in NotificationPreferences.model_fields
        ]
    )
    async def notifications(
        interaction: discord.Interaction,
        setting: discord.app_commands.Choice[str],
        enabled: bool,
    ) -> None:
        user = await linked_user(services, interaction)
        if user is None:
            return
        flags = user.preferences.notifications.model_copy(
            update={setting.value: enabled}
        )
        prefs = user.preferences.model_copy(update={"notifications": flags})
        response = services.auth.update_preferences(user.id, prefs)
        if not response.success:
            await interaction.response.send_message(
                describe_failure(response), ephemeral=True
            )
            return
        state = "on" if enabled else "off"
        await interaction.response.send_message(
            f"{setting.name} notifications turned {state}.", ephemeral=True
        )

    # ------------------------------------------------------------------
    # Machines and availability
    @tree.command(name="machines", description="Show machine status")
    async def machines(interaction: discord.Interaction) -> None:
        response = services.machines.get_all_machines()
        if not response.success or not response.data:
            await interaction.response.send_message(
                "No machines are configured.", ephemeral=True
            )
            return
        await interaction.response.send_message(
            embed=machines_embed(response.data), ephemeral=True
        )

    @tree.command(name="availability", description="List free slots for a machine")
    @discord.app_commands.describe(
        machine="Machine", date="today, tomorrow or YYYY-MM-DD"
    )
    async def availability(
        interaction: discord.Interaction, machine: str, date: str = "today"
    ) -> None:
        found = resolve_machine(machine)
        if found is None:
            await interaction.response.send_message("Machine not found.", ephemeral=True)
            return
        try:
            day = parse_day(date, today())
        except ValueError:
            await interaction.response.send_message(
                "Use a date like `2024-06-10`, `today` or `tomorrow`.", ephemeral=True
            )
            return
        response = services.bookings.free_slots(found.id, day)
        if not response.success:
            await interaction.response.send_message(
                describe_failure(response), ephemeral=True
            )
            return
        await interaction.response.send_message(
            embed=slots_embed(found, day, response.data), ephemeral=True
        )

    @tree.command(name="machine_status", description="Set a machine's status (managers)")
    @discord.app_commands.describe(
        machine="Machine", status="New status", error="Error detail, if any"
    )
    @choices(status=[Choice(name=s.value, value=s.value) for s in MachineStatus])
    async def machine_status(
        interaction: discord.Interaction,
        machine: str,
        status: discord.app_commands.Choice[str],
        error: str | None = None,
    ) -> None:
        if not interaction.user.guild_permissions.manage_guild:
            await interaction.response.send_message(
                "Only a server manager can change machine status.", ephemeral=True
            )
            return
        found = resolve_machine(machine)
        if found is None:
            await interaction.response.send_message("Machine not found.", ephemeral=True)
            return
        response = services.machines.update_machine_status(found.id, status.value, error)
        if not response.success:
            await interaction.response.send_message(
                describe_failure(response), ephemeral=True
            )
            return
        await interaction.response.send_message(
            f"{found.name} is now {status.value}.", ephemeral=True
        )

    # ------------------------------------------------------------------
    # Bookings
    @tree.command(name="book", description="Book a machine slot")
    @discord.app_commands.describe(
        machine="Machine",
        date="today, tomorrow or YYYY-MM-DD",
        time="Start time, e.g. 09:00",
        program="Washing program",
        fixed_slot="Mark as your fixed weekly slot",
    )
    async def book(
        interaction: discord.Interaction,
        machine: str,
        date: str,
        time: str,
        program: str,
        fixed_slot: bool = False,
    ) -> None:
        user = await linked_user(services, interaction)
        if user is None:
            return
        try:
            day = parse_day(date, today())
            start = parse_clock(time)
        except ValueError:
            await interaction.response.send_message(
                "Use a date like `2024-06-10` and a time like `09:00`.", ephemeral=True
            )
            return
        found = resolve_machine(machine)
        response = services.bookings.create_booking(
            {
                "user_id": user.id,
                "machine_id": found.id if found else machine,
                "date": day,
                "start_time": start,
                "program": program,
                "is_fixed_slot": fixed_slot,
            }
        )
        if not response.success:
            await interaction.response.send_message(
                describe_failure(response), ephemeral=True
            )
            return
        booking = response.data
        await interaction.response.send_message(
            content="Booked! Show the verification code at the machine.",
            embed=booking_embed(booking, services),
            view=BookingView(services, booking.id, user.id),
            ephemeral=True,
        )

    @tree.command(name="my_bookings", description="Show your bookings")
    async def my_bookings(interaction: discord.Interaction) -> None:
        user = await linked_user(services, interaction)
        if user is None:
            return
        response = services.bookings.get_user_bookings(user.id)
        if not response.success:
            await interaction.response.send_message(
                describe_failure(response), ephemeral=True
            )
            return
        await interaction.response.send_message(
            embed=bookings_embed(response.data[-25:], services), ephemeral=True
        )

    @tree.command(name="modify_booking", description="Change the time or program of a booking")
    @discord.app_commands.describe(
        booking="Booking id",
        date="New date (optional)",
        time="New start time (optional)",
        program="New program (optional)",
    )
    async def modify_booking(
        interaction: discord.Interaction,
        booking: str,
        date: str | None = None,
        time: str | None = None,
        program: str | None = None,
    ) -> None:
        user = await linked_user(services, interaction)
        if user is None:
            return
        target = find_own_booking(services, user, booking)
        if target is None:
            await interaction.response.send_message("Booking not found.", ephemeral=True)
            return
        updates: dict[str, object] = {}
        try:
            if date:
                updates["date"] = parse_day(date, today())
            if time:
                updates["start_time"] = parse_clock(time)
        except ValueError:
            await interaction.response.send_message(
                "Use a date like `2024-06-10` and a time like `09:00`.", ephemeral=True
            )
            return
        if program:
            updates["program"] = program
        if not updates:
            await interaction.response.send_message("Nothing to change.", ephemeral=True)
            return
        response = services.bookings.modify_booking(target.id, updates)
        if not response.success:
            await interaction.response.send_message(
                describe_failure(response), ephemeral=True
            )
            return
        await interaction.response.send_message(
            content="Booking updated.",
            embed=booking_embed(response.data, services),
            ephemeral=True,
        )

    @tree.command(name="cancel_booking", description="Cancel an upcoming booking")
    @discord.app_commands.describe(booking="Booking id")
    async def cancel_booking(interaction: discord.Interaction, booking: str) -> None:
        user = await linked_user(services, interaction)
        if user is None:
            return
        target = find_own_booking(services, user, booking)
        if target is None:
            await interaction.response.send_message("Booking not found.", ephemeral=True)
            return
        response = services.bookings.cancel_booking(target.id)
        if not response.success:
            await interaction.response.send_message(
                describe_failure(response), ephemeral=True
            )
            return
        await interaction.response.send_message(
            f"Booking `{target.id[:8]}` cancelled.", ephemeral=True
        )

    @tree.command(name="quota", description="Show your booking quota")
    async def quota(interaction: discord.Interaction) -> None:
        user = await linked_user(services, interaction)
        if user is None:
            return
        response = services.bookings.quota_summary(user.id)
        if not response.success:
            await interaction.response.send_message(
                describe_failure(response), ephemeral=True
            )
            return
        await interaction.response.send_message(
            embed=quota_embed(response.data), ephemeral=True
        )

    # ------------------------------------------------------------------
    # Reports
    @tree.command(name="report", description="Report a machine or user issue")
    @discord.app_commands.describe(
        kind="What you are reporting",
        target="Machine id, or the username of the person",
        issue="Short issue type, e.g. leaking or time-violation",
        urgency="How urgent it is",
    )
    @choices(
        kind=[Choice(name=t.value, value=t.value) for t in ReportType],
        urgency=[Choice(name=u.value, value=u.value) for u in Urgency],
    )
    async def report(
        interaction: discord.Interaction,
        kind: discord.app_commands.Choice[str],
        target: str,
        issue: str,
        urgency: discord.app_commands.Choice[str] | None = None,
    ) -> None:
        user = await linked_user(services, interaction)
        if user is None:
            return
        report_type = ReportType(kind.value)
        if report_type is ReportType.MACHINE:
            found = resolve_machine(target)
            target_id = found.id if found else None
        else:
            matches = services.store.list(User, lambda u: u.username == target.strip())
            target_id = matches[0].id if matches else None
        if target_id is None:
            await interaction.response.send_message(
                f"No {report_type.value} named `{target}`.", ephemeral=True
            )
            return
        await interaction.response.send_modal(
            ReportModal(
                services,
                user.id,
                report_type,
                target_id,
                issue,
                Urgency(urgency.value) if urgency else Urgency.MEDIUM,
            )
        )

    @tree.command(name="my_reports", description="Show reports you submitted")
    async def my_reports(interaction: discord.Interaction) -> None:
        user = await linked_user(services, interaction)
        if user is None:
            return
        response = services.reports.get_user_reports(user.id)
        if not response.success or not response.data:
            await interaction.response.send_message(
                "You have not submitted any reports.", ephemeral=True
            )
            return
        embed = discord.Embed(title="My reports")
        for r in response.data[-25:]:
            embed.add_field(
                name=f"{r.issue_type} ({r.type.value})",
                value=f"{r.status.value} • {r.urgency.value}\n{r.description[:200]}",
                inline=False,
            )
        await interaction.response.send_message(embed=embed, ephemeral=True)

    # ------------------------------------------------------------------
    # Autocomplete hooks
    if hasattr(book, "autocomplete"):
        book.autocomplete("machine")(machine_autocomplete)
        book.autocomplete("program")(program_autocomplete)
        availability.autocomplete("machine")(machine_autocomplete)
        machine_status.autocomplete("machine")(machine_autocomplete)
        modify_booking.autocomplete("booking")(own_booking_autocomplete)
        modify_booking.autocomplete("program")(program_autocomplete)
        cancel_booking.autocomplete("booking")(own_booking_autocomplete)
