from __future__ import annotations

import datetime
from collections.abc import Iterable

import discord

from ..core.models import (
    Booking,
    BookingStatus,
    Machine,
    MachineStatus,
    QuotaSummary,
    TimeSlot,
)
from ..services import LaundryServices

STATUS_LABELS = {
    BookingStatus.UPCOMING: "🕒 Upcoming",
    BookingStatus.IN_PROGRESS: "🌀 In progress",
    BookingStatus.COMPLETED: "✅ Completed",
    BookingStatus.CANCELLED: "✖️ Cancelled",
}

MACHINE_LABELS = {
    MachineStatus.AVAILABLE: "🟢 Available",
    MachineStatus.IN_USE: "🔵 In use",
    MachineStatus.MAINTENANCE: "🟠 Maintenance",
    MachineStatus.ERROR: "🔴 Error",
}


def short_id(booking: Booking) -> str:
    return booking.id[:8]


def slot_label(day: datetime.date, start: datetime.time) -> str:
    return f"{day.strftime('%a %d %b %Y')} {start.strftime('%H:%M')}"


class BookingView(discord.ui.View):
    """Buttons shown under a single booking."""

    def __init__(self, services: LaundryServices, booking_id: str, owner_id: str) -> None:
        super().__init__(timeout=300)
        self.services = services
        self.booking_id = booking_id
        self.owner_id = owner_id

    @discord.ui.button(label="Cancel booking", style=discord.ButtonStyle.danger)
    async def cancel(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        user = self.services.auth.user_for_discord(interaction.user.id)
        if not user.success or user.data.id != self.owner_id:
            await interaction.response.send_message(
                "Only the person who booked can cancel it.", ephemeral=True
            )
            return
        response = self.services.bookings.cancel_booking(self.booking_id)
        if not response.success:
            await interaction.response.send_message(
                response.message or "Could not cancel.", ephemeral=True
            )
            return
        button.disabled = True
        await interaction.response.edit_message(
            embed=booking_embed(response.data, self.services), view=self
        )


def booking_embed(booking: Booking, services: LaundryServices) -> discord.Embed:
    machine = services.store.get(Machine, booking.machine_id)
    program = services.catalog.get(booking.program)
    e = discord.Embed(
        title=f"Booking {short_id(booking)}",
        description=STATUS_LABELS[booking.status],
        color=discord.Color.blurple(),
    )
    e.add_field(name="Machine", value=machine.name if machine else booking.machine_id)
    e.add_field(name="When", value=slot_label(booking.date, booking.start_time))
    e.add_field(
        name="Program",
        value=f"{program.name if program else booking.program} ({booking.duration} min)",
    )
    e.add_field(name="Verification code", value=f"`{booking.verification_code}`")
    if booking.is_fixed_slot:
        e.add_field(name="Slot", value="Fixed weekly slot")
    if booking.water_usage is not None:
        e.set_footer(
            text=(
                f"{booking.water_usage:g} L water • {booking.energy_usage:g} kWh • "
                f"{booking.co2_impact:g} kg CO₂"
            )
        )
    return e


def bookings_embed(
    bookings: Iterable[Booking], services: LaundryServices
) -> discord.Embed:
    e = discord.Embed(title="My bookings")
    names = {m.id: m.name for m in services.store.list(Machine)}
    for b in bookings:
        e.add_field(
            name=f"{short_id(b)} • {slot_label(b.date, b.start_time)}",
            value=(
                f"{names.get(b.machine_id, b.machine_id)} • {b.duration} min\n"
                f"{STATUS_LABELS[b.status]} • code `{b.verification_code}`"
            ),
            inline=False,
        )
    if not e.fields:
        e.description = "You have no bookings yet. Use `/book`."
    return e


def machines_embed(machines: Iterable[Machine]) -> discord.Embed:
    e = discord.Embed(title="Machines")
    for m in machines:
        value = MACHINE_LABELS[m.status]
        if m.error:
            value += f"\n{m.error}"
        e.add_field(name=f"{m.name} ({m.id})", value=value, inline=False)
    return e


def slots_embed(
    machine: Machine, day: datetime.date, slots: Iterable[TimeSlot]
) -> discord.Embed:
    free = [s.time.strftime("%H:%M") for s in slots if s.available]
    e = discord.Embed(title=f"{machine.name} on {day.strftime('%a %d %b %Y')}")
    e.description = ", ".join(free) if free else "No free slots on this day."
    if machine.status is not MachineStatus.AVAILABLE:
        e.set_footer(text=f"Machine is currently {machine.status.value}")
    return e


def progress_bar(used: int, limit: int) -> str:
    blocks = 10 if limit <= 0 else min(10, round(used / limit * 10))
    return "▮" * blocks + "▯" * (10 - blocks)


def quota_embed(summary: QuotaSummary) -> discord.Embed:
    e = discord.Embed(title="Booking quota", color=discord.Color.green())
    e.add_field(
        name="Today",
        value=(
            f"{summary.daily_used} of {summary.daily_limit}\n"
            f"{progress_bar(summary.daily_used, summary.daily_limit)}"
        ),
        inline=False,
    )
    e.add_field(
        name="This week",
        value=(
            f"{summary.weekly_used} of {summary.weekly_limit}\n"
            f"{progress_bar(summary.weekly_used, summary.weekly_limit)}"
        ),
        inline=False,
    )
    return e
