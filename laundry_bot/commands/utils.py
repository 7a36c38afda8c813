"""Parsing and reply helpers shared by the slash commands."""

from __future__ import annotations

import datetime

import discord

from ..core.errors import ErrorReason, ServiceResponse
from ..core.models import Booking, User
from ..services import LaundryServices

_FRIENDLY = {
    ErrorReason.DAILY_QUOTA_EXCEEDED: "You have reached your daily booking limit for that date.",
    ErrorReason.WEEKLY_QUOTA_EXCEEDED: "You have reached your weekly booking limit.",
    ErrorReason.SLOT_UNAVAILABLE: "That time slot is already booked.",
    ErrorReason.INVALID_PROGRAM: "Unknown washing program.",
    ErrorReason.INVALID_CREDENTIALS: "Invalid username or password.",
    ErrorReason.INVALID_INPUT: "That input is not valid.",
    ErrorReason.STORAGE_FAILURE: "Saving failed, please try again later.",
}


def parse_day(value: str, today: datetime.date) -> datetime.date:
    """Accept ``today``, ``tomorrow`` or an ISO ``YYYY-MM-DD`` date."""
    text = value.strip().lower()
    if text == "today":
        return today
    if text == "tomorrow":
        return today + datetime.timedelta(days=1)
    return datetime.date.fromisoformat(text)


def parse_clock(value: str) -> datetime.time:
    """Accept ``HH:MM`` or a bare hour such as ``9``."""
    hours, _, minutes = value.strip().partition(":")
    return datetime.time(int(hours), int(minutes or 0))


def describe_failure(response: ServiceResponse) -> str:
    if response.error in _FRIENDLY:
        return _FRIENDLY[response.error]
    return response.message or "Something went wrong."


async def linked_user(
    services: LaundryServices, interaction: discord.Interaction
) -> User | None:
    """Return the account linked to the caller, or reply and return ``None``."""
    response = services.auth.user_for_discord(interaction.user.id)
    if not response.success:
        await interaction.response.send_message(
            describe_failure(response), ephemeral=True
        )
        return None
    return response.data


def find_own_booking(
    services: LaundryServices, user: User, token: str
) -> Booking | None:
    """Match ``token`` against the user's booking ids (full id or unique prefix)."""
    token = token.strip()
    mine = services.store.list(Booking, lambda b: b.user_id == user.id)
    exact = [b for b in mine if b.id == token]
    if exact:
        return exact[0]
    matches = [b for b in mine if token and b.id.startswith(token)]
    return matches[0] if len(matches) == 1 else None
