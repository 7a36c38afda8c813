from __future__ import annotations

import discord

from ..core.models import ReportType, Urgency
from ..services import LaundryServices


class ReportModal(discord.ui.Modal, title="Report an issue"):
    def __init__(
        self,
        services: LaundryServices,
        reporter_id: str,
        report_type: ReportType,
        target_id: str,
        issue_type: str,
        urgency: Urgency,
    ) -> None:
        super().__init__()
        self.services = services
        self.reporter_id = reporter_id
        self.report_type = report_type
        self.target_id = target_id
        self.issue_type = issue_type
        self.urgency = urgency
        self.description_input = discord.ui.TextInput(
            label="What happened?",
            style=discord.TextStyle.long,
            placeholder="Describe the problem so staff can follow up...",
            required=True,
            max_length=1000,
        )
        self.add_item(self.description_input)

    async def on_submit(self, interaction: discord.Interaction) -> None:
        target = (
            {"machine_id": self.target_id}
            if self.report_type is ReportType.MACHINE
            else {"reported_user_id": self.target_id}
        )
        response = self.services.reports.create_report(
            {
                "type": self.report_type,
                "reporter_id": self.reporter_id,
                "issue_type": self.issue_type,
                "description": self.description_input.value,
                "urgency": self.urgency,
                **target,
            }
        )
        if not response.success:
            await interaction.response.send_message(
                response.message or "Failed to submit report.", ephemeral=True
            )
            return
        await interaction.response.send_message(
            f"Report `{response.data.id[:8]}` submitted. Thank you!",
            ephemeral=True,
        )
