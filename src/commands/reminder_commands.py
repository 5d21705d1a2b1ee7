# classbell - Timetable Reminder Bot
# Copyright (c) 2025-2026 Slash Daemon slashdaemon@protonmail.com
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, version 3 of the License.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.
#
# Commercial licensing: [slashdaemon@protonmail.com]

"""
Reminder Slash Commands

Discord slash commands for one-off reminders.
"""

import logging

import discord
from discord import app_commands
from discord.ext import commands

from analytics import track
from reminders import (
    ReminderConfig,
    ScheduleStore,
    TimeParseError,
    parse_due_at,
    parse_reminder_request,
)

logger = logging.getLogger("classbell.commands.reminder")

# Discord embeds hold at most 25 fields
MAX_LISTED = 25

PARSE_HELP = (
    "**Examples:**\n"
    "- `in 20 minutes`\n"
    "- `at 5:30 pm`\n"
    "- `tomorrow at 10am`"
)


def format_pending_reminder(record, tz) -> tuple[str, str]:
    """Return (name, value) embed field text for a stored reminder."""
    if not isinstance(record, dict):
        return ("(unreadable reminder)", str(record)[:100])
    text = str(record.get("text") or "")
    if len(text) > 50:
        text = text[:47] + "..."
    due = parse_due_at(record.get("dueAt"))
    due_str = due.astimezone(tz).strftime("%m/%d %H:%M") if due else "unknown time"
    return (text or "(no text)", f"Due: {due_str}")


class ReminderCommands(commands.Cog):
    """
    Slash commands for one-off reminders.

    Commands:
    - /remind set - Create a reminder
    - /remind list - List pending reminders
    - /remind clear - Remove all pending reminders
    """

    remind_group = app_commands.Group(
        name="remind",
        description="Manage your one-off reminders",
    )

    def __init__(
        self,
        bot: commands.Bot,
        store: ScheduleStore,
        config: ReminderConfig,
    ):
        self.bot = bot
        self.store = store
        self.config = config

    @remind_group.command(name="set")
    @app_commands.describe(
        message="What to remind you about",
        time="When to remind you (e.g., 'in 20 minutes', 'at 5:30 pm', 'tomorrow at 10am')",
    )
    async def set_reminder(
        self,
        interaction: discord.Interaction,
        message: str,
        time: str,
    ):
        """Create a new reminder."""
        await interaction.response.defer(ephemeral=True)

        track(
            "command_used",
            "command",
            user_id=interaction.user.id,
            properties={"command_name": "remind", "subcommand": "set"},
        )

        try:
            record = parse_reminder_request(
                f"remind me {time} to {message}", self.config.timezone
            )
        except TimeParseError as e:
            await interaction.followup.send(
                f"Could not parse time: {e}\n\n{PARSE_HELP}",
                ephemeral=True,
            )
            return

        await self.store.add_reminder(interaction.user.id, record)

        due_local = record.due_at.astimezone(self.config.tz)
        embed = discord.Embed(
            title="Reminder Created",
            color=discord.Color.green(),
        )
        embed.add_field(name="Message", value=record.text[:100], inline=False)
        embed.add_field(name="Due", value=due_local.strftime("%Y-%m-%d %H:%M %Z"), inline=True)
        embed.add_field(name="Delivery", value="DM", inline=True)
        embed.set_footer(text="Use /remind list to see your reminders")

        await interaction.followup.send(embed=embed, ephemeral=True)

        track("reminder_created", "reminder", user_id=interaction.user.id)

    @remind_group.command(name="list")
    async def list_reminders(self, interaction: discord.Interaction):
        """List your pending reminders."""
        await interaction.response.defer(ephemeral=True)

        pending = await self.store.list_reminders(interaction.user.id)
        if not pending:
            await interaction.followup.send(
                "You don't have any reminders. Use `/remind set` to create one!",
                ephemeral=True,
            )
            return

        embed = discord.Embed(
            title="Your Reminders",
            description=f"{len(pending)} pending",
            color=discord.Color.blue(),
        )
        for record in pending[:MAX_LISTED]:
            name, value = format_pending_reminder(record, self.config.tz)
            embed.add_field(name=name, value=value, inline=False)
        embed.set_footer(text=f"Timezone: {self.config.timezone}")

        await interaction.followup.send(embed=embed, ephemeral=True)

    @remind_group.command(name="clear")
    async def clear_reminders(self, interaction: discord.Interaction):
        """Remove all of your pending reminders."""
        await interaction.response.defer(ephemeral=True)

        removed = await self.store.clear_reminders(interaction.user.id)
        await interaction.followup.send(
            f"Removed {removed} reminder(s)." if removed else "You had no pending reminders.",
            ephemeral=True,
        )
        logger.info(f"User {interaction.user.id} cleared {removed} reminder(s)")
