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
Schedule Slash Commands

Discord slash commands for importing and viewing class timetables.
"""

import logging
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands

from analytics import track
from reminders import ReminderConfig, ScheduleStore
from timetable import ExtractionConfig, extract_schedule, format_schedule_reply

logger = logging.getLogger("classbell.commands.schedule")

TEXT_EXTENSIONS = {".txt", ".md", ".csv", ".tsv", ".text"}
MAX_FILE_SIZE = 200_000  # 200KB limit per file

# Discord message length limit
DISCORD_MAX_LENGTH = 2000


async def read_text_attachment(attachment: discord.Attachment) -> Optional[str]:
    """
    Download a timetable text file.

    Returns:
        Decoded text, or None if the file is not a supported text file
    """
    filename = attachment.filename.lower()
    ext = "." + filename.rsplit(".", 1)[-1] if "." in filename else ""
    if ext not in TEXT_EXTENSIONS:
        return None
    if attachment.size > MAX_FILE_SIZE:
        logger.warning(f"Timetable file too large: {attachment.filename} ({attachment.size} bytes)")
        return None

    content_bytes = await attachment.read()
    text = content_bytes.decode("utf-8", errors="replace")
    logger.info(f"Read timetable file: {attachment.filename} ({len(text)} chars)")
    return text


def truncate_reply(text: str) -> str:
    if len(text) <= DISCORD_MAX_LENGTH:
        return text
    return text[: DISCORD_MAX_LENGTH - 20] + "\n\n[...truncated]"


class ScheduleCommands(commands.Cog):
    """
    Slash commands for class timetables.

    Commands:
    - /schedule import - Extract and save a timetable from text or a file
    - /schedule show - Show the saved timetable
    - /schedule clear - Delete the saved timetable
    """

    schedule_group = app_commands.Group(
        name="schedule",
        description="Manage your class timetable",
    )

    def __init__(
        self,
        bot: commands.Bot,
        store: ScheduleStore,
        extraction_config: ExtractionConfig,
        reminder_config: ReminderConfig,
    ):
        self.bot = bot
        self.store = store
        self.extraction_config = extraction_config
        self.reminder_config = reminder_config

    @schedule_group.command(name="import")
    @app_commands.describe(
        text="Timetable text, one class per line (e.g. 'Math 9:00 AM - 10:15 AM Mon')",
        file="A .txt/.md/.csv file with the timetable text",
    )
    async def import_schedule(
        self,
        interaction: discord.Interaction,
        text: Optional[str] = None,
        file: Optional[discord.Attachment] = None,
    ):
        """Extract and save your class timetable."""
        await interaction.response.defer(ephemeral=True)

        track(
            "command_used",
            "command",
            user_id=interaction.user.id,
            properties={"command_name": "schedule", "subcommand": "import"},
        )

        parts = [text] if text else []
        if file is not None:
            file_text = await read_text_attachment(file)
            if file_text is None:
                await interaction.followup.send(
                    "Only text files (.txt, .md, .csv) up to 200KB are supported.",
                    ephemeral=True,
                )
                return
            parts.append(file_text)

        if not parts:
            await interaction.followup.send(
                "Provide the timetable as `text` or attach a `file`.",
                ephemeral=True,
            )
            return

        entries = extract_schedule("\n".join(parts), self.extraction_config)
        if entries:
            await self.store.save_schedule(interaction.user.id, entries)
            track(
                "schedule_imported",
                "schedule",
                user_id=interaction.user.id,
                properties={"items": len(entries), "source": "slash"},
            )

        await interaction.followup.send(
            truncate_reply(format_schedule_reply(entries)), ephemeral=True
        )

    @schedule_group.command(name="show")
    async def show_schedule(self, interaction: discord.Interaction):
        """Show your saved timetable."""
        await interaction.response.defer(ephemeral=True)

        entries = await self.store.get_schedule(interaction.user.id)
        if not entries:
            await interaction.followup.send(
                "You don't have a saved timetable. Use `/schedule import` to add one!",
                ephemeral=True,
            )
            return

        lines = [f"- {e.subject} at {e.time} ({e.day})" for e in entries]
        lead = self.reminder_config.lead_minutes
        lines.append(
            f"\nYou'll get a DM {lead} minutes before each class "
            f"({self.reminder_config.timezone})."
        )
        await interaction.followup.send(truncate_reply("\n".join(lines)), ephemeral=True)

    @schedule_group.command(name="clear")
    async def clear_schedule(self, interaction: discord.Interaction):
        """Delete your saved timetable."""
        await interaction.response.defer(ephemeral=True)

        await self.store.clear_schedule(interaction.user.id)
        await interaction.followup.send("Your timetable has been cleared.", ephemeral=True)
