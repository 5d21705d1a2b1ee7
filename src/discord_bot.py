"""
classbell Discord Bot

Reads class timetables sent as text, saves them per user and DMs each user
shortly before every class. Also delivers one-off reminders.
"""

import asyncio
import os
from typing import Optional

import asyncpg
import discord
from discord.ext import commands
from dotenv import load_dotenv

import analytics
from analytics import track
from commands.reminder_commands import ReminderCommands
from commands.schedule_commands import ScheduleCommands, read_text_attachment
from reminders import (
    ReminderConfig,
    ReminderScheduler,
    ScheduleStore,
    TimeParseError,
    is_class_reminder_question,
    is_reminder_request,
    parse_reminder_request,
)
from timetable import ExtractionConfig, extract_schedule, format_schedule_reply

load_dotenv()

import logging

# Discord message length limit
DISCORD_MAX_LENGTH = 2000

SCHEDULE_PREFIX = "!schedule"

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("classbell")

HELP_TEXT = "\n".join(
    [
        "Here's what I can do:",
        f"- Timetable: send `{SCHEDULE_PREFIX}` followed by your timetable text, "
        "or attach it as a .txt file",
        "- Class alerts: once your timetable is saved I DM you before each class",
        "- Reminders: `remind me at 5:30 pm to call mom` or `remind me in 20 minutes`",
        "- Slash commands: `/schedule import|show|clear`, `/remind set|list|clear`",
    ]
)


def class_alert_guidance(lead_minutes: int) -> str:
    return "\n".join(
        [
            f"I can notify you {lead_minutes} minutes before each class. To set this up:",
            f"1) Send your timetable as text (start the message with `{SCHEDULE_PREFIX}`) "
            "or attach it as a .txt file.",
            "2) I'll extract the times and save your schedule.",
            f"3) You'll get a DM {lead_minutes} minutes before each class on the right weekday.",
        ]
    )


def chunk_lines(content: str, limit: int = DISCORD_MAX_LENGTH) -> list[str]:
    """Split a message on line boundaries into chunks under the Discord limit."""
    chunks = []
    current = ""
    for line in content.split("\n"):
        while len(line) > limit:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:limit])
            line = line[limit:]
        candidate = f"{current}\n{line}" if current else line
        if len(candidate) > limit:
            chunks.append(current)
            current = line
        else:
            current = candidate
    if current:
        chunks.append(current)
    return chunks


class DiscordBot(commands.Bot):
    """Discord bot that stores timetables and sends class alerts."""

    def __init__(
        self,
        extraction_config: Optional[ExtractionConfig] = None,
        reminder_config: Optional[ReminderConfig] = None,
    ):
        intents = discord.Intents.default()
        intents.message_content = True
        intents.messages = True

        super().__init__(command_prefix="!", intents=intents)

        self.extraction_config = extraction_config or ExtractionConfig.from_env()
        self.reminder_config = reminder_config or ReminderConfig.from_env()
        self.db_pool: Optional[asyncpg.Pool] = None
        self.store: Optional[ScheduleStore] = None
        self.scheduler: Optional[ReminderScheduler] = None
        self._ready_event = asyncio.Event()

    async def setup_hook(self):
        """Called when the bot is starting up."""
        database_url = os.getenv("DATABASE_URL")
        logger.info(f"Setup: DATABASE_URL={'set' if database_url else 'missing'}")
        logger.info(
            f"Setup: lead={self.reminder_config.lead_minutes}min "
            f"timezone={self.reminder_config.timezone}"
        )

        if not database_url:
            logger.warning("No DATABASE_URL, schedules and reminders disabled")
            return

        try:
            self.db_pool = await asyncpg.create_pool(database_url)
            self.store = ScheduleStore(self.db_pool)
            await self.store.ensure_schema()
        except Exception as e:
            logger.error(f"Failed to initialize schedule store: {e}", exc_info=True)
            self.store = None
            return

        await self.add_cog(
            ScheduleCommands(self, self.store, self.extraction_config, self.reminder_config)
        )
        await self.add_cog(ReminderCommands(self, self.store, self.reminder_config))
        synced = await self.tree.sync()
        logger.info(f"Synced {len(synced)} slash command(s)")

        self.scheduler = ReminderScheduler(self, self.store, self.reminder_config)
        self.scheduler.start()

    async def on_ready(self):
        """Called when the bot has connected to Discord."""
        logger.info(f"Logged in as {self.user} (ID: {self.user.id})")
        self._ready_event.set()

    def is_ready(self) -> bool:
        """Check if the bot is ready."""
        return self._ready_event.is_set()

    async def wait_until_ready(self):
        """Wait until the bot is ready."""
        await self._ready_event.wait()

    async def on_command_error(self, context: commands.Context, exception: commands.CommandError):
        """Ignore unknown "!" commands; "!schedule" and "!remind me" are handled in on_message."""
        if isinstance(exception, commands.CommandNotFound):
            return
        logger.error(f"Command error: {exception}", exc_info=exception)

    async def notify(self, user_id: int, text: str) -> None:
        """Send a DM to a user. Used by the reminder scheduler."""
        user = self.get_user(user_id)
        if user is None:
            user = await self.fetch_user(user_id)
        for chunk in chunk_lines(text):
            await user.send(chunk)

    async def on_message(self, message: discord.Message):
        """Handle timetable uploads and reminder requests."""
        if message.author == self.user or message.author.bot:
            return

        await self.process_commands(message)

        # Respond in DMs or when mentioned
        if not (
            isinstance(message.channel, discord.DMChannel)
            or self.user.mentioned_in(message)
        ):
            return

        content = message.content.replace(f"<@{self.user.id}>", "").strip()

        if content.lower().startswith(SCHEDULE_PREFIX) or (
            not content and message.attachments
        ):
            await self._handle_schedule_message(message, content[len(SCHEDULE_PREFIX):])
        elif is_class_reminder_question(content):
            await message.reply(class_alert_guidance(self.reminder_config.lead_minutes))
        elif is_reminder_request(content):
            await self._handle_reminder_request(message, content)
        elif content.lower() in {"help", "menu", "?", "commands"}:
            await message.reply(HELP_TEXT)

    async def _handle_schedule_message(self, message: discord.Message, text: str):
        """Extract a timetable from message text and text attachments."""
        if self.store is None:
            await message.reply("Schedule storage is not configured (missing DATABASE_URL).")
            return

        parts = [text] if text.strip() else []
        for attachment in message.attachments:
            try:
                file_text = await read_text_attachment(attachment)
            except discord.HTTPException as e:
                logger.warning(f"Failed to read attachment {attachment.filename}: {e}")
                continue
            if file_text:
                parts.append(file_text)

        entries = extract_schedule("\n".join(parts), self.extraction_config)
        if entries:
            await self.store.save_schedule(message.author.id, entries)
            track(
                "schedule_imported",
                "schedule",
                user_id=message.author.id,
                properties={"items": len(entries), "source": "message"},
            )

        await self._send_chunked(message.channel, format_schedule_reply(entries), reply_to=message)

    async def _handle_reminder_request(self, message: discord.Message, content: str):
        if self.store is None:
            await message.reply("Reminder storage is not configured (missing DATABASE_URL).")
            return

        try:
            record = parse_reminder_request(content, self.reminder_config.timezone)
        except TimeParseError as e:
            await message.reply(str(e))
            return

        await self.store.add_reminder(message.author.id, record)
        due_local = record.due_at.astimezone(self.reminder_config.tz)
        await message.reply(
            f"Okay, I'll remind you at {due_local.strftime('%Y-%m-%d %H:%M %Z')}: {record.text}"
        )
        track("reminder_created", "reminder", user_id=message.author.id)

    async def _send_chunked(
        self, channel: discord.abc.Messageable, content: str, reply_to: discord.Message = None
    ) -> discord.Message:
        """Send a message, splitting into chunks if needed. Returns the last message sent."""
        last_msg = None
        for i, chunk in enumerate(chunk_lines(content)):
            if i == 0 and reply_to:
                last_msg = await reply_to.reply(chunk)
            else:
                last_msg = await channel.send(chunk)
        return last_msg

    async def close(self):
        """Clean up resources on shutdown."""
        if self.scheduler:
            self.scheduler.stop()
        if self.db_pool:
            await self.db_pool.close()
        await analytics.shutdown()
        await super().close()


async def main():
    """Run the bot."""
    token = os.getenv("DISCORD_BOT_TOKEN")
    if not token:
        print("Error: DISCORD_BOT_TOKEN environment variable not set")
        print("Please set it in your .env file")
        return

    bot = DiscordBot()
    await bot.start(token)


if __name__ == "__main__":
    asyncio.run(main())
