"""
Starts the LafdaClub Telegram bot.
"""

import os

from dotenv import load_dotenv

# Load .env before settings are imported
load_dotenv()

from lfdc.bot.main import run_bot  # noqa: E402


if __name__ == "__main__":
    BOT_TOKEN = os.getenv("BOT_TOKEN")
    API_BASE_URL = os.getenv("API_BASE_URL")

    if not BOT_TOKEN:
        raise ValueError("BOT_TOKEN environment variable is required")

    print(f"Starting LFDC bot (API: {API_BASE_URL or 'default from settings'})")
    try:
        run_bot(BOT_TOKEN, API_BASE_URL)
    except KeyboardInterrupt:
        print("\nBot stopped")
