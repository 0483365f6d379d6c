import os
from dotenv import load_dotenv

load_dotenv()

user = os.getenv("DB_USER")
password = os.getenv("DB_PASSWORD")
host = os.getenv("DB_HOST")
port = os.getenv("DB_PORT", "5432")
db_name = os.getenv("DB_NAME")

if os.getenv("DATABASE_URL"):
    database_url = os.getenv("DATABASE_URL")
elif host:
    database_url = f"postgresql+asyncpg://{user}:{password}@{host}:{port}/{db_name}"
else:
    database_url = "sqlite+aiosqlite:///./tictac_promo.sqlite3"

storage_backend = os.getenv("STORAGE_BACKEND", "sql")
player_data_file = os.getenv("PLAYER_DATA_FILE", "database.json")

telegram_bot_token = os.getenv("TELEGRAM_BOT_TOKEN")
bot_username = os.getenv("BOT_USERNAME", "tic_tac_glamour_bot")

lock_cleanup_minutes = int(os.getenv("LOCK_CLEANUP_MINUTES", "30"))
log_level = os.getenv("LOG_LEVEL", "INFO").upper()

opponent_delay_seconds = float(os.getenv("OPPONENT_DELAY_SECONDS", "0.7"))
poll_interval_seconds = float(os.getenv("POLL_INTERVAL_SECONDS", "2.0"))

if __name__ == "__main__":
    print(database_url, storage_backend, bot_username, log_level)
