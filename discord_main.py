import config
from application.commands import CommandDispatcher
from application.ledger import GameLedger
from infrastructure.db.backend_factory import create_backend
from interfaces.discord.handlers import create_discord_bot
from logger import logger, setup_logging


def main() -> None:
    setup_logging(config.LOG_LEVEL, config.LOG_FILE)

    if not config.DISCORD_TOKEN:
        raise RuntimeError("DISCORD_TOKEN environment variable is not set.")

    logger.info(f"Starting ShameBot for Discord (backend={config.LEDGER_BACKEND})")

    ledger = GameLedger(create_backend(), alert_threshold=config.ALERT_THRESHOLD)
    dispatcher = CommandDispatcher(ledger, prefix=config.COMMAND_PREFIX, alert_mention="@here")

    bot = create_discord_bot(dispatcher)
    bot.run(config.DISCORD_TOKEN, log_handler=None)


if __name__ == "__main__":
    main()
