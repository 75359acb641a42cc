import config
from application.commands import CommandDispatcher
from application.ledger import GameLedger
from infrastructure.db.backend_factory import create_backend
from interfaces.telegram.handlers import create_telegram_bot
from logger import logger, setup_logging


def main() -> None:
    setup_logging(config.LOG_LEVEL, config.LOG_FILE)

    if not config.TELEGRAM_BOT_TOKEN:
        raise RuntimeError("TELEGRAM_BOT_TOKEN environment variable is not set.")

    logger.info(f"Starting ShameBot for Telegram (backend={config.LEDGER_BACKEND})")

    ledger = GameLedger(create_backend(), alert_threshold=config.ALERT_THRESHOLD)
    # Telegram commands are slash-prefixed and have no @here equivalent.
    dispatcher = CommandDispatcher(ledger, prefix="/", alert_mention="")

    bot = create_telegram_bot(config.TELEGRAM_BOT_TOKEN, dispatcher)
    bot.infinity_polling()


if __name__ == "__main__":
    main()
