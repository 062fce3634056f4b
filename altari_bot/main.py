from __future__ import annotations

import sys
from typing import Callable

from dotenv import load_dotenv
from fastapi import FastAPI

from altari_bot.api.routes import router
from altari_bot.config.settings import Settings, get_settings
from altari_bot.integrations.telegram_bot import BotPoller, TelegramBotClient
from altari_bot.services.commands import CommandHandler
from altari_bot.services.quote_resolver import build_default_resolver
from altari_bot.services.shutdown import ShutdownController, ShutdownSignal


def create_app(
    shutdown_signal: ShutdownSignal,
    settings_provider: Callable[[], Settings] = get_settings,
) -> FastAPI:
    app = FastAPI(title="cheap-altari-bot", docs_url=None, redoc_url=None, openapi_url=None)
    app.include_router(router)
    # NOTE: lazy-loaded so app creation does not require env during tests.
    app.state.get_settings = settings_provider
    app.state.shutdown_signal = shutdown_signal
    return app


def build_shutdown_controller(
    settings: Settings,
    shutdown_signal: ShutdownSignal,
    argv: list[str],
) -> ShutdownController:
    app = create_app(shutdown_signal, lambda: settings)
    if settings.SERVER_DEV:
        print(f"[SHUTDOWN][mode] dev=1 scheme=http port={settings.listen_port}", flush=True)
        return ShutdownController(app, shutdown_signal, port=settings.listen_port)

    if len(argv) < 3:
        raise SystemExit("usage: cheap-altari-bot <cert-file> <key-file>")
    print(f"[SHUTDOWN][mode] dev=0 scheme=https port={settings.listen_port}", flush=True)
    return ShutdownController(
        app,
        shutdown_signal,
        port=settings.listen_port,
        ssl_certfile=argv[1],
        ssl_keyfile=argv[2],
    )


def main(argv: list[str] | None = None) -> None:
    argv = sys.argv if argv is None else argv

    print("[BOT][startup] load .env file", flush=True)
    load_dotenv(".env")
    settings = get_settings()

    shutdown_signal = ShutdownSignal()
    controller = build_shutdown_controller(settings, shutdown_signal, argv)
    controller.run_in_background()

    client = TelegramBotClient(settings.BOT_TOKEN)
    me = client.get_me()
    print(f"[BOT][authorized] account={me.get('username')}", flush=True)

    resolver = build_default_resolver(kis_proxy_url=settings.KIS_PROXY_URL)
    BotPoller(client, CommandHandler(resolver)).run()


if __name__ == "__main__":
    main()
