"""
Applet process entry point

    from qapplet import run_applet

    if __name__ == "__main__":
        run_applet(MyApplet())

Configures logging from the `loggingOptions` environment variable, starts
the engine with the config from the command line and blocks until
shutdown. A startup failure exits the process with status 1.
"""

import asyncio
import sys
from typing import Any

from qapplet.engine.applet import Applet
from qapplet.engine.desktop_app import DesktopApp
from qapplet.utils.logger import configure_from_env, get_logger, LogCategory

log = get_logger().for_category(LogCategory.SYSTEM)


async def main(applet: Applet, **engine_kwargs: Any) -> None:
    app = DesktopApp(applet, **engine_kwargs)
    try:
        # ============================================================
        # 1. CONFIG, PARENT CHANNEL, SIGNAL HANDLERS
        # ============================================================
        await app.initialize()

        log.info(f"🏁 {applet.__class__.__name__} initialized. Waiting for exit signal...")

        # ============================================================
        # 2. WAIT FOR SIGINT / SIGTERM / DISCONNECT / exit()
        # ============================================================
        await app.run_forever()
    finally:
        # No-op when run_forever() already ran the sequence
        await app.shutdown()

    log.info("👋 Applet shut down cleanly.")


def run_applet(applet: Applet, **engine_kwargs: Any) -> None:
    """Run an applet until it is told to stop. Extra kwargs go to DesktopApp."""
    configure_from_env()

    exit_code = 0
    try:
        asyncio.run(main(applet, **engine_kwargs))
    except KeyboardInterrupt:
        log.info("Keyboard interrupt received")
    except Exception as e:
        log.error(f"Fatal error: {e}", exc_info=True)
        exit_code = 1
    finally:
        sys.exit(exit_code)
