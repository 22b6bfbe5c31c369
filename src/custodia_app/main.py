from __future__ import annotations

import logging
import sys

from custodia_client_sdk import ConfigError, load_config

from custodia_app.ui.gui_app import GuiApp

logger = logging.getLogger(__name__)


def run() -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    try:
        config = load_config()
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2
    app = GuiApp(config)
    try:
        app.run()
    finally:
        app.controller.close()
        grace = config.connect_timeout_seconds + config.read_timeout_seconds
        if app.controller.wait_for_workers(grace):
            gateway_close = getattr(app.controller.gateway, "close", None)
            if callable(gateway_close):
                gateway_close()
        else:
            logger.warning("workers_still_running", extra={"grace_seconds": grace})
    return 0


if __name__ == "__main__":
    raise SystemExit(run())
