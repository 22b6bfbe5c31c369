from __future__ import annotations

import logging
import tkinter as tk
from typing import Callable

from custodia_client_sdk import ClientConfig, load_config

from custodia_app.app.controller import WorkflowController
from custodia_app.ui.main_window import MainWindow

logger = logging.getLogger(__name__)


class GuiApp:
    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        controller_factory: Callable[..., WorkflowController] = WorkflowController.from_config,
        window_cls: type[MainWindow] = MainWindow,
    ) -> None:
        self.config = config or load_config()
        self.root = tk.Tk()
        self.controller = controller_factory(self.config, dispatch=self._dispatch)
        self.window = window_cls(
            self.root,
            on_lookup=self.controller.submit_lookup,
            on_movements=self.controller.request_movements,
            on_toggle_sort=self.controller.toggle_sort,
            on_toggle_buy=self.controller.toggle_buy_form,
            on_toggle_sell=self.controller.toggle_sell_form,
            on_buy=self.controller.submit_buy,
            on_sell=self.controller.submit_sell,
            price_currency=self.config.price_currency,
        )
        self.controller.store.subscribe(self.window.render)
        self.root.protocol("WM_DELETE_WINDOW", self.shutdown)
        self.window.render(self.controller.store.state)

    def _dispatch(self, callback: Callable[[], None]) -> None:
        if self.controller.closed:
            logger.debug("dispatch_dropped", extra={"reason": "closed"})
            return
        try:
            self.root.after(0, callback)
        except (RuntimeError, tk.TclError):
            # root destroyed between the check and the call
            logger.debug("dispatch_dropped", extra={"reason": "window_destroyed"})

    def run(self) -> None:
        self.controller.start()
        self.root.mainloop()

    def shutdown(self) -> None:
        logger.info("shutdown")
        self.controller.close()
        self.root.destroy()
