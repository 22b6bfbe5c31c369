from __future__ import annotations

import pytest

pytest.importorskip("tkinter")

from custodia_app.app.controller import WorkflowController
from custodia_app.ui.gui_app import GuiApp
from custodia_shared.telemetry import TelemetryLogger


class FakeRoot:
    def __init__(self) -> None:
        self.scheduled: list = []
        self.destroyed = False

    def after(self, delay: int, callback) -> None:
        if self.destroyed:
            raise RuntimeError("main thread is not in main loop")
        self.scheduled.append(callback)

    def protocol(self, name: str, handler) -> None:
        self.close_handler = handler

    def destroy(self) -> None:
        self.destroyed = True


class FakeWindow:
    def __init__(self, root, **callbacks) -> None:
        self.root = root
        self.callbacks = callbacks
        self.renders = 0

    def render(self, state) -> None:
        self.renders += 1


@pytest.fixture
def app(monkeypatch: pytest.MonkeyPatch, config) -> GuiApp:
    monkeypatch.setattr("custodia_app.ui.gui_app.tk.Tk", FakeRoot)

    def controller_factory(cfg, *, dispatch):
        telemetry = TelemetryLogger(app_name="test", enabled=False)
        return WorkflowController(object(), dispatch=dispatch, telemetry=telemetry)

    return GuiApp(config, controller_factory=controller_factory, window_cls=FakeWindow)


def test_dispatch_schedules_on_the_tk_loop(app: GuiApp) -> None:
    app._dispatch(lambda: None)

    assert len(app.root.scheduled) == 1
    assert app.window.renders == 1


def test_dispatch_after_shutdown_is_dropped(app: GuiApp) -> None:
    app.shutdown()

    app._dispatch(lambda: None)

    assert app.controller.closed
    assert app.root.destroyed
    assert app.root.scheduled == []


def test_dispatch_to_destroyed_window_is_dropped(app: GuiApp) -> None:
    app.root.destroy()

    app._dispatch(lambda: None)

    assert app.root.scheduled == []
