from __future__ import annotations

import tkinter as tk
from tkinter import ttk
from typing import Callable

from custodia_app.app.price_poller import price_trend
from custodia_app.app.state import SessionState
from custodia_app.ui.formatting import format_btc, format_cop, format_price, format_yield, operation_label, trend_color
from custodia_app.ui.view_state import (
    balance_panel,
    can_open_order_forms,
    can_request_movements,
    can_toggle_sort,
    error_banner,
    movements_panel,
    sort_button_label,
)

_MOVEMENT_COLUMNS = (
    ("date", "Date", 150),
    ("kind", "Operation", 90),
    ("cop_balance", "COP balance", 140),
    ("btc_price", "BTC price", 130),
    ("usd_price", "USD price", 110),
    ("total", "Total", 120),
)


class MainWindow:
    def __init__(
        self,
        root: tk.Tk,
        *,
        on_lookup: Callable[[str], None],
        on_movements: Callable[[], None],
        on_toggle_sort: Callable[[], None],
        on_toggle_buy: Callable[[], None],
        on_toggle_sell: Callable[[], None],
        on_buy: Callable[[str], None],
        on_sell: Callable[[str, str], None],
        price_currency: str = "cop",
    ) -> None:
        self.root = root
        root.title("Account Balance")
        root.geometry("900x640")

        self.price_currency = price_currency
        self.account_id_value = tk.StringVar(value="")
        self.error_value = tk.StringVar(value="")
        self.notice_value = tk.StringVar(value="")
        self.status_value = tk.StringVar(value="")
        self.price_value = tk.StringVar(value="--")
        self.buy_amount_value = tk.StringVar(value="")
        self.sell_amount_value = tk.StringVar(value="")
        self.sell_account_value = tk.StringVar(value="")
        self.movements_status_value = tk.StringVar(value="")

        frame = tk.Frame(root, padx=16, pady=16)
        frame.pack(fill="both", expand=True)

        header = tk.Frame(frame)
        header.pack(fill="x")
        tk.Label(header, text="Account Balance", font=("TkDefaultFont", 14, "bold")).pack(side="left")
        self._price_label = tk.Label(header, textvariable=self.price_value, font=("TkDefaultFont", 11, "bold"))
        self._price_label.pack(side="right")
        tk.Label(header, text="BTC spot:").pack(side="right", padx=(0, 6))

        form = tk.Frame(frame, pady=8)
        form.pack(fill="x")
        entry = tk.Entry(form, textvariable=self.account_id_value, width=24)
        entry.pack(side="left")
        entry.bind("<Return>", lambda _event: on_lookup(self.account_id_value.get()))
        self._lookup_button = tk.Button(form, text="Fetch", width=10, command=lambda: on_lookup(self.account_id_value.get()))
        self._lookup_button.pack(side="left", padx=6)

        tk.Label(frame, textvariable=self.error_value, fg="#b00020", anchor="w", justify="left").pack(fill="x")
        tk.Label(frame, textvariable=self.notice_value, fg="#007a00", anchor="w").pack(fill="x")
        tk.Label(frame, textvariable=self.status_value, fg="#777777", anchor="w").pack(fill="x")

        self._balances_frame = tk.Frame(frame, pady=6)
        self._balances_frame.pack(fill="x")

        actions = tk.Frame(frame, pady=6)
        actions.pack(fill="x")
        self._movements_button = tk.Button(actions, text="Movements", width=12, command=on_movements)
        self._movements_button.pack(side="left")
        self._sort_button = tk.Button(actions, text="Sort: oldest first", width=18, command=on_toggle_sort)
        self._sort_button.pack(side="left", padx=6)
        self._buy_toggle = tk.Button(actions, text="Buy", width=10, command=on_toggle_buy)
        self._buy_toggle.pack(side="right")
        self._sell_toggle = tk.Button(actions, text="Sell", width=10, command=on_toggle_sell)
        self._sell_toggle.pack(side="right", padx=6)

        self._buy_form = tk.Frame(frame, pady=4)
        tk.Label(self._buy_form, text="BTC amount").pack(side="left")
        tk.Entry(self._buy_form, textvariable=self.buy_amount_value, width=16).pack(side="left", padx=6)
        self._buy_submit = tk.Button(
            self._buy_form, text="Send buy request", command=lambda: on_buy(self.buy_amount_value.get())
        )
        self._buy_submit.pack(side="left")

        self._sell_form = tk.Frame(frame, pady=4)
        tk.Label(self._sell_form, text="BTC amount").pack(side="left")
        tk.Entry(self._sell_form, textvariable=self.sell_amount_value, width=16).pack(side="left", padx=6)
        tk.Label(self._sell_form, text="Account number").pack(side="left")
        tk.Entry(self._sell_form, textvariable=self.sell_account_value, width=20).pack(side="left", padx=6)
        self._sell_submit = tk.Button(
            self._sell_form,
            text="Send sell request",
            command=lambda: on_sell(self.sell_amount_value.get(), self.sell_account_value.get()),
        )
        self._sell_submit.pack(side="left")

        self._movements_status = tk.Label(frame, textvariable=self.movements_status_value, fg="#777777", anchor="w")
        self._movements_status.pack(fill="x", pady=(8, 0))
        self._movements = ttk.Treeview(frame, columns=[column[0] for column in _MOVEMENT_COLUMNS], show="headings")
        for key, title, width in _MOVEMENT_COLUMNS:
            self._movements.heading(key, text=title)
            self._movements.column(key, width=width, anchor="e" if key != "kind" else "center")
        self._movements.pack(fill="both", expand=True)

    def render(self, state: SessionState) -> None:
        self.error_value.set(error_banner(state))
        self.notice_value.set(state.notice or "")
        self.status_value.set(balance_panel(state).status_line)
        self._lookup_button.configure(
            state="disabled" if state.loading else "normal",
            text="Loading..." if state.loading else "Fetch",
        )
        self._render_price(state)
        self._render_balances(state)
        self._render_forms(state)
        self._render_movements(state)

    def _render_price(self, state: SessionState) -> None:
        self.price_value.set(format_price(state.price.current, self.price_currency))
        self._price_label.configure(fg=trend_color(price_trend(state.price.previous, state.price.current)))

    def _render_balances(self, state: SessionState) -> None:
        for widget in self._balances_frame.winfo_children():
            widget.destroy()
        for balance in state.balances:
            card = tk.Frame(self._balances_frame, padx=10, pady=6, relief="groove", borderwidth=1)
            card.pack(side="left", padx=(0, 8))
            rows = (
                ("ID:", balance.id),
                ("Name:", balance.name),
                ("Last Name:", balance.lastname),
                ("BTC Balance:", format_btc(balance.btc_balance)),
                ("COP Balance:", format_cop(balance.cop_balance)),
                ("Yield:", format_yield(balance.yield_)),
            )
            for row_index, (label, value) in enumerate(rows):
                tk.Label(card, text=label, anchor="w").grid(row=row_index, column=0, sticky="w")
                tk.Label(card, text=value, anchor="e").grid(row=row_index, column=1, sticky="e", padx=(12, 0))

    def _render_forms(self, state: SessionState) -> None:
        self._movements_button.configure(state="normal" if can_request_movements(state) else "disabled")
        self._sort_button.configure(
            state="normal" if can_toggle_sort(state) else "disabled",
            text=sort_button_label(state.sort_order),
        )
        for button in (self._buy_toggle, self._sell_toggle):
            button.configure(state="normal" if can_open_order_forms(state) else "disabled")
        submit_state = "disabled" if state.loading else "normal"
        self._buy_submit.configure(state=submit_state)
        self._sell_submit.configure(state=submit_state)
        if not state.buy_form_open:
            self.buy_amount_value.set(state.buy_amount)
        if not state.sell_form_open:
            self.sell_amount_value.set(state.sell_amount)
            self.sell_account_value.set(state.sell_account_number)
        self._toggle_frame(self._buy_form, state.buy_form_open)
        self._toggle_frame(self._sell_form, state.sell_form_open)

    def _toggle_frame(self, frame: tk.Frame, visible: bool) -> None:
        packed = bool(frame.winfo_manager())
        if visible and not packed:
            frame.pack(fill="x", before=self._movements_status)
        elif not visible and packed:
            frame.pack_forget()

    def _render_movements(self, state: SessionState) -> None:
        self.movements_status_value.set(movements_panel(state).status_line)
        self._movements.delete(*self._movements.get_children())
        for movement in state.movements:
            self._movements.insert(
                "",
                "end",
                values=(
                    movement.date,
                    operation_label(movement.operation_kind),
                    format_cop(movement.cop_balance_at_time),
                    movement.btc_price_at_time,
                    movement.usd_price_at_time,
                    movement.total,
                ),
            )
