"""
DeskApp — the main Tkinter application.

Everything that touches widgets runs inside Tkinter's event loop.
Network calls go to the TaskRunner's worker pool; their results come back
through the UiDispatcher, which _pump() drains every DISPATCH_POLL_MS.
Periodic refresh (health checks, dismissal board) uses RepeatingJob.

Widgets are deliberately thin: each view is a Toplevel that redraws from
its controller on every change notification.
"""

import tkinter as tk
from dataclasses import dataclass
from tkinter import messagebox, simpledialog

from .constants import (
    DESK_VERSION, DISPATCH_POLL_MS, THEME, QUESTION_TYPES, OPTION_QUESTION_TYPES, QUESTION_SHORT_TEXT,
    WEIGHT_PERFECT, WEIGHT_OVER, WEIGHT_UNDER,
)
from .config import log, safe_print
from .state import DeskState
from .tasks import TaskRunner, UiDispatcher
from .admin_api import AdminApiClient
from .edgames_api import EdGamesApiClient
from .talk_api import HeronixTalkApiClient
from .poll_api import PollService
from .dismissal_api import DismissalService
from .session import SessionManager
from .network import NetworkMonitor, PendingStore
from .sync import AutoSyncService
from .roster import RosterCache
from .auth import AuthenticationService
from .shell import ShellController
from .polls import PollsController
from .devices import DeviceManagementController
from .dismissal import DismissalBoardController
from .discipline import DisciplineTicketController
from .grading import CategoryStore, GradingCategoriesController


# ─── Service wiring ──────────────────────────────────────────────

@dataclass
class Services:
    config: dict
    session: SessionManager
    admin: AdminApiClient
    edgames: EdGamesApiClient
    talk: HeronixTalkApiClient
    polls: PollService
    dismissal: DismissalService
    network: NetworkMonitor
    sync: AutoSyncService
    roster_cache: RosterCache
    categories: CategoryStore
    auth: AuthenticationService


def build_services(config) -> Services:
    admin_url = config["adminServerUrl"]
    session = SessionManager()
    admin = AdminApiClient(admin_url)
    edgames = EdGamesApiClient(config["edGamesServerUrl"])
    talk = HeronixTalkApiClient(config["talkServerUrl"], fallback_urls=config.get("talkFallbackUrls", ()))
    network = NetworkMonitor(admin_url)
    cache = RosterCache()
    return Services(
        config=config,
        session=session,
        admin=admin,
        edgames=edgames,
        talk=talk,
        polls=PollService(admin),
        dismissal=DismissalService(admin_url),
        network=network,
        sync=AutoSyncService(config, network, store=PendingStore(), admin_client=admin),
        roster_cache=cache,
        categories=CategoryStore(),
        auth=AuthenticationService(session, admin, edgames, talk, cache),
    )


def _button(parent, text, command, color=None):
    return tk.Button(parent, text=text, command=command, font=("Segoe UI", 10, "bold"),
                     bg=color or THEME["primary"], fg="white",
                     activebackground=THEME["primary_hover"], activeforeground="white",
                     relief="flat", padx=12, pady=4, cursor="hand2")


def _label(parent, text="", size=10, color=None, bold=False):
    return tk.Label(parent, text=text, font=("Segoe UI", size, "bold" if bold else "normal"),
                    bg=parent["bg"], fg=color or THEME["text_primary"], anchor="w")


def _entry(parent, variable, width=None):
    return tk.Entry(parent, textvariable=variable, width=width, bg=THEME["bg_input"], fg=THEME["text_primary"],
                    insertbackground=THEME["text_primary"], relief="flat")


def _status_color(flag):
    if flag is None:
        return THEME["text_muted"]
    return THEME["success"] if flag else THEME["offline"]


class DeskApp:
    """
    Owns the Tk main loop. Schedules via root.after():
      _pump()             — drains worker results onto the Tk thread  (every 100ms)
      ShellController     — network + server status icons             (every 30s)
      DismissalBoard      — board snapshot, while its view is open    (every 15s)
    """

    def __init__(self, services):
        self._svc = services
        self.state = DeskState()
        self._dispatcher = UiDispatcher()
        self._runner = TaskRunner(self._dispatcher)
        self._root = None
        self._controllers = []
        self.shell = None
        self._widgets = {}

    def run(self):
        """Start the app. Blocks on Tk mainloop. Call from main thread."""
        svc = self._svc
        self._root = tk.Tk()
        self._root.title(f"Heronix Teacher Desk {DESK_VERSION}")
        self._root.geometry("640x330")
        self._root.configure(bg=THEME["bg_dark"])
        self._root.protocol("WM_DELETE_WINDOW", self.stop)

        self.shell = ShellController(
            svc.session, svc.network, svc.admin, svc.edgames, svc.talk,
            svc.sync, self._runner, self._root,
        )
        self._watch(self.shell, self._render_shell)
        self._build_main_window()

        self._root.after(DISPATCH_POLL_MS, self._pump)
        self.shell.start()
        svc.sync.start()

        log.info("v%s started for %s", DESK_VERSION, svc.session.teacher_name)
        safe_print("Desk running.\n")

        try:
            self._root.mainloop()
        finally:
            self._shutdown()

    def stop(self):
        self.state.closing = True
        try:
            self._root.quit()
        except tk.TclError:
            pass

    def _shutdown(self):
        self.state.closing = True
        for controller in self._controllers:
            controller.close()
        self._controllers.clear()
        self._runner.shutdown()
        self._svc.sync.shutdown()
        try:
            self._root.destroy()
        except tk.TclError:
            pass
        log.info("DeskApp shut down.")

    # ─── Dispatcher pump (every 100ms) ───────────────────────

    def _pump(self):
        try:
            self._dispatcher.drain()
            self._show_next_alert()
        except Exception as e:
            log.error("_pump error: %s", e, exc_info=True)
        if not self.state.closing:
            self._root.after(DISPATCH_POLL_MS, self._pump)

    # ─── Alerts (one modal at a time) ────────────────────────

    def _watch(self, controller, render):
        """Redraw on every change and route the controller's alerts to the modal queue."""
        def on_change(c):
            if c.last_alert is not None:
                self.state.queue_alert(c.last_alert)
                c.last_alert = None
            render(c)
        controller.subscribe(on_change)
        self._controllers.append(controller)
        return controller

    def _show_next_alert(self):
        alert = self.state.next_alert()
        if alert is None:
            return
        try:
            if alert.kind == "error":
                messagebox.showerror(alert.title, alert.message, parent=self._root)
            else:
                messagebox.showinfo(alert.title, alert.message, parent=self._root)
        finally:
            self.state.on_alert_closed()

    # ─── Main window ─────────────────────────────────────────

    def _build_main_window(self):
        root = self._root
        w = self._widgets

        header = tk.Frame(root, bg=THEME["header_bg"], padx=16, pady=10)
        header.pack(fill="x")
        w["teacher"] = _label(header, self.shell.teacher_label, 13, "white", bold=True)
        w["teacher"].pack(side="left")
        w["session"] = _label(header, "", 9, THEME["warning"])
        w["session"].pack(side="right")

        status = tk.Frame(root, bg=THEME["bg_card"], padx=16, pady=8)
        status.pack(fill="x", pady=(8, 0), padx=12)
        for key, text in (("network", "Network"), ("sis", "SIS"), ("edgames", "Ed-Games"), ("talk", "Talk")):
            w[key] = _label(status, f"● {text}", 10, THEME["text_muted"])
            w[key].pack(side="left", padx=(0, 14))

        card = tk.Frame(root, bg=THEME["bg_card"], padx=16, pady=10)
        card.pack(fill="x", pady=8, padx=12)
        w["pending"] = _label(card, self.shell.pending_label)
        w["pending"].pack(side="left")
        w["last_sync"] = _label(card, self.shell.last_sync_label, 10, THEME["text_secondary"])
        w["last_sync"].pack(side="left", padx=14)
        w["sync_btn"] = _button(card, "Sync Now", self.shell.sync_now)
        w["sync_btn"].pack(side="right")

        nav = tk.Frame(root, bg=THEME["bg_dark"], padx=12, pady=6)
        nav.pack(fill="x")
        for text, opener in (
            ("Polls", self._open_polls),
            ("Devices", self._open_devices),
            ("Dismissal", self._open_dismissal),
            ("Discipline", self._open_discipline),
            ("Grading", self._open_grading),
        ):
            _button(nav, text, opener).pack(side="left", padx=(0, 8))

        w["status"] = _label(root, "", 9, THEME["text_muted"])
        w["status"].pack(fill="x", padx=14, pady=(6, 0))

    def _render_shell(self, shell):
        w = self._widgets
        if not w:
            return
        w["teacher"].config(text=shell.teacher_label)
        w["session"].config(text=shell.session_warning)
        w["network"].config(text=f"● {shell.network_label}", fg=_status_color(shell.online))
        w["sis"].config(fg=_status_color(shell.sis_online))
        w["edgames"].config(fg=_status_color(shell.edgames_online))
        w["talk"].config(fg=_status_color(shell.talk_online))
        w["pending"].config(text=shell.pending_label)
        w["last_sync"].config(text=shell.last_sync_label)
        w["sync_btn"].config(state="disabled" if shell.syncing else "normal")
        w["status"].config(text=shell.status_message)

    # ─── Views ───────────────────────────────────────────────

    def _open_view(self, name, controller, build, on_open=None):
        """Open a Toplevel for controller, or raise it if already open."""
        if self.state.is_view_open(name):
            self.state.open_views[name].lift()
            return
        top = tk.Toplevel(self._root)
        top.title(name)
        top.configure(bg=THEME["bg_dark"], padx=12, pady=10)
        render = build(top, controller)
        self._watch(controller, render)
        self.state.view_opened(name, top)

        def on_close():
            controller.close()
            if controller in self._controllers:
                self._controllers.remove(controller)
            self.state.view_closed(name)
            top.destroy()

        top.protocol("WM_DELETE_WINDOW", on_close)
        render(controller)
        if on_open is not None:
            on_open()

    def _list_frame(self, top, height=12):
        box = tk.Listbox(top, height=height, width=70, font=("Consolas", 10),
                         bg=THEME["bg_input"], fg=THEME["text_primary"],
                         selectbackground=THEME["primary"], relief="flat")
        box.pack(fill="both", expand=True, pady=6)
        return box

    @staticmethod
    def _fill(box, rows):
        box.delete(0, "end")
        for row in rows:
            box.insert("end", row)

    @staticmethod
    def _selected(box, items):
        sel = box.curselection()
        if not sel or sel[0] >= len(items):
            return None
        return items[sel[0]]

    # ── Polls ────────────────────────────────────────────────

    def _open_polls(self):
        svc = self._svc
        ctl = PollsController(svc.polls, self._runner, svc.session)
        self._open_view("Polls", ctl, self._build_polls, on_open=ctl.refresh)

    def _build_polls(self, top, ctl):
        count = _label(top, "", 10, THEME["text_secondary"])
        count.pack(fill="x")
        box = self._list_frame(top, height=8)
        results = _label(top, "", 9, THEME["text_secondary"])
        results.pack(fill="x")
        active_count = _label(top, "", 10, THEME["text_secondary"])
        active_count.pack(fill="x", pady=(6, 0))
        active_box = self._list_frame(top, height=4)

        def take_poll():
            poll = self._selected(active_box, ctl.active_polls)
            if poll is not None:
                self._open_poll_form(ctl, poll)

        def act(action):
            poll = self._selected(box, ctl.my_polls)
            if poll is None:
                return
            if action == "publish":
                ctl.publish(poll)
            elif action == "close":
                ctl.close_poll(poll)
            elif action == "delete":
                if messagebox.askyesno("Delete poll", f"Delete '{poll.title}'?", parent=top):
                    ctl.delete(poll)
            elif action == "results":
                ctl.load_results(poll.poll_id)

        bar = tk.Frame(top, bg=THEME["bg_dark"])
        bar.pack(fill="x")
        _button(bar, "Refresh", ctl.refresh).pack(side="left", padx=(0, 6))
        _button(bar, "New Poll", lambda: self._open_poll_editor(ctl), THEME["success"]).pack(side="left", padx=(0, 6))
        for action in ("publish", "close", "results", "delete"):
            _button(bar, action.title(), lambda a=action: act(a)).pack(side="left", padx=(0, 6))
        _button(bar, "Take Poll", take_poll).pack(side="right")
        status = _label(top, "", 9, THEME["text_muted"])
        status.pack(fill="x", pady=(6, 0))

        def render(c):
            count.config(text=f"My polls: {c.my_polls_label}")
            self._fill(box, [f"{p.status:<10} {p.title}" for p in c.my_polls])
            active_count.config(text=f"Open to teachers: {c.active_polls_label}")
            self._fill(active_box, [f"{p.title}  ({p.creator_name})" for p in c.active_polls])
            if c.results is not None:
                lines = [f"{c.results.title}: {c.results.total_responses} responses"]
                for q in c.results.questions:
                    tallies = ", ".join(f"{o.option} {o.count} ({o.percentage}%)" for o in q.options)
                    lines.append(f"{q.text}: {tallies or '; '.join(q.text_answers)}")
                results.config(text="\n".join(lines))
            status.config(text=c.status_message)
        return render

    def _open_poll_editor(self, polls_ctl):
        self._open_view("New Poll", polls_ctl.new_editor(), self._build_poll_editor)

    def _build_poll_editor(self, top, ed):
        draft = ed.draft
        title_var = tk.StringVar(value=draft.title)
        desc_var = tk.StringVar(value=draft.description)
        audience_var = tk.StringVar(value=draft.audience)
        visibility_var = tk.StringVar(value=draft.results_visibility)
        anonymous_var = tk.BooleanVar(value=draft.anonymous)
        type_var = tk.StringVar(value=QUESTION_TYPES[0])

        _label(top, "Title").pack(fill="x")
        _entry(top, title_var).pack(fill="x")
        _label(top, "Description").pack(fill="x", pady=(4, 0))
        _entry(top, desc_var).pack(fill="x")
        opts = tk.Frame(top, bg=THEME["bg_dark"])
        opts.pack(fill="x", pady=4)
        tk.OptionMenu(opts, audience_var, *ed.audiences).pack(side="left")
        tk.OptionMenu(opts, visibility_var, *ed.visibility_options).pack(side="left", padx=6)
        tk.Checkbutton(opts, text="Anonymous", variable=anonymous_var,
                       bg=THEME["bg_dark"], fg=THEME["text_primary"],
                       selectcolor=THEME["bg_card"]).pack(side="left")
        box = self._list_frame(top, height=6)

        def add_question():
            qtype = type_var.get()
            text = simpledialog.askstring("Add question", "Question text:", parent=top)
            if text is None:
                return
            options = ""
            if qtype in OPTION_QUESTION_TYPES:
                raw = simpledialog.askstring("Options", "Options, separated by commas:", parent=top) or ""
                options = "\n".join(o.strip() for o in raw.split(","))
            ed.add_question(qtype, text, options)

        def remove_question():
            sel = box.curselection()
            if sel and sel[0] < len(draft.questions):
                ed.remove_question(sel[0])

        def save():
            draft.title = title_var.get()
            draft.description = desc_var.get()
            draft.audience = audience_var.get()
            draft.results_visibility = visibility_var.get()
            draft.anonymous = anonymous_var.get()
            ed.save()

        bar = tk.Frame(top, bg=THEME["bg_dark"])
        bar.pack(fill="x")
        tk.OptionMenu(bar, type_var, *QUESTION_TYPES).pack(side="left")
        _button(bar, "Add Question", add_question).pack(side="left", padx=6)
        _button(bar, "Remove", remove_question, THEME["error"]).pack(side="left")
        save_btn = _button(bar, "Save Draft", save, THEME["success"])
        save_btn.pack(side="right")
        message = _label(top, "", 9)
        message.pack(fill="x", pady=(6, 0))

        def render(c):
            rows = []
            for i, q in enumerate(c.draft.questions):
                extra = f"  [{', '.join(q.options)}]" if q.options else ""
                rows.append(f"{i + 1}. {q.question_type:<16} {q.text}{extra}")
            self._fill(box, rows)
            if c.error_message:
                message.config(text=c.error_message, fg=THEME["error"])
            elif c.saved_poll is not None:
                message.config(text=f"Saved '{c.draft.title.strip()}' as a draft", fg=THEME["success"])
            else:
                message.config(text="Saving..." if c.saving else "", fg=THEME["text_muted"])
            done = c.saving or c.saved_poll is not None
            save_btn.config(state="disabled" if done else "normal")
        return render

    def _open_poll_form(self, polls_ctl, poll):
        form = polls_ctl.new_response_form()
        self._open_view(f"Poll: {poll.title}", form, self._build_poll_form,
                        on_open=lambda: form.load(poll.poll_id))

    def _build_poll_form(self, top, form):
        heading = _label(top, "", 12, bold=True)
        heading.pack(fill="x")
        body = tk.Frame(top, bg=THEME["bg_dark"])
        body.pack(fill="both", expand=True)
        built = []
        variables = []

        def build_questions(c):
            for child in body.winfo_children():
                child.destroy()
            variables.clear()
            for i, entry in enumerate(c.entries):
                _label(body, f"{i + 1}. {entry.text}", bold=True).pack(fill="x", pady=(6, 0))
                if entry.question_type == QUESTION_SHORT_TEXT:
                    var = tk.StringVar(value=entry.text_answer)
                    var.trace_add("write", lambda *_a, i=i, v=var: c.set_text(i, v.get()))
                    _entry(body, var).pack(fill="x")
                    variables.append(var)
                elif entry.multi:
                    for option in entry.options:
                        var = tk.BooleanVar(value=option in entry.selected)
                        tk.Checkbutton(body, text=option, variable=var,
                                       command=lambda i=i, o=option: c.choose(i, o),
                                       bg=THEME["bg_dark"], fg=THEME["text_primary"],
                                       selectcolor=THEME["bg_card"]).pack(anchor="w")
                        variables.append(var)
                else:
                    var = tk.StringVar(value=entry.selected[0] if entry.selected else "")
                    for option in entry.options:
                        tk.Radiobutton(body, text=option, value=option, variable=var,
                                       command=lambda i=i, o=option: c.choose(i, o),
                                       bg=THEME["bg_dark"], fg=THEME["text_primary"],
                                       selectcolor=THEME["bg_card"]).pack(anchor="w")
                    variables.append(var)

        submit_btn = _button(top, "Submit Response", form.submit, THEME["success"])
        submit_btn.pack(anchor="e", pady=6)
        message = _label(top, "", 9)
        message.pack(fill="x")

        def render(c):
            if c.poll is not None and (not built or built[0] is not c.poll):
                heading.config(text=c.poll.title)
                build_questions(c)
                built[:] = [c.poll]
            if c.submitted:
                message.config(text="Thank you! Your response was recorded.", fg=THEME["success"])
            else:
                message.config(text=c.error_message, fg=THEME["error"])
            closed = c.poll is None or c.submitting or c.submitted or c.already_responded
            submit_btn.config(state="disabled" if closed else "normal")
        return render

    # ── Devices ──────────────────────────────────────────────

    def _open_devices(self):
        ctl = DeviceManagementController(self._svc.edgames, self._runner)

        def on_open():
            ctl.check_server_status()
            ctl.refresh_devices()
        self._open_view("Devices", ctl, self._build_devices, on_open=on_open)

    def _build_devices(self, top, ctl):
        header = _label(top, "", 10, THEME["text_secondary"])
        header.pack(fill="x")
        search_var = tk.StringVar()
        search_var.trace_add("write", lambda *_: ctl.set_search(search_var.get()))
        _entry(top, search_var).pack(fill="x", pady=(6, 0))
        box = self._list_frame(top)
        shown = []

        def approve():
            device = self._selected(box, shown)
            if device is not None:
                student_id = simpledialog.askstring(
                    "Approve device", f"Student ID for {device.device_name or device.device_id}:",
                    initialvalue=device.student_id, parent=top,
                )
                ctl.approve(device, student_id or "")

        def reject():
            device = self._selected(box, shown)
            if device is not None:
                ctl.reject(device)

        def revoke():
            device = self._selected(box, shown)
            if device is not None:
                ctl.revoke(device)

        bar = tk.Frame(top, bg=THEME["bg_dark"])
        bar.pack(fill="x")
        _button(bar, "Refresh", ctl.refresh_devices).pack(side="left", padx=(0, 6))
        _button(bar, "Approve", approve, THEME["success"]).pack(side="left", padx=(0, 6))
        _button(bar, "Reject", reject, THEME["error"]).pack(side="left", padx=(0, 6))
        _button(bar, "Revoke", revoke, THEME["error"]).pack(side="left")
        status = _label(top, "", 9, THEME["text_muted"])
        status.pack(fill="x", pady=(6, 0))

        def render(c):
            s = c.stats
            header.config(text=f"{c.server_status_label}   Total {s.total}  Pending {s.pending}  Approved {s.approved}")
            shown[:] = c.visible_all()
            self._fill(box, [f"{d.status:<9} {d.device_name or d.device_id:<28} {d.student_id}" for d in shown])
            status.config(text=c.status_message)
        return render

    # ── Dismissal board ──────────────────────────────────────

    def _open_dismissal(self):
        ctl = DismissalBoardController(self._svc.dismissal, self._runner, self._root)
        self._open_view("Dismissal", ctl, self._build_dismissal, on_open=ctl.start)

    def _build_dismissal(self, top, ctl):
        date = _label(top, ctl.date_label, 12, bold=True)
        date.pack(fill="x")
        banner = tk.Label(top, text="", font=("Segoe UI", 10, "bold"),
                          bg=THEME["warning"], fg="black", cursor="hand2")
        banner.bind("<Button-1>", lambda _e: ctl.dismiss_banner())
        stats = _label(top, "", 10, THEME["text_secondary"])
        stats.pack(fill="x")
        box = self._list_frame(top)

        auto_var = tk.BooleanVar(value=True)
        bar = tk.Frame(top, bg=THEME["bg_dark"])
        bar.pack(fill="x")
        _button(bar, "Refresh", ctl.refresh).pack(side="left", padx=(0, 6))
        tk.Checkbutton(bar, text="Auto refresh", variable=auto_var,
                       command=lambda: ctl.set_auto_refresh(auto_var.get()),
                       bg=THEME["bg_dark"], fg=THEME["text_primary"],
                       selectcolor=THEME["bg_card"]).pack(side="left")
        type_var = tk.StringVar(value=ctl.type_filter)
        tk.OptionMenu(bar, type_var, *ctl.type_filters,
                      command=ctl.set_type_filter).pack(side="right")
        count = _label(top, "", 9, THEME["text_muted"])
        count.pack(fill="x", pady=(6, 0))

        def render(c):
            if c.banner is not None:
                banner.config(text=f"{c.banner.title}: {c.banner.message}   (click to dismiss)")
                banner.pack(fill="x", pady=4, before=stats)
            else:
                banner.pack_forget()
            s = c.stats
            stats.config(text=f"Buses {s.bus_arrivals}  Cars {s.car_pickups}  "
                              f"Pending {s.pending}  Departed {s.departed}")
            self._fill(box, [
                f"{e.type_label:<14} {e.student_name or e.bus_number:<24} {e.status}"
                for e in c.visible_events()
            ])
            text = c.record_count_label
            if c.last_error:
                text += f"   Last refresh failed: {c.last_error}"
            count.config(text=text)
            auto_var.set(c.auto_refresh)
        return render

    # ── Discipline ticket ────────────────────────────────────

    def _open_discipline(self):
        svc = self._svc
        ctl = DisciplineTicketController(svc.admin, svc.roster_cache, svc.session, self._runner)
        self._open_view("Discipline", ctl, self._build_discipline, on_open=ctl.start)

    def _build_discipline(self, top, ctl):
        period_var = tk.StringVar(value=ctl.period_filter)
        period_menu = tk.OptionMenu(top, period_var, ctl.period_filter, command=ctl.set_period_filter)
        period_menu.pack(fill="x")
        box = self._list_frame(top, height=8)
        shown = []
        box.bind("<<ListboxSelect>>", lambda _e: (
            self._selected(box, shown) and ctl.select_student(self._selected(box, shown))
        ))

        names = [t.display_name for t in ctl.templates]
        template_var = tk.StringVar(value="Choose a template")
        tk.OptionMenu(top, template_var, *names,
                      command=lambda n: ctl.apply_template(ctl.templates[names.index(n)])).pack(fill="x", pady=4)
        text = tk.Text(top, height=5, width=70, bg=THEME["bg_input"], fg=THEME["text_primary"],
                       insertbackground=THEME["text_primary"], relief="flat", wrap="word")
        text.pack(fill="x")

        def submit():
            ctl.set_description(text.get("1.0", "end").strip())
            ctl.submit()

        bar = tk.Frame(top, bg=THEME["bg_dark"])
        bar.pack(fill="x", pady=6)
        _button(bar, "Submit", submit, THEME["success"]).pack(side="left", padx=(0, 6))
        _button(bar, "Clear", ctl.handle_clear).pack(side="left")
        feedback = _label(top, "", 9)
        feedback.pack(fill="x")
        recent = _label(top, "", 9, THEME["text_secondary"])
        recent.pack(fill="x")

        def render(c):
            menu = period_menu["menu"]
            menu.delete(0, "end")
            for option in c.period_options:
                menu.add_command(label=option, command=lambda o=option: (period_var.set(o), c.set_period_filter(o)))
            period_var.set(c.period_filter)
            shown[:] = c.visible_students()
            self._fill(box, [
                ("▶ " if s == c.selected_student else "  ") + s.display for s in shown
            ])
            if text.get("1.0", "end").strip() != c.description.strip():
                text.delete("1.0", "end")
                text.insert("1.0", c.description)
            hint = f"   {c.placeholder_hint}" if c.placeholder_hint else ""
            feedback.config(text=c.status_message + hint,
                            fg=THEME["error"] if c.feedback_error else THEME["success"])
            recent.config(text="\n".join(
                f"{r.time}  {r.student_name}  {r.category}  {r.severity}  {r.status}"
                for r in c.recent_submissions
            ))
        return render

    # ── Grading categories ───────────────────────────────────

    def _open_grading(self):
        ctl = GradingCategoriesController(
            self._svc.categories, self._svc.sync, self._runner, on_queued=self.shell.refresh_pending,
        )
        self._open_view("Grading Categories", ctl, self._build_grading, on_open=ctl.start)

    def _build_grading(self, top, ctl):
        box = self._list_frame(top, height=8)
        shown = []
        name_var = tk.StringVar()
        desc_var = tk.StringVar()
        weight_var = tk.StringVar()
        low_var = tk.StringVar(value="0")
        high_var = tk.StringVar(value="0")
        extra_var = tk.BooleanVar()
        active_var = tk.BooleanVar(value=True)

        def load_form():
            name_var.set(ctl.name)
            desc_var.set(ctl.description)
            weight_var.set(ctl.weight_text)
            low_var.set(str(ctl.drop_lowest))
            high_var.set(str(ctl.drop_highest))
            extra_var.set(ctl.extra_credit)
            active_var.set(ctl.active)

        def on_select(_e):
            category = self._selected(box, shown)
            if category is not None:
                ctl.select(category)
                load_form()

        box.bind("<<ListboxSelect>>", on_select)

        form = tk.Frame(top, bg=THEME["bg_dark"])
        form.pack(fill="x")
        for row, (text, var) in enumerate((("Name", name_var), ("Description", desc_var), ("Weight %", weight_var))):
            _label(form, text).grid(row=row, column=0, sticky="w")
            _entry(form, var, width=40).grid(row=row, column=1, columnspan=3, sticky="we", pady=1)
        weight_var.trace_add("write", lambda *_: ctl.set_weight_text(weight_var.get()))
        _label(form, "Drop lowest").grid(row=3, column=0, sticky="w")
        tk.Spinbox(form, from_=0, to=ctl.max_drop, textvariable=low_var, width=4).grid(row=3, column=1, sticky="w")
        _label(form, "Drop highest").grid(row=3, column=2, sticky="w")
        tk.Spinbox(form, from_=0, to=ctl.max_drop, textvariable=high_var, width=4).grid(row=3, column=3, sticky="w")
        for col, (text, var, setter) in enumerate((
            ("Extra credit", extra_var, ctl.set_extra_credit),
            ("Active", active_var, ctl.set_active),
        )):
            tk.Checkbutton(form, text=text, variable=var, command=lambda v=var, s=setter: s(v.get()),
                           bg=THEME["bg_dark"], fg=THEME["text_primary"],
                           selectcolor=THEME["bg_card"]).grid(row=4, column=col, sticky="w")

        indicator = _label(top, "", 11, bold=True)
        indicator.pack(fill="x", pady=(6, 0))

        def save():
            ctl.set_name(name_var.get())
            ctl.set_description(desc_var.get())
            ctl.set_drop_lowest(low_var.get())
            ctl.set_drop_highest(high_var.get())
            if ctl.save():
                load_form()

        def delete():
            category = self._selected(box, shown)
            if category is None:
                return
            if messagebox.askyesno(
                "Delete category",
                f"Delete '{category.name}'?\n\nAssignments in this category are kept "
                "but will no longer belong to a category.",
                parent=top,
            ):
                ctl.delete(category)
                load_form()

        def clear():
            ctl.clear_form()
            load_form()

        bar = tk.Frame(top, bg=THEME["bg_dark"])
        bar.pack(fill="x", pady=6)
        save_btn = _button(bar, ctl.save_label, save, THEME["success"])
        save_btn.pack(side="left", padx=(0, 6))
        _button(bar, "New", clear).pack(side="left", padx=(0, 6))
        _button(bar, "Delete", delete, THEME["error"]).pack(side="left")
        message = _label(top, "", 9)
        message.pack(fill="x")

        colors = {
            WEIGHT_PERFECT: THEME["success"],
            WEIGHT_OVER: THEME["error"],
            WEIGHT_UNDER: THEME["warning"],
        }

        def render(c):
            shown[:] = c.categories
            self._fill(box, [
                f"{cat.name:<24} {cat.weight_label:>5}  {cat.drop_label:<8}"
                + ("  extra credit" if cat.extra_credit else "")
                + ("" if cat.active else "  (inactive)")
                for cat in shown
            ])
            summary = c.weight_summary
            indicator.config(text=f"Total weight: {summary.label}",
                             fg=colors.get(summary.state, THEME["text_muted"]))
            save_btn.config(text=c.save_label)
            if c.error_message:
                message.config(text=c.error_message, fg=THEME["error"])
            else:
                message.config(text=c.status_message, fg=THEME["text_muted"])
        return render
