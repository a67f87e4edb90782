"""
GUI login dialog. Collects credentials and runs AuthenticationService.login.
"""

import tkinter as tk

from .constants import DESK_VERSION, THEME
from .config import log, save_config


def _entry(parent, var, show=None):
    e = tk.Entry(parent, textvariable=var, font=("Segoe UI", 12), show=show,
                 bg=THEME["bg_input"], fg=THEME["text_primary"],
                 insertbackground=THEME["text_primary"],
                 relief="solid", borderwidth=1,
                 highlightbackground=THEME["border"],
                 highlightcolor=THEME["primary"])
    e.pack(fill="x", pady=(4, 14))
    return e


def gui_login(auth_service, config):
    """Show the login dialog. Returns a successful LoginResult, or None if closed."""
    result = {"login": None}

    root = tk.Tk()
    root.title(f"Heronix Teacher Desk {DESK_VERSION} — Sign in")
    root.geometry("420x380")
    root.resizable(False, False)
    root.configure(bg=THEME["bg_dark"])

    root.update_idletasks()
    x = (root.winfo_screenwidth() // 2) - 210
    y = (root.winfo_screenheight() // 2) - 190
    root.geometry(f"420x380+{x}+{y}")

    # ─── Header ──────────────────────────────
    header = tk.Frame(root, bg=THEME["header_bg"], height=70)
    header.pack(fill="x")
    header.pack_propagate(False)
    tk.Label(header, text="Heronix Teacher Desk", font=("Segoe UI", 14, "bold"),
             fg="white", bg=THEME["header_bg"]).pack(expand=True)

    # ─── Body ────────────────────────────────
    body = tk.Frame(root, bg=THEME["bg_dark"], padx=35, pady=20)
    body.pack(fill="both", expand=True)

    tk.Label(body, text="Employee ID", font=("Segoe UI", 11, "bold"),
             bg=THEME["bg_dark"], fg=THEME["text_primary"]).pack(anchor="w")
    emp_var = tk.StringVar(value=config.get("employeeId", ""))
    emp_entry = _entry(body, emp_var)

    tk.Label(body, text="Password", font=("Segoe UI", 11, "bold"),
             bg=THEME["bg_dark"], fg=THEME["text_primary"]).pack(anchor="w")
    pw_var = tk.StringVar()
    pw_entry = _entry(body, pw_var, show="•")

    status = tk.Label(body, text="", font=("Segoe UI", 10), bg=THEME["bg_dark"])
    status.pack(pady=(0, 8))

    def on_sign_in(_event=None):
        status.config(text="Signing in...", fg=THEME["primary"])
        root.update()

        login = auth_service.login(emp_var.get(), pw_var.get())
        if not login.success:
            status.config(text=login.message, fg=THEME["error"])
            pw_var.set("")
            return

        result["login"] = login
        if config.get("employeeId") != login.teacher.employee_id:
            config["employeeId"] = login.teacher.employee_id
            try:
                save_config(config)
            except OSError as e:
                log.warning("Could not remember employee ID: %s", e)
        status.config(text=login.message, fg=THEME["success"])
        root.after(600, root.quit)

    btn = tk.Button(body, text="Sign In", font=("Segoe UI", 12, "bold"),
                    bg=THEME["primary"], fg="white",
                    activebackground=THEME["primary_hover"], activeforeground="white",
                    relief="flat", padx=20, pady=8, cursor="hand2",
                    command=on_sign_in)
    btn.pack(fill="x")

    root.bind("<Return>", on_sign_in)
    (pw_entry if emp_var.get() else emp_entry).focus_set()

    root.protocol("WM_DELETE_WINDOW", root.quit)
    root.mainloop()

    try:
        root.destroy()
    except tk.TclError:
        pass

    return result["login"]
