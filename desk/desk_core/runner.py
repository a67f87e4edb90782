"""
Entry point and auto-restart wrapper.
"""

import sys
import time

from .constants import DESK_VERSION, CRASH_WINDOW_SEC, MAX_RAPID_CRASHES, RAPID_CRASH_WAIT_SEC
from .config import log, safe_print, load_config
from . import http_client
from .network import PendingStore
from .login import gui_login
from .app import DeskApp, build_services


def main(restarts=0):
    """Sign in, flush leftovers, run the desk until it closes."""
    safe_print("Heronix Teacher Desk v" + DESK_VERSION)
    safe_print()

    config = load_config()
    log.info(
        "Servers: SIS=%s Ed-Games=%s Talk=%s",
        config["adminServerUrl"], config["edGamesServerUrl"], config["talkServerUrl"],
    )
    services = build_services(config)

    # ── Sign in (closing the dialog exits cleanly) ──
    login = gui_login(services.auth, config)
    if login is None:
        safe_print("Sign-in cancelled.")
        sys.exit(0)
    log.info(
        "Signed in as %s (edgames=%s, talk=%s, cached students=%d)",
        login.teacher.employee_id, login.edgames_connected,
        login.talk_connected, login.students_cached,
    )

    # ── Push anything left over from a previous session ──
    if services.sync.pending_items_count():
        log.info("Flushing %d pending changes from previous session...",
                 services.sync.pending_items_count())
        try:
            services.sync.sync_now()
        except Exception as e:
            log.warning("Pending flush failed: %s", e)

    # ── Start the desk ──
    if restarts:
        log.info("Desk restart %d for %s", restarts, login.teacher.employee_id)
    app = DeskApp(services)
    try:
        app.run()
    except Exception:
        log.error("Desk failed with views open: %s", ", ".join(app.state.open_views) or "none")
        raise
    finally:
        services.auth.logout()


def _restart_delay(crash_count):
    """Seconds to wait before restart number crash_count."""
    if crash_count >= MAX_RAPID_CRASHES:
        return RAPID_CRASH_WAIT_SEC
    return min(10 * crash_count, 60)


def run_with_auto_restart(sleep=time.sleep, clock=time.monotonic):
    """
    Run the desk, signing in again after a crash.

    Unsynced changes stay in the pending store across restarts. The crash
    count resets after a run that lasted longer than CRASH_WINDOW_SEC.
    """
    crash_count = 0
    restarts = 0
    while True:
        started = clock()
        try:
            main(restarts=restarts)
            return
        except KeyboardInterrupt:
            safe_print("\nDesk stopped by user.")
            return
        except SystemExit as e:
            if e.code in (0, None):
                return
            log.error("Desk exited with status %s", e.code)
        except Exception as e:
            log.error("Desk crashed after %.0fs: %s", clock() - started, e, exc_info=True)

        if clock() - started > CRASH_WINDOW_SEC:
            crash_count = 0
        crash_count += 1
        restarts += 1
        wait = _restart_delay(crash_count)
        if crash_count >= MAX_RAPID_CRASHES:
            log.warning("%d rapid crashes in a row", crash_count)
        log.info("Restarting in %ds (crash %d, %d unsynced changes kept)",
                 wait, crash_count, PendingStore().count())
        sleep(wait)
        http_client.http = http_client.reset_session(http_client.http)
