# booklend/tasks/scheduler.py
import os

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger


def start_scheduler(app):
    """
    Runs the inventory audit periodically.
    - Skipped unless SCHEDULER_ENABLED is set (off by default, so tests and
      CLI one-shots never start it).
    - Under the debug reloader only the serving process starts it.
    """
    if not app.config.get("SCHEDULER_ENABLED", False):
        app.logger.info("[scheduler] disabled by config.")
        return None

    # Werkzeug reloader runs two processes; WERKZEUG_RUN_MAIN=true marks the real one
    if app.debug and os.environ.get("WERKZEUG_RUN_MAIN") != "true":
        app.logger.info("[scheduler] Debug reloader secondary process: scheduler skipped.")
        return None

    # imported here to keep app import free of task modules
    from booklend.tasks.inventory_audit import run_inventory_audit

    minutes = app.config.get("AUDIT_INTERVAL_MINUTES", 30)
    repair = app.config.get("AUDIT_REPAIR", False)
    scheduler = BackgroundScheduler(timezone="UTC")

    def _job_wrapper():
        try:
            run_inventory_audit(app, repair=repair)
        except Exception as ex:
            app.logger.exception(f"[scheduler] inventory_audit_job error: {ex}")

    scheduler.add_job(
        func=_job_wrapper,
        trigger=IntervalTrigger(minutes=minutes),
        id="inventory_audit_job",
        replace_existing=True,
        max_instances=1,        # never overlap
        coalesce=True,          # missed runs collapse into one
        misfire_grace_time=120,
    )

    scheduler.start()
    app.logger.info(f"[scheduler] Inventory audit job started (every {minutes} minutes).")

    app.extensions["apscheduler"] = scheduler
    return scheduler
