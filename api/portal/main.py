from fastapi import FastAPI, Depends, Request
from alembic import command as alembic_command
from alembic.config import Config as AlembicConfig
import pathlib
from fastapi.responses import RedirectResponse
from . import config
from .deps import get_current_user
from .errors import SessionRequired
from .logging_config import setup_logging, get_logger
from .models import User
from .routes_auth import router as auth_router
from .routes_dashboard import router as dashboard_router
from .routes_notify import router as notify_router
from .routes_storage import router as storage_router
from .routes_submissions import router as submissions_router
from .version import get_version

setup_logging()
log = get_logger("main")

app = FastAPI(title="Case Competition Portal", version=get_version())

app.include_router(auth_router)
app.include_router(notify_router)
app.include_router(dashboard_router)
app.include_router(submissions_router)
app.include_router(storage_router)


@app.exception_handler(SessionRequired)
def _redirect_to_sign_in(request: Request, exc: SessionRequired):
    return RedirectResponse(exc.redirect_to, status_code=303)

@app.get("/health")
def health():
    return {"status": "ok", "service": "portal", "version": get_version()}

@app.get("/version")
def version():
    return {"version": get_version()}

@app.get("/me")
def me(current: User = Depends(get_current_user)):
    return {"id": current.id, "email": current.email}


@app.on_event("startup")
def _auto_migrate_dev():
    if config.ENV == "dev":
        try:
            here = pathlib.Path(__file__).resolve().parent
            cfg_path = here.parent / "alembic.ini"
            cfg = AlembicConfig(str(cfg_path))
            cfg.set_main_option("script_location", str(here.parent / "alembic"))
            # DATABASE_URL is read by env.py
            alembic_command.upgrade(cfg, "head")
            log.info("alembic upgrade head executed on startup (dev)")
        except Exception as e:
            # don't crash the dev server on a migration error
            log.error("alembic startup migration skipped/failed: %s", e)
