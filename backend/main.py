from fastapi import FastAPI

from backend.api.routes import router as api_router
from backend.storage.db import init_db

app = FastAPI(title="Seen API", version="1.0.0")


@app.on_event("startup")
def _startup_init_db() -> None:
    # Best-effort table creation for local/dev runs.
    # If DATABASE_URL points at an unreachable DB, API can still start.
    try:
        init_db()
    except Exception as exc:
        print(f"[API] init_db skipped: {exc}")


app.include_router(api_router)
