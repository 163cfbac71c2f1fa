# app/main.py
import logging
from fastapi import FastAPI
from sqlalchemy import exc as sa_exc
from app.config import settings
from app.database import engine, Base
from app.models import activity, admin as admin_models, category, goal, task as task_models, user  # noqa: F401 register tables
from app.routers import auth, task, category as category_router, goal as goal_router, dashboard, analytics, admin

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="TAL - To-Achieve List", version="1.0")

# Include Routers
app.include_router(auth.router)
app.include_router(task.router)
app.include_router(category_router.router)
app.include_router(goal_router.router)
app.include_router(dashboard.router)
app.include_router(analytics.router)
app.include_router(admin.router)

# Create DB Tables (use migrations for long-lived databases)
@app.on_event("startup")
async def startup_event():
    # ignore duplicate-object errors from previous partial runs
    async with engine.begin() as conn:
        try:
            await conn.run_sync(Base.metadata.create_all)
        except sa_exc.IntegrityError as e:
            msg = str(getattr(e, "orig", e))
            if "duplicate key value violates unique constraint" in msg or "already exists" in msg:
                logger.warning("Ignored duplicate DDL error during create_all: %s", msg)
            else:
                raise

@app.get("/")
def read_root():
    return {"message": "Welcome to the To-Achieve List backend"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
