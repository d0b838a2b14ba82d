import logging

from fastapi import FastAPI

from app.config import settings
from app.engine.router import router as engine_router

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="GoalEngine", version="0.1.0")
app.include_router(engine_router)


@app.get("/")
async def root() -> dict:
    return {
        "status": "ok",
        "docs": "/docs",
        "health": "/health",
        "engine": {
            "evaluations": "/engine/goals/evaluations",
            "evaluate": "/engine/goals/evaluate",
            "indicators": "/engine/goals/indicators",
            "achievement": "/engine/goals/{goal_id}/achievement",
        },
    }


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
