from __future__ import annotations

from fastapi import FastAPI

from api.routes import (
    config,
    health,
    jobs,
    league,
    predictions,
    simulation,
    teams,
)

app = FastAPI(title="Seedline Predictions API", version="0.1.0")
app.include_router(health.router)
app.include_router(config.router)
app.include_router(league.router)
app.include_router(teams.router)
app.include_router(predictions.router)
app.include_router(simulation.router)
app.include_router(jobs.router)


@app.get("/", summary="Root endpoint", tags=["health"])
async def root() -> dict[str, str]:
    return {"message": "Seedline Predictions API"}
