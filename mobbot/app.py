"""Control API — forwards UI intent (toggles, parameters) into a ScannerAgent."""

from typing import Dict, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from mobbot.agent import ScannerAgent
from mobbot.config import STATS

LOOP_NAMES = ("bust", "trainer", "crimes")
CRIME_KINDS = ("crime", "gta", "heist")


class SettingsUpdate(BaseModel):
    scan_interval_ms: Optional[int] = Field(default=None, ge=50, le=1000)
    train_interval_minutes: Optional[int] = Field(default=None, ge=1, le=60)
    min_energy: Optional[int] = Field(default=None, ge=1, le=100)
    train_stat: Optional[str] = None
    action_ids: Optional[Dict[str, Optional[int]]] = None
    resource_costs: Optional[Dict[str, Dict[str, int]]] = None


class TrainRequest(BaseModel):
    stat: Optional[str] = None


class ActionRequest(BaseModel):
    action_id: Optional[int] = Field(default=None, ge=1)


def create_app(agent: ScannerAgent) -> FastAPI:
    app = FastAPI(title="mobbot control")
    app.state.agent = agent

    @app.get("/status")
    async def status():
        return agent.status_dict()

    @app.post("/{loop_name}/start")
    async def start_loop(loop_name: str):
        if loop_name not in LOOP_NAMES:
            raise HTTPException(status_code=404, detail=f"unknown loop {loop_name!r}")
        await agent.loop(loop_name).start()
        return agent.loop(loop_name).snapshot()

    @app.post("/{loop_name}/stop")
    async def stop_loop(loop_name: str):
        if loop_name not in LOOP_NAMES:
            raise HTTPException(status_code=404, detail=f"unknown loop {loop_name!r}")
        await agent.loop(loop_name).stop()
        return agent.loop(loop_name).snapshot()

    @app.put("/settings")
    async def update_settings(update: SettingsUpdate):
        settings = agent.settings
        if update.train_stat is not None and update.train_stat not in STATS:
            raise HTTPException(status_code=422, detail=f"unknown stat {update.train_stat!r}")
        if update.scan_interval_ms is not None:
            settings.set_scan_interval(update.scan_interval_ms)
        if update.train_interval_minutes is not None:
            settings.set_train_interval(update.train_interval_minutes)
        if update.min_energy is not None:
            settings.set_min_energy(update.min_energy)
        if update.train_stat is not None:
            settings.set_train_stat(update.train_stat)
        for kind, action_id in (update.action_ids or {}).items():
            if kind in CRIME_KINDS:
                settings.set_action_id(kind, action_id)
        for kind, costs in (update.resource_costs or {}).items():
            for resource, value in costs.items():
                settings.set_resource_cost(kind, resource, value)
        return settings.to_dict()

    @app.post("/train")
    async def train(req: TrainRequest):
        if req.stat is not None and req.stat not in STATS:
            raise HTTPException(status_code=422, detail=f"unknown stat {req.stat!r}")
        data = await agent.manual_train(req.stat)
        return {"result": data, "board": agent.board.to_dict()["trainer"]}

    @app.post("/crimes/{kind}")
    async def run_action(kind: str, req: ActionRequest):
        if kind not in CRIME_KINDS:
            raise HTTPException(status_code=404, detail=f"unknown action {kind!r}")
        runners = {
            "crime": agent.commit_crime,
            "gta": agent.commit_gta,
            "heist": agent.start_heist,
        }
        data = await runners[kind](req.action_id)
        return {"result": data, "board": agent.board.to_dict()["crimes"]}

    @app.post("/character/refresh")
    async def refresh_character():
        state = await agent.get_character_updates(force=True)
        return {"available": state is not None, "character": state}

    return app
