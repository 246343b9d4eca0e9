from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, status

from wordtail.agents.autogen_config import ConfigurationError
from wordtail.api.deps import get_engine
from wordtail.api.models import (
    Difficulty,
    DifficultyListResponse,
    DifficultyOption,
    DifficultyRequest,
    GameCreateRequest,
    GameView,
    SubmitWordRequest,
)
from wordtail.game_store import GameNotFoundError
from wordtail.turn_processing.engine import TurnEngine
from wordtail.websocket_hub import hub

router = APIRouter()


@router.websocket("/ws/game/{game_id}")
async def game_updates_ws(websocket: WebSocket, game_id: UUID) -> None:
    gid = str(game_id)
    await hub.connect(gid, websocket)

    try:
        # Keep the socket open; client can optionally send pings.
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        await hub.disconnect(gid, websocket)
    except Exception:
        await hub.disconnect(gid, websocket)
        raise


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/difficulties", response_model=DifficultyListResponse)
async def list_difficulties_route() -> DifficultyListResponse:
    return DifficultyListResponse(
        difficulties=[DifficultyOption(value=level, label=level.label) for level in Difficulty]
    )


@router.post("/game", response_model=GameView, status_code=status.HTTP_201_CREATED)
async def create_game_route(payload: GameCreateRequest, engine: TurnEngine = Depends(get_engine)) -> GameView:
    try:
        state = await engine.create_game(difficulty=payload.difficulty)
    except ConfigurationError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)) from e
    return GameView.from_state(state)


@router.get("/game/{game_id}", response_model=GameView)
async def get_game_route(game_id: UUID, engine: TurnEngine = Depends(get_engine)) -> GameView:
    try:
        state = engine.get(game_id=game_id)
    except GameNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return GameView.from_state(state)


@router.post("/game/{game_id}/words", response_model=GameView)
async def submit_word_route(
    game_id: UUID,
    payload: SubmitWordRequest,
    engine: TurnEngine = Depends(get_engine),
) -> GameView:
    try:
        state = await engine.submit(game_id=game_id, word=payload.word)
    except GameNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e
    return GameView.from_state(state)


@router.put("/game/{game_id}/difficulty", response_model=GameView)
async def select_difficulty_route(
    game_id: UUID,
    payload: DifficultyRequest,
    engine: TurnEngine = Depends(get_engine),
) -> GameView:
    try:
        state = await engine.select_difficulty(game_id=game_id, difficulty=payload.difficulty)
    except GameNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e
    return GameView.from_state(state)


@router.post("/game/{game_id}/restart", response_model=GameView)
async def restart_route(game_id: UUID, engine: TurnEngine = Depends(get_engine)) -> GameView:
    try:
        state = await engine.restart(game_id=game_id)
    except GameNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e
    return GameView.from_state(state)
