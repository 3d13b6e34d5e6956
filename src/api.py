import logging

from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel, Field
from typing import List, Optional
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

import core
from board import Side
from config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

# Initialize the rate limiter
limiter = Limiter(key_func=get_remote_address)
app = FastAPI(
    title=settings.app_name,
    description="A stateless API for playing the 2048 game. "\
                "Manage your game state (board, score, max_score) on the client side.",
    version=settings.app_version
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

BOARD_DESCRIPTION = ("The N x N board indexed by [row][col], row 0 being the bottom row. "
                     "0 marks an empty cell.")

# --- Pydantic Models for API requests and responses ---

class NewGameSettings(BaseModel):
    """Settings for creating a new game."""
    size: Optional[int] = Field(
        default=None,
        gt=1, # Board size must be at least 2x2
        description="Size of the N x N game board (e.g., 4 for a 4x4 board)."
    )

class GameStateData(BaseModel):
    """Represents the complete state of a game instance."""
    board: List[List[int]] = Field(..., description=BOARD_DESCRIPTION)
    score: int = Field(..., ge=0, description="Current score of the game.")
    max_score: int = Field(..., ge=0, description="Best score, updated when a game ends.")
    game_over: bool = Field(..., description="True if a tile reached 2048 or no move is left.")
    progress: core.GameProgressState = Field(
        ...,
        description="Current progress state of the game (IN_PROGRESS, GAME_WON, GAME_OVER)."
    )
    board_size: int = Field(..., gt=0, description="The dimension N of the N x N board.")
    rendering: str = Field(..., description="Text rendering of the board, top row first.")


class MoveRequestData(BaseModel):
    """Data required to make a move."""
    board: List[List[int]] = Field(..., description=BOARD_DESCRIPTION)
    score: int = Field(..., ge=0, description="Current score before the move.")
    max_score: int = Field(default=0, ge=0, description="Best score before the move.")
    direction: str = Field(
        ...,
        description="Side to tilt toward (north, east, south, west or up, right, down, left)."
    )

class MoveResponseData(GameStateData):
    """Response after a move, including the new game state and move effectiveness."""
    changed: bool = Field(
        ...,
        description="True if the tilt moved or merged any tile, False otherwise."
    )
    message: Optional[str] = Field(
        default=None,
        description="An optional message, e.g., if a move was ineffective or the game ended."
    )


def _state_fields(model: core.Model) -> dict:
    # game_over() first so max_score reflects the over-transition
    game_over = model.game_over()
    return dict(
        board=model.raw_values(),
        score=model.score(),
        max_score=model.max_score(),
        game_over=game_over,
        progress=model.progress(),
        board_size=model.size(),
        rendering=str(model),
    )

# --- API Endpoints ---

@app.post("/game/new", response_model=GameStateData, summary="Start a New 2048 Game")
@limiter.limit(settings.rate_limit)
async def start_new_game(request: Request, game_settings: NewGameSettings):
    """
    Initializes a new 2048 game.

    - **size**: Dimension of the N x N board (e.g., 4 for 4x4). Defaults to the configured size.

    Returns the initial game state, including the board with two random tiles,
    score (0) and progress status (IN_PROGRESS).
    """
    size = game_settings.size if game_settings.size is not None else settings.board_size
    try:
        model = core.new_game(size)
        logger.debug("Started a %dx%d game", size, size)
        return GameStateData(**_state_fields(model))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Unexpected error in /game/new: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred during game creation: {str(e)}")


@app.post("/game/move", response_model=MoveResponseData, summary="Make a Move in the Game")
@limiter.limit(settings.rate_limit)
async def make_move(request: Request, request_data: MoveRequestData):
    """
    Processes a player's move in the game.

    Requires the current `board`, `score`, `max_score` and the `direction` of the tilt.

    The API will:
    1. Tilt the board (slide tiles, merge, slide again).
    2. If the tilt changed the board, add a new random tile (2 or 4).
    3. Determine the new game status.

    Returns the updated game state, whether the move changed the board, and an optional message.
    """
    try:
        side = Side.parse(request_data.direction)
        model = core.Model.from_raw_values(
            request_data.board, request_data.score, request_data.max_score
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid move request: {str(e)}")

    message_for_client: Optional[str] = None
    try:
        changed = model.tilt(side)
        if changed:
            core.add_random_tile(model)
        else:
            message_for_client = "Move was not effective; board state unchanged by tilt."

        fields = _state_fields(model)
        if fields["progress"] == core.GameProgressState.GAME_WON:
            message_for_client = "Congratulations! You won!"
        elif fields["progress"] == core.GameProgressState.GAME_OVER:
            message_for_client = "Game Over. No more valid moves."

        return MoveResponseData(**fields, changed=changed, message=message_for_client)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Error processing move: {str(e)}")
    except Exception as e:
        logger.error(f"Unexpected error in /game/move: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected server error occurred while processing the move: {str(e)}")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": settings.app_version}


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=settings.log_level)
    uvicorn.run("api:app", host=settings.host, port=settings.port)
