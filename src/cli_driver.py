# cli_driver.py
# This file is intended to be run to play or test the 2048 game on the CLI

import logging

from board import Side
from config import get_settings
from core import GameProgressState, Model, add_random_tile, new_game

KEY_MAP = {'W': Side.NORTH, 'A': Side.WEST, 'S': Side.SOUTH, 'D': Side.EAST}


def parse_move(move_input: str):
    """Maps W/A/S/D or a side name to a Side; returns None for anything else."""
    key = move_input.strip().upper()
    if key in KEY_MAP:
        return KEY_MAP[key]
    try:
        return Side.parse(key)
    except ValueError:
        return None


def main():
    settings = get_settings()
    logging.basicConfig(level=settings.log_level)

    # 1. Initialize game
    model = new_game(settings.board_size)
    display_board_state(model)

    # 2. Game Loop
    while not model.game_over():
        move_input = input("Enter move (W/A/S/D for Up/Left/Down/Right, Q to quit): ")

        if move_input.strip().upper() == 'Q':
            print("Quitting game.")
            break

        chosen_side = parse_move(move_input)
        if chosen_side is None:
            print("Invalid input. Use W, A, S, D.")
            continue

        # 3. Tilt, then add a new random tile if the board changed
        if model.tilt(chosen_side):
            add_random_tile(model)
        else:
            print("Move did not change the board. Try a different direction.")

        display_board_state(model)

    # 4. Game Ended
    print("\n--- Final Board State ---")
    display_board_state(model)
    progress = model.progress()
    if progress == GameProgressState.GAME_WON:
        print("Congratulations! You reached the 2048 tile!")
    elif progress == GameProgressState.GAME_OVER:
        print("No more moves possible. Better luck next time!")


def display_board_state(model: Model):
    """Prints the board, score, and game status to the console."""
    print(model)


if __name__ == "__main__":
    main()
