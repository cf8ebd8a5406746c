"""
Non-deterministic Minesweeper - Interactive Demo

Run with: streamlit run app/demo.py
"""

import sys
import time
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import streamlit as st
from typing import Optional, Tuple

from nondet_minesweeper import DIFFICULTY_LEVELS, Minesweeper, make_rng, parse_seed
from nondet_minesweeper.config import clamp_settings, format_seed, random_seed

COLORS = {
    "0": "#cccccc",
    "1": "#0000ff",
    "2": "#008000",
    "3": "#ff0000",
    "4": "#000080",
    "5": "#800000",
    "6": "#008080",
    "7": "#000000",
    "8": "#808080",
}


def render_board_html(
    game: Minesweeper,
    highlight_cell: Optional[Tuple[int, int]] = None,
    reveal_all: bool = False,
) -> str:
    """Render the board as HTML with styling."""
    # Scale cell size based on board width
    if game.width >= 30:
        cell_size = 14
        font_size = "10px"
    elif game.width >= 25:
        cell_size = 16
        font_size = "11px"
    elif game.width >= 16:
        cell_size = 20
        font_size = "13px"
    else:
        cell_size = 26
        font_size = "15px"

    html = '<div style="font-family: monospace; line-height: 1.2;">'
    html += '<table style="border-collapse: collapse; margin: auto;">'

    for row in range(game.height):
        html += "<tr>"
        for col in range(game.width):
            cell = game.tile_display(row, col, reveal_all=reveal_all)

            if cell == "F":
                bg = "#ffa500"
                text_color = "#ffffff"
            elif cell == "M":
                bg = "#ff0000" if (row, col) == highlight_cell else "#ffcccc"
                text_color = "#ffffff" if (row, col) == highlight_cell else "#ff0000"
            elif cell == "X":
                bg = "#ffcccc"
                text_color = "#000000"
            elif cell in (".", "?"):
                bg = "#c0c0c0"
                text_color = "#666666"
            else:
                bg = "#f0f0f0" if cell == "0" else "#ffffff"
                text_color = COLORS.get(cell, "#000000")

            border = "2px solid #ff0000" if (row, col) == highlight_cell else "1px solid #999"
            display = cell if cell not in ("0", ".") else " "

            html += f'''<td style="
                width: {cell_size}px; height: {cell_size}px;
                text-align: center;
                background: {bg};
                border: {border};
                color: {text_color};
                font-weight: bold;
                font-size: {font_size};
            ">{display}</td>'''
        html += "</tr>"

    html += "</table></div>"
    return html


def format_elapsed(started_at: float, finished_at: Optional[float], now: float) -> str:
    """Play time as m:ss, frozen once the game has finished."""
    seconds = int((finished_at if finished_at is not None else now) - started_at)
    return f"{seconds // 60}:{seconds % 60:02d}"


def new_game(width: int, height: int, mines: int, seed_text: str) -> None:
    """Start a game in session state, with the given seed or a fresh one."""
    seed = parse_seed(seed_text) if seed_text.strip() else random_seed()
    st.session_state.seed = format_seed(seed)
    st.session_state.game = Minesweeper(width, height, mines, rng=make_rng(seed))
    st.session_state.last_cell = None
    st.session_state.survived = True
    st.session_state.started_at = time.monotonic()
    st.session_state.finished_at = None


def main():
    st.set_page_config(
        page_title="Non-deterministic Minesweeper",
        page_icon="💣",
        layout="wide",
    )

    st.title("Non-deterministic Minesweeper")
    st.markdown("""
    Mines are only where the revealed clues force them to be.
    """)

    # Sidebar configuration
    st.sidebar.header("Game Configuration")

    presets = [f"{name.capitalize()} ({w}x{h}, {m})" for name, (w, h, m) in DIFFICULTY_LEVELS.items()]
    preset = st.sidebar.selectbox("Difficulty Preset", presets + ["Custom"])

    if preset == "Custom":
        width = st.sidebar.slider("Width", 2, 40, 16)
        height = st.sidebar.slider("Height", 2, 30, 16)
        mines = st.sidebar.slider("Mines", 1, width * height - 1, min(40, width * height - 1))
    else:
        width, height, mines = list(DIFFICULTY_LEVELS.values())[presets.index(preset)]
    width, height, mines = clamp_settings(width, height, mines)

    seed_text = st.sidebar.text_input(
        "Seed (64 hex digits, optional)",
        help="Replay a game: the same seed and the same moves give the same board.",
    )

    current_settings = (width, height, mines, seed_text)
    if st.session_state.get("prev_settings") != current_settings:
        try:
            new_game(width, height, mines, seed_text)
        except ValueError as exc:
            st.sidebar.error(str(exc))
            new_game(width, height, mines, "")
        st.session_state.prev_settings = current_settings

    game: Minesweeper = st.session_state.game

    col1, col2 = st.columns([3, 1])

    with col1:
        st.subheader("Game Board")

        in_col1, in_col2, in_col3, in_col4 = st.columns(4)
        with in_col1:
            row = st.number_input("Row", 0, game.height - 1, 0)
        with in_col2:
            col = st.number_input("Column", 0, game.width - 1, 0)
        with in_col3:
            if st.button("Reveal", type="primary", disabled=game.game_over):
                st.session_state.survived = game.reveal(int(row), int(col))
                st.session_state.last_cell = (int(row), int(col))
                if game.game_over:
                    st.session_state.finished_at = time.monotonic()
                st.rerun()
        with in_col4:
            if st.button("Mark", disabled=game.game_over):
                game.mark(int(row), int(col))
                st.rerun()

        html = render_board_html(
            game,
            highlight_cell=st.session_state.last_cell,
            reveal_all=game.game_over,
        )
        st.markdown(html, unsafe_allow_html=True)

        if game.game_over and st.session_state.survived:
            st.success("You won! Congratulations!")
        elif game.game_over:
            st.error("You lost! Try again...")

        if st.button("Restart"):
            new_game(width, height, mines, "")
            st.rerun()

    with col2:
        st.subheader("Status")
        st.metric("Flags", f"{game.flag_count}/{game.mines_count}")
        st.metric("Cells Revealed", game.revealed_count)
        st.metric("Reveal Moves", game.reveal_moves_count)
        st.metric("Mines Moved Away", game.reaccommodation_count)
        st.metric(
            "Elapsed Time",
            format_elapsed(
                st.session_state.started_at,
                st.session_state.finished_at,
                time.monotonic(),
            ),
        )
        st.text(f"Seed: {st.session_state.seed}")


if __name__ == "__main__":
    main()
