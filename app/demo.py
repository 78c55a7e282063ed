"""
Minesweeper Risk Overlay - Interactive Demo

Run with: streamlit run app/demo.py
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import streamlit as st
from typing import Dict, Optional, Tuple

from minerisk import (
    Cheat,
    Chord,
    GameSession,
    NewGame,
    Outcome,
    Restart,
    Reveal,
    ToggleFlag,
    Visibility,
)
from minerisk.analysis import risk_colors
from minerisk.config import PRESETS, resolve_preset
from minerisk.engine import Board
from minerisk.solver import Cell, CellResult


def render_board_html(
    board: Board,
    overlay: Optional[Dict[Cell, CellResult]] = None,
    highlight_cell: Optional[Tuple[int, int]] = None,
) -> str:
    """Render the board as HTML, tinting covered cells by solver risk when an overlay is given."""
    rows, cols = board.dimensions()
    if cols >= 30:
        cell_size = 14
        font_size = "10px"
    elif cols >= 16:
        cell_size = 20
        font_size = "13px"
    else:
        cell_size = 26
        font_size = "15px"

    colors = {
        "1": "#0000ff",
        "2": "#008000",
        "3": "#ff0000",
        "4": "#000080",
        "5": "#800000",
        "6": "#008080",
        "7": "#000000",
        "8": "#808080",
    }
    tints = risk_colors(board, overlay) if overlay else {}

    html = '<div style="font-family: monospace; line-height: 1.2;">'
    html += '<table style="border-collapse: collapse; margin: auto;">'

    for r, c, view in board.iter_cells():
        if c == 0:
            html += "<tr>"

        if view.is_mine and view.visibility is Visibility.REVEALED:
            cell, bg, text_color = "M", "#ff0000", "#ffffff"
        elif view.is_mine:
            cell, bg, text_color = "M", "#ffcccc", "#ff0000"
        elif view.visibility is Visibility.REVEALED or view.clue is not None:
            cell = str(view.clue) if view.clue else " "
            bg = "#d3d3d3"
            text_color = colors.get(cell, "#000000")
        elif view.visibility is Visibility.FLAGGED:
            cell, bg, text_color = "F", "#ff00ff", "#ffffff"
        else:
            cell, bg, text_color = ".", "#f8f8ff", "#666666"

        if (r, c) in tints:
            red, green, blue = tints[(r, c)]
            bg = f"rgb({red},{green},{blue})"

        border = "2px solid #32cd32" if (r, c) == highlight_cell else "1px solid #999"
        html += f'''<td style="
            width: {cell_size}px; height: {cell_size}px;
            text-align: center;
            background: {bg};
            border: {border};
            color: {text_color};
            font-weight: bold;
            font-size: {font_size};
        ">{cell}</td>'''

        if c == cols - 1:
            html += "</tr>"

    html += "</table></div>"
    return html


def main():
    st.set_page_config(
        page_title="Minesweeper Risk Overlay",
        page_icon="💣",
        layout="wide",
    )

    st.title("Minesweeper Risk Overlay")
    st.markdown("""
    Play Minesweeper with an optional solver overlay: blue cells are certainly safe,
    black cells certainly mined, and the green-to-red tint ranks the remaining risk.
    """)

    st.sidebar.header("Game Configuration")
    preset = st.sidebar.selectbox("Difficulty Preset", list(PRESETS))
    pass_limit = st.sidebar.slider("Solver pass limit", 1, 100, 50)

    if "session" not in st.session_state or st.session_state.preset != preset:
        st.session_state.session = GameSession.from_preset(preset, pass_limit=pass_limit)
        st.session_state.preset = preset
        st.session_state.message = ""
        st.session_state.cursor = None

    session: GameSession = st.session_state.session
    rows, cols = session.board.dimensions()

    st.sidebar.header("Move")
    row = st.sidebar.number_input("Row", 0, rows - 1, 0)
    col = st.sidebar.number_input("Column", 0, cols - 1, 0)
    hints = st.sidebar.checkbox("Show risk overlay", value=session.hints_enabled)
    session.hints_enabled = hints

    actions = {
        "Reveal": lambda: Reveal(int(row), int(col)),
        "Flag": lambda: ToggleFlag(int(row), int(col)),
        "Chord": lambda: Chord(int(row), int(col)),
        f"Cheat ({session.cheats_left} left)": Cheat,
        "Restart": Restart,
        "New Game": lambda: NewGame(*resolve_preset(preset)),
    }
    btn_cols = st.columns(len(actions))
    for btn_col, (label, make_command) in zip(btn_cols, actions.items()):
        with btn_col:
            if st.button(label):
                result = session.apply(make_command())
                st.session_state.message = result.message
                st.session_state.cursor = (int(row), int(col))
                st.rerun()

    overlay = session.risk_overlay() if session.hints_enabled else None
    st.markdown(
        render_board_html(session.board, overlay, st.session_state.cursor),
        unsafe_allow_html=True,
    )

    if session.outcome is Outcome.WON:
        st.success(st.session_state.message or "You won!")
    elif session.outcome is Outcome.LOST:
        st.error(st.session_state.message or "You lost.")
    elif st.session_state.message:
        st.info(st.session_state.message)

    st.sidebar.markdown("---")
    st.sidebar.metric("Flags remaining", session.board.flags_remaining)
    st.sidebar.metric("Cells revealed", session.board.revealed_count)


if __name__ == "__main__":
    main()
