"""Main blessed UI application."""

from dataclasses import replace

from blessed import Terminal
from loguru import logger

from shellbeats.context import AppContext
from shellbeats.ui.blessed import navigation
from shellbeats.ui.blessed.keys import handle_key
from shellbeats.ui.blessed.render import compute_list_height, render_frame
from shellbeats.ui.blessed.state import UIState, create_initial_state


def run_interactive_ui(ctx: AppContext) -> AppContext:
    """
    Run the main interactive UI event loop.

    Args:
        ctx: Application context with config, library and player connection

    Returns:
        Updated AppContext after UI session ends
    """
    term = Terminal()

    with term.fullscreen(), term.cbreak(), term.hidden_cursor():
        try:
            ctx = main_loop(term, ctx)
        except KeyboardInterrupt:
            logger.info("Ctrl+C detected - leaving UI")

    return ctx


def _sync_size(term: Terminal, state: UIState) -> UIState:
    list_height = compute_list_height(term.height)
    if list_height != state.list_height:
        state = replace(state, list_height=list_height)
    return state


def main_loop(term: Terminal, ctx: AppContext) -> AppContext:
    """
    Alternate between waiting for a key and polling mpv.

    Each iteration applies at most one auto-advance and finishes all state
    changes before the next frame is drawn.
    """
    state = _sync_size(term, create_initial_state())
    poll_timeout = ctx.config.ui.poll_timeout

    while not state.should_quit:
        state, ctx = navigation.tick(state, ctx)

        state = _sync_size(term, state)
        render_frame(term, state, ctx)

        key = term.inkey(timeout=poll_timeout)
        if not key:
            continue

        state, ctx = handle_key(state, ctx, key)

        if state.pending_query is not None:
            # Show "Searching..." before blocking on yt-dlp
            render_frame(term, state, ctx)
            state, ctx = navigation.run_pending_search(state, ctx)

    return ctx
