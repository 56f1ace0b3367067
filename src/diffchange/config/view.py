"""Display and scheduling defaults for the reconciliation view."""

from __future__ import annotations

from dataclasses import dataclass

from .env import int_env_var

DEFAULT_ITEM_HEIGHT = 150
DEFAULT_LOOKAHEAD = 10
DEFAULT_HYSTERESIS = 3
DEFAULT_RENDER_BUFFER = 5
DEFAULT_INITIAL_WINDOW = 20
DEFAULT_SCROLL_INTERVAL_SECONDS = 0.05
DEFAULT_SEARCH_DEBOUNCE_SECONDS = 0.3
DEFAULT_INGEST_CHUNK_SIZE = 500


@dataclass(frozen=True, slots=True)
class ViewConfig:
    item_height: int = DEFAULT_ITEM_HEIGHT
    lookahead: int = DEFAULT_LOOKAHEAD
    hysteresis: int = DEFAULT_HYSTERESIS
    render_buffer: int = DEFAULT_RENDER_BUFFER
    initial_window: int = DEFAULT_INITIAL_WINDOW
    scroll_interval: float = DEFAULT_SCROLL_INTERVAL_SECONDS
    search_debounce: float = DEFAULT_SEARCH_DEBOUNCE_SECONDS
    ingest_chunk_size: int = DEFAULT_INGEST_CHUNK_SIZE

    def __post_init__(self) -> None:
        if self.item_height <= 0:
            raise ValueError("item_height must be positive")
        if self.ingest_chunk_size <= 0:
            raise ValueError("ingest_chunk_size must be positive")
        if min(self.lookahead, self.hysteresis, self.render_buffer, self.initial_window) < 0:
            raise ValueError("window sizes must be non-negative")


def get_view_config() -> ViewConfig:
    """Defaults, with row height and ingestion chunk size overridable from the env."""

    return ViewConfig(
        item_height=int_env_var("DIFFCHANGE_ITEM_HEIGHT", DEFAULT_ITEM_HEIGHT),
        ingest_chunk_size=int_env_var("DIFFCHANGE_INGEST_CHUNK_SIZE", DEFAULT_INGEST_CHUNK_SIZE),
    )
