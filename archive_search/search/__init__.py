"""Search orchestration: candidate window, upstream fetch, re-ranking."""
