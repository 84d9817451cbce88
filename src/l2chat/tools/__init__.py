"""
Tools the backend agent may call. Registered once at startup.
"""
from l2chat.core.storage import Store

from .analysis import analysis_tools
from .files import file_tools
from .lexicon import lexicon_tools


def build_tools(store: Store) -> list:
    return [*file_tools(store), *analysis_tools(store), *lexicon_tools(store)]


__all__ = ["build_tools"]
