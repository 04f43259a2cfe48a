"""Core functionality for critical CSS inlining."""

from .inliner import Inliner, InlineResult, inline_critical_css
from .loader import StylesheetLoader, StylesheetReference
from .partition import MirrorTable, partition, partition_mirrored
from .preload import PreloadTransformer
from .selector import SelectorEvaluator
from .serializer import serialize_stylesheet
from .stylesheet import Declaration, RuleNode, parse_stylesheet
from .validator import check_media_query, is_safe_media_query

__all__ = [
    'Inliner',
    'InlineResult',
    'inline_critical_css',
    'StylesheetLoader',
    'StylesheetReference',
    'MirrorTable',
    'partition',
    'partition_mirrored',
    'PreloadTransformer',
    'SelectorEvaluator',
    'serialize_stylesheet',
    'Declaration',
    'RuleNode',
    'parse_stylesheet',
    'check_media_query',
    'is_safe_media_query'
]
