"""
advisor - Generative-AI helpers for WalkSafe

Exposes the SafetyAdvisor (route captions, area reports, place search)
and the data models it returns.
"""

from .core import SafetyAdvisor
from .data_models import GroundingChunk, PlaceSuggestion, SafetyAnalysis
from .exceptions import AdvisorError, AdvisorUnavailable, MalformedReply

__all__ = ['SafetyAdvisor', 'GroundingChunk', 'PlaceSuggestion', 'SafetyAnalysis',
           'AdvisorError', 'AdvisorUnavailable', 'MalformedReply']
