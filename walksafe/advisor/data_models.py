# walksafe/advisor/data_models.py
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from walksafe.route_planner.data_models import Coordinate

@dataclass
class ReviewSnippet:
    content: str
    author: str = ''

@dataclass
class GroundingChunk:
    """A citation the model grounded its answer on."""
    source: str  # 'web' or 'maps'
    title: str
    uri: str
    review_snippets: List[ReviewSnippet] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'source': self.source,
            'title': self.title,
            'uri': self.uri,
            'reviewSnippets': [{'content': s.content, 'author': s.author} for s in self.review_snippets],
        }

@dataclass
class SafetyAnalysis:
    """Narrative area report plus its grounding citations."""
    text: str
    grounding_chunks: List[GroundingChunk] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {'text': self.text, 'groundingChunks': [c.to_dict() for c in self.grounding_chunks]}

@dataclass
class PlaceSuggestion:
    name: str
    location: Coordinate
    address: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'location': self.location.to_dict(), 'address': self.address}
