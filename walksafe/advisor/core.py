# walksafe/advisor/core.py
"""
Thin wrapper around the Gemini text service. Every public method degrades
to a fixed, deterministic answer instead of raising, so a route or a map
view is never blocked by the generative layer.
"""
import json
import logging
from typing import Any, List, Optional

import google.generativeai as genai

from walksafe.constants.services import ServiceConstants
from walksafe.route_planner.data_models import Coordinate
from .data_models import GroundingChunk, PlaceSuggestion, ReviewSnippet, SafetyAnalysis
from .exceptions import AdvisorUnavailable, MalformedReply
from . import prompts

class SafetyAdvisor:
    """Route captions, area safety reports and place search."""

    def __init__(self, api_key: Optional[str] = None, model_name: str = ServiceConstants.GEMINI_MODEL,
                 model: Any = None):
        """
        Args:
            api_key: Gemini API key. Without one (and without a model) every
                     call returns its fallback.
            model_name: The Gemini model to use.
            model: A pre-built GenerativeModel, mainly for tests.
        """
        self.model = model
        if self.model is None and api_key:
            genai.configure(api_key=api_key)
            self.model = genai.GenerativeModel(model_name)
        logging.info(f"SafetyAdvisor initialized. Model available: {self.model is not None}")

    @property
    def enabled(self) -> bool:
        return self.model is not None

    def _generate(self, prompt: str, json_reply: bool = False):
        if self.model is None:
            raise AdvisorUnavailable("No Gemini API key configured.")
        if json_reply:
            return self.model.generate_content(
                prompt,
                generation_config=genai.types.GenerationConfig(response_mime_type="application/json"),
            )
        return self.model.generate_content(prompt)

    # --- Narrative annotation ---

    def generate_safety_note(self, start: Coordinate, destination_name: str, duration: str,
                             is_detour: bool, danger_count: int) -> str:
        """One-sentence caption for the chosen route."""
        prompt = prompts.build_safety_note_prompt(start, destination_name, duration, is_detour, danger_count)
        note = None
        try:
            response = self._generate(prompt, json_reply=True)
            note = parse_safety_note(response.text)
        except AdvisorUnavailable as e:
            logging.info(f"Safety note skipped: {e}")
        except Exception as e:
            logging.warning(f"Gemini safety note failed: {e}")

        if not note or (danger_count > 0 and note == prompts.NEUTRAL_NOTE):
            return prompts.fallback_safety_note(danger_count)
        return note

    # --- Area analysis ---

    def analyze_safety(self, location: Coordinate) -> SafetyAnalysis:
        """Describes the area around a location and lists the nearest safe havens."""
        try:
            response = self._generate(prompts.build_area_analysis_prompt(location))
            text = response.text or prompts.ANALYSIS_EMPTY
            return SafetyAnalysis(text=text, grounding_chunks=extract_grounding_chunks(response))
        except Exception as e:
            logging.error(f"Gemini area analysis failed: {e}")
            return SafetyAnalysis(text=prompts.ANALYSIS_UNAVAILABLE)

    # --- Place search ---

    def search_places(self, query: str, center: Coordinate) -> List[PlaceSuggestion]:
        """Up to four places matching a free-text query near the center."""
        try:
            response = self._generate(prompts.build_place_search_prompt(query, center))
            if not response.text:
                return []
            return parse_place_suggestions(response.text)[:prompts.MAX_PLACE_SUGGESTIONS]
        except Exception as e:
            logging.error(f"Place search failed: {e}")
            return []


def parse_safety_note(text: str) -> Optional[str]:
    """Reads the 'safetyNote' field of a JSON reply."""
    try:
        data = json.loads(_strip_code_fences(text))
    except (TypeError, ValueError) as e:
        raise MalformedReply(f"Safety note reply is not JSON: {e}")
    if not isinstance(data, dict):
        raise MalformedReply("Safety note reply is not a JSON object.")
    note = data.get('safetyNote')
    return note.strip() if isinstance(note, str) and note.strip() else None


def parse_place_suggestions(text: str) -> List[PlaceSuggestion]:
    """Extracts the outermost JSON array from a reply and keeps the well-formed places."""
    json_str = _strip_code_fences(text)
    first_bracket, last_bracket = json_str.find('['), json_str.rfind(']')
    if first_bracket != -1 and last_bracket != -1:
        json_str = json_str[first_bracket:last_bracket + 1]

    try:
        data = json.loads(json_str)
    except ValueError as e:
        raise MalformedReply(f"Place search reply is not JSON: {e}")
    if not isinstance(data, list):
        return []

    places = []
    for item in data:
        if not isinstance(item, dict):
            continue
        try:
            location = Coordinate(lat=float(item['lat']), lng=float(item['lng']))
        except (KeyError, TypeError, ValueError):
            logging.warning(f"Skipping place without usable coordinates: {item!r}")
            continue
        places.append(PlaceSuggestion(name=str(item.get('name', '')), location=location,
                                      address=item.get('address')))
    return places


def extract_grounding_chunks(response) -> List[GroundingChunk]:
    """Collects web and maps citations from the first candidate, if the reply carries any."""
    candidates = getattr(response, 'candidates', None) or []
    if not candidates:
        return []
    metadata = getattr(candidates[0], 'grounding_metadata', None)
    raw_chunks = getattr(metadata, 'grounding_chunks', None) or []

    chunks = []
    for raw in raw_chunks:
        for source in ('maps', 'web'):
            ref = getattr(raw, source, None)
            if ref is None:
                continue
            uri, title = getattr(ref, 'uri', '') or '', getattr(ref, 'title', '') or ''
            if not uri and not title:
                continue
            chunks.append(GroundingChunk(source=source, title=title, uri=uri,
                                         review_snippets=_review_snippets(ref)))
    return chunks


def _review_snippets(ref) -> List[ReviewSnippet]:
    sources = getattr(ref, 'place_answer_sources', None) or []
    if not isinstance(sources, (list, tuple)):
        sources = [sources]
    snippets = []
    for answer_source in sources:
        for snippet in getattr(answer_source, 'review_snippets', None) or []:
            content = getattr(snippet, 'content', None) or getattr(snippet, 'review', None)
            if content:
                snippets.append(ReviewSnippet(content=content, author=getattr(snippet, 'author', '') or ''))
    return snippets


def _strip_code_fences(text: str) -> str:
    return text.replace('```json', '').replace('```', '').strip()
