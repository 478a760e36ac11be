# walksafe/advisor/prompts.py
"""
Prompt templates and the deterministic fallback texts used when the
generative service cannot be reached or answers with something unusable.
"""
from walksafe.route_planner.data_models import Coordinate

NEUTRAL_NOTE = "Stay aware of your surroundings."
DANGER_NOTE = "Warning: Safe path not possible. This route still passes near reported danger zones."
ANALYSIS_UNAVAILABLE = ("We couldn't reach the AI service right now. "
                        "Please rely on community pins and your own judgment.")
ANALYSIS_EMPTY = "Unable to retrieve safety information at this time."

MAX_PLACE_SUGGESTIONS = 4


def fallback_safety_note(danger_count: int) -> str:
    return DANGER_NOTE if danger_count > 0 else NEUTRAL_NOTE


def build_safety_note_prompt(start: Coordinate, destination_name: str, duration: str,
                             is_detour: bool, danger_count: int) -> str:
    detour = "YES (Avoided danger zone)" if is_detour else "NO (Direct path)"
    return f"""
I am walking from coordinates ({start.lat}, {start.lng}) to "{destination_name}".
The calculated walk time is {duration}.

Context:
- Detour Logic Used: {detour}
- Remaining danger zones on chosen path: {danger_count}

Task:
Provide a concise "Safety Note" (max 1 sentence).
- If a detour was applied successfully, tell the user the route was adjusted for safety.
- If danger zones remain, give a STRICT warning.
- If direct route is clear, be reassuring.

Return JSON: {{ "safetyNote": "..." }}
"""


def build_area_analysis_prompt(location: Coordinate) -> str:
    return f"""You are a safety advisor assistant. The user is currently at coordinates {location.lat}, {location.lng}.

Task:
1. Identify the **nearest** verified "Safe Havens" relative to the user's location. Specifically look for:
   - **Police Stations**
   - **Hospitals or Emergency Care Centers**
   - **Public Transit Stations** (Train, Metro, Bus Terminals)
   - **Major 24-hour Businesses** (e.g., Gas Stations, Pharmacies, large Supermarkets)

2. Provide a concise safety report (max 150 words):
   - **Area Context**: Briefly describe the area (e.g., residential, commercial, isolated).
   - **Nearest Safe Havens**: Explicitly list the identified locations found in step 1.
   - **Safety Tip**: Actionable advice for this specific location.

Use map data to verify these locations. Prioritize proximity."""


def build_place_search_prompt(query: str, center: Coordinate) -> str:
    return f"""Find up to {MAX_PLACE_SUGGESTIONS} places matching the query "{query}" near latitude {center.lat}, longitude {center.lng}.

Return a JSON array of objects. Each object must have:
- "name": The name of the place
- "lat": The latitude (number)
- "lng": The longitude (number)
- "address": Short address string

Ensure strict JSON format. Do not use Markdown code blocks. Only return the JSON array."""
