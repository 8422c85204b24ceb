"""
Gemini-backed theme generator.

Maps a gesture summary (hand count, kinetic energy, openness) to a VisualTheme
via the `generateContent` REST endpoint with a JSON response schema. Any failure
(no key, HTTP error, empty/blocked answer, bad JSON, schema mismatch) ends up
as `None` from request_theme(); the caller keeps its current theme.
"""

import os

import requests

from params import _pget
from theme import THEME_SCHEMA, ThemeError, parse_theme

API_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"


def build_prompt(hand_count, intensity, spread):
    return f"""
    Act as a Generative Art Director for a high-end sci-fi installation.
    Input Data:
    - Hands: {int(hand_count)}
    - Kinetic Energy: {float(intensity):.2f} (0=Still, 1=Violent)
    - Structural Openness: {float(spread):.2f} (0=Closed, 1=Open)

    Map this to a visual theme that feels like "Deep Space", "Dark Matter", and "Sacred Geometry".

    Guidelines:
    - Palette: RESTRICTED to Metallic Golds (Tungsten), Deep Blues (Quantum), and Void Blacks. No neon rainbows.
    - Low Energy: 'CRYSTALLIZE' or 'VOID'. Deep, slow, solid structures.
    - High Energy: 'FRAGMENT' or 'RESONANCE'. Breaking geometry, high entropy.
    - Open Hands: 'WEAVE'. Connecting threads.

    Output strictly JSON matching the schema.
    """


def _response_text(body):
    try:
        parts = body["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError):
        raise ThemeError("response has no candidate content") from None
    text = "".join(p.get("text", "") for p in parts if isinstance(p, dict))
    if not text.strip():
        raise ThemeError("response text is empty")
    return text


class GeminiThemeClient:
    def __init__(self, params=None, api_key=None, session=None):
        self.model = _pget(params, "model_id", "gemini-2.5-flash")
        self.timeout = float(_pget(params, "request_timeout", 20.0))
        self.api_key = api_key or os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY")
        self.session = session or requests

    def generate(self, hand_count, intensity, spread):
        """One round trip. Raises ThemeError / requests.RequestException on failure."""
        if not self.api_key:
            raise ThemeError("no API key (set GEMINI_API_KEY)")

        payload = {
            "contents": [{"parts": [{"text": build_prompt(hand_count, intensity, spread)}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": THEME_SCHEMA,
            },
        }
        r = self.session.post(
            API_URL.format(model=self.model),
            params={"key": self.api_key},
            json=payload,
            timeout=self.timeout,
        )
        r.raise_for_status()
        try:
            body = r.json()
        except ValueError as e:
            raise ThemeError(f"response body is not JSON: {e}") from e
        return parse_theme(_response_text(body))

    def request_theme(self, hand_count, intensity, spread):
        try:
            return self.generate(hand_count, intensity, spread)
        except (ThemeError, requests.RequestException) as e:
            print(f"⚠️  Theme request failed: {e}")
            return None
