"""Script agent: turns a theme and its snippets into a VideoScript."""

import asyncio
import json
from dataclasses import dataclass, field
from typing import Sequence

from pydantic import ValidationError

from ..errors import ScriptGenerationError
from ..models import ContentSnippet, VideoScript
from .base import BaseAgent

# Low temperature keeps the script format consistent between runs
SCRIPT_TEMPERATURE = 0.3

SYSTEM_PROMPT = """You are a senior pharmaceutical video ad director and medical copywriter.
You write cinematic, compliant, single-shot video scripts for short promotional clips.
You always answer with valid JSON only, no markdown and no commentary."""

SCRIPT_SCHEMA = """{
  "title": string,
  "duration": number,
  "scenes": [
    {
      "timeStart": number,
      "timeEnd": number,
      "visual": string,
      "text": string
    }
  ],
  "voiceover": string,
  "prompt": string
}"""


@dataclass
class ScriptInput:
    """Input data for the script agent."""

    theme_name: str
    theme_description: str
    snippets: Sequence[ContentSnippet] = field(default_factory=list)
    duration_seconds: int = 8


class ScriptAgent(BaseAgent[ScriptInput, VideoScript]):
    """Agent that writes a timed promotional video script.

    The reply must be a JSON object matching the VideoScript shape. Anything
    else raises ScriptGenerationError; there is no fallback script.
    """

    @property
    def name(self) -> str:
        """Return the agent's name."""
        return "ScriptAgent"

    @property
    def system_prompt(self) -> str:
        """Return the system prompt for script generation."""
        return SYSTEM_PROMPT

    async def generate_script(
        self,
        theme_name: str,
        theme_description: str,
        snippets: Sequence[ContentSnippet],
        duration_seconds: int = 8,
    ) -> VideoScript:
        """Generate a script without blocking the event loop.

        Raises:
            ScriptGenerationError: If the reply is not a valid script.
        """
        input_data = ScriptInput(
            theme_name=theme_name,
            theme_description=theme_description,
            snippets=list(snippets),
            duration_seconds=duration_seconds,
        )
        return await asyncio.to_thread(self.run, input_data)

    def run(self, input_data: ScriptInput) -> VideoScript:
        """Generate a script for the theme.

        Raises:
            ScriptGenerationError: If the reply is not a valid script.
        """
        self._logger.info(
            f"Generating script for theme '{input_data.theme_name}' "
            f"({len(input_data.snippets)} components, {input_data.duration_seconds}s)"
        )

        prompt = self._build_prompt(input_data)
        response = self._create_message(
            prompt=prompt,
            max_tokens=4096,
            temperature=SCRIPT_TEMPERATURE,
            json_output=True,
        )

        script = self._parse_response(response)
        self._logger.info(f"Generated script '{script.title}' with {len(script.scenes)} scenes")
        return script

    def _build_prompt(self, input_data: ScriptInput) -> str:
        """Build the user prompt for script generation."""
        duration = input_data.duration_seconds
        component_list = "\n".join(
            f"- {snippet.name}: {snippet.content}" for snippet in input_data.snippets
        )

        prompt_parts = [
            f"Create a concise, high-end {duration}-second pharmaceutical video script.",
            "",
            f"THEME: {input_data.theme_name}",
            f"DESCRIPTION: {input_data.theme_description}",
            "",
            "COMPONENTS TO INCORPORATE:",
            component_list or "- (none)",
            "",
            "MANDATORY RULES:",
            f"- EXACT duration: {duration} seconds",
            "- ONE continuous shot (no cuts, no scene changes)",
            "- Professional pharmaceutical commercial tone",
            "- Non-anatomical medical metaphors only",
            "- No exaggerated or unsafe medical claims",
            f"- Scenes must be contiguous, start at 0 and end at exactly {duration}",
            "",
            "Return JSON in EXACTLY this schema:",
            SCRIPT_SCHEMA,
            "",
            "IMPORTANT:",
            '- "prompt" MUST be a single, Veo-ready cinematic prompt',
            "- Include second-by-second timing",
            "- Specify camera movement, lighting, visual metaphors",
            "- Clearly include the brand name if present in the components",
        ]
        return "\n".join(prompt_parts)

    def _parse_response(self, response: str) -> VideoScript:
        """Parse the model reply into a VideoScript.

        Raises:
            ScriptGenerationError: If the reply is not valid JSON or does not
                match the VideoScript shape.
        """
        json_str = self._extract_json(response)
        if not json_str:
            raise ScriptGenerationError("Empty response from script model")

        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            self._logger.error(f"Failed to parse JSON: {e}")
            self._logger.debug(f"Raw response: {response}")
            raise ScriptGenerationError(f"Invalid JSON in script response: {e}") from e

        if not isinstance(data, dict):
            raise ScriptGenerationError("Script response is not a JSON object")

        try:
            return VideoScript.model_validate(data)
        except ValidationError as e:
            raise ScriptGenerationError(f"Script response does not match schema: {e}") from e

    def _extract_json(self, response: str) -> str:
        """Strip a markdown code fence around the JSON, if present."""
        text = response.strip()
        if text.startswith("```"):
            start = text.find("\n") + 1
            end = text.rfind("```")
            if 0 < start <= end:
                return text[start:end].strip()
        return text
