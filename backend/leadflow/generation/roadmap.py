import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from leadflow.llm.client import LLMClient
from leadflow.llm.json_guard import validate_and_parse_json
from leadflow.llm.prompts import TITAN_SYSTEM_PROMPT, build_titan_roadmap_prompt

logger = logging.getLogger(__name__)


class RoadmapGenerationError(RuntimeError):
    """The roadmap could not be produced; the submission fails."""


@dataclass
class TitanRoadmap:
    content: Dict[str, Any]
    primary_constraint: str

    def to_json(self) -> str:
        return json.dumps(self.content)


def extract_primary_constraint(content: Any) -> str:
    """diagnosis.primaryConstraint, or "" when the roadmap does not name one."""
    if not isinstance(content, dict):
        return ""
    diagnosis = content.get("diagnosis")
    if not isinstance(diagnosis, dict):
        return ""
    constraint = diagnosis.get("primaryConstraint")
    return constraint.strip() if isinstance(constraint, str) else ""


def generate_titan_roadmap(answers: Mapping[str, Any], client: Optional[LLMClient] = None) -> TitanRoadmap:
    """Generate the Titan scaling roadmap for a quiz submission."""
    client = client or LLMClient()
    prompt = build_titan_roadmap_prompt(answers)

    logger.info("🗺️  Generating Titan roadmap for %s", answers.get("businessName"))
    response = client.generate(
        prompt,
        system_prompt=TITAN_SYSTEM_PROMPT,
        json_mode=True,
        schema_name="titan_roadmap",
    )
    if not response or not response.strip():
        raise RoadmapGenerationError("LLM returned empty roadmap content")

    try:
        content = validate_and_parse_json(response, "titan_roadmap", retry_on_failure=False)
    except ValueError as e:
        raise RoadmapGenerationError(str(e)) from e

    primary_constraint = extract_primary_constraint(content)
    if not primary_constraint:
        logger.info("Roadmap has no primary constraint, score-based gap will be used")

    return TitanRoadmap(content=content, primary_constraint=primary_constraint)
