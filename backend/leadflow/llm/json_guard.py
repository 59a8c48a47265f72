import json
import jsonschema
import logging
from typing import Dict, Any
from pathlib import Path

logger = logging.getLogger(__name__)

SCHEMAS_DIR = Path(__file__).parent.parent / "schemas"


def load_schema(schema_name: str) -> Dict[str, Any]:
    """Load JSON schema from schemas directory."""
    schema_path = SCHEMAS_DIR / f"{schema_name}.schema.json"

    if not schema_path.exists():
        raise FileNotFoundError(f"Schema not found: {schema_path}")

    with open(schema_path, "r") as f:
        return json.load(f)


def strip_code_fences(text: str) -> str:
    """Remove a ```json ... ``` wrapper some models add despite instructions."""
    text = (text or "").strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()


def validate_and_parse_json(
    json_string: str,
    schema_name: str,
    retry_on_failure: bool = True
) -> Any:
    """
    Validate JSON string against schema and return parsed object.
    On failure returns placeholder data when retry_on_failure is set, else
    raises ValueError.
    """
    try:
        data = json.loads(strip_code_fences(json_string))
        schema = load_schema(schema_name)
        jsonschema.validate(instance=data, schema=schema)
        return data
    except (json.JSONDecodeError, jsonschema.ValidationError) as e:
        preview = (json_string or "")[:500]
        if len(json_string or "") > 500:
            preview += "... [truncated]"
        logger.warning("⚠️  JSON validation failed for %s: %s", schema_name, e)
        logger.warning("   Raw response preview: %s", preview)
        if retry_on_failure:
            logger.warning("   Using placeholder data for %s", schema_name)
            return get_mock_data(schema_name)
        raise ValueError(f"JSON validation failed: {str(e)}") from e


def get_mock_data(schema_name: str) -> Any:
    """Return mock data matching the schema."""
    if schema_name == "titan_roadmap":
        return {
            "diagnosis": {
                "snapshot": "PLACEHOLDER: Diagnosis will appear when LLM generation succeeds.",
                "primaryConstraint": "Lead capture and response system",
                "costOfInaction": "PLACEHOLDER: Cost of inaction will appear when LLM generation succeeds.",
            },
            "titanPhase": {
                "phase": "Phase 2: Growth Architecture",
                "mission": "PLACEHOLDER: Mission statement",
                "whyNow": "PLACEHOLDER: Why this phase comes first",
                "victoryCondition": "PLACEHOLDER: Victory condition",
            },
            "benchmarks": [
                {"metric": "Lead response time", "value": "Under 5 minutes", "context": "PLACEHOLDER"},
            ],
            "actionPlan": {
                "primaryBuild": {
                    "title": "PLACEHOLDER: Primary build",
                    "description": "PLACEHOLDER: Real build will appear when LLM generation succeeds.",
                    "components": ["PLACEHOLDER: Component"],
                    "doneDefinition": "PLACEHOLDER: Done definition",
                    "estimatedEffort": "40-80 hours",
                },
                "weeklyPlan": [
                    {
                        "week": 1,
                        "title": "PLACEHOLDER: Week 1",
                        "days": [
                            {"dayRange": "Day 1-2", "task": "PLACEHOLDER: Task", "details": ["PLACEHOLDER: Detail"]},
                        ],
                    }
                ],
                "blitz72Hours": [
                    {"task": "PLACEHOLDER: 72-hour task", "why": "PLACEHOLDER"},
                ],
            },
            "warnings": [
                {"title": "PLACEHOLDER: Warning", "reason": "PLACEHOLDER"},
            ],
            "milestone": {
                "timeframe": "90 days",
                "goal": "PLACEHOLDER: Goal",
                "successSignals": ["PLACEHOLDER: Signal"],
                "nextStep": "PLACEHOLDER: Next step",
            },
            "titanPath": {
                "currentPhase": "Phase 2: Growth Architecture",
                "nextPhases": ["Phase 3: Profit Flywheel Engine", "Phase 4: The High-Leverage CEO"],
                "estimatedTimeToSovereign": "12-18 months with focused execution",
            },
        }
    elif schema_name == "playbook":
        return {
            "snapshot": {
                "diagnosis": "PLACEHOLDER: Playbook diagnosis will appear when LLM generation succeeds.",
                "pattern": "PLACEHOLDER",
            },
            "weeklyPlan": [
                {
                    "week": 1,
                    "title": "PLACEHOLDER: Week 1",
                    "days": [
                        {"dayRange": "1-2", "title": "PLACEHOLDER: Task", "tasks": ["PLACEHOLDER: Step"]},
                    ],
                }
            ],
            "successMetrics": [{"metric": "PLACEHOLDER", "target": "PLACEHOLDER"}],
            "warnings": [{"title": "PLACEHOLDER: Warning", "reason": "PLACEHOLDER"}],
            "milestone": {
                "timeframe": "60 Days",
                "goal": "PLACEHOLDER: Goal",
                "successSignals": ["PLACEHOLDER: Signal"],
                "nextStep": "PLACEHOLDER: Next step",
            },
        }
    else:
        return {}
