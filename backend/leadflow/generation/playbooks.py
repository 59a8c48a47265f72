"""
Bonus playbook generation.

All four playbooks are requested in parallel. A playbook that fails to
generate or validate is logged and returned as None; it never fails the
submission.
"""
import json
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Mapping, Optional

from leadflow.llm.client import LLMClient
from leadflow.llm.json_guard import validate_and_parse_json
from leadflow.llm.prompts import build_playbook_system_prompt, build_playbook_user_prompt

logger = logging.getLogger(__name__)

PLAYBOOK_GENERATORS = ("offer", "facebook", "instagram", "leadgen")


def generate_playbook(generator: str, answers: Mapping[str, Any], client: LLMClient) -> Optional[str]:
    """One playbook as a JSON string, or None on any failure."""
    try:
        response = client.generate(
            build_playbook_user_prompt(generator, answers),
            system_prompt=build_playbook_system_prompt(generator, answers),
            json_mode=True,
            schema_name="playbook",
            strict_schema=False,
        )
        content = validate_and_parse_json(response, "playbook", retry_on_failure=False)
        return json.dumps(content)
    except Exception:
        logger.exception("❌ Playbook generation failed: %s", generator)
        return None


def generate_playbooks(answers: Mapping[str, Any], client: Optional[LLMClient] = None) -> Dict[str, Optional[str]]:
    """generator -> JSON string (or None) for every playbook in PLAYBOOK_GENERATORS."""
    client = client or LLMClient()
    logger.info("📚 Generating playbooks %s for %s", list(PLAYBOOK_GENERATORS), answers.get("businessName"))

    with ThreadPoolExecutor(max_workers=len(PLAYBOOK_GENERATORS)) as pool:
        futures = {
            generator: pool.submit(generate_playbook, generator, answers, client)
            for generator in PLAYBOOK_GENERATORS
        }
        results = {generator: future.result() for generator, future in futures.items()}

    generated = sum(1 for content in results.values() if content)
    logger.info("✅ %d/%d playbooks generated", generated, len(PLAYBOOK_GENERATORS))
    return results
