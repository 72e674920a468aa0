"""
JSON-LD extraction: collect structured-data blocks from the loaded page,
redact phone numbers, and persist the result under data/.

No retries here; failures propagate to the controller's per-attempt handling.
"""

import json
import re
from pathlib import Path
from loguru import logger
from .browser import BrowserSession
from .settings import ExtractionPolicy
from .storage import save_schema

# Text content of every linked-data script block on the page.
COLLECT_LD_JSON_JS = """
() => Array.from(document.querySelectorAll('script[type="application/ld+json"]'))
    .map(el => el.textContent || '')
"""

# Optional country code (leading + optional), then 3-3-4 digits separated by nothing, '-', '.' or whitespace.
PHONE_RE = re.compile(r"(?:\+?\d{1,3}[-.\s]?)?\d{3}[-.\s]?\d{3}[-.\s]?\d{4}")
US_PAREN_PHONE_RE = re.compile(r"\(\d{3}\)[-.\s]?\d{3}[-.\s]?\d{4}")

PHONE_PLACEHOLDER = "XXXX-XXX-XXXX"
US_PAREN_PHONE_PLACEHOLDER = "(XXX) XXX-XXXX"


class _NoData:
    """Sentinel returned when a page carries no JSON-LD."""

    def __repr__(self):
        return "NO_DATA"

    def __bool__(self):
        return False


NO_DATA = _NoData()


def parse_blocks(blocks) -> list:
    records = []
    for raw in blocks or []:
        if not raw or not raw.strip():
            continue
        try:
            records.append(json.loads(raw))
        except json.JSONDecodeError:
            continue
    return records


async def collect_records(session: BrowserSession) -> list:
    """Parse every JSON-LD block on the page, silently skipping invalid ones."""
    blocks = await session.evaluate(COLLECT_LD_JSON_JS)
    return parse_blocks(blocks)


def anonymize_text(text: str) -> str:
    text = PHONE_RE.sub(PHONE_PLACEHOLDER, text)
    return US_PAREN_PHONE_RE.sub(US_PAREN_PHONE_PLACEHOLDER, text)


def anonymize(records):
    """
    Redact phone numbers across the serialized record collection.

    Returns the re-parsed records, or the raw redacted text if the
    redaction left something that is no longer valid JSON.
    """
    redacted = anonymize_text(json.dumps(records, ensure_ascii=False))
    try:
        return json.loads(redacted)
    except json.JSONDecodeError:
        return redacted


class SchemaExtractor:
    def __init__(self, policy: ExtractionPolicy, target_domain: str, data_dir: Path):
        self.policy = policy
        self.target_domain = target_domain
        self.data_dir = data_dir

    async def run(self, session: BrowserSession):
        logger.info(f"Extracting JSON-LD (types of interest: {', '.join(self.policy.schema_types) or 'any'})")

        records = await collect_records(session)
        if not records:
            logger.warning("No JSON-LD structured data found on page")
            return NO_DATA

        logger.info(f"Found {len(records)} JSON-LD block(s)")

        result = records
        if self.policy.anonymize_phone_numbers:
            result = anonymize(records)

        if self.policy.save_to_disk:
            out_path = save_schema(result, self.target_domain, self.data_dir)
            logger.info(f"Schema data saved to {out_path}")

        return result
