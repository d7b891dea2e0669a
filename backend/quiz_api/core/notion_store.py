# backend/quiz_api/core/notion_store.py

import os, logging, random, re
from typing import Any, Callable, Dict, List, Tuple, TypedDict
from notion_client import AsyncClient
from dotenv import load_dotenv

# ------------------------------------------------------------
# Ensure environment is loaded early
# ------------------------------------------------------------
load_dotenv()
logger = logging.getLogger("quiz.store")

DEFAULT_COUNT = 20
MIN_COUNT, MAX_COUNT = 1, 50
PAGE_SIZE = 100
MAX_RECORDS = 500  # bound on records fetched per request

# Property names in the quiz database
TYPE_PROP = "Type"
QUESTION_PROP = "Question"
OPTIONS_PROP = "Options"
CORRECT_PROP = "Correct answer"
LECTURE_PROP = "Lecture"

# ------------------------------------------------------------
# Types for clarity
# ------------------------------------------------------------
class QuizItem(TypedDict):
    id: str
    type: str
    question: str
    options: List[str]
    correct: str
    lectureIds: List[str]

class QuestionsResult(TypedDict):
    count: int
    items: List[QuizItem]
    truncated: bool

# ------------------------------------------------------------
# Global Notion client (async)
# ------------------------------------------------------------
_client: AsyncClient | None = None

def configure_notion(token: str | None = None) -> AsyncClient:
    """Create or reuse an async Notion client."""
    global _client
    if _client is None:
        key = token or os.getenv("NOTION_TOKEN", "")
        if not key:
            raise RuntimeError("NOTION_TOKEN missing. Provide via env or param.")
        _client = AsyncClient(
            auth=key,
            notion_version=os.getenv("NOTION_VERSION", "2022-06-28"),
        )
        logger.info("Notion async client configured (global instance).")
    return _client

def quiz_database_id() -> str:
    db_id = os.getenv("NOTION_QUIZ_DB_ID", "")
    if not db_id:
        raise RuntimeError("NOTION_QUIZ_DB_ID missing. Set it in the environment.")
    return db_id

# ------------------------------------------------------------
# Query parameters
# ------------------------------------------------------------
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

def parse_count(raw: str | None) -> int:
    """Lenient integer parse of `count`, clamped to [1, 50]."""
    m = _LEADING_INT.match(raw or "")
    count = int(m.group(1)) if m else DEFAULT_COUNT
    return max(MIN_COUNT, min(count, MAX_COUNT))

def parse_lectures(raw: str | None) -> List[str]:
    seen = set()
    lectures = []
    for part in (raw or "").split(","):
        lid = part.strip()
        if lid and lid not in seen:
            seen.add(lid)
            lectures.append(lid)
    return lectures

def build_filter(lectures: List[str]) -> Dict[str, Any] | None:
    filters = [
        {"property": LECTURE_PROP, "relation": {"contains": lid}}
        for lid in lectures
    ]
    if not filters:
        return None
    if len(filters) == 1:
        return filters[0]
    return {"or": filters}

# ------------------------------------------------------------
# Property extraction
# ------------------------------------------------------------
def _plain_text(parts: List[Dict[str, Any]]) -> str:
    return "".join(p.get("plain_text", "") for p in parts or [])

def _option_name(opt: Dict[str, Any] | None) -> str:
    return (opt or {}).get("name") or ""

PROPERTY_EXTRACTORS: Dict[str, Callable[[Dict[str, Any]], Any]] = {
    "title": lambda p: _plain_text(p["title"]),
    "rich_text": lambda p: _plain_text(p["rich_text"]),
    "select": lambda p: _option_name(p.get("select")),
    "status": lambda p: _option_name(p.get("status")),
    "multi_select": lambda p: ", ".join(_option_name(o) for o in p["multi_select"]),
    "relation": lambda p: [r["id"] for r in p.get("relation") or []],
    "url": lambda p: p.get("url") or "",
    "number": lambda p: "" if p.get("number") is None else p["number"],
}

def extract_property(prop: Dict[str, Any] | None) -> Any:
    """Read a property value according to its declared type."""
    if not prop:
        return ""
    extractor = PROPERTY_EXTRACTORS.get(prop.get("type"))
    return extractor(prop) if extractor else ""

def _as_text(value: Any) -> str:
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    return str(value)

def parse_options(raw: str | None) -> List[str]:
    # Options may be stored with <br> or newline separators
    if not raw:
        return []
    return [s.strip() for s in re.split(r"\n|<br>", raw, flags=re.I) if s.strip()]

def normalize_page(page: Dict[str, Any]) -> QuizItem:
    props = page.get("properties") or {}
    lecture = props.get(LECTURE_PROP) or {}
    relation = lecture.get("relation")
    lecture_ids = [r["id"] for r in relation] if isinstance(relation, list) else []

    return {
        "id": page["id"],
        "type": _as_text(extract_property(props.get(TYPE_PROP))),
        "question": _as_text(extract_property(props.get(QUESTION_PROP))),
        "options": parse_options(_as_text(extract_property(props.get(OPTIONS_PROP)))),
        "correct": _as_text(extract_property(props.get(CORRECT_PROP))),
        "lectureIds": lecture_ids,
    }

# ------------------------------------------------------------
# Pagination
# ------------------------------------------------------------
async def query_all_pages(
    client: AsyncClient,
    database_id: str,
    query_filter: Dict[str, Any] | None = None,
) -> Tuple[List[Dict[str, Any]], bool]:
    """
    Page through the database until it reports no more results or
    MAX_RECORDS pages have been collected.

    Returns the collected pages and whether the cap left records behind.
    """
    body: Dict[str, Any] = {"page_size": PAGE_SIZE}
    if query_filter:
        body["filter"] = query_filter

    results: List[Dict[str, Any]] = []
    has_more, cursor = True, None
    while has_more and len(results) < MAX_RECORDS:
        if cursor:
            body["start_cursor"] = cursor
        res = await client.request(
            path=f"databases/{database_id}/query",
            method="POST",
            body=body,
        )
        batch = res["results"]
        results.extend(batch)
        cursor = res.get("next_cursor")
        # A page without a cursor cannot be followed
        has_more = bool(res.get("has_more")) and bool(cursor)
        logger.debug(f"Fetched batch of {len(batch)} quiz pages (has_more={has_more})")

    truncated = has_more or len(results) > MAX_RECORDS
    if truncated:
        logger.warning(f"Quiz query hit the {MAX_RECORDS}-record cap; sampling from a partial set")
    return results[:MAX_RECORDS], truncated

# ------------------------------------------------------------
# Sampling
# ------------------------------------------------------------
def sample_questions(
    items: List[QuizItem],
    count: int,
    rng: random.Random | None = None,
) -> List[QuizItem]:
    """Shuffle the whole candidate list in place and keep the first `count`."""
    (rng or random).shuffle(items)
    return items[:count]

# ------------------------------------------------------------
# Main fetcher
# ------------------------------------------------------------
async def fetch_questions(
    lectures: List[str] | None = None,
    count: int = DEFAULT_COUNT,
    client: AsyncClient | None = None,
    database_id: str | None = None,
    rng: random.Random | None = None,
) -> QuestionsResult:
    client = client or configure_notion()
    database_id = database_id or quiz_database_id()
    lectures = lectures or []

    logger.info(f"Querying quiz database {database_id} (lectures={lectures}, count={count})")
    pages, truncated = await query_all_pages(client, database_id, build_filter(lectures))

    items = [normalize_page(p) for p in pages]
    selected = sample_questions(items, count, rng)

    logger.info(f"Selected {len(selected)} of {len(items)} quiz questions")
    return {"count": len(selected), "items": selected, "truncated": truncated}
